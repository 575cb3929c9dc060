"""
family_xref

Cross-reference resolution and citation text for parish family records:
records in, a resolved ``FamilyNetwork`` and citation strings out.
"""

from family_xref.entities import Couple, Family, Person

__version__ = "0.1.0"

__all__ = [
    "Couple",
    "Family",
    "Person",
    "__version__",
]
