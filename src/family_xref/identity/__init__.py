from .matcher import find_same, same_identity
from .person_key import PersonKey, normalize_family_id, normalize_text

__all__ = [
    "PersonKey",
    "find_same",
    "normalize_family_id",
    "normalize_text",
    "same_identity",
]
