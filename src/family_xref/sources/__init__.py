"""
family_xref.sources

Collaborators that feed the resolver: ``lookup_text`` by family id and,
for pre-extracted JSON records, ``parse``.
"""

from .record_store import RecordStore
from .text_source import HEADER_RE, TextSource

__all__ = ["HEADER_RE", "RecordStore", "TextSource"]
