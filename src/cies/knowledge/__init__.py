# src/cies/knowledge/__init__.py

"""
Knowledge layer for CIES.
Encodes facts as predicate-call text and keeps them in an append-only store.
"""

from .schema import Fact, FactValidationError
from .codec import decode_line, decode_text, encode_fact, fact_key, normalize_argument
from .filters import ArgumentFilter, FilterOperation
from .store import FactStore, FactStoreError

__all__ = [
    "Fact",
    "FactValidationError",
    "decode_line",
    "decode_text",
    "encode_fact",
    "fact_key",
    "normalize_argument",
    "ArgumentFilter",
    "FilterOperation",
    "FactStore",
    "FactStoreError",
]
