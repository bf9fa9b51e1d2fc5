"""Persistent stores for repoctx cards."""

from .card_store import CardStore, IndexEntry, ModuleIndex
from .keyword_index import KeywordIndex

__all__ = ["CardStore", "IndexEntry", "KeywordIndex", "ModuleIndex"]
