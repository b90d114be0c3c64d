"""
Conversation history.

- HistoryStore: ordered entries, queries, CSV export, vault-backed persistence
- HistoryStorage: durable slot providers (in-memory, local files)
- write_export: atomic export file writer
"""

from syntra_core.history.base import ConversationEntry, HistoryFilter, mask_keywords
from syntra_core.history.export import write_export
from syntra_core.history.storage import (
    FileHistoryStorage,
    HistoryStorage,
    InMemoryHistoryStorage,
)
from syntra_core.history.store import CSV_HEADER, LOCKED_PLACEHOLDER, HistoryStore

__all__ = [
    "ConversationEntry",
    "HistoryFilter",
    "mask_keywords",
    "HistoryStore",
    "CSV_HEADER",
    "LOCKED_PLACEHOLDER",
    "HistoryStorage",
    "InMemoryHistoryStorage",
    "FileHistoryStorage",
    "write_export",
]
