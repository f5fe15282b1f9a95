from quill.journal.store.base import AuditSink, EntryStore
from quill.journal.store.memory import (
    InMemoryEntryStore,
    Share,
    ShareScope,
    StoreSnapshot,
)

__all__ = [
    "AuditSink",
    "EntryStore",
    "InMemoryEntryStore",
    "Share",
    "ShareScope",
    "StoreSnapshot",
]
