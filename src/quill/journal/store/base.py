from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from quill.journal.summary.models import JournalEntry


@runtime_checkable
class EntryStore(Protocol):
    """Source of journal entries, with access checks done by the store."""

    async def fetch_accessible_entries(
        self, requester_id: str, entry_ids: Sequence[str]
    ) -> list[JournalEntry]:
        """Return the requested entries the requester may read, oldest first."""
        ...

    async def save_summary(self, entry_id: str, summary_text: str) -> None:
        """Persist a generated per-entry summary."""
        ...


@runtime_checkable
class AuditSink(Protocol):
    """Destination for audit records. `record` may raise AuditSinkFailure."""

    async def record(
        self, action: str, resource_id: str | None, details: dict[str, Any]
    ) -> None: ...
