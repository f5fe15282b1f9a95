import json
from collections.abc import Iterable, Sequence
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from quill.journal.summary.models import JournalEntry


class ShareScope(str, Enum):
    NONE = "NONE"
    TITLE_ONLY = "TITLE_ONLY"
    SUMMARY_ONLY = "SUMMARY_ONLY"
    FULL_ACCESS = "FULL_ACCESS"


# Scopes that allow reading an entry's summary or content.
SUMMARY_SCOPES = frozenset({ShareScope.SUMMARY_ONLY, ShareScope.FULL_ACCESS})


class Share(BaseModel):
    """A grant of access to one entry for one user."""

    entry_id: str
    grantee_id: str
    scope: ShareScope = ShareScope.SUMMARY_ONLY
    revoked: bool = False
    expires_at: datetime | None = None

    def grants_summary(self, now: datetime) -> bool:
        if self.revoked or self.scope not in SUMMARY_SCOPES:
            return False
        if self.expires_at is None:
            return True
        if self.expires_at.tzinfo is not None and now.tzinfo is None:
            now = now.astimezone()
        return self.expires_at > now


class StoreSnapshot(BaseModel):
    entries: list[JournalEntry] = []
    shares: list[Share] = []


class InMemoryEntryStore:
    """Entry store held in memory.

    An entry is accessible to its owner, and to any user holding an unrevoked,
    unexpired share with SUMMARY_ONLY or FULL_ACCESS scope.
    """

    def __init__(
        self,
        entries: Iterable[JournalEntry] = (),
        shares: Iterable[Share] = (),
    ) -> None:
        self._entries: dict[str, JournalEntry] = {e.id: e for e in entries}
        self._shares: list[Share] = list(shares)
        self.saved_summaries: dict[str, str] = {}

    @classmethod
    def from_json(cls, path: Path) -> "InMemoryEntryStore":
        """Load entries and shares from a JSON file.

        The file holds an object with "entries" and "shares" lists, or a bare
        list of entries.
        """
        data = json.loads(path.read_text())
        if isinstance(data, list):
            data = {"entries": data}
        snapshot = StoreSnapshot.model_validate(data)
        return cls(snapshot.entries, snapshot.shares)

    def add_entry(self, entry: JournalEntry) -> None:
        self._entries[entry.id] = entry

    def add_share(self, share: Share) -> None:
        self._shares.append(share)

    @property
    def entry_ids(self) -> list[str]:
        return list(self._entries)

    def get(self, entry_id: str) -> JournalEntry | None:
        return self._entries.get(entry_id)

    def can_access(self, requester_id: str, entry: JournalEntry) -> bool:
        if entry.owner_id == requester_id:
            return True
        now = datetime.now()
        return any(
            share.entry_id == entry.id
            and share.grantee_id == requester_id
            and share.grants_summary(now)
            for share in self._shares
        )

    async def fetch_accessible_entries(
        self, requester_id: str, entry_ids: Sequence[str]
    ) -> list[JournalEntry]:
        entries = [
            entry
            for entry_id in dict.fromkeys(entry_ids)
            if (entry := self._entries.get(entry_id)) is not None
            and self.can_access(requester_id, entry)
        ]
        return sorted(entries, key=lambda e: e.created_at)

    async def save_summary(self, entry_id: str, summary_text: str) -> None:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise KeyError(f"Unknown entry: {entry_id}")
        self._entries[entry_id] = entry.model_copy(
            update={"existing_summary": summary_text}
        )
        self.saved_summaries[entry_id] = summary_text
