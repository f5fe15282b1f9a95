import logging
from typing import TYPE_CHECKING

from quill.journal.audit import record_audit
from quill.journal.exceptions import InsufficientInputError
from quill.journal.summary.aggregator import HierarchicalAggregator
from quill.journal.summary.models import (
    HIERARCHY_LEVELS,
    CombinedSummaryRequest,
    CombinedSummaryResult,
    SummaryTree,
)

if TYPE_CHECKING:
    from quill.journal.store.base import AuditSink, EntryStore

logger = logging.getLogger(__name__)

COMBINED_SUMMARY_RESOURCE = "combined_summary"


class CombinedSummaryService:
    """Builds a combined summary over the entries a requester may read."""

    def __init__(
        self,
        store: "EntryStore",
        aggregator: HierarchicalAggregator,
        audit_sink: "AuditSink | None" = None,
    ):
        self._store = store
        self._aggregator = aggregator
        self._audit_sink = audit_sink

    async def summarize(
        self, requester_id: str, request: CombinedSummaryRequest
    ) -> CombinedSummaryResult:
        """Fetch, aggregate, optionally persist per-entry summaries, audit.

        Raises:
            InsufficientInputError: Fewer than two requested entries are
                accessible, or too few could be summarized
            GenerationFailure: A group or combined summary failed
        """
        entries = await self._store.fetch_accessible_entries(
            requester_id, request.entry_ids
        )
        if len(entries) < 2:
            raise InsufficientInputError("Not enough accessible entries found")

        tree = await self._aggregator.aggregate(entries, group_size=request.group_size)

        saved = 0
        if request.save_individual_summaries:
            saved = await self._save_generated(tree)

        await record_audit(
            self._audit_sink,
            "CREATE",
            None,
            {
                "resource": COMBINED_SUMMARY_RESOURCE,
                "entryCount": tree.total_entries,
                "hierarchyLevels": HIERARCHY_LEVELS,
                "savedIndividual": request.save_individual_summaries,
            },
        )

        logger.info(
            "Combined summary built over %d entries (%d summaries saved)",
            tree.total_entries,
            saved,
        )

        return CombinedSummaryResult(
            tree=tree,
            total_entries=tree.total_entries,
            hierarchy_levels=tree.hierarchy_levels,
            date_range=tree.date_range,
        )

    async def _save_generated(self, tree: SummaryTree) -> int:
        saved = 0
        for unit in tree.entry_summaries:
            if not unit.generated:
                continue
            try:
                await self._store.save_summary(unit.entry_id, unit.summary_text)
            except Exception as e:
                logger.error(
                    "Failed to save summary for entry %s: %s",
                    unit.entry_id,
                    type(e).__name__,
                )
                continue
            saved += 1
        return saved
