from quill.journal.summary.aggregator import HierarchicalAggregator, SummaryGenerator
from quill.journal.summary.client import SummaryClient
from quill.journal.summary.models import (
    HIERARCHY_LEVELS,
    CombinedSummaryRequest,
    CombinedSummaryResult,
    DateRange,
    EntrySummaryUnit,
    GenerationResult,
    JournalEntry,
    SummaryLevel,
    SummaryNode,
    SummaryTree,
)
from quill.journal.summary.service import CombinedSummaryService
from quill.journal.summary.validator import SummaryValidator

__all__ = [
    "HIERARCHY_LEVELS",
    "CombinedSummaryRequest",
    "CombinedSummaryResult",
    "CombinedSummaryService",
    "DateRange",
    "EntrySummaryUnit",
    "GenerationResult",
    "HierarchicalAggregator",
    "JournalEntry",
    "SummaryClient",
    "SummaryGenerator",
    "SummaryLevel",
    "SummaryNode",
    "SummaryTree",
    "SummaryValidator",
]
