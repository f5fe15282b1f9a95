from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator

from quill.journal.content.document import DocumentNode

HIERARCHY_LEVELS = 3


class SummaryLevel(str, Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"
    COMBINED = "combined"


class DateRange(BaseModel):
    start: datetime
    end: datetime


class JournalEntry(BaseModel):
    """An entry as handed over by the entry store.

    Attributes:
        id: Entry identifier
        title: Entry title
        content: Editor JSON, a parsed DocumentNode, or a plain string
        existing_summary: Previously stored AI summary, reused as-is
        mood: Optional mood score (0-10)
        tags: Free-form tags
        created_at: Creation time, used for ordering (stored as naive UTC)
        owner_id: Owning user, used by stores for access checks
    """

    id: str
    title: str = ""
    content: DocumentNode | dict[str, Any] | str | None = None
    existing_summary: str | None = None
    mood: int | None = Field(default=None, ge=0, le=10)
    tags: list[str] = []
    created_at: datetime
    owner_id: str | None = None

    @field_validator("created_at")
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC already.
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)


class EntrySummaryUnit(BaseModel):
    """Summary of a single entry."""

    entry_id: str
    summary_text: str
    word_count: int
    created_at: datetime
    generated: bool = True


class GenerationResult(BaseModel):
    summary_text: str
    word_count: int
    key_themes: list[str] = []
    generated_at: datetime = Field(default_factory=datetime.now)


class SummaryNode(BaseModel):
    level: SummaryLevel
    summary_text: str
    word_count: int
    source_entry_ids: list[str]
    date_range: DateRange | None = None


class SummaryTree(BaseModel):
    """Individual, group and combined summaries in generation order."""

    nodes: list[SummaryNode]
    entry_summaries: list[EntrySummaryUnit] = []
    total_entries: int
    hierarchy_levels: int = HIERARCHY_LEVELS
    date_range: DateRange

    @property
    def individual_nodes(self) -> list[SummaryNode]:
        return [n for n in self.nodes if n.level is SummaryLevel.INDIVIDUAL]

    @property
    def group_nodes(self) -> list[SummaryNode]:
        return [n for n in self.nodes if n.level is SummaryLevel.GROUP]

    @property
    def combined_node(self) -> SummaryNode:
        return next(n for n in self.nodes if n.level is SummaryLevel.COMBINED)

    @property
    def final_summary(self) -> str:
        return self.combined_node.summary_text


class CombinedSummaryRequest(BaseModel):
    entry_ids: list[str] = Field(
        min_length=2, description="At least 2 entries required for combination"
    )
    group_size: int = Field(default=3, ge=2, le=10)
    save_individual_summaries: bool = True


class CombinedSummaryResult(BaseModel):
    tree: SummaryTree
    total_entries: int
    hierarchy_levels: int = HIERARCHY_LEVELS
    date_range: DateRange
    generated_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def final_summary(self) -> str:
        return self.tree.final_summary


class EntrySummaryOutput(BaseModel):
    """Structured generator output for a single entry."""

    summary: str = Field(description="Brief summary of the entry (2-3 sentences)")
    themes: list[str] = Field(
        default_factory=list, description="Key emotional themes"
    )
    observations: str | None = Field(
        default=None, description="Clinical observations, if relevant"
    )


class CombinedSummaryOutput(BaseModel):
    """Structured generator output for a set of summaries."""

    overview: str = Field(description="Overall trends across the summaries")
    themes: list[str] = Field(
        default_factory=list, description="Recurring themes or patterns"
    )
    recommendations: str | None = Field(
        default=None, description="Clinical recommendations, if applicable"
    )
