import asyncio
import logging
from collections.abc import Awaitable, Iterable, Sequence
from typing import Protocol, TypeVar

from quill.journal.config import AppConfig, Config
from quill.journal.content.processor import ContentProcessor
from quill.journal.exceptions import GenerationFailure, InsufficientInputError
from quill.journal.summary.models import (
    DateRange,
    EntrySummaryUnit,
    GenerationResult,
    JournalEntry,
    SummaryLevel,
    SummaryNode,
    SummaryTree,
)
from quill.journal.summary.validator import SummaryValidator
from quill.journal.utils import count_words

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_GROUP_SIZE = 2
MAX_GROUP_SIZE = 10


class SummaryGenerator(Protocol):
    async def generate(
        self,
        title: str,
        body_text: str,
        mood: int | None = None,
        tags: Sequence[str] | None = None,
    ) -> GenerationResult: ...

    async def generate_combined(
        self,
        summaries: Sequence[str],
        level: str = "custom",
        date_range: DateRange | None = None,
        overall_mood: float | None = None,
    ) -> GenerationResult: ...


async def _gather_or_cancel(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all tasks; on the first error cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _batched(items: Sequence[T], size: int) -> list[Sequence[T]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class HierarchicalAggregator:
    """Builds the individual -> group -> combined summary tree.

    Individual summaries are generated with bounded concurrency and a failed
    entry is dropped rather than failing the tree. Group summaries are built
    over consecutive batches of individual summaries and the combined summary
    over all of them. Group and combined failures abort the whole call.
    """

    def __init__(
        self,
        generator: SummaryGenerator,
        processor: ContentProcessor,
        validator: SummaryValidator | None = None,
        config: AppConfig = Config,
    ):
        self._generator = generator
        self._processor = processor
        self._validator = validator or SummaryValidator(processor.redactor, config)
        self._config = config

    async def aggregate(
        self, entries: Sequence[JournalEntry], group_size: int | None = None
    ) -> SummaryTree:
        """Summarize entries into a three-level tree.

        Args:
            entries: Entries the requester may read
            group_size: Entries per group summary (2-10). Defaults to
                config.aggregation.group_size

        Returns:
            The complete summary tree

        Raises:
            InsufficientInputError: Fewer than the minimum number of entries
                were supplied, or too few survived the individual stage
            GenerationFailure: A group or combined summary could not be generated
        """
        min_entries = self._config.aggregation.min_entries
        if len(entries) < min_entries:
            raise InsufficientInputError(
                f"Not enough accessible entries: need at least {min_entries}, "
                f"got {len(entries)}"
            )

        if group_size is None:
            group_size = self._config.aggregation.group_size
        if not MIN_GROUP_SIZE <= group_size <= MAX_GROUP_SIZE:
            raise ValueError(
                f"group_size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}"
            )

        ordered = sorted(entries, key=lambda e: e.created_at)
        date_range = DateRange(start=ordered[0].created_at, end=ordered[-1].created_at)
        semaphore = asyncio.Semaphore(self._config.aggregation.max_concurrency)

        logger.debug(
            "Building summary tree for %d entries (group_size=%d)",
            len(ordered),
            group_size,
        )

        # Individual stage
        results = await _gather_or_cancel(
            self._summarize_entry(entry, semaphore) for entry in ordered
        )
        units = [unit for unit in results if unit is not None]
        if len(units) < len(ordered):
            logger.info(
                "Excluded %d of %d entries after generation failures",
                len(ordered) - len(units),
                len(ordered),
            )
        if len(units) < min_entries:
            raise InsufficientInputError(
                f"Not enough entries could be summarized: need at least "
                f"{min_entries}, got {len(units)}"
            )

        # Stored summaries may predate the current rules, so every summary is
        # scrubbed again before it is sent out.
        outbound = [self._processor.scrub_for_ai(u.summary_text) for u in units]

        # Group stage
        group_nodes = await _gather_or_cancel(
            self._summarize_batch(batch_units, batch_texts, semaphore)
            for batch_units, batch_texts in zip(
                _batched(units, group_size), _batched(outbound, group_size)
            )
        )

        # Combined stage
        moods = [e.mood for e in ordered if e.mood is not None]
        result = await self._generator.generate_combined(
            outbound,
            "custom",
            date_range=date_range,
            overall_mood=sum(moods) / len(moods) if moods else None,
        )
        combined_text = self._validator.accept(result.summary_text)
        combined_node = SummaryNode(
            level=SummaryLevel.COMBINED,
            summary_text=combined_text,
            word_count=self._word_count(result, combined_text),
            source_entry_ids=[e.id for e in ordered],
            date_range=date_range,
        )

        individual_nodes = [
            SummaryNode(
                level=SummaryLevel.INDIVIDUAL,
                summary_text=unit.summary_text,
                word_count=unit.word_count,
                source_entry_ids=[unit.entry_id],
            )
            for unit in units
        ]

        logger.debug(
            "Summary tree built: %d individual, %d group, 1 combined",
            len(individual_nodes),
            len(group_nodes),
        )

        return SummaryTree(
            nodes=[*individual_nodes, *group_nodes, combined_node],
            entry_summaries=units,
            total_entries=len(ordered),
            date_range=date_range,
        )

    async def _summarize_entry(
        self, entry: JournalEntry, semaphore: asyncio.Semaphore
    ) -> EntrySummaryUnit | None:
        if entry.existing_summary:
            # TODO: re-validate stored summaries once summaries record the
            # rule set they were redacted under.
            return EntrySummaryUnit(
                entry_id=entry.id,
                summary_text=entry.existing_summary,
                word_count=count_words(entry.existing_summary),
                created_at=entry.created_at,
                generated=False,
            )

        limits = self._config.content
        body = self._processor.prepare_for_ai(
            entry.content, max_length=limits.entry_max_length
        )
        title = self._processor.prepare_for_ai(
            entry.title, max_length=limits.title_max_length
        )
        tags = [
            self._processor.scrub_for_ai(tag)[: limits.tag_max_length]
            for tag in entry.tags[: limits.max_tags]
        ]

        async with semaphore:
            logger.debug("Summarizing entry %s (content %s)", entry.id, body.content_hash)
            try:
                result = await self._generator.generate(
                    title.text, body.text, entry.mood, tags
                )
            except GenerationFailure as e:
                logger.warning("Excluding entry %s from summary tree: %s", entry.id, e)
                return None

        summary = self._validator.accept(result.summary_text)
        return EntrySummaryUnit(
            entry_id=entry.id,
            summary_text=summary,
            word_count=self._word_count(result, summary),
            created_at=entry.created_at,
        )

    async def _summarize_batch(
        self,
        units: Sequence[EntrySummaryUnit],
        texts: Sequence[str],
        semaphore: asyncio.Semaphore,
    ) -> SummaryNode:
        async with semaphore:
            result = await self._generator.generate_combined(list(texts), "custom")

        summary = self._validator.accept(result.summary_text)
        return SummaryNode(
            level=SummaryLevel.GROUP,
            summary_text=summary,
            word_count=self._word_count(result, summary),
            source_entry_ids=[unit.entry_id for unit in units],
            date_range=DateRange(start=units[0].created_at, end=units[-1].created_at),
        )

    @staticmethod
    def _word_count(result: GenerationResult, accepted: str) -> int:
        if accepted == result.summary_text:
            return result.word_count
        return count_words(accepted)
