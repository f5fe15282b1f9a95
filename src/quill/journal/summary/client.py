import asyncio
import logging
from collections.abc import Sequence
from typing import Literal, TypeVar

from pydantic_ai import Agent
from pydantic_ai.output import ToolOutput

from quill.journal.config import AppConfig, Config
from quill.journal.config.models import ModelConfig
from quill.journal.content.sanitizer import Sanitizer
from quill.journal.exceptions import GenerationFailure
from quill.journal.summary.models import (
    CombinedSummaryOutput,
    DateRange,
    EntrySummaryOutput,
    GenerationResult,
)
from quill.journal.summary.prompts import (
    COMBINED_SUMMARY_PROMPT,
    COMBINED_SYSTEM_PROMPT,
    ENTRY_SUMMARY_PROMPT,
    ENTRY_SYSTEM_PROMPT,
)
from quill.journal.utils import count_words, get_model, strip_code_fences

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT")

CombinedLevel = Literal["daily", "weekly", "monthly", "custom"]

LEVEL_DESCRIPTORS: dict[str, str] = {
    "daily": "daily",
    "weekly": "weekly",
    "monthly": "monthly",
    "custom": "combined",
}


class SummaryClient:
    """Transport wrapper around the external text generator.

    Callers are responsible for redaction: every string handed to this client
    is sent to the model as-is.
    """

    def __init__(
        self,
        config: AppConfig = Config,
        model_config: ModelConfig | None = None,
        sanitizer: Sanitizer | None = None,
    ):
        """Initialize the client.

        Args:
            config: Application configuration
            model_config: Optional model config override. If None, uses
                         config.generation.model
            sanitizer: Sanitizer applied to generated text
        """
        self._config = config
        self._generation = config.generation
        self._sanitizer = sanitizer or Sanitizer()

        model = get_model(model_config or self._generation.model, config)
        self._entry_agent: Agent[None, EntrySummaryOutput] = Agent(
            model=model,
            output_type=ToolOutput(
                EntrySummaryOutput, max_retries=self._generation.output_retries
            ),
            instructions=ENTRY_SYSTEM_PROMPT,
            retries=self._generation.output_retries,
        )
        self._combined_agent: Agent[None, CombinedSummaryOutput] = Agent(
            model=model,
            output_type=ToolOutput(
                CombinedSummaryOutput, max_retries=self._generation.output_retries
            ),
            instructions=COMBINED_SYSTEM_PROMPT,
            retries=self._generation.output_retries,
        )

    async def generate(
        self,
        title: str,
        body_text: str,
        mood: int | None = None,
        tags: Sequence[str] | None = None,
    ) -> GenerationResult:
        """Summarize a single, already redacted entry.

        Raises:
            GenerationFailure: If the content is too short, the call times out
                or errors, or the model returns an empty summary.
        """
        if len(body_text.strip()) < self._generation.min_content_length:
            raise GenerationFailure("Content too short for summary generation")

        prompt = ENTRY_SUMMARY_PROMPT.format(
            title=title or "Untitled",
            mood=f"{mood}/10" if mood is not None else "Not provided",
            tags=", ".join(tags) if tags else "None",
            content=body_text,
        )
        output = await self._run(self._entry_agent, prompt, "entry")

        summary = output.summary
        if output.observations:
            summary = f"{summary} {output.observations}"
        return self._finish(summary, output.themes)

    async def generate_combined(
        self,
        summaries: Sequence[str],
        level: CombinedLevel = "custom",
        date_range: DateRange | None = None,
        overall_mood: float | None = None,
    ) -> GenerationResult:
        """Summarize a set of already redacted summaries into one overview.

        Raises:
            GenerationFailure: As for generate().
        """
        if sum(len(s.strip()) for s in summaries) < self._generation.min_content_length:
            raise GenerationFailure("Combined text too short for summary generation")

        period = ""
        if date_range is not None:
            period = (
                f"Period: {date_range.start:%Y-%m-%d} to {date_range.end:%Y-%m-%d}\n"
            )
        mood = f"Average mood: {overall_mood:.1f}/10\n" if overall_mood is not None else ""

        prompt = COMBINED_SUMMARY_PROMPT.format(
            level=LEVEL_DESCRIPTORS[level],
            count=len(summaries),
            summaries="\n".join(
                f"Entry {i + 1}: {summary}" for i, summary in enumerate(summaries)
            ),
            period=period,
            mood=mood,
        )
        output = await self._run(self._combined_agent, prompt, "combined")

        overview = output.overview
        if output.recommendations:
            overview = f"{overview} Recommendations: {output.recommendations}"
        return self._finish(overview, output.themes)

    async def _run(self, agent: Agent[None, OutputT], prompt: str, label: str) -> OutputT:
        attempts = self._generation.max_attempts
        timeout = self._generation.timeout
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                result = await asyncio.wait_for(agent.run(prompt), timeout=timeout)
                return result.output
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(
                    "%s generation timed out after %.1fs (attempt %d/%d)",
                    label,
                    timeout,
                    attempt,
                    attempts,
                )
            except Exception as e:
                last_error = e
                logger.warning(
                    "%s generation failed (attempt %d/%d): %s",
                    label,
                    attempt,
                    attempts,
                    type(e).__name__,
                )

        raise GenerationFailure(
            f"Failed to generate {label} summary after {attempts} attempt(s)"
        ) from last_error

    def _finish(self, text: str, themes: list[str]) -> GenerationResult:
        summary = self._sanitizer.strip(strip_code_fences(text or "")).strip()
        if not summary:
            raise GenerationFailure("Generator returned an empty summary")
        return GenerationResult(
            summary_text=summary,
            word_count=count_words(summary),
            key_themes=list(themes),
        )
