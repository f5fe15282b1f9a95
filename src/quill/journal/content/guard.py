import re
from collections.abc import Iterable

from quill.journal.config.models import PromptGuardConfig

DEFAULT_PATTERNS: tuple[str, ...] = (
    r"\b(?:ignore|disregard)\b\s+(?:all|previous|above)",
    r"\bnew\b\s+(?:instructions|system|prompt)",
    r"\byou\s+are\s+now\b",
    r"\bforget\s+everything\b",
    r"\[INST\][\s\S]*?\[/INST\]",
    r"\bsystem\s*:",
    r"\bassistant\s*:",
)


class PromptGuard:
    """Scrubs instruction-override phrasings from text bound for a generator.

    Only apply this to the outbound copy of a text. Stored or displayed text
    must never pass through it.
    """

    def __init__(
        self,
        patterns: Iterable[str] = DEFAULT_PATTERNS,
        block_marker: str = "[BLOCKED]",
    ):
        self._patterns = tuple(re.compile(p, re.IGNORECASE) for p in patterns)
        self.block_marker = block_marker

    @classmethod
    def from_config(cls, config: PromptGuardConfig) -> "PromptGuard":
        return cls(
            patterns=(*DEFAULT_PATTERNS, *config.extra_patterns),
            block_marker=config.block_marker,
        )

    def guard(self, text: str) -> str:
        for pattern in self._patterns:
            text = pattern.sub(self.block_marker, text)
        return text
