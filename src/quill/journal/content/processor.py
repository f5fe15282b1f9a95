from typing import Any

from pydantic import BaseModel

from quill.journal.config import AppConfig, Config
from quill.journal.content.fingerprint import fingerprint
from quill.journal.content.guard import PromptGuard
from quill.journal.content.redactor import Redactor
from quill.journal.content.sanitizer import Sanitizer
from quill.journal.content.walker import flatten


class PreparedContent(BaseModel):
    """AI-bound text plus the fingerprint of its redacted source."""

    text: str
    content_hash: str


class ProcessedContent(BaseModel):
    normalized_text: str
    content_hash: str


class ContentProcessor:
    """Turns raw entry content into redacted, generator-safe text.

    The processor holds no mutable state and can be shared across concurrent
    tasks. Build a new one (or call with_redactor()) to change rules.
    """

    def __init__(
        self,
        config: AppConfig = Config,
        redactor: Redactor | None = None,
        guard: PromptGuard | None = None,
        sanitizer: Sanitizer | None = None,
    ):
        self._config = config
        self.redactor = redactor or Redactor.from_config(config.redaction)
        self.guard = guard or PromptGuard.from_config(config.prompt_guard)
        self.sanitizer = sanitizer or Sanitizer()

    def with_redactor(self, redactor: Redactor) -> "ContentProcessor":
        return ContentProcessor(
            self._config, redactor=redactor, guard=self.guard, sanitizer=self.sanitizer
        )

    def redacted_text(self, content: Any) -> str:
        """Plain, tag-free, redacted text. Safe to store, not yet safe to prompt."""
        return self.redactor.redact(self.sanitizer.strip(flatten(content)))

    def scrub_for_ai(self, text: str) -> str:
        """Sanitize, redact and guard text that is already plain."""
        return self.guard.guard(self.redactor.redact(self.sanitizer.strip(text)))

    def prepare_for_ai(
        self, content: Any, max_length: int | None = None
    ) -> PreparedContent:
        """Prepare content for a generation call.

        The fingerprint is taken from the redacted text before prompt-guard
        scrubbing and truncation, so it does not move when those rules or
        limits change.
        """
        if max_length is None:
            max_length = self._config.content.max_length
        redacted = self.redacted_text(content)
        safe = self.guard.guard(redacted)
        if len(safe) > max_length:
            safe = safe[:max_length] + "..."
        return PreparedContent(text=safe, content_hash=fingerprint(redacted))

    def process_entry(self, content: Any) -> ProcessedContent:
        prepared = self.prepare_for_ai(content, max_length=self._config.content.max_length)
        return ProcessedContent(
            normalized_text=prepared.text, content_hash=prepared.content_hash
        )
