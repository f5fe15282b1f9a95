import logging

from quill.journal.config import AppConfig, Config
from quill.journal.content.redactor import Redactor
from quill.journal.exceptions import ResidualPHIDetected

logger = logging.getLogger(__name__)


class SummaryValidator:
    """Second line of defense against generators echoing PHI back.

    Generated summaries are re-scanned with the same rules used on the input.
    A summary with residual PHI is never exposed; it is replaced by a fixed
    placeholder.
    """

    def __init__(self, redactor: Redactor, config: AppConfig = Config):
        self._redactor = redactor
        self.placeholder = config.redaction.summary_placeholder

    def validate(self, summary_text: str) -> bool:
        """True when the redactor finds nothing in the summary."""
        return not self._redactor.contains_phi(summary_text)

    def check(self, summary_text: str) -> None:
        """Raise ResidualPHIDetected if the summary contains PHI."""
        matches = self._redactor.find(summary_text)
        if matches:
            raise ResidualPHIDetected(sorted({m.category for m in matches}))

    def accept(self, summary_text: str) -> str:
        """Return the summary, or the placeholder if it contains PHI."""
        try:
            self.check(summary_text)
        except ResidualPHIDetected as e:
            logger.warning("Generated summary rejected: %s", e)
            return self.placeholder
        return summary_text
