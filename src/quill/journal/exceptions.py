class QuillJournalError(Exception):
    """Base class for quill.journal errors."""

    pass


class MalformedContentError(QuillJournalError):
    """Raised when a rich-text document tree cannot be interpreted."""

    pass


class GenerationFailure(QuillJournalError):
    """Raised when the generation collaborator times out, errors or returns nothing usable."""

    pass


class ResidualPHIDetected(QuillJournalError):
    """Raised internally when a generated summary still contains PHI."""

    def __init__(self, categories: list[str]):
        self.categories = categories
        super().__init__(f"Residual PHI detected: {', '.join(categories)}")


class InsufficientInputError(QuillJournalError):
    """Raised when there are not enough entries to build a summary tree."""

    pass


class AuditSinkFailure(QuillJournalError):
    """Raised by audit sinks that fail to record; always caught by callers."""

    pass
