from quill.journal.content.document import (
    DocumentNode,
    Mark,
    MarkKind,
    NodeKind,
    validate_document,
)
from quill.journal.content.fingerprint import compute_hash, normalize_for_hash
from quill.journal.content.guard import PromptGuard
from quill.journal.content.processor import (
    ContentProcessor,
    PreparedContent,
    ProcessedContent,
)
from quill.journal.content.redactor import Redactor, RedactionMatch, RedactionRule
from quill.journal.content.sanitizer import Sanitizer
from quill.journal.content.walker import flatten, to_structured_text

__all__ = [
    "ContentProcessor",
    "DocumentNode",
    "Mark",
    "MarkKind",
    "NodeKind",
    "PreparedContent",
    "ProcessedContent",
    "PromptGuard",
    "RedactionMatch",
    "RedactionRule",
    "Redactor",
    "Sanitizer",
    "compute_hash",
    "flatten",
    "normalize_for_hash",
    "to_structured_text",
    "validate_document",
]
