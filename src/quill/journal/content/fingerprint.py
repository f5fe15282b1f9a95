import hashlib
import re

_WHITESPACE = re.compile(r"\s+")


def normalize_for_hash(text: str) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def compute_hash(text: str) -> str:
    """SHA-256 hex digest of the text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def fingerprint(redacted_text: str) -> str:
    """Content hash of already-redacted text."""
    return compute_hash(normalize_for_hash(redacted_text))
