import re
from html.parser import HTMLParser

# Elements whose text is never user-visible content.
DROPPED_ELEMENTS = {"script", "style", "template", "noscript"}

DANGEROUS_PATTERNS = [
    re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE),
    re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
]


class _TextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._dropped_depth = 0

    def handle_starttag(self, tag: str, attrs) -> None:  # type: ignore[override]
        if tag.lower() in DROPPED_ELEMENTS:
            self._dropped_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag.lower() in DROPPED_ELEMENTS and self._dropped_depth:
            self._dropped_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._dropped_depth:
            self.parts.append(data)


def _strip_once(text: str) -> str:
    parser = _TextExtractor()
    parser.feed(text)
    parser.close()
    return "".join(parser.parts)


class Sanitizer:
    """Removes markup from text, keeping only inner text content."""

    def strip(self, text: str) -> str:
        """Strip all tags and unescape entities.

        Entity-escaped markup (``&lt;b&gt;``) becomes a real tag once
        unescaped, so passes repeat until the text stops changing. Each
        changing pass shortens the text, which bounds the loop.
        """
        if not text:
            return ""
        previous = None
        current = text
        while current != previous:
            previous = current
            current = _strip_once(current)
        return current

    def strip_dangerous(self, text: str) -> str:
        """Remove script/iframe blocks, script URL schemes and inline handlers."""
        for pattern in DANGEROUS_PATTERNS:
            text = pattern.sub("", text)
        return text
