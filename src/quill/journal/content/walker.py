import json
import logging
from typing import Any

from quill.journal.content.document import DocumentNode, NodeKind
from quill.journal.exceptions import MalformedContentError

logger = logging.getLogger(__name__)

BULLET = "• "


def flatten(content: Any) -> str:
    """Flatten rich-text content into plain text.

    Accepts a DocumentNode, editor JSON (a dict, or a string holding a JSON
    object), plain strings, or anything else. Never raises: malformed trees
    degrade to the text runs that can be found, and absent content yields an
    empty string.
    """
    if content is None:
        return ""

    if isinstance(content, str):
        parsed = _parse_json_object(content)
        if parsed is None:
            return content
        content = parsed

    if isinstance(content, DocumentNode):
        return _walk(content).strip()

    if isinstance(content, dict):
        try:
            node = DocumentNode.from_json(content)
        except MalformedContentError as e:
            logger.debug("Falling back to best-effort text extraction: %s", e)
            return _salvage_text(content).strip()
        return _walk(node).strip()

    if isinstance(content, list):
        return _salvage_text(content).strip()

    return str(content)


def _parse_json_object(text: str) -> dict | None:
    stripped = text.lstrip()
    if not stripped.startswith("{"):
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _render(node: DocumentNode, inner: str) -> str:
    if node.kind is NodeKind.TEXT:
        return node.text or ""
    if node.kind in (NodeKind.PARAGRAPH, NodeKind.HEADING):
        return inner + "\n\n" if inner else ""
    if node.kind is NodeKind.LIST_ITEM:
        stripped = inner.strip()
        return BULLET + stripped + "\n" if stripped else ""
    if node.kind is NodeKind.CODE_BLOCK:
        return "\n" + inner + "\n" if inner else ""
    if node.kind in (NodeKind.HARD_BREAK, NodeKind.HORIZONTAL_RULE):
        return "\n"
    return inner


def _walk(root: DocumentNode) -> str:
    # Post-order over an explicit stack of (node, rendered children).
    stack: list[tuple[DocumentNode, list[str]]] = [(root, [])]
    while True:
        node, parts = stack[-1]
        if len(parts) < len(node.children):
            stack.append((node.children[len(parts)], []))
            continue
        stack.pop()
        rendered = _render(node, "".join(parts))
        if not stack:
            return rendered
        stack[-1][1].append(rendered)


def _salvage_text(value: Any) -> str:
    """Collect every ``text`` string found anywhere in a JSON-like value."""
    parts: list[str] = []
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, dict):
            text = item.get("text")
            if isinstance(text, str):
                parts.append(text)
            stack.extend(
                reversed([child for key, child in item.items() if key != "text"])
            )
        elif isinstance(item, list):
            stack.extend(reversed(item))
    return " ".join(part for part in parts if part)


def to_structured_text(content: Any) -> str:
    """Render content as lightly structured text.

    Headings get ``#`` prefixes, code blocks are fenced and top-level blocks
    are separated by blank lines. Non-document input falls back to flatten().
    """
    if isinstance(content, str):
        parsed = _parse_json_object(content)
        if parsed is None:
            return content
        content = parsed

    if isinstance(content, dict):
        try:
            content = DocumentNode.from_json(content)
        except MalformedContentError:
            return flatten(content)

    if not isinstance(content, DocumentNode):
        return flatten(content)

    if content.kind is not NodeKind.DOCUMENT:
        return _walk(content).strip()

    blocks = []
    for block in content.children:
        body = _walk(block)
        if not body.strip():
            continue
        if block.kind is NodeKind.HEADING:
            text = "#" * (block.level or 1) + " " + body.strip()
        elif block.kind is NodeKind.CODE_BLOCK:
            text = "```\n" + body.strip("\n") + "\n```"
        elif block.kind is NodeKind.LIST:
            text = body.rstrip()
        else:
            text = body.strip()
        blocks.append(text)
    return "\n\n".join(blocks)
