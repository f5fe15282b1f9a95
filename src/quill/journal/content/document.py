from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from quill.journal.exceptions import MalformedContentError


class NodeKind(str, Enum):
    """Closed set of rich-text node kinds, plus a fallback for unknown ones."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    LIST_ITEM = "list_item"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    HARD_BREAK = "hard_break"
    HORIZONTAL_RULE = "horizontal_rule"
    TEXT = "text"
    UNKNOWN = "unknown"


class MarkKind(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    STRIKE = "strike"
    CODE = "code"
    LINK = "link"


# Editor JSON type names -> node kind (and the list flavour where relevant)
EDITOR_NODE_TYPES: dict[str, tuple[NodeKind, bool | None]] = {
    "doc": (NodeKind.DOCUMENT, None),
    "paragraph": (NodeKind.PARAGRAPH, None),
    "heading": (NodeKind.HEADING, None),
    "bulletList": (NodeKind.LIST, False),
    "orderedList": (NodeKind.LIST, True),
    "listItem": (NodeKind.LIST_ITEM, None),
    "codeBlock": (NodeKind.CODE_BLOCK, None),
    "blockquote": (NodeKind.BLOCKQUOTE, None),
    "hardBreak": (NodeKind.HARD_BREAK, None),
    "horizontalRule": (NodeKind.HORIZONTAL_RULE, None),
    "text": (NodeKind.TEXT, None),
}

EDITOR_MARK_TYPES: dict[str, MarkKind] = {
    "bold": MarkKind.BOLD,
    "italic": MarkKind.ITALIC,
    "strike": MarkKind.STRIKE,
    "code": MarkKind.CODE,
    "link": MarkKind.LINK,
}

# Marks the editor may emit; only a subset is modelled.
ALLOWED_EDITOR_MARKS = {
    "bold",
    "italic",
    "underline",
    "strike",
    "code",
    "link",
    "subscript",
    "superscript",
}


class Mark(BaseModel):
    """Presentation mark on a text run. Only links carry attributes."""

    model_config = ConfigDict(frozen=True)

    kind: MarkKind
    href: str | None = None
    target: str | None = None


class DocumentNode(BaseModel):
    """An immutable node in a rich-text document tree.

    Text lives only in ``text`` leaves; every other kind holds children.

    Attributes:
        kind: Node kind
        children: Ordered child nodes (empty for text leaves)
        text: Text run for ``text`` nodes
        marks: Presentation marks on a text run
        level: Heading level
        ordered: List flavour for ``list`` nodes
        language: Code block language
        type_name: Original type name, kept for ``unknown`` nodes
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    children: tuple["DocumentNode", ...] = ()
    text: str | None = None
    marks: frozenset[Mark] = frozenset()
    level: int | None = None
    ordered: bool | None = None
    language: str | None = None
    type_name: str | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "DocumentNode":
        if self.kind is NodeKind.TEXT:
            if self.children:
                raise ValueError("text nodes cannot have children")
            if self.text is None:
                raise ValueError("text nodes require a text run")
        else:
            if self.text is not None:
                raise ValueError(f"{self.kind.value} nodes cannot carry text")
            if self.marks:
                raise ValueError(f"{self.kind.value} nodes cannot carry marks")
        return self

    @classmethod
    def from_json(cls, data: Any) -> "DocumentNode":
        """Build a node tree from the editor's JSON representation.

        Raises:
            MalformedContentError: If the input is not a well-formed tree.
        """
        try:
            return _parse_node(data)
        except (ValidationError, ValueError, TypeError) as e:
            raise MalformedContentError(f"Cannot interpret document: {e}") from e

    def iter_text(self):
        """Yield text runs in document order."""
        stack: list[DocumentNode] = [self]
        while stack:
            node = stack.pop()
            if node.kind is NodeKind.TEXT:
                yield node.text or ""
            else:
                stack.extend(reversed(node.children))


DocumentNode.model_rebuild()


def _parse_marks(raw: Any) -> frozenset[Mark]:
    if raw is None:
        return frozenset()
    if not isinstance(raw, list):
        raise TypeError("marks must be a list")
    marks = set()
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("type"), str):
            raise TypeError("mark must be an object with a type")
        kind = EDITOR_MARK_TYPES.get(item["type"])
        if kind is None:
            continue
        attrs = item.get("attrs") or {}
        if kind is MarkKind.LINK:
            marks.add(Mark(kind=kind, href=attrs.get("href"), target=attrs.get("target")))
        else:
            marks.add(Mark(kind=kind))
    return frozenset(marks)


@dataclass
class _PendingNode:
    """A container whose children are still being parsed."""

    type_name: str
    kind: NodeKind
    ordered: bool | None
    attrs: dict[str, Any]
    raw_children: list[Any]
    children: list[DocumentNode] = field(default_factory=list)

    def build(self) -> DocumentNode:
        kind = self.kind
        level = self.attrs.get("level", 1) if kind is NodeKind.HEADING else None
        language = self.attrs.get("language") if kind is NodeKind.CODE_BLOCK else None
        return DocumentNode(
            kind=kind,
            children=tuple(self.children),
            level=level,
            ordered=self.ordered,
            language=language,
            type_name=self.type_name if kind is NodeKind.UNKNOWN else None,
        )


def _open_node(data: Any, stack: list[_PendingNode]) -> DocumentNode | None:
    """Parse a leaf directly, or push a container onto the stack."""
    if isinstance(data, DocumentNode):
        return data
    if not isinstance(data, dict):
        raise TypeError(f"node must be an object, got {type(data).__name__}")

    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise TypeError("node type must be a string")

    raw_children = data.get("content") or []
    if not isinstance(raw_children, list):
        raise TypeError("node content must be a list")
    attrs = data.get("attrs") or {}
    if not isinstance(attrs, dict):
        raise TypeError("node attrs must be an object")

    kind, ordered = EDITOR_NODE_TYPES.get(type_name, (NodeKind.UNKNOWN, None))

    if kind is NodeKind.TEXT:
        return DocumentNode(
            kind=kind,
            text=data.get("text") or "",
            marks=_parse_marks(data.get("marks")),
        )

    stack.append(_PendingNode(type_name, kind, ordered, attrs, raw_children))
    return None


def _parse_node(data: Any) -> DocumentNode:
    # Explicit stack: nesting depth is bounded by memory, not the call stack.
    stack: list[_PendingNode] = []
    node = _open_node(data, stack)
    while stack:
        pending = stack[-1]
        if len(pending.children) < len(pending.raw_children):
            child = _open_node(pending.raw_children[len(pending.children)], stack)
            if child is not None:
                pending.children.append(child)
            continue
        stack.pop()
        node = pending.build()
        if stack:
            stack[-1].children.append(node)
    assert node is not None
    return node


def validate_document(data: Any) -> bool:
    """Strict allow-list check for stored editor JSON.

    The root must be a ``doc`` with a list of children, every node must be a
    known type and every mark an allowed one.
    """
    if not isinstance(data, dict):
        return False
    if data.get("type") != "doc" or not isinstance(data.get("content"), list):
        return False
    return _validate_nodes(data["content"])


def _validate_nodes(nodes: list[Any]) -> bool:
    stack = list(nodes)
    while stack:
        node = stack.pop()
        if not isinstance(node, dict) or not isinstance(node.get("type"), str):
            return False
        if node["type"] not in EDITOR_NODE_TYPES:
            return False

        children = node.get("content")
        if isinstance(children, list):
            stack.extend(children)

        marks = node.get("marks")
        if isinstance(marks, list):
            for mark in marks:
                if not isinstance(mark, dict):
                    return False
                if mark.get("type") not in ALLOWED_EDITOR_MARKS:
                    return False
    return True
