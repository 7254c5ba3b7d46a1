"""
JSX/TSX syntax layer built on tree-sitter.

tree-sitter trees are read-only, so every rewrite is expressed as a list of
byte-range ``TextEdit`` objects applied to the source, after which the unit is
re-parsed. Untouched bytes keep their original formatting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from tree_sitter import Language, Node, Parser, Tree

from jsxlocalizer.core.exceptions import ExtractionError, ParseError

logger = logging.getLogger(__name__)

MARKUP_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})
CONTAINER_TYPES = frozenset({"jsx_element", "jsx_fragment"})
TEXT_TYPES = frozenset({"jsx_text", "html_character_reference"})
TAG_TYPES = frozenset({"jsx_opening_element", "jsx_closing_element"})
FUNCTION_VALUE_TYPES = frozenset({"arrow_function", "function_expression", "function"})


def _build_parsers() -> Dict[str, Parser]:
    """Load JavaScript and TSX parsers."""
    import tree_sitter_javascript as ts_javascript
    import tree_sitter_typescript as ts_typescript

    js_lang = Language(ts_javascript.language())
    ts_lang = Language(ts_typescript.language_typescript())
    tsx_lang = Language(ts_typescript.language_tsx())

    return {
        ".js": Parser(js_lang),
        ".jsx": Parser(js_lang),
        ".mjs": Parser(js_lang),
        ".cjs": Parser(js_lang),
        ".ts": Parser(ts_lang),
        ".tsx": Parser(tsx_lang),
    }


# Cached parsers (one set per process)
_PARSERS: Optional[Dict[str, Parser]] = None


def get_parser(file_path: str) -> Parser:
    """Get the parser for a file; unknown suffixes use the JavaScript grammar."""
    global _PARSERS
    if _PARSERS is None:
        _PARSERS = _build_parsers()
    return _PARSERS.get(Path(file_path).suffix.lower(), _PARSERS[".jsx"])


@dataclass
class TextEdit:
    """Replace ``source[start:end]`` with ``text``; ``start == end`` inserts."""
    start: int
    end: int
    text: str

    @classmethod
    def insert(cls, offset: int, text: str) -> "TextEdit":
        return cls(offset, offset, text)


def apply_edits(source: bytes, edits: Sequence[TextEdit]) -> bytes:
    """Apply non-overlapping edits.

    Insertions at the same offset keep the order in which they were given.
    """
    ordered = sorted(enumerate(edits), key=lambda item: (item[1].start, item[1].end, item[0]))
    previous_end = -1
    for _, edit in ordered:
        if edit.start > edit.end or edit.end > len(source):
            raise ExtractionError(f"Edit out of range: {edit.start}..{edit.end}")
        if edit.start < previous_end:
            raise ExtractionError(
                f"Overlapping edits at byte {edit.start} (previous edit ends at {previous_end})"
            )
        previous_end = max(previous_end, edit.end)

    result = source
    for _, edit in reversed(ordered):
        result = result[:edit.start] + edit.text.encode("utf-8") + result[edit.end:]
    return result


@dataclass
class SourceUnit:
    """One file's source bytes and its parsed tree."""
    file_path: str
    source: bytes
    component_name: str
    tree: Tree = field(init=False, repr=False)

    def __post_init__(self):
        self.tree = self._parse(self.source)

    @classmethod
    def from_text(cls, text: str, file_path: str) -> "SourceUnit":
        return cls(
            file_path=file_path,
            source=text.encode("utf-8"),
            component_name=Path(file_path).stem or "Component",
        )

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def text(self) -> str:
        return self.source.decode("utf-8")

    @property
    def newline(self) -> str:
        """Line terminator used by the file."""
        return "\r\n" if b"\r\n" in self.source else "\n"

    def _parse(self, source: bytes) -> Tree:
        tree = get_parser(self.file_path).parse(source)
        if tree.root_node.has_error:
            line = _first_error_line(tree.root_node)
            raise ParseError(f"{self.file_path}:{line}: source does not parse as JSX/TSX")
        return tree

    def apply(self, edits: Sequence[TextEdit]) -> bool:
        """Apply edits and re-parse. Returns False when there was nothing to do."""
        if not edits:
            return False
        new_source = apply_edits(self.source, edits)
        try:
            new_tree = self._parse(new_source)
        except ParseError as exc:
            raise ExtractionError(f"Rewrite produced invalid source: {exc}",
                                  file_path=self.file_path) from exc
        self.source = new_source
        self.tree = new_tree
        return True

    def node_text(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8")

    def line_indent(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""
        line_start = self.source.rfind(b"\n", 0, offset) + 1
        line = self.source[line_start:offset]
        stripped = line.lstrip(b" \t")
        return line[:len(line) - len(stripped)].decode("utf-8")

    def starts_line(self, offset: int) -> bool:
        """True when only whitespace precedes ``offset`` on its line."""
        line_start = self.source.rfind(b"\n", 0, offset) + 1
        return not self.source[line_start:offset].strip()


def _first_error_line(node: Node) -> int:
    for child in iter_nodes(node):
        if child.type == "ERROR" or child.is_missing:
            return child.start_point[0] + 1
    return node.start_point[0] + 1


def iter_nodes(root: Node, types: Optional[frozenset] = None) -> Iterator[Node]:
    """Pre-order walk over ``root``, optionally filtered by node type."""
    stack = [root]
    while stack:
        node = stack.pop()
        if types is None or node.type in types:
            yield node
        stack.extend(reversed(node.children))


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def significant_children(node: Node) -> List[Node]:
    """Named children that carry meaning (comments dropped)."""
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    """Strip any number of wrapping parenthesized_expression nodes."""
    while node is not None and node.type == "parenthesized_expression":
        inner = significant_children(node)
        node = inner[0] if len(inner) == 1 else None
    return node


def is_markup(node: Optional[Node]) -> bool:
    return node is not None and node.type in MARKUP_TYPES


def contains_markup(root: Node) -> bool:
    return next(iter_nodes(root, MARKUP_TYPES), None) is not None


def jsx_children(element: Node) -> List[Node]:
    """Direct content children of a JSX element or fragment (tags excluded)."""
    return [
        child for child in element.children
        if child.is_named and child.type not in TAG_TYPES and child.type != "comment"
    ]


def expression_of(jsx_expression: Node) -> Optional[Node]:
    """The expression inside ``{...}``; None for empty or comment-only braces."""
    inner = significant_children(jsx_expression)
    return inner[0] if len(inner) == 1 else None


def string_value(unit: SourceUnit, string_node: Node) -> str:
    """Value of a string literal node without its quotes."""
    raw = unit.node_text(string_node)
    if len(raw) >= 2 and raw[0] in "'\"`" and raw[-1] == raw[0]:
        return raw[1:-1]
    return raw


def quote_literal(value: str, quote_style: str = "single") -> str:
    """Render ``value`` as a JS string literal."""
    quote = "'" if quote_style == "single" else '"'
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"
