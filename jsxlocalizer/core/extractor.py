"""
Text Extraction Engine
======================

Walks the JSX markup of a SourceUnit and turns hard-coded text into
``t('key')`` calls.

Pass A rewrites plain text nodes one by one. Pass B joins each contiguous run
of text and ``{variable}`` interpolations into a single
``t('key', { variable: variable })`` call; nested elements and other
expressions split runs and stay where they are.

Pass A must be applied (and the unit re-parsed) before Pass B runs; text
belonging to a mixed element is left to Pass B.

tree-sitter splits JSX text into ``jsx_text`` and ``html_character_reference``
tokens. Consecutive tokens are grouped into one text run, which is what a
JSX text node is to the React compiler.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from tree_sitter import Node

from jsxlocalizer.core.exceptions import ExtractionError
from jsxlocalizer.core.keygen import KeyGenerator
from jsxlocalizer.core.syntax import (
    CONTAINER_TYPES,
    TEXT_TYPES,
    SourceUnit,
    TextEdit,
    expression_of,
    iter_nodes,
    jsx_children,
    line_of,
    quote_literal,
)

# Text that is nothing but a parameter echo, e.g. "{error}"
PARAMETER_ONLY_RE = re.compile(r'^\s*\{[^}]+\}\s*$')
# A joined part that is only a placeholder token, e.g. "{{count}}"
PLACEHOLDER_TOKEN_RE = re.compile(r'^\{\{[^}]+\}\}$')
_WHITESPACE_RE = re.compile(r'[ \t\r\n]+')
_ASCII_WS = b" \t\r\n"

TEXT = "text"
IDENTIFIER = "identifier"
EXPRESSION = "expression"
ELEMENT = "element"


@dataclass
class MarkupChild:
    """One significant child of a JSX element."""
    kind: str
    start: int
    end: int
    line: int
    value: str = ""  # normalized text, or the identifier name
    raw: str = ""


@dataclass
class TextSegment:
    """Text found in markup, with the variables it interpolates."""
    text: str
    line: int
    key: str = ""
    variables: List[str] = field(default_factory=list)


class TextExtractor:
    """Runs the two extraction passes over one SourceUnit."""

    def __init__(self, key_generator: KeyGenerator, translate_function: str = "t",
                 quote_style: str = "single"):
        self.logger = logging.getLogger(__name__)
        self.key_generator = key_generator
        self.translate_function = translate_function
        self.quote_style = quote_style

    # --- Pass A -----------------------------------------------------------

    def extract_text_nodes(self, unit: SourceUnit) -> Tuple[List[TextEdit], List[TextSegment]]:
        edits: List[TextEdit] = []
        segments: List[TextSegment] = []

        for container in iter_nodes(unit.root, CONTAINER_TYPES):
            children = self.children_of(unit, container)
            if is_mixed(children):
                continue
            for child in children:
                if child.kind != TEXT:
                    continue
                try:
                    segment = self._process_text(child)
                except Exception as e:
                    raise self._failure(unit, child.line, child.raw, e) from e
                if segment is None:
                    continue
                edits.append(TextEdit(child.start, child.end, self.render_call(segment)))
                segments.append(segment)

        return edits, segments

    def _process_text(self, child: MarkupChild) -> Optional[TextSegment]:
        text = child.value
        if not text:
            return None
        if PARAMETER_ONLY_RE.match(text):
            self.logger.debug(f"Skipping parameter: {text}")
            return None

        key = self.key_generator.generate(text)
        if not key:
            self.logger.debug(f"Skipping non-extractable text: {text!r}")
            return None
        self.logger.debug(f'Processing text: "{text}" -> {key}')
        return TextSegment(text=text, line=child.line, key=key)

    # --- Pass B -----------------------------------------------------------

    def extract_mixed_children(self, unit: SourceUnit) -> Tuple[List[TextEdit], List[TextSegment]]:
        edits: List[TextEdit] = []
        segments: List[TextSegment] = []

        for container in iter_nodes(unit.root, CONTAINER_TYPES):
            children = self.children_of(unit, container)
            if len(children) <= 1:
                continue
            if not any(c.kind in (IDENTIFIER, EXPRESSION) for c in children):
                continue
            for run in contributing_runs(children):
                try:
                    result = self._process_mixed(run)
                except Exception as e:
                    raise self._failure(unit, run[0].line, unit.node_text(container), e) from e
                if result is None:
                    continue
                edit, segment = result
                edits.append(edit)
                segments.append(segment)

        return edits, segments

    def _process_mixed(self, run: List[MarkupChild]) -> Optional[Tuple[TextEdit, TextSegment]]:
        """Join one contiguous run of text and ``{identifier}`` children into a single call."""
        parts: List[str] = []
        variables: List[str] = []
        for child in run:
            if child.kind == TEXT and child.value:
                parts.append(child.value)
            elif child.kind == IDENTIFIER:
                parts.append(f"{{{{{child.value}}}}}")
                if child.value not in variables:
                    variables.append(child.value)

        full_text = " ".join(parts)
        if not full_text:
            return None
        # Only process if there's actual text content beyond just parameters
        if all(PLACEHOLDER_TOKEN_RE.match(part) for part in parts):
            return None

        key = self.key_generator.generate(full_text)
        if not key:
            return None
        segment = TextSegment(text=full_text, line=run[0].line, key=key, variables=variables)
        self.logger.debug(f'Processing mixed text: "{full_text}" -> {key}')
        return TextEdit(run[0].start, run[-1].end, self.render_call(segment)), segment

    # --- Helpers ----------------------------------------------------------

    def render_call(self, segment: TextSegment) -> str:
        args = quote_literal(segment.key, self.quote_style)
        if segment.variables:
            params = ", ".join(f"{name}: {name}" for name in segment.variables)
            args += f", {{ {params} }}"
        return f"{{{self.translate_function}({args})}}"

    def children_of(self, unit: SourceUnit, container: Node) -> List[MarkupChild]:
        """Group a container's children, merging consecutive text tokens into runs."""
        children: List[MarkupChild] = []
        run: List[Node] = []

        def close_run():
            if run:
                child = _text_run(unit, run)
                if child is not None:
                    children.append(child)
                run.clear()

        for node in jsx_children(container):
            if node.type in TEXT_TYPES:
                run.append(node)
                continue
            close_run()
            if node.type == "jsx_expression":
                expression = expression_of(node)
                if expression is not None and expression.type == "identifier":
                    kind, value = IDENTIFIER, unit.node_text(expression)
                else:
                    kind, value = EXPRESSION, ""
            else:
                kind, value = ELEMENT, ""
            children.append(MarkupChild(
                kind=kind,
                start=node.start_byte,
                end=node.end_byte,
                line=line_of(node),
                value=value,
                raw=unit.node_text(node),
            ))
        close_run()
        return children

    def _failure(self, unit: SourceUnit, line: int, text: str, error: Exception) -> ExtractionError:
        self.logger.error(f"Error processing text at line {line} in {unit.file_path}:")
        self.logger.error(f'Text: "{text}"')
        self.logger.error(f"Error: {error}")
        return ExtractionError(str(error), file_path=unit.file_path, line=line, text=text)


def _text_run(unit: SourceUnit, nodes: List[Node]) -> Optional[MarkupChild]:
    """Build a TEXT child from consecutive text tokens; None if only whitespace."""
    start, end = nodes[0].start_byte, nodes[-1].end_byte
    raw = unit.source[start:end]
    stripped = raw.strip(_ASCII_WS)
    if not stripped:
        return None
    trim_start = start + (len(raw) - len(raw.lstrip(_ASCII_WS)))
    trim_end = trim_start + len(stripped)
    raw_text = stripped.decode("utf-8")
    value = _WHITESPACE_RE.sub(" ", html.unescape(raw_text)).strip()
    line = unit.source.count(b"\n", 0, trim_start) + 1
    return MarkupChild(kind=TEXT, start=trim_start, end=trim_end, line=line,
                       value=value, raw=raw_text)


def is_mixed(children: List[MarkupChild]) -> bool:
    """Text interleaved with at least one ``{identifier}``: handled by Pass B."""
    return (
        len(children) > 1
        and any(c.kind == IDENTIFIER for c in children)
        and any(c.kind == TEXT and c.value for c in children)
    )


def contributing_runs(children: List[MarkupChild]) -> List[List[MarkupChild]]:
    """Contiguous runs of text/identifier children.

    Any other child (a nested element, a non-identifier expression) ends a
    run, so each run is rewritten in place and the children keep their order.
    """
    runs: List[List[MarkupChild]] = []
    current: List[MarkupChild] = []
    for child in children:
        if (child.kind == TEXT and child.value) or child.kind == IDENTIFIER:
            current.append(child)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs
