"""
Component Classifier
====================

Finds function-like declarations with an uppercase name and decides which of
them are UI components.

A component is recognized only when its markup-producing return sits at the
top level of its body; returns nested in conditionals or loops are not
scanned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from tree_sitter import Node

from jsxlocalizer.core.syntax import (
    FUNCTION_VALUE_TYPES,
    SourceUnit,
    TextEdit,
    contains_markup,
    is_markup,
    iter_nodes,
    line_of,
    significant_children,
    unwrap_parens,
)

COMPONENT_NAME_RE = re.compile(r'^[A-Z]')
INDENT_STEP = "  "

_DECLARATION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "variable_declarator",
})


@dataclass
class ComponentCandidate:
    """A function-like declaration whose name starts with an uppercase letter."""
    name: str
    function: Node = field(repr=False)
    body: Node = field(repr=False)
    line: int = 0
    implicit_return: bool = False
    accepted: bool = False

    @property
    def has_block_body(self) -> bool:
        return self.body.type == "statement_block"


@dataclass
class ClassificationResult:
    has_markup: bool
    candidates: List[ComponentCandidate] = field(default_factory=list)
    rejected: List[ComponentCandidate] = field(default_factory=list)

    @property
    def component_names(self) -> List[str]:
        return [c.name for c in self.candidates]


class ComponentClassifier:
    """Classifies the functions of a SourceUnit."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def classify(self, unit: SourceUnit) -> ClassificationResult:
        result = ClassificationResult(has_markup=contains_markup(unit.root))
        if not result.has_markup:
            return result

        for candidate in self.find_candidates(unit):
            if self._accepts(candidate):
                candidate.accepted = True
                result.candidates.append(candidate)
            else:
                result.rejected.append(candidate)

        self.logger.debug(
            "%s: components=%s rejected=%s",
            unit.file_path,
            result.component_names,
            [c.name for c in result.rejected],
        )
        return result

    def find_candidates(self, unit: SourceUnit) -> List[ComponentCandidate]:
        candidates = []
        for node in iter_nodes(unit.root, _DECLARATION_TYPES):
            candidate = self._candidate_from(unit, node)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def normalize(self, unit: SourceUnit, result: ClassificationResult) -> List[TextEdit]:
        """Edits turning implicit-return arrow bodies into explicit blocks."""
        edits: List[TextEdit] = []
        for candidate in result.candidates:
            if not candidate.implicit_return:
                continue
            body = candidate.body
            base_indent = unit.line_indent(candidate.function.start_byte)
            newline = unit.newline
            inner_indent = base_indent + INDENT_STEP
            text = unit.node_text(body)
            if not _has_multiline_template(body):
                text = _indent_continuation(text, INDENT_STEP)
            replacement = "{" + newline + inner_indent + "return " + text + ";" + newline + base_indent + "}"
            edits.append(TextEdit(body.start_byte, body.end_byte, replacement))
            self.logger.debug("Wrapped implicit return of %s in a block", candidate.name)
        return edits

    def _candidate_from(self, unit: SourceUnit, node: Node) -> Optional[ComponentCandidate]:
        if node.type == "variable_declarator":
            name_node = node.child_by_field_name("name")
            function = node.child_by_field_name("value")
            if function is None or function.type not in FUNCTION_VALUE_TYPES:
                return None
        else:
            name_node = node.child_by_field_name("name")
            function = node

        if name_node is None or name_node.type != "identifier":
            return None
        name = unit.node_text(name_node)
        if not COMPONENT_NAME_RE.match(name):
            return None

        body = function.child_by_field_name("body")
        if body is None:
            return None
        return ComponentCandidate(name=name, function=function, body=body, line=line_of(function))

    def _accepts(self, candidate: ComponentCandidate) -> bool:
        if not candidate.has_block_body:
            # Implicit-return arrow function: () => <div/>
            if is_markup(unwrap_parens(candidate.body)):
                candidate.implicit_return = True
                return True
            return False

        for statement in significant_children(candidate.body):
            if statement.type != "return_statement":
                continue
            argument = significant_children(statement)
            if argument and is_markup(unwrap_parens(argument[0])):
                return True
        return False


def _indent_continuation(text: str, step: str) -> str:
    """Indent every non-blank line after the first by ``step``."""
    lines = text.split("\n")
    return "\n".join([lines[0]] + [step + line if line.strip() else line for line in lines[1:]])


def _has_multiline_template(node: Node) -> bool:
    """Template literals keep their whitespace, so their lines must not move."""
    return any("\n" in t.text.decode("utf-8", "replace")
               for t in iter_nodes(node, frozenset({"template_string"})))
