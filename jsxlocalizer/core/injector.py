"""
Hook Injector
=============

Makes sure the localization hook is imported once per file and invoked once
per component: ``const { t } = useTranslation();``
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from tree_sitter import Node

from jsxlocalizer.core.classifier import ComponentCandidate
from jsxlocalizer.core.syntax import (
    SourceUnit,
    TextEdit,
    quote_literal,
    significant_children,
    string_value,
)

TRANSLATE_FUNCTION = "t"

_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})


class HookInjector:
    """Inserts the hook import and per-component hook calls."""

    def __init__(self, hook_name: str = "useTranslation", hook_module: str = "react-i18next",
                 quote_style: str = "single"):
        self.logger = logging.getLogger(__name__)
        self.hook_name = hook_name
        self.hook_module = hook_module
        self.quote_style = quote_style

    @property
    def import_statement(self) -> str:
        module = quote_literal(self.hook_module, self.quote_style)
        return f"import {{ {self.hook_name} }} from {module};"

    @property
    def hook_statement(self) -> str:
        return f"const {{ {TRANSLATE_FUNCTION} }} = {self.hook_name}();"

    def inject(self, unit: SourceUnit, candidates: Sequence[ComponentCandidate]) -> List[TextEdit]:
        """Collect the import edit and one hook edit per component lacking ``t``."""
        edits: List[TextEdit] = []
        import_edit = self.import_edit(unit)
        if import_edit is not None:
            edits.append(import_edit)

        for candidate in candidates:
            try:
                edit = self.hook_edit(unit, candidate)
            except Exception as e:
                self.logger.error(
                    f"Error adding {self.hook_name} to {candidate.name} "
                    f"({unit.file_path}:{candidate.line}): {e}"
                )
                continue
            if edit is None:
                self.logger.info(f"Component {candidate.name} already has {TRANSLATE_FUNCTION} function")
            else:
                self.logger.info(f"Added {self.hook_name} hook to component {candidate.name}")
                edits.append(edit)
        return edits

    # --- File level -------------------------------------------------------

    def module_imports(self, unit: SourceUnit) -> List[Node]:
        """Top-level value imports from the hook module (``import type`` excluded)."""
        found = []
        for statement in unit.root.named_children:
            if statement.type != "import_statement":
                continue
            if any(child.type == "type" for child in statement.children):
                continue
            source = statement.child_by_field_name("source")
            if source is not None and string_value(unit, source) == self.hook_module:
                found.append(statement)
        return found

    def has_hook_import(self, unit: SourceUnit) -> bool:
        """Is the hook name bound by an import from the hook module?"""
        for statement in self.module_imports(unit):
            named = _named_imports(statement)
            if named is None:
                continue
            for specifier in named.named_children:
                if specifier.type != "import_specifier":
                    continue
                local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                if local is not None and unit.node_text(local) == self.hook_name:
                    return True
        return False

    def import_edit(self, unit: SourceUnit) -> Optional[TextEdit]:
        if self.has_hook_import(unit):
            return None

        # Extend `import { Trans } from 'react-i18next'` rather than importing the module twice
        for statement in self.module_imports(unit):
            named = _named_imports(statement)
            if named is None:
                continue
            specifiers = [s for s in named.named_children if s.type == "import_specifier"]
            if specifiers:
                return TextEdit.insert(specifiers[-1].end_byte, f", {self.hook_name}")
            return TextEdit(named.start_byte, named.end_byte, f"{{ {self.hook_name} }}")

        return TextEdit.insert(self._import_offset(unit), self.import_statement + unit.newline)

    def _import_offset(self, unit: SourceUnit) -> int:
        """First byte after the hashbang, leading comments and directives."""
        for statement in unit.root.named_children:
            if statement.type in ("hash_bang_line", "comment"):
                continue
            if _is_directive(statement):
                continue
            return statement.start_byte
        return len(unit.source)

    # --- Component level --------------------------------------------------

    def has_translate_binding(self, unit: SourceUnit, block: Node) -> bool:
        for statement in significant_children(block):
            if statement.type not in _DECLARATION_TYPES:
                continue
            for declarator in statement.named_children:
                if declarator.type != "variable_declarator":
                    continue
                pattern = declarator.child_by_field_name("name")
                if pattern is not None and pattern.type == "object_pattern" \
                        and _pattern_binds(unit, pattern, TRANSLATE_FUNCTION):
                    return True
        return False

    def hook_edit(self, unit: SourceUnit, candidate: ComponentCandidate) -> Optional[TextEdit]:
        block = candidate.body
        if block.type != "statement_block":
            raise ValueError(f"{candidate.name} has no block body; normalize it first")
        if self.has_translate_binding(unit, block):
            return None

        statements = significant_children(block)
        first = statements[0]
        if unit.starts_line(first.start_byte):
            indent = unit.line_indent(first.start_byte)
            return TextEdit.insert(first.start_byte, f"{self.hook_statement}{unit.newline}{indent}")
        return TextEdit.insert(first.start_byte, f"{self.hook_statement} ")


def _named_imports(statement: Node) -> Optional[Node]:
    """The ``{ ... }`` clause of an import statement, if it has one."""
    for child in statement.named_children:
        if child.type == "import_clause":
            for part in child.named_children:
                if part.type == "named_imports":
                    return part
    return None


def _is_directive(statement: Node) -> bool:
    """'use client'; / 'use strict'; at the top of a module."""
    if statement.type != "expression_statement":
        return False
    inner = significant_children(statement)
    return len(inner) == 1 and inner[0].type == "string"


def _pattern_binds(unit: SourceUnit, pattern: Node, name: str) -> bool:
    """Does an object pattern destructure the property ``name``?"""
    for prop in pattern.named_children:
        if prop.type == "shorthand_property_identifier_pattern":
            key = prop
        elif prop.type == "pair_pattern":
            key = prop.child_by_field_name("key")
        elif prop.type == "object_assignment_pattern":
            key = prop.child_by_field_name("left")
        else:
            continue
        if key is not None and unit.node_text(key).strip("'\"") == name:
            return True
    return False
