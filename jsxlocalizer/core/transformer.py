"""
Transform Orchestrator
======================

Per-file entry point: Classifier -> Injector -> Extraction (Pass A, Pass B).

``LocalizationTransformer.transform`` never raises: on any failure the
original source is returned and the locale store is left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from jsxlocalizer.core.classifier import ComponentClassifier
from jsxlocalizer.core.exceptions import ExtractionError, ParseError
from jsxlocalizer.core.extractor import TextExtractor, TextSegment
from jsxlocalizer.core.injector import TRANSLATE_FUNCTION, HookInjector
from jsxlocalizer.core.keygen import KeyGenerator, KeyPolicy
from jsxlocalizer.core.locale_store import LocaleTableStore
from jsxlocalizer.core.syntax import SourceUnit
from jsxlocalizer.utils.config import ExtractionSettings


class TransformStatus(Enum):
    TRANSFORMED = "transformed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TransformResult:
    """Outcome of transforming one file."""
    file_path: str
    source: str
    status: TransformStatus
    components: List[str] = field(default_factory=list)
    entries: List[TextSegment] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.status is TransformStatus.TRANSFORMED


class LocalizationTransformer:
    """Rewrites JSX text into lookup calls and records the extracted pairs."""

    def __init__(self, settings: Optional[ExtractionSettings] = None,
                 store: Optional[LocaleTableStore] = None):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or ExtractionSettings()
        self.store = store if store is not None else LocaleTableStore()
        self.policy = KeyPolicy.from_value(self.settings.key_policy)
        self.classifier = ComponentClassifier()
        self.injector = HookInjector(
            hook_name=self.settings.hook_name,
            hook_module=self.settings.hook_module,
            quote_style=self.settings.quote_style,
        )

    def transform(self, source: str, file_path: str) -> str:
        """Return the rewritten source, or ``source`` itself when nothing can be done."""
        return self.process(source, file_path).source

    def process(self, source: str, file_path: str) -> TransformResult:
        try:
            unit = SourceUnit.from_text(source, file_path)
            result = self._run(unit)
        except ParseError as e:
            self.logger.error(f"Transformation failed in file: {file_path}")
            self.logger.error(f"Error: {e}")
            self.logger.error("Please check the component for any syntax errors or unsupported patterns.")
            return TransformResult(file_path, source, TransformStatus.FAILED, error=str(e))
        except ExtractionError as e:
            self.logger.error(f"Transformation failed in file: {file_path} (line {e.line})")
            self.logger.error(f"Error: {e}")
            return TransformResult(file_path, source, TransformStatus.FAILED, error=str(e))
        except Exception as e:
            # Return the original source to avoid breaking the build
            self.logger.exception(f"Unexpected error while transforming {file_path}: {e}")
            return TransformResult(file_path, source, TransformStatus.FAILED, error=str(e))

        if result is None:
            self.logger.info(f"Skipping non-component file (no JSX): {file_path}")
            return TransformResult(file_path, source, TransformStatus.SKIPPED)

        components, segments = result
        for segment in segments:
            self.store.record(segment.key, segment.text)

        new_source = unit.text
        status = TransformStatus.TRANSFORMED if new_source != source else TransformStatus.UNCHANGED
        return TransformResult(file_path, new_source, status, components=components, entries=segments)

    def _run(self, unit: SourceUnit) -> Optional[Tuple[List[str], List[TextSegment]]]:
        """Transform ``unit`` in place; None when the file has no markup."""
        classification = self.classifier.classify(unit)
        if not classification.has_markup:
            return None

        self.logger.info(f"Processing component: {unit.component_name} ({unit.file_path})")

        # Implicit-return arrows become blocks so the hook can be inserted
        unit.apply(self.classifier.normalize(unit, classification))
        classification = self.classifier.classify(unit)
        unit.apply(self.injector.inject(unit, classification.candidates))

        extractor = TextExtractor(
            KeyGenerator(self.policy, unit.component_name),
            translate_function=TRANSLATE_FUNCTION,
            quote_style=self.settings.quote_style,
        )
        text_edits, segments = extractor.extract_text_nodes(unit)
        unit.apply(text_edits)
        mixed_edits, mixed_segments = extractor.extract_mixed_children(unit)
        unit.apply(mixed_edits)

        segments = segments + mixed_segments
        if segments:
            self.logger.info(f"Extracted {len(segments)} text(s) from {unit.file_path}")
        return classification.component_names, segments


def transform_source(source: str, file_path: str, store: LocaleTableStore,
                     settings: Optional[ExtractionSettings] = None) -> str:
    """Runner-facing contract: always returns a string."""
    return LocalizationTransformer(settings, store).transform(source, file_path)
