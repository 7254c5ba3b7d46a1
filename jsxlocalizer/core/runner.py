"""
Batch Runner
============

Discovers component source files, transforms them (optionally in a process
pool) and merges every extracted pair into the locale tables with a single
flush once all files are done.

Workers never touch the locale tables. Each one transforms a file against a
process-local store and hands its pairs and new text back to the parent,
which owns the only store that is flushed. The parent writes a file only when
none of its keys is already bound to other text; otherwise the file is left
unchanged.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from jsxlocalizer.core.diagnostics import DiagnosticReport
from jsxlocalizer.core.extractor import TextSegment
from jsxlocalizer.core.locale_store import FlushResult, KeyCollision, LocaleTableStore
from jsxlocalizer.core.transformer import LocalizationTransformer, TransformStatus
from jsxlocalizer.utils.config import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS, ExtractionSettings
from jsxlocalizer.utils.encoding import read_text_safely, write_text_preserving_newlines

logger = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """What a worker reports back for one file."""
    file_path: str
    status: TransformStatus
    segments: List[TextSegment] = field(default_factory=list)
    pairs: List[Tuple[str, str]] = field(default_factory=list)
    collisions: List[KeyCollision] = field(default_factory=list)
    components: List[str] = field(default_factory=list)
    source: Optional[str] = None  # transformed text, set when the file changed
    written: bool = False
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Totals for one batch run."""
    files: int = 0
    transformed: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    extracted: int = 0
    dry_run: bool = False
    flush: Optional[FlushResult] = None
    failures: List[Tuple[str, str]] = field(default_factory=list)
    conflicted: List[str] = field(default_factory=list)
    collisions: List[KeyCollision] = field(default_factory=list)
    report: DiagnosticReport = field(default_factory=DiagnosticReport)

    @property
    def tables_saved(self) -> bool:
        return self.flush is not None and self.flush.written

    @property
    def success(self) -> bool:
        if self.failures:
            return False
        return self.dry_run or self.flush is None or self.flush.written


def discover_source_files(root, extensions: Optional[Iterable[str]] = None,
                          exclude_dirs: Optional[Iterable[str]] = None) -> List[Path]:
    """List source files under ``root`` (or ``root`` itself when it is a file)."""
    root = Path(root)
    suffixes = {ext.lower() if ext.startswith(".") else f".{ext.lower()}"
                for ext in (extensions or DEFAULT_EXTENSIONS)}
    excluded = set(exclude_dirs if exclude_dirs is not None else DEFAULT_EXCLUDE_DIRS)

    if root.is_file():
        return [root]
    if not root.is_dir():
        raise FileNotFoundError(f"Source path not found: {root}")

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in excluded]
        for filename in filenames:
            if Path(filename).suffix.lower() in suffixes:
                found.append(Path(dirpath) / filename)
    found.sort()
    logger.debug(f"Discovered {len(found)} source file(s) under {root}")
    return found


def localize_file(file_path: str, settings: Optional[ExtractionSettings] = None,
                  dry_run: bool = False, write: bool = True) -> FileOutcome:
    """Transform one file on disk. Runs inside pool workers, so it must not raise.

    With ``write=False`` the transformed text is only returned in
    ``outcome.source``; the batch runner writes it once the file's keys are
    known not to collide.
    """
    text = read_text_safely(Path(file_path))
    if text is None:
        logger.error(f"Could not read {file_path}")
        return FileOutcome(file_path, TransformStatus.FAILED, error="could not read file")

    # Process-local store: pairs go back to the parent instead of to disk
    store = LocaleTableStore()
    result = LocalizationTransformer(settings, store).process(text, file_path)
    outcome = FileOutcome(
        file_path=file_path,
        status=result.status,
        segments=result.entries,
        pairs=store.pending(),
        collisions=list(store.collisions),
        components=result.components,
        source=result.source if result.changed else None,
        error=result.error,
    )
    if write and not dry_run:
        return write_outcome(outcome)
    return outcome


def write_outcome(outcome: FileOutcome) -> FileOutcome:
    """Write a changed file back; a write error turns the outcome into a failure."""
    if outcome.source is None or outcome.written:
        return outcome
    try:
        write_text_preserving_newlines(Path(outcome.file_path), outcome.source)
    except OSError as e:
        logger.error(f"Could not write {outcome.file_path}: {e}")
        return FileOutcome(outcome.file_path, TransformStatus.FAILED, error=f"could not write file: {e}")
    outcome.written = True
    logger.info(f"Successfully processed {outcome.file_path}")
    return outcome


def run_localization(files: Sequence, settings: Optional[ExtractionSettings],
                     store: LocaleTableStore, workers: int = 1, dry_run: bool = False,
                     project: str = "") -> RunSummary:
    """Transform ``files`` and flush the gathered pairs into ``store`` once."""
    paths = [str(f) for f in files]
    summary = RunSummary(files=len(paths), dry_run=dry_run)
    summary.report = DiagnosticReport(
        project=project,
        source_language=store.source_language,
        target_language=store.target_language,
    )

    for outcome in _execute(paths, settings, workers, dry_run):
        _collect(summary, store, outcome, dry_run)

    if dry_run:
        logger.info(f"Dry run: {len(store)} entries not written to the locale tables")
    elif len(store):
        summary.flush = store.flush()
    else:
        logger.info("No new text found; locale tables left untouched")

    summary.collisions = list(store.collisions)
    for collision in summary.collisions:
        summary.report.add_collision(collision.key, collision.existing,
                                     collision.incoming, collision.origin)
    return summary


def _execute(paths: List[str], settings: Optional[ExtractionSettings], workers: int,
             dry_run: bool) -> List[FileOutcome]:
    if workers <= 1 or len(paths) <= 1:
        return [localize_file(path, settings, dry_run, write=False) for path in paths]

    outcomes: List[FileOutcome] = []
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = [(path, executor.submit(localize_file, path, settings, dry_run, False))
                   for path in paths]
        # Results are gathered in file order so keys are recorded deterministically
        for path, future in futures:
            try:
                outcomes.append(future.result())
            except Exception as e:
                logger.error(f"Worker failed on {path}: {e}")
                outcomes.append(FileOutcome(path, TransformStatus.FAILED, error=str(e)))
    return outcomes


def _collect(summary: RunSummary, store: LocaleTableStore, outcome: FileOutcome,
             dry_run: bool = False) -> None:
    report = summary.report

    if outcome.status is TransformStatus.TRANSFORMED:
        collisions = outcome.collisions + store.conflicts(outcome.pairs)
        if collisions:
            _leave_untouched(summary, store, outcome, collisions)
            return
        if not dry_run:
            outcome = write_outcome(outcome)

    report.set_status(outcome.file_path, outcome.status.value)
    if outcome.status is TransformStatus.FAILED:
        summary.failed += 1
        summary.failures.append((outcome.file_path, outcome.error or "unknown error"))
        report.mark_failed(outcome.file_path, outcome.error or "unknown error")
        return
    if outcome.status is TransformStatus.SKIPPED:
        summary.skipped += 1
        report.mark_skipped(outcome.file_path, "no JSX markup")
        return

    if outcome.status is TransformStatus.TRANSFORMED:
        summary.transformed += 1
    else:
        summary.unchanged += 1

    store.record_many(outcome.pairs)
    summary.extracted += len(outcome.segments)
    for segment in outcome.segments:
        entry = {'key': segment.key, 'text': segment.text, 'line': segment.line}
        if segment.variables:
            entry['variables'] = list(segment.variables)
        report.add_extracted(outcome.file_path, entry)


def _leave_untouched(summary: RunSummary, store: LocaleTableStore, outcome: FileOutcome,
                     collisions: List[KeyCollision]) -> None:
    """Keep a file whose keys are bound to other text out of the run entirely."""
    store.collisions.extend(collisions)
    for collision in collisions:
        logger.error(
            f"{outcome.file_path}: key '{collision.key}' is already bound to "
            f"{collision.existing!r}, not {collision.incoming!r}; file left unchanged"
        )
    summary.conflicted.append(outcome.file_path)
    summary.report.set_status(outcome.file_path, "conflicted")
    keys = ", ".join(sorted({c.key for c in collisions}))
    summary.report.mark_skipped(outcome.file_path, f"key collision: {keys}")
