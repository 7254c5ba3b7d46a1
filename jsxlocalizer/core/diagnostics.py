"""Diagnostic reporting for a localization run.

Collects what happened to every file (extracted texts, skips, failures) plus
the key collisions of the run, and emits them as one JSON document.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class FileReport:
    file_path: str
    status: str = ''
    extracted: int = 0
    skipped: int = 0
    failed: int = 0
    entries: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'extracted': self.extracted,
            'skipped': self.skipped,
            'failed': self.failed,
            'entries': self.entries,
        }


@dataclass
class DiagnosticReport:
    project: str = ''
    source_language: str = ''
    target_language: str = ''
    files: Dict[str, FileReport] = field(default_factory=dict)
    collisions: List[Dict[str, str]] = field(default_factory=list)

    def file(self, file_path: str) -> FileReport:
        """Report for ``file_path``, created on first use."""
        if file_path not in self.files:
            self.files[file_path] = FileReport(file_path=file_path)
        return self.files[file_path]

    def set_status(self, file_path: str, status: str):
        self.file(file_path).status = status

    def add_extracted(self, file_path: str, entry: Dict[str, Any]):
        report = self.file(file_path)
        report.extracted += 1
        report.entries.append(dict(entry, status='extracted'))

    def mark_skipped(self, file_path: str, reason: str, entry: Optional[Dict[str, Any]] = None):
        report = self.file(file_path)
        report.skipped += 1
        report.entries.append(dict(entry or {}, status='skipped', reason=reason))

    def mark_failed(self, file_path: str, error: str, line: int = 0):
        report = self.file(file_path)
        report.failed += 1
        record = {'status': 'failed', 'error': error}
        if line:
            record['line'] = line
        report.entries.append(record)

    def add_collision(self, key: str, existing: str, incoming: str, origin: str = 'run'):
        self.collisions.append(
            {'key': key, 'existing': existing, 'incoming': incoming, 'origin': origin}
        )

    def totals(self) -> Dict[str, int]:
        reports = self.files.values()
        return {
            'files': len(self.files),
            'extracted': sum(r.extracted for r in reports),
            'skipped': sum(r.skipped for r in reports),
            'failed': sum(r.failed for r in reports),
            'collisions': len(self.collisions),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project': self.project,
            'source_language': self.source_language,
            'target_language': self.target_language,
            'totals': self.totals(),
            'collisions': self.collisions,
            'files': {path: report.as_dict() for path, report in self.files.items()},
        }

    def write(self, path: str) -> bool:
        """Write the report as JSON; failures are logged, never raised."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not write diagnostic report {target}: {e}")
            return False
        return True
