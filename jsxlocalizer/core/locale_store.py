"""
Locale Table Store
==================

Collects extracted (key, text) pairs and merges them into the two on-disk
locale tables:

- the source-language table (``en.json``) always holds the source text; an
  existing binding is never changed
- the target-language table (``he.json``) gets an empty placeholder for new
  keys; an existing value, translated or not, is never overwritten

Flushes against the same table files are serialized by a per-path lock, and
every write goes through a temporary file plus ``os.replace``.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Dict, Iterable, List, Optional, Tuple

from jsxlocalizer.core.exceptions import KeyCollisionError, PersistenceError

_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """Process-wide lock keyed on the resolved table path."""
    key = str(path.resolve())
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


@dataclass
class KeyCollision:
    """One key observed with two different source texts."""
    key: str
    existing: str
    incoming: str
    origin: str = "run"  # 'run' (two files in this run) or 'disk' (existing table)


@dataclass
class FlushResult:
    source_file: Path
    target_file: Path
    added_source: int = 0
    added_target: int = 0
    collisions: List[KeyCollision] = field(default_factory=list)
    recovered_files: List[Path] = field(default_factory=list)
    written: bool = False
    error: str = ""


class LocaleTableStore:
    """Pending translation entries plus the merge/persist logic."""

    def __init__(self, locales_dir: str = ".", source_language: str = "en",
                 target_language: str = "he", indent: int = 2):
        self.logger = logging.getLogger(__name__)
        self.locales_dir = Path(locales_dir)
        self.source_language = source_language
        self.target_language = target_language
        self.indent = indent
        self._pending: Dict[str, str] = {}
        self._on_disk: Optional[Dict[str, str]] = None
        self.collisions: List[KeyCollision] = []

    @property
    def source_file(self) -> Path:
        return self.locales_dir / f"{self.source_language}.json"

    @property
    def target_file(self) -> Path:
        return self.locales_dir / f"{self.target_language}.json"

    # --- Recording --------------------------------------------------------

    def record(self, key: str, text: str) -> bool:
        """Register a pair for the next flush. Returns False on a collision."""
        existing = self._pending.get(key)
        if existing is None:
            self._pending[key] = text
            return True
        if existing != text:
            collision = KeyCollision(key=key, existing=existing, incoming=text)
            self.collisions.append(collision)
            self.logger.warning(
                f"Key collision for '{key}': keeping {existing!r}, ignoring {text!r}"
            )
            return False
        return True

    def record_many(self, entries: Iterable[Tuple[str, str]]) -> None:
        for key, text in entries:
            self.record(key, text)

    def conflicts(self, entries: Iterable[Tuple[str, str]]) -> List[KeyCollision]:
        """Pairs whose key is already bound to other text, pending or on disk.

        Nothing is recorded; callers decide whether to keep the entries.
        """
        if self._on_disk is None:
            self._on_disk = self._peek_table(self.source_file)
        found: List[KeyCollision] = []
        for key, text in entries:
            if key in self._pending and self._pending[key] != text:
                found.append(KeyCollision(key=key, existing=self._pending[key], incoming=text))
            elif key in self._on_disk and self._on_disk[key] != text:
                found.append(KeyCollision(key=key, existing=self._on_disk[key],
                                          incoming=text, origin="disk"))
        return found

    def pending(self) -> List[Tuple[str, str]]:
        return list(self._pending.items())

    def __len__(self) -> int:
        return len(self._pending)

    # --- Persistence ------------------------------------------------------

    def flush(self) -> FlushResult:
        """Merge pending pairs into both tables and write them back."""
        result = FlushResult(source_file=self.source_file, target_file=self.target_file)

        locks = sorted(
            {str(p.resolve()): _lock_for(p) for p in (self.source_file, self.target_file)}.items()
        )
        for _, lock in locks:
            lock.acquire()
        try:
            try:
                source_table = self._read_table(self.source_file, result)
                target_table = self._read_table(self.target_file, result)
            except PersistenceError as e:
                result.error = str(e)
                self.logger.error(f"Translations not saved: {e}")
                return result

            for key, text in self._pending.items():
                if key not in source_table:
                    source_table[key] = text
                    result.added_source += 1
                elif source_table[key] != text:
                    collision = KeyCollision(key=key, existing=source_table[key],
                                             incoming=text, origin="disk")
                    result.collisions.append(collision)
                    self.collisions.append(collision)
                    self.logger.error(
                        f"Key '{key}' is already bound to {source_table[key]!r} in "
                        f"{self.source_file}; not replacing it with {text!r}"
                    )
                if key not in target_table:
                    target_table[key] = ""
                    result.added_target += 1

            try:
                self._write_table(self.source_file, source_table)
                self._write_table(self.target_file, target_table)
            except PersistenceError as e:
                result.error = str(e)
                self.logger.error(f"Translations not saved: {e}")
                return result

            result.written = True
            self._pending.clear()
            self._on_disk = None
            self.logger.info(
                f"Translations saved/merged: {self.source_file} (+{result.added_source}) "
                f"& {self.target_file} (+{result.added_target})"
            )
            return result
        finally:
            for _, lock in reversed(locks):
                lock.release()

    def raise_for_collisions(self) -> None:
        if self.collisions:
            raise KeyCollisionError(self.collisions)

    def _read_table(self, path: Path, result: FlushResult) -> Dict[str, str]:
        """Load a table; missing or blank files are empty tables."""
        if not path.exists():
            return {}
        try:
            raw = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e
        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
        except ValueError as e:
            backup = path.with_suffix(path.suffix + ".bak")
            self.logger.warning(
                f"Malformed locale table {path} ({e}); continuing with an empty table, "
                f"original kept as {backup}"
            )
            try:
                shutil.copy2(path, backup)
            except OSError as copy_error:
                self.logger.warning(f"Could not back up {path}: {copy_error}")
            result.recovered_files.append(path)
            return {}
        return {str(k): v for k, v in data.items()}

    def _peek_table(self, path: Path) -> Dict[str, str]:
        """Best-effort read for conflict checks; unreadable tables count as empty."""
        try:
            data = json.loads(path.read_text(encoding="utf-8-sig") or "{}")
        except (OSError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items()}

    def _write_table(self, path: Path, table: Dict[str, str]) -> None:
        encoded = json.dumps(table, ensure_ascii=False, indent=self.indent) + "\n"
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w", encoding="utf-8", dir=str(path.parent),
                prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(encoded)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            raise PersistenceError(f"Could not write {path}: {e}") from e
