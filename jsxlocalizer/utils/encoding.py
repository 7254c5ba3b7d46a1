"""
Source file I/O that never crashes on odd encodings.

Component sources are mostly UTF-8 (sometimes with a BOM); anything else is
decoded with the encoding chardet guesses so the file can still be scanned.
"""

from __future__ import annotations

import chardet
from pathlib import Path
from typing import Optional, Tuple

UTF8_ENCODINGS = ("utf-8-sig", "utf-8")


def decode_bytes(raw: bytes, preferred: Tuple[str, ...] = UTF8_ENCODINGS) -> str:
    """Decode ``raw``, trying ``preferred`` first and chardet's guess last."""
    for encoding in preferred:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            pass

    guess = chardet.detect(raw).get("encoding") or "utf-8"
    try:
        return raw.decode(guess, errors="replace")
    except LookupError:
        # chardet named a codec Python does not ship
        return raw.decode("utf-8", errors="replace")


def read_text_safely(path: Path, preferred: Tuple[str, ...] = UTF8_ENCODINGS) -> Optional[str]:
    """Read a source file without translating newlines; None if it cannot be read."""
    try:
        data = Path(path).read_bytes()
    except OSError:
        return None
    return decode_bytes(data, preferred)


def write_text_preserving_newlines(path: Path, text: str) -> None:
    """Write UTF-8 text exactly as given (``newline=''`` disables translation)."""
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)
