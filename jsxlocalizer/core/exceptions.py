"""
Custom exceptions for JSX Localizer.
"""

class LocalizerError(Exception):
    """Base exception for JSX Localizer."""
    pass

class ParseError(LocalizerError):
    """Raised when a source file cannot be understood as JSX/TSX."""
    pass

class ExtractionError(LocalizerError):
    """Raised when a text node or element cannot be safely rewritten."""

    def __init__(self, message: str, file_path: str = "", line: int = 0, text: str = ""):
        super().__init__(message)
        self.file_path = file_path
        self.line = line
        self.text = text

class PersistenceError(LocalizerError):
    """Raised when a locale table cannot be read or written."""
    pass

class KeyCollisionError(PersistenceError):
    """Raised when one key is bound to two different source texts."""

    def __init__(self, collisions):
        self.collisions = list(collisions)
        details = ", ".join(
            f"{c.key!r} ({c.existing!r} vs {c.incoming!r})" for c in self.collisions[:5]
        )
        more = "" if len(self.collisions) <= 5 else f" and {len(self.collisions) - 5} more"
        super().__init__(f"{len(self.collisions)} key collision(s): {details}{more}")

class ConfigError(LocalizerError):
    """Raised when configuration-related errors occur."""
    pass
