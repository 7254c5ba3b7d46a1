"""
Core module for JSX Localizer
=============================

Only the leaf modules are re-exported here: ``jsxlocalizer.utils.config``
depends on them, and the orchestration modules depend on the config.
Import those directly:
    from jsxlocalizer.core.transformer import LocalizationTransformer
"""

from .exceptions import (
    LocalizerError, ParseError, ExtractionError, PersistenceError, KeyCollisionError, ConfigError
)
from .keygen import KeyPolicy, KeyGenerator, generate_key

__all__ = [
    'LocalizerError', 'ParseError', 'ExtractionError', 'PersistenceError', 'KeyCollisionError', 'ConfigError',
    'KeyPolicy', 'KeyGenerator', 'generate_key'
]
