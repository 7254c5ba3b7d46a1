"""
JSX Localizer
=============

Extracts hard-coded text from React components into i18n lookup calls and
keeps the locale tables in sync.
"""

from .version import VERSION

__version__ = VERSION

__all__ = ['__version__']
