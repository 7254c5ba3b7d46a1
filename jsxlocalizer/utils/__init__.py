"""
Utils module for JSX Localizer
==============================
"""

from .config import ConfigManager, ExtractionSettings, OutputSettings, RunSettings

__all__ = [
    'ConfigManager', 'ExtractionSettings', 'OutputSettings', 'RunSettings'
]
