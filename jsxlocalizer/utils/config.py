"""
Configuration Manager
====================

Manages extraction, output and run settings.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field, fields

from jsxlocalizer.core.exceptions import ConfigError
from jsxlocalizer.core.keygen import KeyPolicy

DEFAULT_CONFIG_FILE = "jsxlocalizer.json"

DEFAULT_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx"]

DEFAULT_EXCLUDE_DIRS = ["node_modules", ".git", "dist", "build", "coverage", ".next"]

QUOTE_STYLES = ("single", "double")


@dataclass
class ExtractionSettings:
    """How components are rewritten."""
    key_policy: str = "camel"  # 'camel' (global, dedup) or 'component' (per-component slug)
    hook_name: str = "useTranslation"
    hook_module: str = "react-i18next"
    quote_style: str = "single"


@dataclass
class OutputSettings:
    """Where the locale tables live."""
    locales_dir: str = "."
    source_language: str = "en"
    target_language: str = "he"
    indent: int = 2


@dataclass
class RunSettings:
    """Batch run behaviour."""
    workers: int = 4
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    dry_run: bool = False
    fail_on_collision: bool = False
    report_file: str = ""


class ConfigManager:
    """Manages application configuration."""

    SECTIONS = {
        'extraction': 'extraction_settings',
        'output': 'output_settings',
        'run': 'run_settings',
    }

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        self.logger = logging.getLogger(__name__)
        self.config_file = Path(config_file)

        # Default configuration
        self.extraction_settings = ExtractionSettings()
        self.output_settings = OutputSettings()
        self.run_settings = RunSettings()

        # Load existing configuration
        self.load_config()

    def load_config(self) -> bool:
        """Load configuration from file."""
        if not self.config_file.exists():
            self.logger.debug("Config file %s doesn't exist, using defaults", self.config_file)
            return False

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
            if not isinstance(config_data, dict):
                raise ValueError("expected a JSON object at the root")

            if 'extraction_settings' in config_data:
                self.extraction_settings = _build_section(
                    ExtractionSettings, config_data['extraction_settings'])
            if 'output_settings' in config_data:
                self.output_settings = _build_section(
                    OutputSettings, config_data['output_settings'])
            if 'run_settings' in config_data:
                self.run_settings = _build_section(
                    RunSettings, config_data['run_settings'])

            self.logger.info("Configuration loaded from %s", self.config_file)
            return True

        except Exception as e:
            self.logger.error(f"Error loading configuration {self.config_file}: {e}")
            self.reset_to_defaults()
            return False

    def save_config(self) -> bool:
        """Save configuration to file."""
        try:
            config_data = {
                'extraction_settings': asdict(self.extraction_settings),
                'output_settings': asdict(self.output_settings),
                'run_settings': asdict(self.run_settings),
            }

            # Create backup if file exists
            if self.config_file.exists():
                backup_file = self.config_file.with_suffix('.json.bak')
                try:
                    self.config_file.replace(backup_file)
                except OSError as e:
                    self.logger.warning(f"Could not create backup: {e}")

            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=4, ensure_ascii=False)

            self.logger.info("Configuration saved successfully")
            return True

        except OSError as e:
            self.logger.error(f"Error saving configuration: {e}")
            return False

    def validate(self) -> None:
        """Raise ConfigError when a setting has an unusable value."""
        try:
            KeyPolicy.from_value(self.extraction_settings.key_policy)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if self.extraction_settings.quote_style not in QUOTE_STYLES:
            raise ConfigError(
                f"quote_style must be one of {', '.join(QUOTE_STYLES)}, "
                f"got {self.extraction_settings.quote_style!r}"
            )
        if not self.extraction_settings.hook_name or not self.extraction_settings.hook_module:
            raise ConfigError("hook_name and hook_module must not be empty")
        if not self.output_settings.source_language or not self.output_settings.target_language:
            raise ConfigError("source_language and target_language must not be empty")
        if self.output_settings.source_language == self.output_settings.target_language:
            raise ConfigError("source_language and target_language must differ")
        if self.run_settings.workers < 1:
            raise ConfigError("workers must be at least 1")

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value using dot notation (e.g., 'output.locales_dir')."""
        parts = key.split('.')
        if len(parts) != 2 or parts[0] not in self.SECTIONS:
            return default
        section = getattr(self, self.SECTIONS[parts[0]])
        return getattr(section, parts[1], default)

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value using dot notation (e.g., 'extraction.key_policy')."""
        parts = key.split('.')
        if len(parts) != 2 or parts[0] not in self.SECTIONS:
            raise ConfigError(f"Unknown setting: {key}")
        section = getattr(self, self.SECTIONS[parts[0]])
        if parts[1] not in {f.name for f in fields(section)}:
            raise ConfigError(f"Unknown setting: {key}")
        setattr(section, parts[1], value)

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Apply dot-notation overrides, ignoring None values (unset CLI flags)."""
        for key, value in overrides.items():
            if value is not None:
                self.set_setting(key, value)

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self.extraction_settings = ExtractionSettings()
        self.output_settings = OutputSettings()
        self.run_settings = RunSettings()
        self.logger.info("Configuration reset to defaults")


def _build_section(cls, data: Optional[Dict[str, Any]]):
    """Instantiate a settings dataclass, dropping unknown keys."""
    known = {f.name for f in fields(cls)}
    data = data or {}
    unknown = set(data) - known
    if unknown:
        logging.getLogger(__name__).warning(
            "Ignoring unknown %s keys: %s", cls.__name__, ", ".join(sorted(unknown)))
    return cls(**{k: v for k, v in data.items() if k in known})
