# -*- coding: utf-8 -*-
"""
JSX Localizer CLI Main Module
"""

import sys
import os
import argparse
import logging
from typing import List, Optional

from jsxlocalizer.core.exceptions import ConfigError, KeyCollisionError
from jsxlocalizer.core.keygen import KeyPolicy
from jsxlocalizer.core.locale_store import LocaleTableStore
from jsxlocalizer.core.runner import RunSummary, discover_source_files, run_localization
from jsxlocalizer.utils.config import DEFAULT_CONFIG_FILE, ConfigManager
from jsxlocalizer.version import VERSION


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def print_header():
    """Print the CLI header."""
    print("\n" + "="*60)
    print(f"       JSX Localizer CLI v{VERSION}")
    print("       React i18n Text Extraction Tool")
    print("="*60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsxlocalizer",
        description=f"JSX Localizer v{VERSION}: move hard-coded JSX text into t() calls",
    )
    parser.add_argument("source", help="Source folder or file")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE,
                        help=f"Path to JSON configuration file (default: {DEFAULT_CONFIG_FILE})")
    parser.add_argument("--key-policy", choices=[p.value for p in KeyPolicy], default=None,
                        help="Key naming: 'camel' (global) or 'component' (Component.slug)")
    parser.add_argument("--workers", "-w", type=int, default=None,
                        help="Number of worker processes")
    parser.add_argument("--locales-dir", "-o", default=None,
                        help="Directory holding the locale tables")
    parser.add_argument("--source-lang", "-s", default=None, help="Source language code (default: en)")
    parser.add_argument("--target-lang", "-t", default=None, help="Target language code (default: he)")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Report what would change without writing any file")
    parser.add_argument("--report", default=None, help="Write a JSON diagnostic report to this path")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="Exit with an error when key collisions were found")
    parser.add_argument("--save-config", action="store_true",
                        help="Store the effective settings in the config file before running")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def print_summary(summary: RunSummary):
    print("\n" + "="*60)
    print("SUCCESS" if summary.success else "FAILED")
    print("\nStatistics:")
    print(f"  Files:       {summary.files}")
    print(f"  Transformed: {summary.transformed}")
    print(f"  Unchanged:   {summary.unchanged}")
    print(f"  Skipped:     {summary.skipped}")
    print(f"  Failed:      {summary.failed}")
    print(f"  Extracted:   {summary.extracted}")
    if summary.flush is not None:
        print(f"\n  {summary.flush.source_file}: +{summary.flush.added_source}")
        print(f"  {summary.flush.target_file}: +{summary.flush.added_target}")
        if summary.flush.error:
            print(f"  Details: {summary.flush.error}")
    elif summary.dry_run:
        print("\n  Dry run: no files were written")
    if summary.collisions:
        print(f"\n  Key collisions: {len(summary.collisions)}")
        for collision in summary.collisions[:10]:
            print(f"    {collision.key}: {collision.existing!r} vs {collision.incoming!r}")
    for file_path in summary.conflicted:
        print(f"  [CONFLICT] {file_path}: left unchanged")
    for file_path, error in summary.failures:
        print(f"  [FAILED] {file_path}: {error}")
    print("="*60)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config_manager = ConfigManager(args.config)
    try:
        # Explicit CLI args take priority over the config file
        config_manager.apply_overrides({
            'extraction.key_policy': args.key_policy,
            'run.workers': args.workers,
            'run.dry_run': args.dry_run,
            'run.fail_on_collision': args.strict,
            'run.report_file': args.report,
            'output.locales_dir': args.locales_dir,
            'output.source_language': args.source_lang,
            'output.target_language': args.target_lang,
        })
        config_manager.validate()
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 2

    if args.save_config and not config_manager.save_config():
        print(f"Error: Could not save configuration to {args.config}")
        return 1

    source = os.path.abspath(args.source)
    if not os.path.exists(source):
        print(f"Error: Path not found: {source}")
        return 1

    run_settings = config_manager.run_settings
    output = config_manager.output_settings

    print_header()
    print(f"  Source:  {source}")
    print(f"  Locales: {os.path.abspath(output.locales_dir)} "
          f"({output.source_language} -> {output.target_language})")

    files = discover_source_files(source, run_settings.extensions, run_settings.exclude_dirs)
    if not files:
        print("  No source files found")
        return 0

    print("\n>> Running codemod...")
    store = LocaleTableStore(
        locales_dir=output.locales_dir,
        source_language=output.source_language,
        target_language=output.target_language,
        indent=output.indent,
    )
    summary = run_localization(
        files,
        config_manager.extraction_settings,
        store,
        workers=run_settings.workers,
        dry_run=run_settings.dry_run,
        project=source,
    )
    print_summary(summary)

    report_file = config_manager.get_setting('run.report_file')
    if report_file:
        if summary.report.write(report_file):
            logger.info(f"Diagnostic report written to {report_file}")

    exit_code = 0 if summary.success else 1
    if config_manager.get_setting('run.fail_on_collision', False):
        try:
            store.raise_for_collisions()
        except KeyCollisionError as e:
            logger.error(str(e))
            exit_code = 1
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
