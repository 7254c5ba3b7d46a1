#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JSX Localizer CLI Launcher
Runs the command line interface from a source checkout
"""

import sys
from pathlib import Path

# Ensure stdout can print non-ASCII source text
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

def setup_environment() -> None:
    """Make the checkout importable without installing it."""
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

def main() -> int:
    setup_environment()

    try:
        from jsxlocalizer.cli_main import main as cli_main
    except ImportError as e:
        print(f"Error: Could not import CLI module: {e}")
        print("Ensure you are running from the project root and all dependencies are installed.")
        return 1
    return cli_main()

if __name__ == "__main__":
    sys.exit(main())
