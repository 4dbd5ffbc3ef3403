#!/usr/bin/env python3
"""
Goldmine CLI - Minimal entry point.

All run settings are specified in a YAML file.

Usage:
    python3 goldmine_cli.py run_config.yaml
    python3 goldmine_cli.py -v run_config.yaml
    python3 goldmine_cli.py --help

Examples:
    # Solve the sample maps with the graph strategy
    python3 goldmine_cli.py examples/graph_run.yaml
"""

import sys

from goldmine.cli import main


if __name__ == '__main__':
    sys.exit(main())
