"""
rerun_core.cli

Shared parser and runner used by the ``rerun`` console script.
"""

from rerun_core.cli.base import build_base_parser, run_cli

__all__ = ["build_base_parser", "run_cli"]
