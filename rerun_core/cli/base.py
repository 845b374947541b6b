"""
rerun_core.cli.base

Shared CLI runner foundation for rerun.

Provides:
 - Unified argument parsing (log level, config, modules root, verbose, answers)
 - Automatic logging setup
 - Safe execution wrapper mapping errors to exit codes:
     0 success, 1 fatal/usage error, 2 syntax error, 130 interrupted,
     anything else passed through from the dispatched command
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

import argcomplete

from rerun_core import __version__
from rerun_core.core.logging import get_logger, setup_logging
from rerun_core.engine.errors import (
    EXIT_FATAL,
    EXIT_INTERRUPTED,
    LookupFailure,
    RerunError,
    RerunSyntaxError,
    UsageError,
)

log = get_logger(__name__)


# ----------------------------------------------------------------------
# BASE PARSER FACTORY
# ----------------------------------------------------------------------

def build_base_parser(
    prog: str = "rerun",
    description: str = "Run module commands declared by metadata.",
) -> argparse.ArgumentParser:
    """
    Build a base parser preloaded with the global options.
    """
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging verbosity (default: config value, else WARNING).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML (default: ~/.rerun/config.yaml).",
    )
    parser.add_argument(
        "-M",
        "--modules",
        dest="modules_dir",
        type=Path,
        help="Modules root directory (overrides RERUN_MODULES and config).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Trace mode: run command scripts through their interpreter with tracing enabled.",
    )
    parser.add_argument(
        "-A",
        "--answers",
        type=Path,
        help="Answer file used to populate option values.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# ----------------------------------------------------------------------
# WRAPPER FUNCTION
# ----------------------------------------------------------------------

def run_cli(
    main_func: Callable[[argparse.Namespace], int],
    parser: argparse.ArgumentParser,
    argv: Optional[Sequence[str]] = None,
) -> None:
    """
    Execute a CLI command function safely with unified error handling.

    Args:
        main_func: The main function that takes parsed args and returns exit code.
        parser: Argument parser configured for this CLI.
        argv: Arguments to parse; defaults to ``sys.argv[1:]``.
    """
    argcomplete.autocomplete(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)

    setup_logging(args.log_level)
    log.debug(f"Arguments: {args}")

    try:
        exit_code = main_func(args)
    except KeyboardInterrupt:
        log.warning("Operation cancelled by user.")
        sys.exit(EXIT_INTERRUPTED)
    except LookupFailure as e:
        syntax = RerunSyntaxError(str(e))
        log.error(str(syntax))
        sys.exit(syntax.exit_code)
    except RerunSyntaxError as e:
        log.error(str(e))
        sys.exit(e.exit_code)
    except UsageError as e:
        log.error(f"Usage error: {e}", exc_info=True)
        sys.exit(e.exit_code)
    except RerunError as e:
        log.error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        log.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(EXIT_FATAL)
    sys.exit(exit_code)
