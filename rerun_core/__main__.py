#!/usr/bin/env python3
"""
rerun command-line utility
--------------------------

  rerun                         List available modules
  rerun MODULE                  List the module's commands and their options
  rerun MODULE:COMMAND [ARGS]   Run a command, passing ARGS through
"""

from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional, Sequence, Tuple

from rerun_core.cli.base import build_base_parser, run_cli
from rerun_core.core.config import RerunConfig, coerce_yes_no, load_config
from rerun_core.core.logging import get_logger, setup_logging
from rerun_core.engine.answers import load_answers
from rerun_core.engine.dispatcher import Dispatcher
from rerun_core.engine.errors import ModuleNotFound, RerunSyntaxError, UsageError
from rerun_core.engine.options import Option
from rerun_core.engine.scanner import ModuleEntry, scan

log = get_logger(__name__)


def split_target(target: str) -> Tuple[str, Optional[str]]:
    """Split ``module:command`` (command optional)."""
    module, sep, command = target.partition(":")
    if not module or (sep and not command) or ":" in command:
        raise RerunSyntaxError(f"invalid target {target!r}, expected MODULE or MODULE:COMMAND")
    return module, command or None


def _configure_logging(args: argparse.Namespace, config: RerunConfig) -> None:
    settings = dict(config.logging)
    if not settings:
        return
    use_rich = settings.get("use_rich")
    setup_logging(
        level=args.log_level or settings.get("level"),
        use_rich=None if use_rich in (None, "auto") else coerce_yes_no(use_rich, "use_rich"),
        log_dir=settings.get("log_dir"),
        file_prefix=settings.get("file_prefix"),
    )


def collect_modules(dispatcher: Dispatcher) -> Dict[str, ModuleEntry]:
    """Modules visible through every search root; the first root to define a name wins."""
    modules: Dict[str, ModuleEntry] = {}
    for root in dispatcher.resolver.search_roots():
        for name, entry in scan(root).modules.items():
            modules.setdefault(name, entry)
    return dict(sorted(modules.items()))


def format_option(option: Option) -> str:
    spelling = " | ".join(option.spellings)
    if option.arguments:
        spelling += f" <{option.default or ''}>"
    text = spelling if option.required else f"[{spelling}]"
    return f"{text}: {option.description}" if option.description else text


def list_modules_text(dispatcher: Dispatcher) -> List[str]:
    return [
        f"{entry.name}: {entry.description}" if entry.description else entry.name
        for entry in collect_modules(dispatcher).values()
    ]


def list_commands_text(dispatcher: Dispatcher, module: str) -> List[str]:
    try:
        module_dir = dispatcher.resolver.module_lookup(module)
    except ModuleNotFound as exc:
        raise RerunSyntaxError(f"module not found: {module}") from exc

    entry = scan(module_dir.parent).get(module)
    lines: List[str] = []
    if entry is None:
        return lines
    for command in entry.commands.values():
        lines.append(f"{command.name}: {command.description}" if command.description else command.name)
        for option in dispatcher.options.load(module_dir, command.name):
            lines.append(f"    {format_option(option)}")
    return lines


def rerun_main(args: argparse.Namespace) -> int:
    config = load_config(
        args.config,
        modules_dir=args.modules_dir,
        verbose=args.verbose,
        program_path=sys.argv[0] if sys.argv and sys.argv[0] else None,
    )
    _configure_logging(args, config)
    log.debug("Modules root: %s (verbose=%s)", config.modules_dir, config.verbose)
    dispatcher = Dispatcher(config)

    if not args.target:
        if args.command_args:
            raise UsageError(f"arguments given without a command: {args.command_args}")
        lines = list_modules_text(dispatcher)
        if not lines:
            log.warning("No modules found in %s", config.modules_dir)
        for line in lines:
            print(line)
        return 0

    module, command = split_target(args.target)
    if command is None:
        for line in list_commands_text(dispatcher, module):
            print(line)
        return 0

    if args.answers:
        answers = load_answers(args.answers)
        return dispatcher.execute_with_answers(module, command, args.command_args, answers)
    return dispatcher.execute(module, command, args.command_args)


def build_parser() -> argparse.ArgumentParser:
    parser = build_base_parser()
    parser.add_argument("target", nargs="?", metavar="MODULE[:COMMAND]", help="Module or module:command.")
    parser.add_argument("command_args", nargs=argparse.REMAINDER, metavar="ARGS", help="Arguments for the command.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    run_cli(rerun_main, build_parser(), argv)


if __name__ == "__main__":
    main()
