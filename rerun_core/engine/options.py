"""
rerun_core.engine.options

Option schemas: load the options a command declares, describe them, turn them
into an ``argparse`` parser, or synthesize an argument vector from an answer
source.

Options live at ``<module>/options/<name>/metadata`` and are shared by every
command in the module; a command selects them, in order, via its OPTIONS
property. References are resolved lazily, so a dangling name only fails when
that option is loaded.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from rerun_core.core.config import coerce_yes_no
from rerun_core.core.logging import get_logger

from .answers import lookup_answer
from .errors import MalformedRecord, OptionNotFound
from .metadata import has_record, read_record, record_path
from .resolver import Resolver
from .scanner import command_dir, list_options, option_dir

log = get_logger(__name__)


@dataclass(frozen=True)
class Option:
    name: str
    short: Optional[str] = None
    long: Optional[str] = None
    arguments: bool = False
    required: bool = False
    default: Optional[str] = None
    description: str = ""

    @property
    def flag(self) -> str:
        """Long spelling used when emitting the option: LONG if set, else NAME."""
        return self.long or self.name

    @property
    def spellings(self) -> List[str]:
        names = [f"--{self.flag}"]
        if self.short:
            names.insert(0, f"-{self.short}")
        return names


def _flag(props: Mapping[str, str], key: str, path: Path) -> bool:
    value = props.get(key, "")
    try:
        return coerce_yes_no(value, key)
    except ValueError:
        raise MalformedRecord(path, 0, f"{key}={value}") from None


def load_option(module_dir: Path, name: str) -> Option:
    """Load one option schema from the module's option set."""
    opt_dir = option_dir(module_dir, name)
    if not has_record(opt_dir):
        raise OptionNotFound(Path(module_dir), name)
    props = read_record(opt_dir)
    path = record_path(opt_dir)
    return Option(
        name=name,
        short=(props.get("SHORT") or "").lstrip("-") or None,
        long=(props.get("LONG") or "").lstrip("-") or None,
        arguments=_flag(props, "ARGUMENTS", path),
        required=_flag(props, "REQUIRED", path),
        default=props.get("DEFAULT") or None,
        description=props.get("DESCRIPTION", ""),
    )


class OptionSchemaEngine:
    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver

    def declared(self, module_dir: Path, command: str) -> List[str]:
        return list_options(module_dir.parent, module_dir.name, command)

    def load(self, module_dir: Path, command: str) -> List[Option]:
        return [load_option(module_dir, name) for name in self.declared(module_dir, command)]

    def describe(self, module: str, command: str) -> List[Option]:
        """Full schema of each option, in the command's declared order."""
        return self.load(self.resolver.module_lookup(module), command)

    def populate(self, module: str, command: str, answers: Mapping[str, str]) -> List[str]:
        """
        Build ``--flag value`` tokens for argument-taking options that have a
        non-empty answer, in declared order.

        Boolean switches are never emitted, whatever the answers say.
        """
        argv: List[str] = []
        for option in self.describe(module, command):
            if not option.arguments:
                continue
            value = lookup_answer(answers, option.name)
            if value:
                argv.extend([f"--{option.flag}", value])
        log.debug("Populated %s:%s -> %s", module, command, argv)
        return argv

    def build_parser(self, module: str, command: str, prog: Optional[str] = None) -> argparse.ArgumentParser:
        """Render the command's option schema as an ``argparse`` parser."""
        module_dir = self.resolver.module_lookup(module)
        description = None
        cmd_dir = command_dir(module_dir, command)
        if has_record(cmd_dir):
            description = read_record(cmd_dir).get("DESCRIPTION")
        parser = argparse.ArgumentParser(prog=prog or f"{module}:{command}", description=description)
        for option in self.load(module_dir, command):
            kwargs: dict = {"dest": option.name.replace("-", "_"), "help": option.description or None}
            if option.arguments:
                kwargs["metavar"] = f"<{option.default or option.name}>"
                kwargs["default"] = option.default
                if option.required and option.default is None:
                    kwargs["required"] = True
            else:
                kwargs["action"] = "store_true"
            parser.add_argument(*option.spellings, **kwargs)
        return parser

    def missing_required(self, module: str, command: str, argv: Sequence[str]) -> List[Option]:
        """Required options without a DEFAULT that do not appear in ``argv``."""
        missing: List[Option] = []
        for option in self.describe(module, command):
            if not option.required or option.default is not None:
                continue
            present = any(
                token == spelling or token.startswith(f"{spelling}=")
                for token in argv
                for spelling in option.spellings
            )
            if not present:
                missing.append(option)
        return missing
