"""
rerun_core.engine.scanner

Enumerate modules, commands and options by directory convention::

    <root>/<module>/metadata
    <root>/<module>/commands/<command>/metadata
    <root>/<module>/options/<option>/metadata

A directory without a metadata record is not an entity and is skipped.
`scan` builds an explicit snapshot of a whole root; callers rescan per
top-level operation instead of holding on to an index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from rerun_core.core.logging import get_logger

from .metadata import get_property, has_record, read_record

log = get_logger(__name__)

COMMANDS_DIR = "commands"
OPTIONS_DIR = "options"


def entity_dirs(parent: Path) -> List[Path]:
    if not parent.is_dir():
        return []
    return sorted(
        (child for child in parent.iterdir() if child.is_dir() and has_record(child)),
        key=lambda p: p.name,
    )


def command_dir(module_dir: Path, command: str) -> Path:
    return Path(module_dir) / COMMANDS_DIR / command


def option_dir(module_dir: Path, option: str) -> Path:
    return Path(module_dir) / OPTIONS_DIR / option


def list_modules(root: Path | str) -> List[str]:
    """Names of every immediate subdirectory of ``root`` with a record, lexically ordered."""
    return [p.name for p in entity_dirs(Path(root))]


def list_commands(root: Path | str, module: str) -> List[str]:
    return [p.name for p in entity_dirs(Path(root) / module / COMMANDS_DIR)]


def list_module_options(root: Path | str, module: str) -> List[str]:
    return [p.name for p in entity_dirs(Path(root) / module / OPTIONS_DIR)]


def split_options(value: Optional[str]) -> List[str]:
    return value.split() if value else []


def list_options(root: Path | str, module: str, command: str) -> List[str]:
    """
    Tokenized OPTIONS property of the command's record.

    A missing record or a record without OPTIONS yields an empty list. Names
    are returned as declared; dangling references are only detected when the
    option is loaded.
    """
    cmd_dir = command_dir(Path(root) / module, command)
    if not has_record(cmd_dir):
        return []
    return split_options(get_property(cmd_dir, "OPTIONS"))


# ----------------------------------------------------------------------
# INDEX SNAPSHOT
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class CommandEntry:
    name: str
    path: Path
    description: str = ""
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ModuleEntry:
    name: str
    path: Path
    description: str = ""
    interpreter: Optional[str] = None
    version: Optional[str] = None
    commands: Mapping[str, CommandEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class RegistryIndex:
    root: Path
    modules: Mapping[str, ModuleEntry] = field(default_factory=dict)

    def module_names(self) -> List[str]:
        return list(self.modules)

    def get(self, name: str) -> Optional[ModuleEntry]:
        return self.modules.get(name)


def _scan_module(module_dir: Path) -> ModuleEntry:
    props = read_record(module_dir)
    commands: Dict[str, CommandEntry] = {}
    for cmd_path in entity_dirs(module_dir / COMMANDS_DIR):
        cmd_props = read_record(cmd_path)
        commands[cmd_path.name] = CommandEntry(
            name=cmd_path.name,
            path=cmd_path,
            description=cmd_props.get("DESCRIPTION", ""),
            options=tuple(split_options(cmd_props.get("OPTIONS"))),
        )
    return ModuleEntry(
        name=module_dir.name,
        path=module_dir,
        description=props.get("DESCRIPTION", ""),
        interpreter=props.get("INTERPRETER") or None,
        version=props.get("VERSION") or None,
        commands=commands,
    )


def scan(root: Path | str) -> RegistryIndex:
    """Build a fresh snapshot of every module and command under ``root``."""
    root_path = Path(root)
    modules = {p.name: _scan_module(p) for p in entity_dirs(root_path)}
    log.debug("Scanned %s: %d module(s)", root_path, len(modules))
    return RegistryIndex(root=root_path, modules=modules)
