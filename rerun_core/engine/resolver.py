"""
rerun_core.engine.resolver

Map a module name to its directory, a command to its script, and a module to
its interpreter adapter.

Search order for modules:
  1. the configured modules root
  2. the system modules root, only when the program itself runs from one of
     the fixed installation locations

The first root holding ``<root>/<name>/metadata`` wins outright; modules are
never merged across roots.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from rerun_core.core.config import RerunConfig
from rerun_core.core.logging import get_logger

from .errors import ModuleNotFound, ScriptNotFound
from .interpreters import AdapterRegistry, InterpreterAdapter
from .metadata import get_property, has_record
from .scanner import command_dir

log = get_logger(__name__)

CANONICAL_SCRIPT = "script"
LEGACY_SCRIPT = "default.sh"
SCRIPT_NAMES: Tuple[str, ...] = (CANONICAL_SCRIPT, LEGACY_SCRIPT)


def valid_name(name: str) -> bool:
    """A module or command name is a single path component."""
    return bool(name) and "/" not in name and name not in {".", ".."}


class Resolver:
    def __init__(self, config: RerunConfig, adapters: Optional[AdapterRegistry] = None) -> None:
        self.config = config
        self.adapters = adapters if adapters is not None else AdapterRegistry.with_directory(config.adapters_dir)

    def search_roots(self) -> List[Path]:
        roots = [self.config.modules_dir]
        if self.config.running_from_install:
            roots.append(self.config.system_modules_dir)
        return roots

    def module_lookup(self, name: str) -> Path:
        """Return the directory of module ``name`` from the first root that has it."""
        roots = self.search_roots()
        if valid_name(name):
            for root in roots:
                candidate = root / name
                if has_record(candidate):
                    log.debug("Module %s resolved to %s", name, candidate)
                    return candidate
        raise ModuleNotFound(name, tuple(roots))

    def module_exists(self, name: str) -> bool:
        try:
            self.module_lookup(name)
        except ModuleNotFound:
            return False
        return True

    def command_exists(self, module_dir: Path, command: str) -> bool:
        return valid_name(command) and has_record(command_dir(module_dir, command))

    def script_lookup(self, module_dir: Path, command: str) -> Path:
        """Return the canonical ``script`` file, else the legacy ``default.sh``."""
        cmd_dir = command_dir(module_dir, command)
        if not valid_name(command):
            raise ScriptNotFound(cmd_dir)
        for filename in SCRIPT_NAMES:
            candidate = cmd_dir / filename
            if candidate.is_file():
                return candidate
        raise ScriptNotFound(cmd_dir)

    def interpreter_for(self, module_dir: Path) -> InterpreterAdapter:
        """Adapter named by the module's INTERPRETER property (``native`` if unset)."""
        name = get_property(module_dir, "INTERPRETER")
        adapter = self.adapters.get(name)
        log.debug("Module %s uses interpreter %s", module_dir.name, adapter.name)
        return adapter
