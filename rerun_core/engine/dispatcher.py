"""
rerun_core.engine.dispatcher

Resolve a module:command pair and run its script as a child process.

Launch policy, first match wins:
  1. verbose/trace mode: always ``<interpreter> <trace flags> <script> args``
  2. script is executable: run it directly (its own shebang decides)
  3. otherwise: ``<interpreter> <script> args``

The child's exit status is returned untouched; a failing command is the
command's outcome, not a dispatcher error.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from rerun_core import __version__
from rerun_core.core.config import RerunConfig
from rerun_core.core.logging import get_logger
from rerun_core.core.ops import is_executable, launch

from .errors import (
    InterpreterNotFound,
    ModuleNotFound,
    OptionNotFound,
    RerunSyntaxError,
    ScriptNotFound,
)
from .options import OptionSchemaEngine
from .resolver import Resolver

log = get_logger(__name__)

PROGRAM_NAME = "rerun"

Launcher = Callable[[Sequence[str], Mapping[str, str]], int]


def _default_launcher(cmd: Sequence[str], env: Mapping[str, str]) -> int:
    return launch(cmd, env=env)


class Dispatcher:
    def __init__(
        self,
        config: RerunConfig,
        resolver: Optional[Resolver] = None,
        launcher: Optional[Launcher] = None,
        base_env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.config = config
        self.resolver = resolver if resolver is not None else Resolver(config)
        self.options = OptionSchemaEngine(self.resolver)
        self.launcher = launcher or _default_launcher
        self.base_env = dict(os.environ if base_env is None else base_env)

    def child_env(self, module_dir: Path) -> Dict[str, str]:
        env = dict(self.base_env)
        env.update(
            {
                "RERUN": str(self.config.program_path or PROGRAM_NAME),
                "RERUN_VERSION": __version__,
                "RERUN_MODULES": str(self.config.modules_dir),
                "RERUN_MODULE_DIR": str(module_dir),
            }
        )
        return env

    def command_line(self, module_dir: Path, command: str, args: Sequence[str]) -> List[str]:
        try:
            adapter = self.resolver.interpreter_for(module_dir)
        except InterpreterNotFound as exc:
            raise RerunSyntaxError(str(exc)) from exc
        script = self.resolver.script_lookup(module_dir, command)

        if self.config.verbose:
            return adapter.command_line(script, list(args), trace=True)
        if is_executable(script):
            return [str(script), *args]
        return adapter.command_line(script, list(args))

    def resolve(self, module: str, command: str) -> Path:
        """
        Return the module directory for a registered ``module:command`` pair.

        The command needs both a metadata record and a script.

        Raises:
            RerunSyntaxError: the module or the command is not registered.
        """
        try:
            module_dir = self.resolver.module_lookup(module)
        except ModuleNotFound as exc:
            raise RerunSyntaxError(f"module not found: {module}") from exc

        if not self.resolver.command_exists(module_dir, command):
            raise RerunSyntaxError(f"command not found: {module}:{command}")
        try:
            self.resolver.script_lookup(module_dir, command)
        except ScriptNotFound as exc:
            raise RerunSyntaxError(f"command not found: {module}:{command}") from exc
        return module_dir

    def execute(self, module: str, command: str, args: Sequence[str] = ()) -> int:
        """
        Run ``module:command`` with ``args`` and return the child's exit status.

        Raises:
            RerunSyntaxError: the module, the command's record or script, or
                the module's interpreter cannot be resolved. Nothing is launched.
        """
        module_dir = self.resolve(module, command)
        cmd = self.command_line(module_dir, command, args)
        log.info("Running %s:%s", module, command)
        log.debug("Command line: %s", cmd)
        status = self.launcher(cmd, self.child_env(module_dir))
        log.debug("%s:%s exited with %d", module, command, status)
        return status

    def execute_with_answers(
        self,
        module: str,
        command: str,
        args: Sequence[str],
        answers: Mapping[str, str],
    ) -> int:
        """Prepend answer-populated options to ``args``; explicit args come last."""
        self.resolve(module, command)
        try:
            populated = self.options.populate(module, command, answers)
        except OptionNotFound as exc:
            raise RerunSyntaxError(str(exc)) from exc
        return self.execute(module, command, [*populated, *args])
