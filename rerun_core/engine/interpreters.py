"""
rerun_core.engine.interpreters

Closed lookup table of interpreter adapters.

A module selects its adapter by name through its INTERPRETER property. Each
adapter says how to run a command script (executable + trace flags) and where
scaffolding finds its option-parser generator and script template (paths
relative to the adapter's home; consumed by external tooling only).

Extra adapters can be registered from ``<adapters_dir>/<name>/metadata``
records declaring EXECUTABLE, OPTIONS_GENERATOR, TEMPLATE and TRACE_FLAGS.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from rerun_core.core.logging import get_logger

from .errors import InterpreterNotFound
from .metadata import read_record
from .scanner import entity_dirs

log = get_logger(__name__)

NATIVE = "native"


@dataclass(frozen=True)
class InterpreterAdapter:
    name: str
    executable: str
    option_generator: PurePosixPath
    template: PurePosixPath
    trace_flags: Tuple[str, ...] = ()

    def command_line(self, script: Path, args: List[str], trace: bool = False) -> List[str]:
        flags = list(self.trace_flags) if trace else []
        return [self.executable, *flags, str(script), *args]


BUILTIN_ADAPTERS: Dict[str, InterpreterAdapter] = {
    NATIVE: InterpreterAdapter(
        name=NATIVE,
        executable=sys.executable,
        option_generator=PurePosixPath("lib/stub/python/generate-options"),
        template=PurePosixPath("lib/stub/python/templates/script"),
        trace_flags=("-m", "trace", "--trace"),
    ),
    "bash": InterpreterAdapter(
        name="bash",
        executable="bash",
        option_generator=PurePosixPath("lib/stub/bash/generate-options"),
        template=PurePosixPath("lib/stub/bash/templates/script"),
        trace_flags=("-vx",),
    ),
    "sh": InterpreterAdapter(
        name="sh",
        executable="sh",
        option_generator=PurePosixPath("lib/stub/sh/generate-options"),
        template=PurePosixPath("lib/stub/sh/templates/script"),
        trace_flags=("-vx",),
    ),
}


def load_adapter(adapter_dir: Path) -> InterpreterAdapter:
    """Build an adapter from its metadata record."""
    props = read_record(adapter_dir)
    executable = props.get("EXECUTABLE")
    if not executable:
        raise InterpreterNotFound(adapter_dir.name, "EXECUTABLE not declared")
    return InterpreterAdapter(
        name=adapter_dir.name,
        executable=executable,
        option_generator=PurePosixPath(props.get("OPTIONS_GENERATOR", "")),
        template=PurePosixPath(props.get("TEMPLATE", "")),
        trace_flags=tuple((props.get("TRACE_FLAGS") or "").split()),
    )


class AdapterRegistry:
    """Explicit name -> adapter table. Unknown names are an error, never a guess."""

    def __init__(self, adapters: Optional[Mapping[str, InterpreterAdapter]] = None) -> None:
        self._adapters: Dict[str, InterpreterAdapter] = dict(
            BUILTIN_ADAPTERS if adapters is None else adapters
        )

    @classmethod
    def with_directory(cls, adapters_dir: Optional[Path]) -> "AdapterRegistry":
        registry = cls()
        if adapters_dir is not None:
            for adapter_dir in entity_dirs(Path(adapters_dir)):
                registry.register(load_adapter(adapter_dir))
        return registry

    def register(self, adapter: InterpreterAdapter) -> None:
        if adapter.name in self._adapters:
            log.debug("Adapter %s overridden by %s", adapter.name, adapter.executable)
        self._adapters[adapter.name] = adapter

    def get(self, name: Optional[str]) -> InterpreterAdapter:
        key = name or NATIVE
        try:
            return self._adapters[key]
        except KeyError:
            raise InterpreterNotFound(key) from None

    def names(self) -> List[str]:
        return sorted(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def __iter__(self) -> Iterator[InterpreterAdapter]:
        return iter(self._adapters.values())
