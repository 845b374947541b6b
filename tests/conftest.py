from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

import pytest

from rerun_core.core.config import RerunConfig


def _write_record(directory: Path, props: Dict[str, str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    lines = [f'{key}="{value}"' for key, value in props.items()]
    (directory / "metadata").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return directory


class ModuleBuilder:
    """Lay out modules on disk following the <root>/<module>/... convention."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def module(self, name: str, **props: str) -> Path:
        return _write_record(self.root / name, {"NAME": name, **props})

    def command(
        self,
        module: str,
        name: str,
        *,
        options: Iterable[str] = (),
        script: Optional[str] = None,
        script_name: str = "script",
        executable: bool = False,
        description: str = "",
    ) -> Path:
        cmd_dir = _write_record(
            self.root / module / "commands" / name,
            {"NAME": name, "DESCRIPTION": description, "OPTIONS": " ".join(options)},
        )
        if script is not None:
            path = cmd_dir / script_name
            path.write_text(script, encoding="utf-8")
            path.chmod(0o755 if executable else 0o644)
        return cmd_dir

    def option(self, module: str, name: str, **props: str) -> Path:
        return _write_record(self.root / module / "options" / name, {"NAME": name, **props})


@pytest.fixture
def modules_root(tmp_path: Path) -> Path:
    root = tmp_path / "modules"
    root.mkdir()
    return root


@pytest.fixture
def builder(modules_root: Path) -> ModuleBuilder:
    return ModuleBuilder(modules_root)


@pytest.fixture
def make_config(modules_root: Path) -> Callable[..., RerunConfig]:
    def _make(**overrides) -> RerunConfig:
        settings = {"modules_dir": modules_root, "program_path": Path(sys.executable)}
        settings.update(overrides)
        return RerunConfig(**settings)

    return _make


@pytest.fixture
def demo_module(builder: ModuleBuilder) -> ModuleBuilder:
    """Module ``demo`` with command ``hello`` taking a ``--name`` value."""
    builder.module("demo", DESCRIPTION="Demo module")
    builder.option(
        "demo",
        "name",
        LONG="name",
        ARGUMENTS="true",
        REQUIRED="true",
        DESCRIPTION="who to greet",
    )
    builder.command(
        "demo",
        "hello",
        options=["name"],
        description="say hello",
        script="import sys\nprint('hello', *sys.argv[1:])\nsys.exit(0)\n",
    )
    return builder
