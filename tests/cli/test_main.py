from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from rerun_core.__main__ import main, split_target
from rerun_core.engine.errors import RerunSyntaxError

REPO_ROOT = Path(__file__).resolve().parent.parent.parent


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("RERUN_CONFIG", "RERUN_MODULES", "RERUN_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


def _run_main(*argv: str) -> int:
    with pytest.raises(SystemExit) as excinfo:
        main(list(argv))
    return excinfo.value.code


def test_split_target() -> None:
    assert split_target("demo") == ("demo", None)
    assert split_target("demo:hello") == ("demo", "hello")
    for bad in (":hello", "demo:", "a:b:c"):
        with pytest.raises(RerunSyntaxError):
            split_target(bad)


def test_lists_modules(demo_module, modules_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    demo_module.module("tools")

    assert _run_main("-M", str(modules_root)) == 0
    assert capsys.readouterr().out.splitlines() == ["demo: Demo module", "tools"]


def test_lists_commands_with_options(demo_module, modules_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    demo_module.option("demo", "force", SHORT="f", DESCRIPTION="overwrite")
    demo_module.command("demo", "greet", options=["force", "name"])

    assert _run_main("-M", str(modules_root), "demo") == 0
    assert capsys.readouterr().out.splitlines() == [
        "greet",
        "    [-f | --force]: overwrite",
        "    --name <>: who to greet",
        "hello: say hello",
        "    --name <>: who to greet",
    ]


def test_runs_command_and_returns_its_status(builder, modules_root: Path) -> None:
    builder.module("exits")
    builder.command("exits", "three", script="import sys\nsys.exit(3)\n")

    assert _run_main("-M", str(modules_root), "exits:three") == 3


def test_passes_arguments_through(demo_module, modules_root: Path, capfd: pytest.CaptureFixture[str]) -> None:
    assert _run_main("-M", str(modules_root), "demo:hello", "--name", "world") == 0
    assert capfd.readouterr().out.strip() == "hello --name world"


def test_answers_file_populates_options(
    demo_module, modules_root: Path, tmp_path: Path, capfd: pytest.CaptureFixture[str]
) -> None:
    answers = tmp_path / "answers"
    answers.write_text('NAME="ada"\n', encoding="utf-8")

    assert _run_main("-M", str(modules_root), "-A", str(answers), "demo:hello", "loud") == 0
    assert capfd.readouterr().out.strip() == "hello --name ada loud"


def test_unknown_module_is_syntax_error(modules_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run_main("-M", str(modules_root), "ghost:cmd") == 2
    assert "SYNTAX ERROR: module not found: ghost" in capsys.readouterr().err

    assert _run_main("-M", str(modules_root), "ghost") == 2


def test_missing_answers_file_is_fatal(demo_module, modules_root: Path, tmp_path: Path) -> None:
    assert _run_main("-M", str(modules_root), "-A", str(tmp_path / "none"), "demo:hello") == 1


def test_module_entry_point(modules_root: Path, tmp_path: Path) -> None:
    env = dict(os.environ, HOME=str(tmp_path / "home"))
    env.pop("RERUN_MODULES", None)
    result = subprocess.run(
        [sys.executable, "-m", "rerun_core", "-M", str(modules_root), "ghost:cmd"],
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 2
    assert "SYNTAX ERROR" in result.stderr
    assert result.stdout == ""
