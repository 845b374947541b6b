from __future__ import annotations

from pathlib import Path

import pytest

from rerun_core.engine.errors import InterpreterNotFound, ModuleNotFound, ScriptNotFound
from rerun_core.engine.interpreters import AdapterRegistry, NATIVE
from rerun_core.engine.resolver import Resolver


def _system_root(tmp_path: Path, name: str) -> Path:
    root = tmp_path / "system"
    module = root / name
    module.mkdir(parents=True)
    (module / "metadata").write_text('DESCRIPTION="system copy"\n', encoding="utf-8")
    return root


def test_module_lookup_finds_user_module(builder, make_config, modules_root: Path) -> None:
    builder.module("demo")
    resolver = Resolver(make_config())
    assert resolver.module_lookup("demo") == modules_root / "demo"


def test_module_lookup_ignores_directories_without_record(make_config, modules_root: Path) -> None:
    (modules_root / "demo").mkdir()
    resolver = Resolver(make_config())
    with pytest.raises(ModuleNotFound):
        resolver.module_lookup("demo")
    assert resolver.module_exists("demo") is False


def test_system_root_only_used_from_installed_location(tmp_path: Path, make_config) -> None:
    system_root = _system_root(tmp_path, "sysmod")
    bin_dir = tmp_path / "bin"

    outside = Resolver(make_config(system_modules_dir=system_root, installed_locations=(bin_dir,)))
    with pytest.raises(ModuleNotFound):
        outside.module_lookup("sysmod")

    installed = Resolver(
        make_config(
            system_modules_dir=system_root,
            installed_locations=(bin_dir,),
            program_path=bin_dir / "rerun",
        )
    )
    assert installed.module_lookup("sysmod") == system_root / "sysmod"


def test_user_root_shadows_system_root(tmp_path: Path, builder, make_config, modules_root: Path) -> None:
    builder.module("shared")
    system_root = _system_root(tmp_path, "shared")
    bin_dir = tmp_path / "bin"
    resolver = Resolver(
        make_config(
            system_modules_dir=system_root,
            installed_locations=(bin_dir,),
            program_path=bin_dir / "rerun",
        )
    )
    assert resolver.search_roots() == [modules_root, system_root]
    assert resolver.module_lookup("shared") == modules_root / "shared"


@pytest.mark.parametrize("name", ["", "..", "a/b"])
def test_module_lookup_rejects_path_like_names(make_config, name: str) -> None:
    with pytest.raises(ModuleNotFound):
        Resolver(make_config()).module_lookup(name)


def test_script_lookup_prefers_canonical_name(builder, make_config, modules_root: Path) -> None:
    builder.module("demo")
    cmd_dir = builder.command("demo", "hello", script="echo canonical\n")
    (cmd_dir / "default.sh").write_text("echo legacy\n", encoding="utf-8")

    resolver = Resolver(make_config())
    assert resolver.script_lookup(modules_root / "demo", "hello") == cmd_dir / "script"


def test_script_lookup_falls_back_to_legacy_name(builder, make_config, modules_root: Path) -> None:
    builder.module("demo")
    cmd_dir = builder.command("demo", "old", script="echo legacy\n", script_name="default.sh")

    resolver = Resolver(make_config())
    assert resolver.script_lookup(modules_root / "demo", "old") == cmd_dir / "default.sh"


def test_script_lookup_requires_regular_file(builder, make_config, modules_root: Path) -> None:
    builder.module("demo")
    cmd_dir = builder.command("demo", "hollow")
    (cmd_dir / "script").mkdir()

    resolver = Resolver(make_config())
    with pytest.raises(ScriptNotFound):
        resolver.script_lookup(modules_root / "demo", "hollow")
    assert resolver.command_exists(modules_root / "demo", "hollow") is True
    assert resolver.command_exists(modules_root / "demo", "nothing") is False


def test_interpreter_for_defaults_to_native(builder, make_config, modules_root: Path) -> None:
    builder.module("demo")
    adapter = Resolver(make_config()).interpreter_for(modules_root / "demo")
    assert adapter.name == NATIVE
    assert str(adapter.template).endswith("templates/script")


def test_interpreter_for_named_adapter(builder, make_config, modules_root: Path) -> None:
    builder.module("shelly", INTERPRETER="bash")
    builder.module("weird", INTERPRETER="cobol")
    resolver = Resolver(make_config())

    adapter = resolver.interpreter_for(modules_root / "shelly")
    assert adapter.name == "bash"
    assert adapter.trace_flags == ("-vx",)

    with pytest.raises(InterpreterNotFound):
        resolver.interpreter_for(modules_root / "weird")


def test_adapters_registered_from_directory(tmp_path: Path, builder, make_config, modules_root: Path) -> None:
    adapters_dir = tmp_path / "adapters"
    zsh = adapters_dir / "zsh"
    zsh.mkdir(parents=True)
    (zsh / "metadata").write_text(
        'EXECUTABLE="/bin/zsh"\n'
        'OPTIONS_GENERATOR="lib/zsh/generate-options"\n'
        'TEMPLATE="lib/zsh/script"\n'
        'TRACE_FLAGS="-x -v"\n',
        encoding="utf-8",
    )
    builder.module("z", INTERPRETER="zsh")

    resolver = Resolver(make_config(adapters_dir=adapters_dir))
    adapter = resolver.interpreter_for(modules_root / "z")
    assert adapter.executable == "/bin/zsh"
    assert adapter.trace_flags == ("-x", "-v")
    assert "zsh" in resolver.adapters
    assert "native" in AdapterRegistry.with_directory(adapters_dir).names()


def test_adapter_without_executable_is_rejected(tmp_path: Path) -> None:
    broken = tmp_path / "adapters" / "broken"
    broken.mkdir(parents=True)
    (broken / "metadata").write_text('TEMPLATE="x"\n', encoding="utf-8")
    with pytest.raises(InterpreterNotFound):
        AdapterRegistry.with_directory(tmp_path / "adapters")


@pytest.mark.parametrize("command", ["", ".", "..", "../../other/commands/x"])
def test_script_lookup_rejects_path_like_command_names(
    builder, make_config, modules_root: Path, command: str
) -> None:
    builder.module("demo")
    builder.module("other")
    builder.command("other", "x", script="echo\n")
    resolver = Resolver(make_config())

    with pytest.raises(ScriptNotFound):
        resolver.script_lookup(modules_root / "demo", command)
    assert resolver.command_exists(modules_root / "demo", command) is False
