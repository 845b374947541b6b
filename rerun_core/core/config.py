"""
Configuration loading and validation for rerun.

Provides:
 - `RerunConfig`: the explicit configuration value threaded through the
   resolver and dispatcher
 - `load_config_file`: basic YAML loader with root validation
 - `load_config`: validated `RerunConfig` built from file, environment and
   command-line overrides
 - `coerce_yes_no`: shared boolean vocabulary (also used for metadata flags)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .file_io import read_yaml


DEFAULT_CONFIG_PATH = Path("~/.rerun/config.yaml")
DEFAULT_MODULES_DIR = Path("~/.rerun/modules")
DEFAULT_SYSTEM_MODULES_DIR = Path("/usr/lib/rerun/modules")
DEFAULT_INSTALLED_LOCATIONS: Tuple[Path, ...] = (Path("/usr/bin"),)

ENV_CONFIG = "RERUN_CONFIG"
ENV_MODULES = "RERUN_MODULES"
ENV_VERBOSE = "RERUN_VERBOSE"

LOGGING_SECTION_KEY = "logging"
ALLOWED_KEYS = {
    "modules_dir",
    "system_modules_dir",
    "installed_locations",
    "verbose",
    "adapters_dir",
    LOGGING_SECTION_KEY,
}
LOGGING_ALLOWED_KEYS = {"level", "use_rich", "log_dir", "file_prefix"}

YES_VALUES = {"1", "true", "yes", "y", "on"}
NO_VALUES = {"0", "false", "no", "n", "off", ""}


@dataclass(frozen=True)
class RerunConfig:
    modules_dir: Path = DEFAULT_MODULES_DIR
    system_modules_dir: Path = DEFAULT_SYSTEM_MODULES_DIR
    installed_locations: Tuple[Path, ...] = DEFAULT_INSTALLED_LOCATIONS
    program_path: Optional[Path] = None
    verbose: bool = False
    adapters_dir: Optional[Path] = None
    logging: Mapping[str, Any] = field(default_factory=dict)
    config_path: Optional[Path] = None

    @property
    def running_from_install(self) -> bool:
        """True when the program lives in one of the fixed installation locations."""
        if self.program_path is None:
            return False
        parent = self.program_path.parent
        return any(parent == location for location in self.installed_locations)

    def with_overrides(self, **changes: Any) -> "RerunConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def coerce_yes_no(value: object, key: str = "value") -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in YES_VALUES:
        return True
    if text in NO_VALUES:
        return False
    raise ValueError(f"Field '{key}' must be a yes/no value, got {value!r}.")


def load_config_file(path: str | Path | None) -> Dict[str, Any]:
    if not path:
        return {}

    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {cfg_path}")

    data = read_yaml(cfg_path)
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration root must be a mapping in {cfg_path}")
    return dict(data)


def _resolve_config_path(
    explicit: str | Path | None,
    environ: Mapping[str, str],
) -> Tuple[Optional[Path], bool]:
    """Return the config path and whether it must exist."""
    if explicit:
        return Path(explicit).expanduser(), True
    if environ.get(ENV_CONFIG):
        return Path(environ[ENV_CONFIG]).expanduser(), True
    candidate = DEFAULT_CONFIG_PATH.expanduser()
    return (candidate, False) if candidate.exists() else (None, False)


def _normalize_path(value: Any, key: str, config_path: Optional[Path]) -> Path:
    if value is None or value == "":
        raise ValueError(f"Configuration '{config_path}' field '{key}' must be a path.")
    path = Path(str(value)).expanduser()
    if not path.is_absolute() and config_path is not None:
        path = config_path.parent / path
    return path


def _extract_logging_settings(root: Mapping[str, Any], config_path: Optional[Path]) -> Dict[str, Any]:
    payload = root.get(LOGGING_SECTION_KEY)
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"'logging' section must be a mapping in {config_path}")
    invalid = [key for key in payload if key not in LOGGING_ALLOWED_KEYS]
    if invalid:
        raise ValueError(
            f"'logging' section contains unsupported keys in {config_path}: {', '.join(sorted(invalid))}"
        )
    settings = dict(payload)
    if settings.get("log_dir"):
        settings["log_dir"] = str(_normalize_path(settings["log_dir"], "log_dir", config_path))
    return settings


def load_config(
    config_path: str | Path | None = None,
    *,
    modules_dir: str | Path | None = None,
    verbose: Optional[bool] = None,
    program_path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RerunConfig:
    """
    Build a validated `RerunConfig`.

    Precedence for the modules root: explicit ``modules_dir`` argument, then
    ``RERUN_MODULES``, then the config file, then ``~/.rerun/modules``.
    Verbose mode is on if any of the argument, ``RERUN_VERBOSE`` or the file
    enables it.
    """
    env = os.environ if environ is None else environ
    resolved_path, must_exist = _resolve_config_path(config_path, env)
    if resolved_path is not None and (must_exist or resolved_path.exists()):
        root = load_config_file(resolved_path)
    else:
        root = {}

    unexpected = [key for key in root if key not in ALLOWED_KEYS]
    if unexpected:
        raise ValueError(
            f"Configuration '{resolved_path}' contains unsupported keys: {', '.join(sorted(unexpected))}"
        )

    config = RerunConfig(config_path=resolved_path)
    changes: Dict[str, Any] = {}

    if root.get("modules_dir"):
        changes["modules_dir"] = _normalize_path(root["modules_dir"], "modules_dir", resolved_path)
    if root.get("system_modules_dir"):
        changes["system_modules_dir"] = _normalize_path(
            root["system_modules_dir"], "system_modules_dir", resolved_path
        )
    if "installed_locations" in root:
        locations = root["installed_locations"]
        if isinstance(locations, (str, Path)):
            locations = [locations]
        if not isinstance(locations, (list, tuple)):
            raise ValueError(f"Configuration '{resolved_path}' field 'installed_locations' must be a list.")
        changes["installed_locations"] = tuple(
            _normalize_path(item, "installed_locations", resolved_path) for item in locations
        )
    if root.get("adapters_dir"):
        changes["adapters_dir"] = _normalize_path(root["adapters_dir"], "adapters_dir", resolved_path)
    changes["logging"] = _extract_logging_settings(root, resolved_path)

    file_verbose = coerce_yes_no(root.get("verbose"), "verbose")
    env_verbose = coerce_yes_no(env.get(ENV_VERBOSE), ENV_VERBOSE)
    changes["verbose"] = bool(verbose) or env_verbose or file_verbose

    if modules_dir:
        changes["modules_dir"] = Path(modules_dir).expanduser()
    elif env.get(ENV_MODULES):
        changes["modules_dir"] = Path(env[ENV_MODULES]).expanduser()

    if program_path:
        changes["program_path"] = Path(program_path).expanduser().resolve()

    config = config.with_overrides(**changes)
    return replace(config, modules_dir=config.modules_dir.expanduser())
