"""Utility helpers for performing file I/O with consistent defaults."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml


DEFAULT_ENCODING = "utf-8"


def _to_path(path: Path | str) -> Path:
    return Path(path).expanduser()


def read_text(
    path: Path | str,
    encoding: str = DEFAULT_ENCODING,
    newline: Optional[str] = None,
) -> str:
    """Read a text file. Pass ``newline=""`` to keep line endings untranslated."""
    with open(_to_path(path), "r", encoding=encoding, newline=newline) as handle:
        return handle.read()


def atomic_write_text(path: Path | str, content: str, encoding: str = DEFAULT_ENCODING) -> None:
    """
    Replace ``path`` with ``content`` without ever exposing a partial file.

    The payload goes to a temp file in the same directory, which is then
    renamed over the target. The target's permission bits are carried over.
    """
    target = _to_path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if target.exists():
            os.chmod(tmp_name, target.stat().st_mode & 0o7777)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def read_yaml(path: Path | str) -> Mapping[str, Any] | list[Any]:
    with open(_to_path(path), "r", encoding=DEFAULT_ENCODING) as handle:
        data = yaml.safe_load(handle)
    return data if data is not None else {}
