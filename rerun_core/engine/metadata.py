"""
rerun_core.engine.metadata

Metadata records: one ``metadata`` file per module, command, option or
interpreter adapter directory.

A record is a sequence of ``KEY=value`` / ``KEY="value"`` / ``KEY='value'``
lines. Blank lines and ``#`` comments are ignored. Records are data only: the
parser is a strict line grammar and any line it does not recognise is rejected
with `MalformedRecord`. Nothing in a record is ever evaluated.

Updates go through `set_properties`, which rewrites values in place (so line
order, comments and unknown keys survive) and replaces the file atomically.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from rerun_core.core.file_io import atomic_write_text, read_text
from rerun_core.core.logging import get_logger

from .errors import (
    DirectoryNotFound,
    MalformedRecord,
    MetadataError,
    RecordMissing,
    UsageError,
    WriteFailed,
)

log = get_logger(__name__)

RECORD_NAME = "metadata"

KEY_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
_KEY_RE = re.compile(rf"^{KEY_PATTERN}$")
_LINE_RE = re.compile(rf"^\s*(?:export\s+)?({KEY_PATTERN})=(.*)$")
_DOUBLE_QUOTED_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
_SINGLE_QUOTED_RE = re.compile(r"^'([^']*)'$")
_ESCAPE_RE = re.compile(r"\\(.)")

Pairs = Union[Mapping[str, object], Iterable[str]]


# ----------------------------------------------------------------------
# PARSING
# ----------------------------------------------------------------------

def _is_ignorable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def _parse_value(raw: str) -> Optional[str]:
    """Decode a value token, or return None if it is not well formed."""
    text = raw.strip()
    if text.startswith('"'):
        match = _DOUBLE_QUOTED_RE.match(text)
        return _ESCAPE_RE.sub(r"\1", match.group(1)) if match else None
    if text.startswith("'"):
        match = _SINGLE_QUOTED_RE.match(text)
        return match.group(1) if match else None
    return text


def _parse_line(line: str, lineno: int, path: Optional[Path]) -> Tuple[str, str]:
    match = _LINE_RE.match(line)
    value = _parse_value(match.group(2)) if match else None
    if match is None or value is None:
        raise MalformedRecord(path, lineno, line.rstrip("\n"))
    return match.group(1), value


def parse_record(text: str, path: Optional[Path] = None) -> List[Tuple[str, str]]:
    """Parse record text into ``(key, value)`` pairs in file order (duplicates kept)."""
    entries: List[Tuple[str, str]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if _is_ignorable(line):
            continue
        entries.append(_parse_line(line, lineno, path))
    return entries


def quote_value(value: str) -> str:
    """Render a value in the double-quoted form used for every write."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# ----------------------------------------------------------------------
# RECORD ACCESS
# ----------------------------------------------------------------------

def record_path(directory: Path | str) -> Path:
    return Path(directory) / RECORD_NAME


def has_record(directory: Path | str) -> bool:
    """An entity exists iff its directory holds a readable metadata record."""
    path = record_path(directory)
    return path.is_file()


def _load_text(directory: Path | str) -> Tuple[Path, str]:
    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryNotFound(directory)
    path = record_path(directory)
    if not path.is_file():
        raise RecordMissing(path)
    try:
        return path, read_text(path, newline="")
    except OSError as exc:
        raise MetadataError(f"cannot read {path}: {exc}") from exc


def read_record(directory: Path | str) -> Dict[str, str]:
    """Return every property of a record; later duplicates win, first-seen order is kept."""
    path, text = _load_text(directory)
    record: Dict[str, str] = {}
    for key, value in parse_record(text, path):
        record[key] = value
    return record


def get_property(directory: Path | str, key: str) -> Optional[str]:
    """
    Return the value of the last occurrence of ``key`` in the directory's
    record, or None if the key is absent.

    Raises:
        DirectoryNotFound: ``directory`` does not exist.
        RecordMissing: the directory has no metadata file.
        MalformedRecord: a line does not match the record grammar.
    """
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise UsageError(f"invalid property name: {key!r}")
    return read_record(directory).get(key)


# ----------------------------------------------------------------------
# UPSERT
# ----------------------------------------------------------------------

def _normalize_pairs(pairs: Pairs) -> List[Tuple[str, str]]:
    if isinstance(pairs, str):
        raise UsageError("set_properties expects KEY=value pairs, not a bare string")

    items: List[Tuple[str, str]] = []
    if isinstance(pairs, Mapping):
        for key, value in pairs.items():
            items.append((key, "" if value is None else str(value)))
    else:
        for pair in pairs:
            if not isinstance(pair, str) or "=" not in pair:
                raise UsageError(f"expected KEY=value, got {pair!r}")
            key, _, value = pair.partition("=")
            items.append((key, value))

    if not items:
        raise UsageError("set_properties requires at least one KEY=value pair")
    for key, value in items:
        if not isinstance(key, str) or not _KEY_RE.match(key):
            raise UsageError(f"invalid property name: {key!r}")
        if "\n" in value or "\r" in value:
            raise UsageError(f"property {key} value may not contain newlines")
    return items


def set_properties(directory: Path | str, pairs: Pairs) -> None:
    """
    Upsert one or more properties into the directory's record as one update.

    Existing keys are rewritten in place (re-quoted, line position kept);
    legacy duplicate lines for the same key are folded into the first one.
    New keys are appended as ``KEY="value"``. The file is replaced atomically.

    Raises:
        UsageError: a pair is not ``KEY=value`` or the key is invalid.
        DirectoryNotFound / RecordMissing: the entity does not exist.
        WriteFailed: the new record could not be written.
    """
    updates = _normalize_pairs(pairs)
    path, text = _load_text(directory)

    lines: List[str] = []
    endings: List[str] = []
    for raw in text.splitlines(keepends=True):
        body = raw.rstrip("\r\n")
        lines.append(body)
        endings.append(raw[len(body):])
    newline = next((ending for ending in endings if ending), "\n")

    positions: Dict[str, List[int]] = {}
    for index, line in enumerate(lines):
        if _is_ignorable(line):
            continue
        key, _ = _parse_line(line, index + 1, path)
        positions.setdefault(key, []).append(index)

    dropped: set[int] = set()
    for key, value in updates:
        rendered = f"{key}={quote_value(value)}"
        if key in positions:
            first, *rest = positions[key]
            lines[first] = rendered
            dropped.update(rest)
            positions[key] = [first]
        else:
            if endings and not endings[-1]:
                endings[-1] = newline
            lines.append(rendered)
            endings.append(newline)
            positions[key] = [len(lines) - 1]

    content = "".join(
        line + ending
        for index, (line, ending) in enumerate(zip(lines, endings))
        if index not in dropped
    )
    try:
        atomic_write_text(path, content)
    except OSError as exc:
        raise WriteFailed(path, exc) from exc
    log.debug("Updated %s: %s", path, ", ".join(key for key, _ in updates))
