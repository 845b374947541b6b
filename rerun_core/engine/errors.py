"""Exception taxonomy for the rerun engine and the exit codes they map to."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_SYNTAX = 2
EXIT_INTERRUPTED = 130


class RerunError(Exception):
    """Base class for every error raised by rerun itself."""

    exit_code = EXIT_FATAL


class UsageError(RerunError):
    """An internal operation was called with the wrong argument shape."""


class RerunSyntaxError(RerunError):
    """A module, command, script, interpreter or required option could not be resolved."""

    exit_code = EXIT_SYNTAX
    prefix = "SYNTAX ERROR"

    def __str__(self) -> str:
        return f"{self.prefix}: {super().__str__()}"


# ----------------------------------------------------------------------
# LOOKUP FAILURES (ordinary results, escalated by the caller)
# ----------------------------------------------------------------------

class LookupFailure(RerunError, LookupError):
    """Base for not-found results from the scanner and resolver."""

    exit_code = EXIT_SYNTAX


class ModuleNotFound(LookupFailure):
    def __init__(self, name: str, searched: tuple[Path, ...] = ()) -> None:
        self.name = name
        self.searched = searched
        where = ", ".join(str(p) for p in searched) or "no search roots"
        super().__init__(f"module not found: {name} (searched {where})")


class ScriptNotFound(LookupFailure):
    def __init__(self, command_dir: Path) -> None:
        self.command_dir = command_dir
        super().__init__(f"no script found in {command_dir}")


class OptionNotFound(LookupFailure):
    def __init__(self, module_dir: Path, name: str) -> None:
        self.module_dir = module_dir
        self.name = name
        super().__init__(f"option not found: {name} (module {module_dir.name})")


class InterpreterNotFound(LookupFailure):
    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        self.name = name
        super().__init__(f"interpreter not registered: {name}" + (f" ({reason})" if reason else ""))


# ----------------------------------------------------------------------
# METADATA I/O FAILURES (always fatal)
# ----------------------------------------------------------------------

class MetadataError(RerunError):
    """Metadata could not be read or written."""


class DirectoryNotFound(MetadataError):
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"directory not found: {directory}")


class RecordMissing(MetadataError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"metadata record missing: {path}")


class WriteFailed(MetadataError):
    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        super().__init__(f"failed to write {path}: {cause}")


class MalformedRecord(MetadataError):
    def __init__(self, path: Optional[Path], lineno: int, line: str) -> None:
        self.path = path
        self.lineno = lineno
        self.line = line
        if path is None:
            where = f"line {lineno}"
        else:
            where = f"{path}:{lineno}" if lineno else str(path)
        super().__init__(f"malformed metadata at {where}: {line!r}")
