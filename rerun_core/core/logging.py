"""
rerun_core.core.logging

Typed logging for rerun.

Features:
 - RerunLogger subclass with Rich detection flag and optional log file
 - Unified setup for Rich + standard logging
 - Console output on stderr so command stdout stays untouched
 - Optional per-run file logging
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, cast

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "rerun"
ANSI_RESET = "\033[0m"

LEVEL_COLORS: Dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[95m",
}


# ----------------------------------------------------------------------
# FORMATTERS
# ----------------------------------------------------------------------

class ColorFormatter(logging.Formatter):
    """Console formatter that colors the level name when writing to a TTY."""

    def __init__(self, *args: Any, use_color: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level_name = record.levelname
        color = LEVEL_COLORS.get(record.levelno, "")
        if self.use_color and color:
            record.level_display = f"{color}{level_name}{ANSI_RESET}"  # type: ignore[attr-defined]
        else:
            record.level_display = level_name  # type: ignore[attr-defined]
        try:
            return super().format(record)
        finally:
            del record.level_display  # type: ignore[attr-defined]


# ----------------------------------------------------------------------
# LOGGER CLASS
# ----------------------------------------------------------------------

class RerunLogger(logging.Logger):
    """Custom logger with Rich support flag and optional log file."""

    rich_enabled: bool = False
    log_file: Optional[Path] = None


def _normalize_level(value: Any) -> str:
    if isinstance(value, str):
        candidate = value.strip().upper()
        if candidate in logging._nameToLevel:  # type: ignore[attr-defined]
            return candidate
    elif isinstance(value, int):
        label = logging.getLevelName(value)
        if isinstance(label, str):
            return label
    return "WARNING"


def _resolve_use_rich(value: Optional[bool]) -> bool:
    if value is None:
        return sys.stderr.isatty()
    return bool(value)


# ----------------------------------------------------------------------
# BASE LOGGER SETUP
# ----------------------------------------------------------------------

def setup_logging(
    level: str | int | None = None,
    use_rich: Optional[bool] = None,
    log_dir: Optional[Path | str] = None,
    file_prefix: Optional[str] = None,
) -> RerunLogger:
    """
    Configure and return the ``rerun`` logger.

    Args:
        level: Desired logging level. Defaults to WARNING so a dispatched
            command's own output is not interleaved with ours.
        use_rich: Force-enable or disable the Rich handler. None auto-detects.
        log_dir: Directory for a per-run log file. No file is written if unset.
        file_prefix: Prefix for generated log filenames.
    """
    resolved_level = _normalize_level(level)
    resolved_use_rich = _resolve_use_rich(use_rich)

    logging.setLoggerClass(RerunLogger)
    logger = cast(RerunLogger, logging.getLogger(ROOT_LOGGER_NAME))
    logger.setLevel(resolved_level)

    # Tear down any previous handlers so we can rebuild with new settings.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # ------------------------------------------------------------------
    # Console Handler (Rich or ANSI), always stderr
    # ------------------------------------------------------------------
    console_handler: logging.Handler
    if resolved_use_rich:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_level=True,
            show_path=False,
            log_time_format="[%X]",
        )
        logger.rich_enabled = True
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            ColorFormatter(
                fmt="%(asctime)s %(level_display)s %(name)s: %(message)s",
                datefmt="%H:%M:%S",
                use_color=sys.stderr.isatty(),
            )
        )
        logger.rich_enabled = False
    console_handler.setLevel(logging.NOTSET)
    logger.addHandler(console_handler)

    # ------------------------------------------------------------------
    # File Handler
    # ------------------------------------------------------------------
    logger.log_file = None
    if log_dir:
        resolved_log_dir = Path(log_dir).expanduser()
        resolved_log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file_path = resolved_log_dir / f"{file_prefix or 'rerun'}_{timestamp}.log"

        file_handler = logging.FileHandler(log_file_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler.setLevel(logging.NOTSET)
        logger.addHandler(file_handler)
        logger.log_file = log_file_path

    logger.propagate = False
    logger._initialized = True  # type: ignore[attr-defined]
    logger.debug(
        "Logger initialized at level %s (Rich=%s)",
        resolved_level,
        "ON" if logger.rich_enabled else "OFF",
    )
    if logger.log_file:
        logger.debug("Log file created at: %s", logger.log_file)

    return logger


# ----------------------------------------------------------------------
# UTILITY ACCESSOR
# ----------------------------------------------------------------------

def get_logger(name: str = ROOT_LOGGER_NAME) -> RerunLogger:
    """Retrieve a namespaced rerun logger (configured later via setup_logging)."""

    logging.setLoggerClass(RerunLogger)
    base = cast(RerunLogger, logging.getLogger(ROOT_LOGGER_NAME))

    if not getattr(base, "_initialized", False) and not base.handlers:
        base.addHandler(logging.NullHandler())

    if not name or name == ROOT_LOGGER_NAME:
        return base

    if name.startswith("rerun_core."):
        name = name[len("rerun_core."):]
    return cast(RerunLogger, base.getChild(name))
