"""
rerun_core.core

Ambient utilities shared by the engine and the CLI:
  - Logging
  - Configuration
  - File I/O
  - Process launching
"""

from rerun_core.core.logging import setup_logging, get_logger, RerunLogger
from rerun_core.core.config import RerunConfig, load_config, coerce_yes_no
from rerun_core.core.file_io import read_text, read_yaml, atomic_write_text
from rerun_core.core.ops import launch, is_executable, normalize_returncode

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "RerunLogger",

    # Configuration
    "RerunConfig",
    "load_config",
    "coerce_yes_no",

    # File I/O
    "read_text",
    "read_yaml",
    "atomic_write_text",

    # Operations
    "launch",
    "is_executable",
    "normalize_returncode",
]
