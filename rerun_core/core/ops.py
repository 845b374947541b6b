"""
rerun_core.core.ops

Process helpers for launching dispatched commands.

The child inherits our stdin/stdout/stderr; nothing is captured. The call
blocks until the child exits and no timeout is applied.
"""

from __future__ import annotations

import os
import signal
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .logging import get_logger

log = get_logger(__name__)


def normalize_returncode(returncode: int) -> int:
    """Map a signal death (negative returncode) to the shell's 128+N form."""
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


def is_executable(path: Path | str) -> bool:
    p = Path(path)
    return p.is_file() and os.access(p, os.X_OK)


def launch(
    cmd: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path | str] = None,
) -> int:
    """
    Run ``cmd`` to completion and return its exit status.

    Args:
        cmd: Argument vector; never passed through a shell.
        env: Complete child environment. None inherits ours.
        cwd: Working directory for the child.

    Returns:
        The child's exit status, with signal deaths reported as 128+N.
    """
    argv = [str(part) for part in cmd]
    log.debug(f"▶️ Launching: {argv} (cwd={cwd})")
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            check=False,
        )
    except KeyboardInterrupt:
        log.warning("Interrupted while waiting for %s", argv[0])
        raise
    status = normalize_returncode(result.returncode)
    if result.returncode < 0:
        try:
            signame = signal.Signals(-result.returncode).name
        except ValueError:
            signame = str(-result.returncode)
        log.warning(f"Command terminated by {signame}: {argv[0]}")
    elif status != 0:
        log.debug(f"Command returned {status}: {argv[0]}")
    return status
