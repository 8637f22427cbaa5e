# boringssl_roll/runner.py
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Type, Union

from .errors import ProcessFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def format_cmdline(cmd: List[str]) -> str:
    return " ".join(str(c) for c in cmd)


def run(
    cwd: Optional[PathLike],
    name: str,
    *args: str,
    error: Type[ProcessFailure] = ProcessFailure,
    merge_stderr: bool = True,
) -> bytes:
    """
    Execute `name args...` in `cwd` and return its output.

    With merge_stderr (the default) stdout and stderr are captured together.
    Otherwise only stdout is returned and stderr is kept for the diagnostic.
    Raises `error` (a ProcessFailure subclass) on non-zero exit or when the
    executable cannot be started.
    """
    cmd = [str(name), *(str(a) for a in args)]
    workdir = str(cwd) if cwd else None
    logger.debug("[CMD] %s (cwd=%s)", format_cmdline(cmd), workdir or ".")

    try:
        proc = subprocess.run(
            cmd,
            cwd=workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            check=False,
        )
    except OSError as e:
        logger.error("Error starting '%s': %s", format_cmdline(cmd), e)
        raise error(cmd, output=str(e)) from e

    if proc.returncode != 0:
        out = proc.stdout or b""
        if not merge_stderr:
            out = (proc.stderr or b"") + out
        text = out.decode("utf-8", errors="replace")
        logger.error("Error returned for '%s'", format_cmdline(cmd))
        logger.error("Output: %s", text.strip())
        raise error(cmd, output=text, returncode=proc.returncode)

    return proc.stdout or b""


__all__ = ["run", "format_cmdline"]
