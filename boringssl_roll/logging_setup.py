"""
boringssl_roll/logging_setup.py
-------------------------------

Central logging configuration for the roll tool.

Library modules only call `logging.getLogger(__name__)`; the CLI owns the
configuration and calls `init_logging()` once at startup.

Environment overrides:
      ROLL_LOG_LEVEL   (e.g. DEBUG, INFO, WARNING, ERROR)
      ROLL_LOG_FILE    (path to a log file; if unset, log to stderr only)

Implementation notes
====================

- We use Python's built-in `logging` module.
- `init_logging` is idempotent; calling it multiple times is safe.
- Console output is terse (`[+]` for progress, `<!>` for warnings and
  errors) since a roll is read by a human watching the terminal; the
  optional log file keeps timestamps and logger names.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

# Internal flag to avoid re-configuring logging multiple times
_INITIALIZED = False

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """Prefix progress lines with `[+]` and problems with `<!>`."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        marker = "<!>" if record.levelno >= logging.WARNING else "[+]"
        return f"{marker} {msg}"


def _get_env_log_level() -> int:
    """
    Read ROLL_LOG_LEVEL from environment and map it to a logging level.
    Defaults to logging.INFO if unset or invalid.
    """
    level_name = os.getenv("ROLL_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def init_logging(
    level: Optional[int] = None,
    filename: Optional[str] = None,
    *,
    force: bool = False,
) -> None:
    """
    Initialize root logging configuration.

    Args:
        level:
            Logging level (e.g. logging.DEBUG). If None, it is read from
            the ROLL_LOG_LEVEL environment variable, defaulting to INFO.
        filename:
            Optional log file. ROLL_LOG_FILE takes precedence when set.
        force:
            If True, reconfigure logging even if it was already initialized.
    """
    global _INITIALIZED

    if _INITIALIZED and not force:
        return

    if level is None:
        level = _get_env_log_level()

    filename = os.getenv("ROLL_LOG_FILE") or filename

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ConsoleFormatter("%(message)s"))
    handlers.append(console_handler)

    if filename:
        file_handler = logging.FileHandler(filename, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True,  # reset any previous basicConfig
    )

    _INITIALIZED = True


__all__ = ["init_logging", "ConsoleFormatter"]
