# tests/test_logging_setup.py
from __future__ import annotations

import logging

from boringssl_roll import logging_setup


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("boringssl_roll", level, __file__, 1, "hello %s", ("world",), None)


def test_console_formatter_markers() -> None:
    fmt = logging_setup.ConsoleFormatter("%(message)s")
    assert fmt.format(_record(logging.INFO)) == "[+] hello world"
    assert fmt.format(_record(logging.WARNING)) == "<!> hello world"
    assert fmt.format(_record(logging.ERROR)) == "<!> hello world"


def test_env_log_level(monkeypatch) -> None:
    monkeypatch.setenv("ROLL_LOG_LEVEL", "debug")
    assert logging_setup._get_env_log_level() == logging.DEBUG
    monkeypatch.setenv("ROLL_LOG_LEVEL", "nonsense")
    assert logging_setup._get_env_log_level() == logging.INFO


def test_init_logging_writes_log_file(monkeypatch, tmp_path) -> None:
    log_file = tmp_path / "roll.log"
    monkeypatch.setenv("ROLL_LOG_FILE", str(log_file))
    monkeypatch.setattr(logging_setup, "_INITIALIZED", False)

    logging_setup.init_logging(level=logging.INFO)
    logging.getLogger("boringssl_roll.test").warning("disk is full")
    for handler in logging.getLogger().handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "[WARNING] boringssl_roll.test: disk is full" in text

    # Second call is a no-op unless forced.
    logging_setup.init_logging(level=logging.DEBUG)
    assert logging.getLogger().level == logging.INFO
    logging_setup.init_logging(level=logging.DEBUG, force=True)
    assert logging.getLogger().level == logging.DEBUG
    for handler in list(logging.getLogger().handlers):
        logging.getLogger().removeHandler(handler)
        handler.close()
