from __future__ import annotations

import logging

from capturepi.tools.debug import debug_enabled, time_block
from capturepi.tools.logging_setup import configure_logging


def test_time_block_silent_without_debug(monkeypatch) -> None:
    monkeypatch.delenv("CAPTUREPI_DEBUG", raising=False)
    messages: list[str] = []
    with time_block("write", emitter=messages.append):
        pass
    assert not debug_enabled()
    assert messages == []


def test_time_block_reports_when_debugging(monkeypatch) -> None:
    monkeypatch.setenv("CAPTUREPI_DEBUG", "yes")
    messages: list[str] = []
    with time_block("write", emitter=messages.append):
        pass
    assert len(messages) == 1
    assert messages[0].startswith("write took ")


def test_configure_logging_installs_one_handler() -> None:
    logger = logging.getLogger("capturepi")
    before = len(logger.handlers)
    configure_logging(logging.WARNING)
    configure_logging(logging.DEBUG)
    assert len(logger.handlers) <= before + 1
    assert logger.level == logging.DEBUG
