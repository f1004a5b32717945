from __future__ import annotations

import logging

import pytest

from convai.runtime import configure_logging
from convai.runtime.third_party_log_filters import NOISY_LOGGERS, configure


def test_transport_loggers_are_quietened(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHOW_TRANSPORT_LOGS", raising=False)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG)

    configure()

    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)


def test_transport_logs_can_be_kept(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOW_TRANSPORT_LOGS", "true")
    logging.getLogger("httpx").setLevel(logging.DEBUG)

    configure_logging()

    assert logging.getLogger("httpx").level == logging.DEBUG
