"""Logging initialization for applications embedding the client."""

from __future__ import annotations

import logging

from convai.config.logging import LOG_LEVEL, LOG_FORMAT

from .third_party_log_filters import configure as configure_third_party_logs


def configure_logging() -> None:
    configure_third_party_logs()
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
