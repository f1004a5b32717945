"""Logging configuration."""

from __future__ import annotations

import os

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT = (os.getenv("LOG_FORMAT") or "%(asctime)s %(levelname)s %(name)s: %(message)s").strip()

# Set to 1/true/yes to keep websockets/httpx loggers at LOG_LEVEL.
ENV_SHOW_TRANSPORT_LOGS = "SHOW_TRANSPORT_LOGS"

__all__ = ["ENV_SHOW_TRANSPORT_LOGS", "LOG_FORMAT", "LOG_LEVEL"]
