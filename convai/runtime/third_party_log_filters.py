"""Log noise filters for third-party libraries.

Only logger levels are adjusted; handlers stay with the application.
"""

from __future__ import annotations

import os
import logging

from convai.config.logging import ENV_SHOW_TRANSPORT_LOGS

NOISY_LOGGERS = ("websockets", "websockets.client", "httpx", "httpcore")


def configure() -> None:
    # Frame-level websocket and HTTP connection logs drown out session events.
    if (os.getenv(ENV_SHOW_TRANSPORT_LOGS) or "").strip().lower() in {"1", "true", "yes"}:
        return
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["NOISY_LOGGERS", "configure"]
