"""Shared test doubles.

- transport.py: in-memory ``Transport`` with push/flush helpers
- callbacks.py: ``SessionCallbacks`` recorder
- waiting.py: polling helper for background state changes
"""

from __future__ import annotations

from .waiting import wait_until
from .transport import FakeTransport
from .callbacks import CallbackRecorder

__all__ = ["CallbackRecorder", "FakeTransport", "wait_until"]
