"""Observer list for session state snapshots."""

from __future__ import annotations

import contextlib
from collections.abc import Callable

from convai.state.callbacks import emit
from convai.state.session import SessionSnapshot

Listener = Callable[[SessionSnapshot], None]


class SnapshotListeners:
    """Deliver a fresh snapshot to every observer after each session mutation."""

    def __init__(self, snapshot: Callable[[], SessionSnapshot]) -> None:
        self._snapshot = snapshot
        self._listeners: list[Listener] = []

    def add(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove(self, listener: Listener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    def notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self._snapshot()
        # Copy: a listener may unsubscribe itself.
        for listener in list(self._listeners):
            emit(listener, snapshot)


__all__ = ["Listener", "SnapshotListeners"]
