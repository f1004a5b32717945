"""Background consumers for a connected transport's streams."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Awaitable

from convai.connection.transport import Transport, ConnectionState

DataFn = Callable[[bytes], Awaitable[None]]
LostFn = Callable[[], Awaitable[None]]
ErrorFn = Callable[[str, BaseException | None], None]


class TransportSubscriptions:
    """Feed inbound frames to ``on_data`` one at a time and watch for disconnects.

    ``on_disconnected`` runs inside the state watcher task, so it may call
    ``cancel`` without cancelling itself.
    """

    def __init__(self, transport: Transport, *, on_data: DataFn, on_disconnected: LostFn, on_error: ErrorFn) -> None:
        self._transport = transport
        self._on_data = on_data
        self._on_disconnected = on_disconnected
        self._on_error = on_error
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def active(self) -> bool:
        return bool(self._tasks)

    def start(self) -> None:
        self._tasks = [
            asyncio.create_task(self._consume_data()),
            asyncio.create_task(self._watch_state()),
        ]

    async def cancel(self) -> None:
        current = asyncio.current_task()
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            if task is current:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task

    async def _consume_data(self) -> None:
        try:
            async for raw in self._transport.data_stream():
                await self._on_data(raw)
        except Exception as exc:
            self._on_error("Data stream error", exc)

    async def _watch_state(self) -> None:
        try:
            async for state in self._transport.state_stream():
                if state is ConnectionState.DISCONNECTED:
                    await self._on_disconnected()
                    return
        except Exception as exc:
            self._on_error("Connection state stream error", exc)


__all__ = ["TransportSubscriptions"]
