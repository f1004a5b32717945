"""Outbound sends with a single failure path for background work."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from functools import partial
from collections.abc import Callable, Coroutine

from convai.connection.transport import Transport
from convai.config.protocol import KEY_TYPE
from convai.errors import ConvaiError, TransportError

from .codec import encode_envelope

logger = logging.getLogger(__name__)

ErrorFn = Callable[[str, BaseException | None], None]


class OutboundSender:
    """Encode envelopes onto the transport.

    ``dispatch``/``spawn`` are fire-and-forget: the caller gets control back
    immediately and any failure is funnelled through ``on_error`` together
    with the context string of the call site.
    """

    def __init__(self, transport: Transport, *, on_error: ErrorFn) -> None:
        self._transport = transport
        self._on_error = on_error
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def send(self, envelope: dict[str, Any]) -> None:
        data = encode_envelope(envelope)
        try:
            await self._transport.send(data)
        except ConvaiError:
            raise
        except Exception as exc:
            raise TransportError(f"send failed: {exc}") from exc
        logger.debug("sent %s", envelope.get(KEY_TYPE))

    async def deliver(self, envelope: dict[str, Any], *, context: str) -> bool:
        """Send now and report instead of raising; returns whether it went out."""
        try:
            await self.send(envelope)
        except Exception as exc:
            self._report(context, exc)
            return False
        return True

    def dispatch(self, envelope: dict[str, Any], *, context: str) -> asyncio.Task[Any]:
        return self.spawn(self.send(envelope), context=context)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, context: str) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(partial(self._on_task_done, context))
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_task_done(self, context: str, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._report(context, exc)

    def _report(self, context: str, exc: BaseException) -> None:
        logger.debug("%s: %s", context, exc)
        self._on_error(context, exc)


__all__ = ["OutboundSender"]
