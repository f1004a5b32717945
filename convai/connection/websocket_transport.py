"""Data-channel transport over a plain WebSocket connection."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import AsyncIterator

import websockets

from convai.errors import TransportError, NotConnectedError

from .transport import ConnectionState

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT_S = 10.0
DEFAULT_MAX_MESSAGE_BYTES = 16 * 1024 * 1024


class WebSocketTransport:
    """``Transport`` implementation backed by ``websockets``.

    The conversation token travels as a bearer ``Authorization`` header. Text
    and binary frames are both surfaced as UTF-8 bytes. There is no local audio
    capture here, so mute state is a flag the application can read back.
    """

    def __init__(
        self,
        *,
        open_timeout_s: float | None = DEFAULT_OPEN_TIMEOUT_S,
        max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES,
    ) -> None:
        self._open_timeout_s = open_timeout_s
        self._max_message_bytes = max_message_bytes
        self._ws: websockets.ClientConnection | None = None
        self._reader: asyncio.Task[None] | None = None
        self._data: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._states: asyncio.Queue[ConnectionState | None] = asyncio.Queue()
        self._muted = False

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    @property
    def is_muted(self) -> bool:
        return self._muted

    async def connect(self, url: str, token: str) -> None:
        await self.disconnect()

        # Fresh queues per connection so a finished stream never leaks its end marker.
        self._data = asyncio.Queue()
        self._states = asyncio.Queue()
        self._states.put_nowait(ConnectionState.CONNECTING)

        logger.info("connecting to %s", url)
        try:
            ws = await websockets.connect(
                url,
                additional_headers={"Authorization": f"Bearer {token}"},
                open_timeout=self._open_timeout_s,
                max_size=self._max_message_bytes,
            )
        except Exception as exc:
            self._states.put_nowait(ConnectionState.DISCONNECTED)
            raise TransportError(f"connect to {url} failed: {exc}") from exc

        self._ws = ws
        self._reader = asyncio.create_task(self._read_loop(ws))
        self._states.put_nowait(ConnectionState.CONNECTED)
        logger.info("connected to %s", url)

    async def disconnect(self) -> None:
        ws, self._ws = self._ws, None
        reader, self._reader = self._reader, None
        if ws is None and reader is None:
            return

        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        if reader is not None:
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader

        self._finish_streams()
        logger.info("transport disconnected")

    async def send(self, data: bytes) -> None:
        ws = self._ws
        if ws is None:
            raise NotConnectedError("not connected to room")
        try:
            await ws.send(data.decode("utf-8"))
        except websockets.exceptions.ConnectionClosed as exc:
            raise NotConnectedError(f"connection closed code={exc.code} reason={exc.reason}") from exc
        except Exception as exc:
            raise TransportError(f"send failed: {exc}") from exc

    async def data_stream(self) -> AsyncIterator[bytes]:
        queue = self._data
        while True:
            item = await queue.get()
            if item is None:
                return
            yield item

    async def state_stream(self) -> AsyncIterator[ConnectionState]:
        queue = self._states
        while True:
            item = await queue.get()
            if item is None:
                return
            yield item

    async def set_muted(self, muted: bool) -> None:
        self._muted = bool(muted)

    async def toggle_muted(self) -> None:
        self._muted = not self._muted

    async def _read_loop(self, ws: websockets.ClientConnection) -> None:
        try:
            async for message in ws:
                self._data.put_nowait(message.encode("utf-8") if isinstance(message, str) else bytes(message))
        except websockets.exceptions.ConnectionClosed as exc:
            logger.info("connection closed code=%s reason=%s", exc.code, exc.reason)
        finally:
            # Remote close: disconnect() did not run, so publish the loss here.
            if self._ws is ws:
                self._ws = None
                self._finish_streams()

    def _finish_streams(self) -> None:
        self._states.put_nowait(ConnectionState.DISCONNECTED)
        self._states.put_nowait(None)
        self._data.put_nowait(None)


__all__ = ["WebSocketTransport"]
