"""Contract between the session controller and a real-time transport."""

from __future__ import annotations

import enum
from typing import Protocol, runtime_checkable
from collections.abc import AsyncIterator


class ConnectionState(str, enum.Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


@runtime_checkable
class Transport(Protocol):
    """Room-level connection carrying the data channel and the local audio source.

    ``connect`` is not idempotent: callers disconnect first when reusing an
    instance. ``send`` raises ``NotConnectedError`` when no connection is
    active. Mute operations only touch the local audio source and are
    independent of session status.
    """

    @property
    def is_muted(self) -> bool: ...

    async def connect(self, url: str, token: str) -> None: ...

    async def disconnect(self) -> None: ...

    async def send(self, data: bytes) -> None: ...

    def data_stream(self) -> AsyncIterator[bytes]: ...

    def state_stream(self) -> AsyncIterator[ConnectionState]: ...

    async def set_muted(self, muted: bool) -> None: ...

    async def toggle_muted(self) -> None: ...


__all__ = ["ConnectionState", "Transport"]
