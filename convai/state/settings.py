"""Client settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClientSettings:
    api_endpoint: str
    websocket_url: str
    token_timeout_s: float


__all__ = ["ClientSettings"]
