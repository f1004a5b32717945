"""Configuration module exports (env names and constants only)."""

from .endpoints import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_WEBSOCKET_URL,
)

__all__ = [
    "DEFAULT_API_ENDPOINT",
    "DEFAULT_WEBSOCKET_URL",
]
