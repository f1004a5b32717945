"""Environment parsing for client settings."""

from __future__ import annotations

import os

from convai.state.settings import ClientSettings
from convai.config.endpoints import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_WEBSOCKET_URL,
    ENV_CONVAI_API_ENDPOINT,
    DEFAULT_TOKEN_TIMEOUT_S,
    ENV_CONVAI_WEBSOCKET_URL,
    ENV_CONVAI_TOKEN_TIMEOUT_S,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def load_settings(
    *,
    api_endpoint: str | None = None,
    websocket_url: str | None = None,
    token_timeout_s: float | None = None,
) -> ClientSettings:
    """Resolve settings: explicit arguments first, then env, then defaults."""
    timeout = token_timeout_s if token_timeout_s is not None else _float_env(
        ENV_CONVAI_TOKEN_TIMEOUT_S, DEFAULT_TOKEN_TIMEOUT_S
    )
    if timeout <= 0:
        timeout = DEFAULT_TOKEN_TIMEOUT_S

    return ClientSettings(
        api_endpoint=(api_endpoint or _str_env(ENV_CONVAI_API_ENDPOINT, DEFAULT_API_ENDPOINT)).rstrip("/"),
        websocket_url=websocket_url or _str_env(ENV_CONVAI_WEBSOCKET_URL, DEFAULT_WEBSOCKET_URL),
        token_timeout_s=timeout,
    )


__all__ = ["load_settings"]
