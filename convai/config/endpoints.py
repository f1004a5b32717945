"""Remote endpoint configuration (env names and defaults only)."""

from __future__ import annotations

# Both endpoints must point at the same deployment region; tokens minted by
# one region are rejected by the other.
ENV_CONVAI_API_ENDPOINT = "CONVAI_API_ENDPOINT"
ENV_CONVAI_WEBSOCKET_URL = "CONVAI_WEBSOCKET_URL"
ENV_CONVAI_TOKEN_TIMEOUT_S = "CONVAI_TOKEN_TIMEOUT_S"

DEFAULT_API_ENDPOINT = "https://api.elevenlabs.io"
DEFAULT_WEBSOCKET_URL = "wss://livekit.rtc.elevenlabs.io"
DEFAULT_TOKEN_TIMEOUT_S: float = 10.0

TOKEN_PATH = "/v1/convai/conversation/token"
TOKEN_QUERY_AGENT_ID = "agent_id"
TOKEN_RESPONSE_KEY = "token"

__all__ = [
    "DEFAULT_API_ENDPOINT",
    "DEFAULT_TOKEN_TIMEOUT_S",
    "DEFAULT_WEBSOCKET_URL",
    "ENV_CONVAI_API_ENDPOINT",
    "ENV_CONVAI_TOKEN_TIMEOUT_S",
    "ENV_CONVAI_WEBSOCKET_URL",
    "TOKEN_PATH",
    "TOKEN_QUERY_AGENT_ID",
    "TOKEN_RESPONSE_KEY",
]
