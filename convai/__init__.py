"""Client-side session manager for realtime conversational agents."""

from .client import ConversationClient
from .state import (
    Role,
    ClientSettings,
    SessionConfig,
    TtsOverrides,
    AgentOverrides,
    ClientOverrides,
    SessionSnapshot,
    ConversationMode,
    SessionCallbacks,
    SessionOverrides,
    ConversationStatus,
    DisconnectionDetails,
    ConversationBehaviorOverrides,
)
from .tools import ClientToolResult
from .runtime import load_settings, configure_logging
from .connection import Transport, TokenService, ConnectionState, WebSocketTransport
from .errors import (
    ParseError,
    ConvaiError,
    TransportError,
    TokenFetchError,
    NotConnectedError,
    AlreadyActiveError,
    ToolExecutionError,
    InvalidArgumentError,
)

__all__ = [
    "AgentOverrides",
    "AlreadyActiveError",
    "ClientOverrides",
    "ClientSettings",
    "ClientToolResult",
    "ConnectionState",
    "ConvaiError",
    "ConversationBehaviorOverrides",
    "ConversationClient",
    "ConversationMode",
    "ConversationStatus",
    "DisconnectionDetails",
    "InvalidArgumentError",
    "NotConnectedError",
    "ParseError",
    "Role",
    "SessionCallbacks",
    "SessionConfig",
    "SessionOverrides",
    "SessionSnapshot",
    "TokenFetchError",
    "TokenService",
    "ToolExecutionError",
    "Transport",
    "TransportError",
    "WebSocketTransport",
    "configure_logging",
    "load_settings",
]
