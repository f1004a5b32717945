from .settings import ClientSettings
from .callbacks import SessionCallbacks, emit
from .session import (
    Role,
    SessionSnapshot,
    ConversationMode,
    ConversationStatus,
    DisconnectionDetails,
)
from .overrides import (
    TtsOverrides,
    SessionConfig,
    AgentOverrides,
    ClientOverrides,
    SessionOverrides,
    ConversationBehaviorOverrides,
)

__all__ = [
    "AgentOverrides",
    "ClientOverrides",
    "ClientSettings",
    "ConversationBehaviorOverrides",
    "ConversationMode",
    "ConversationStatus",
    "DisconnectionDetails",
    "Role",
    "SessionCallbacks",
    "SessionConfig",
    "SessionOverrides",
    "SessionSnapshot",
    "TtsOverrides",
    "emit",
]
