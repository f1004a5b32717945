"""Session-level enums and value objects."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ConversationStatus(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class ConversationMode(str, enum.Enum):
    LISTENING = "listening"
    SPEAKING = "speaking"


class Role(str, enum.Enum):
    USER = "user"
    AI = "ai"


@dataclass(frozen=True, slots=True)
class DisconnectionDetails:
    reason: str
    code: int | None = None


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of the session handed to observers after each mutation."""

    status: ConversationStatus
    mode: ConversationMode
    conversation_id: str | None
    is_muted: bool
    can_send_feedback: bool
    current_event_id: int

    @property
    def is_speaking(self) -> bool:
        return self.mode is ConversationMode.SPEAKING


__all__ = [
    "ConversationMode",
    "ConversationStatus",
    "DisconnectionDetails",
    "Role",
    "SessionSnapshot",
]
