"""Typed inbound events decoded from the conversational data channel.

Each wire ``type`` maps to exactly one frozen dataclass below. Messages whose
type is not recognised become ``UnknownEvent`` so newer server events are
still visible to diagnostics instead of being dropped.
"""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ConversationMetadata:
    conversation_id: str | None = None
    agent_output_audio_format: str | None = None
    user_input_audio_format: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class UserTranscript:
    transcript: str
    event_id: int


@dataclass(frozen=True, slots=True)
class TentativeUserTranscript:
    transcript: str
    event_id: int


@dataclass(frozen=True, slots=True)
class LegacyUserTranscription:
    transcript: str


@dataclass(frozen=True, slots=True)
class AgentResponse:
    text: str | None = None
    event_id: int | None = None


@dataclass(frozen=True, slots=True)
class AgentChatResponsePart:
    text: str
    event_id: int
    part_type: str | None = None


@dataclass(frozen=True, slots=True)
class AgentResponseCorrection:
    event_id: int | None = None
    original_agent_response: str | None = None
    corrected_agent_response: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TentativeAgentResponse:
    text: str


@dataclass(frozen=True, slots=True)
class AudioChunk:
    # Base64-encoded audio as received; decoding/playback is the caller's job.
    chunk: str
    event_id: int | None = None


@dataclass(frozen=True, slots=True)
class InterruptionEvent:
    event_id: int


@dataclass(frozen=True, slots=True)
class PingEvent:
    event_id: int
    ping_ms: int | None = None


@dataclass(frozen=True, slots=True)
class ClientToolCall:
    tool_call_id: str
    tool_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    event_id: int | None = None


@dataclass(frozen=True, slots=True)
class McpToolCall:
    tool_call_id: str
    tool_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    service_id: str | None = None
    state: str | None = None


@dataclass(frozen=True, slots=True)
class McpConnectionStatus:
    status: str | None = None
    integrations: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AgentToolResponse:
    tool_name: str
    tool_call_id: str | None = None
    tool_type: str | None = None
    is_error: bool = False
    event_id: int | None = None
    response: Any = None


@dataclass(frozen=True, slots=True)
class VadScore:
    score: float


@dataclass(frozen=True, slots=True)
class AsrInitiationMetadata:
    timestamp: int | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class UnknownEvent:
    type: str
    raw: dict[str, Any]


InboundEvent = (
    ConversationMetadata
    | UserTranscript
    | TentativeUserTranscript
    | LegacyUserTranscription
    | AgentResponse
    | AgentChatResponsePart
    | AgentResponseCorrection
    | TentativeAgentResponse
    | AudioChunk
    | InterruptionEvent
    | PingEvent
    | ClientToolCall
    | McpToolCall
    | McpConnectionStatus
    | AgentToolResponse
    | VadScore
    | AsrInitiationMetadata
    | UnknownEvent
)

__all__ = [
    "AgentChatResponsePart",
    "AgentResponse",
    "AgentResponseCorrection",
    "AgentToolResponse",
    "AsrInitiationMetadata",
    "AudioChunk",
    "ClientToolCall",
    "ConversationMetadata",
    "InboundEvent",
    "InterruptionEvent",
    "LegacyUserTranscription",
    "McpConnectionStatus",
    "McpToolCall",
    "PingEvent",
    "TentativeAgentResponse",
    "TentativeUserTranscript",
    "UnknownEvent",
    "UserTranscript",
    "VadScore",
]
