from .decode import DECODERS, decode_event
from .inbound import (
    VadScore,
    PingEvent,
    AudioChunk,
    McpToolCall,
    InboundEvent,
    UnknownEvent,
    AgentResponse,
    ClientToolCall,
    UserTranscript,
    AgentToolResponse,
    InterruptionEvent,
    McpConnectionStatus,
    ConversationMetadata,
    AgentChatResponsePart,
    AsrInitiationMetadata,
    TentativeAgentResponse,
    AgentResponseCorrection,
    LegacyUserTranscription,
    TentativeUserTranscript,
)

__all__ = [
    "DECODERS",
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
    "decode_event",
]
