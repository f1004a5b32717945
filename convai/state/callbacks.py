"""Named event callbacks exposed to the application.

Every field is optional. The bundle is built once per client and never
mutated afterwards; the session controller derives its own internal copy with
``dataclasses.replace`` to hook state bookkeeping in front of user handlers.
"""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

from convai.events.inbound import (
    McpToolCall,
    AudioChunk,
    ClientToolCall,
    AgentToolResponse,
    InterruptionEvent,
    McpConnectionStatus,
    ConversationMetadata,
    AgentChatResponsePart,
    AsrInitiationMetadata,
    AgentResponseCorrection,
)

from .session import Role, ConversationMode, ConversationStatus, DisconnectionDetails

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionCallbacks:
    on_connect: Callable[[str], None] | None = None
    on_disconnect: Callable[[DisconnectionDetails], None] | None = None
    on_status_change: Callable[[ConversationStatus], None] | None = None
    # (message, error) - error is None for policy rejections such as feedback.
    on_error: Callable[[str, BaseException | None], None] | None = None
    on_message: Callable[[str, Role], None] | None = None
    on_mode_change: Callable[[ConversationMode], None] | None = None
    on_audio: Callable[[AudioChunk], None] | None = None
    on_vad_score: Callable[[float], None] | None = None
    on_interruption: Callable[[InterruptionEvent], None] | None = None
    on_agent_chat_response_part: Callable[[AgentChatResponsePart], None] | None = None
    on_tentative_agent_response: Callable[[str], None] | None = None
    on_user_transcript: Callable[[str, int], None] | None = None
    on_tentative_user_transcript: Callable[[str, int], None] | None = None
    on_agent_response_correction: Callable[[AgentResponseCorrection], None] | None = None
    on_conversation_metadata: Callable[[ConversationMetadata], None] | None = None
    on_asr_initiation_metadata: Callable[[AsrInitiationMetadata], None] | None = None
    on_can_send_feedback_change: Callable[[bool], None] | None = None
    on_unhandled_client_tool_call: Callable[[ClientToolCall], None] | None = None
    on_mcp_tool_call: Callable[[McpToolCall], None] | None = None
    on_mcp_connection_status: Callable[[McpConnectionStatus], None] | None = None
    on_agent_tool_response: Callable[[AgentToolResponse], None] | None = None
    on_end_call_requested: Callable[[], None] | None = None
    on_debug: Callable[[Any], None] | None = None


def emit(callback: Callable[..., None] | None, *args: Any) -> None:
    """Invoke an optional application callback.

    Application code runs inside the inbound stream; an exception raised there
    is logged and must not tear down message processing.
    """
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.exception("session callback %s failed", getattr(callback, "__name__", repr(callback)))


__all__ = ["SessionCallbacks", "emit"]
