"""Decoders turning raw inbound envelopes into typed events.

Agent-originated payloads normally live in a nested ``<name>_event`` object.
Older server builds put the same fields at the top level, so every decoder
reads the nested object first and falls back to the envelope itself.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

from convai.errors import ParseError
from convai.config.protocol import (
    MSG_PING,
    MSG_AUDIO,
    KEY_EVENT_ID,
    MSG_VAD_SCORE,
    MSG_MCP_TOOL_CALL,
    MSG_INTERRUPTION,
    MSG_AGENT_RESPONSE,
    MSG_USER_TRANSCRIPT,
    MSG_CLIENT_TOOL_CALL,
    MSG_USER_TRANSCRIPTION,
    MSG_AGENT_TOOL_RESPONSE,
    MSG_AGENT_RESPONSE_PART,
    MSG_CONVERSATION_METADATA,
    MSG_MCP_CONNECTION_STATUS,
    MSG_ASR_INITIATION_METADATA,
    MSG_AGENT_CHAT_RESPONSE_PART,
    MSG_TENTATIVE_AGENT_RESPONSE,
    MSG_AGENT_RESPONSE_CORRECTION,
    MSG_TENTATIVE_USER_TRANSCRIPT,
)

from .inbound import (
    VadScore,
    PingEvent,
    AudioChunk,
    McpToolCall,
    UnknownEvent,
    InboundEvent,
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

DecodeFn = Callable[[str, dict[str, Any]], InboundEvent]


def _section(msg: dict[str, Any], key: str) -> dict[str, Any]:
    nested = msg.get(key)
    if isinstance(nested, dict):
        return nested
    return msg


def _require_str(section: dict[str, Any], key: str, msg_type: str) -> str:
    value = section.get(key)
    if not isinstance(value, str):
        raise ParseError(f"{msg_type}: missing string field '{key}'")
    return value


def _require_int(section: dict[str, Any], key: str, msg_type: str) -> int:
    value = _optional_int(section, key)
    if value is None:
        raise ParseError(f"{msg_type}: missing integer field '{key}'")
    return value


def _optional_int(section: dict[str, Any], key: str) -> int | None:
    value = section.get(key)
    # bool is an int subclass; never accept it as an id.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _optional_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    return value if isinstance(value, str) else None


def _optional_dict(section: dict[str, Any], key: str) -> dict[str, Any]:
    value = section.get(key)
    return value if isinstance(value, dict) else {}


def _decode_metadata(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "conversation_initiation_metadata_event")
    return ConversationMetadata(
        conversation_id=_optional_str(section, "conversation_id"),
        agent_output_audio_format=_optional_str(section, "agent_output_audio_format"),
        user_input_audio_format=_optional_str(section, "user_input_audio_format"),
        metadata=_optional_dict(section, "metadata") or None,
    )


def _decode_user_transcript(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "user_transcription_event")
    return UserTranscript(
        transcript=_require_str(section, "user_transcript", msg_type),
        event_id=_require_int(section, KEY_EVENT_ID, msg_type),
    )


def _decode_tentative_user_transcript(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "tentative_user_transcription_event")
    return TentativeUserTranscript(
        transcript=_require_str(section, "user_transcript", msg_type),
        event_id=_require_int(section, KEY_EVENT_ID, msg_type),
    )


def _decode_legacy_user_transcription(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "user_transcription")
    return LegacyUserTranscription(transcript=_require_str(section, "transcript", msg_type))


def _decode_agent_response(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "agent_response_event")
    return AgentResponse(
        text=_optional_str(section, "agent_response"),
        event_id=_optional_int(section, KEY_EVENT_ID),
    )


def _decode_response_part(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "text_response_part")
    return AgentChatResponsePart(
        text=_require_str(section, "text", msg_type),
        event_id=_require_int(section, KEY_EVENT_ID, msg_type),
        part_type=_optional_str(section, "type") if section is not msg else None,
    )


def _decode_response_correction(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "agent_response_correction_event")
    return AgentResponseCorrection(
        event_id=_optional_int(section, KEY_EVENT_ID),
        original_agent_response=_optional_str(section, "original_agent_response"),
        corrected_agent_response=_optional_str(section, "corrected_agent_response"),
        raw=msg,
    )


def _decode_tentative_agent_response(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "tentative_agent_response_internal_event")
    return TentativeAgentResponse(text=_require_str(section, "tentative_agent_response", msg_type))


def _decode_audio(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "audio_event")
    chunk = _optional_str(section, "audio_base_64")
    if chunk is None:
        # Legacy frames: {"audio": {"chunk": "..."}}
        chunk = _optional_str(_section(msg, "audio"), "chunk")
    if chunk is None:
        raise ParseError(f"{msg_type}: missing string field 'audio_base_64'")
    return AudioChunk(chunk=chunk, event_id=_optional_int(section, KEY_EVENT_ID))


def _decode_interruption(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "interruption_event")
    return InterruptionEvent(event_id=_require_int(section, KEY_EVENT_ID, msg_type))


def _decode_ping(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "ping_event")
    return PingEvent(
        event_id=_require_int(section, KEY_EVENT_ID, msg_type),
        ping_ms=_optional_int(section, "ping_ms"),
    )


def _decode_client_tool_call(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "client_tool_call")
    return ClientToolCall(
        tool_call_id=_require_str(section, "tool_call_id", msg_type),
        tool_name=_require_str(section, "tool_name", msg_type),
        parameters=_optional_dict(section, "parameters"),
        event_id=_optional_int(section, KEY_EVENT_ID),
    )


def _decode_mcp_tool_call(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "mcp_tool_call")
    return McpToolCall(
        tool_call_id=_require_str(section, "tool_call_id", msg_type),
        tool_name=_require_str(section, "tool_name", msg_type),
        parameters=_optional_dict(section, "parameters"),
        service_id=_optional_str(section, "service_id"),
        state=_optional_str(section, "state"),
    )


def _decode_mcp_connection_status(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "mcp_connection_status")
    integrations = section.get("integrations")
    return McpConnectionStatus(
        status=_optional_str(section, "status"),
        integrations=[i for i in integrations if isinstance(i, dict)] if isinstance(integrations, list) else [],
    )


def _decode_agent_tool_response(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "agent_tool_response")
    return AgentToolResponse(
        tool_name=_require_str(section, "tool_name", msg_type),
        tool_call_id=_optional_str(section, "tool_call_id"),
        tool_type=_optional_str(section, "tool_type"),
        is_error=bool(section.get("is_error", False)),
        event_id=_optional_int(section, KEY_EVENT_ID),
        response=section.get("response"),
    )


def _decode_vad_score(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "vad_score_event")
    score = section.get("vad_score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ParseError(f"{msg_type}: missing numeric field 'vad_score'")
    return VadScore(score=float(score))


def _decode_asr_metadata(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    section = _section(msg, "asr_initiation_metadata_event")
    return AsrInitiationMetadata(
        timestamp=_optional_int(section, "timestamp"),
        metadata=section if section is not msg else None,
    )


DECODERS: dict[str, DecodeFn] = {
    MSG_CONVERSATION_METADATA: _decode_metadata,
    MSG_USER_TRANSCRIPT: _decode_user_transcript,
    MSG_TENTATIVE_USER_TRANSCRIPT: _decode_tentative_user_transcript,
    MSG_USER_TRANSCRIPTION: _decode_legacy_user_transcription,
    MSG_AGENT_RESPONSE: _decode_agent_response,
    MSG_AGENT_RESPONSE_PART: _decode_response_part,
    MSG_AGENT_CHAT_RESPONSE_PART: _decode_response_part,
    MSG_AGENT_RESPONSE_CORRECTION: _decode_response_correction,
    MSG_TENTATIVE_AGENT_RESPONSE: _decode_tentative_agent_response,
    MSG_AUDIO: _decode_audio,
    MSG_INTERRUPTION: _decode_interruption,
    MSG_PING: _decode_ping,
    MSG_CLIENT_TOOL_CALL: _decode_client_tool_call,
    MSG_MCP_TOOL_CALL: _decode_mcp_tool_call,
    MSG_MCP_CONNECTION_STATUS: _decode_mcp_connection_status,
    MSG_AGENT_TOOL_RESPONSE: _decode_agent_tool_response,
    MSG_VAD_SCORE: _decode_vad_score,
    MSG_ASR_INITIATION_METADATA: _decode_asr_metadata,
}


def decode_event(msg_type: str, msg: dict[str, Any]) -> InboundEvent:
    """Decode one envelope whose ``type`` is already known to be ``msg_type``.

    Raises ``ParseError`` when a required field is missing. Unrecognised types
    never raise; they come back as ``UnknownEvent``.
    """
    decoder = DECODERS.get(msg_type)
    if decoder is None:
        return UnknownEvent(type=msg_type, raw=msg)
    return decoder(msg_type, msg)


__all__ = ["DECODERS", "decode_event"]
