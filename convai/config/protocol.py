"""Wire protocol constants for the conversational data channel."""

from __future__ import annotations

# Envelope keys
KEY_TYPE = "type"
KEY_EVENT_ID = "event_id"
KEY_TOOL_CALL_ID = "tool_call_id"

# Inbound message types
MSG_CONVERSATION_METADATA = "conversation_initiation_metadata"
MSG_USER_TRANSCRIPT = "user_transcript"
MSG_TENTATIVE_USER_TRANSCRIPT = "tentative_user_transcript"
MSG_USER_TRANSCRIPTION = "user_transcription"
MSG_AGENT_RESPONSE = "agent_response"
MSG_AGENT_RESPONSE_PART = "agent_response_part"
MSG_AGENT_CHAT_RESPONSE_PART = "agent_chat_response_part"
MSG_AGENT_RESPONSE_CORRECTION = "agent_response_correction"
MSG_TENTATIVE_AGENT_RESPONSE = "internal_tentative_agent_response"
MSG_AUDIO = "audio"
MSG_INTERRUPTION = "interruption"
MSG_PING = "ping"
MSG_CLIENT_TOOL_CALL = "client_tool_call"
MSG_MCP_TOOL_CALL = "mcp_tool_call"
MSG_MCP_CONNECTION_STATUS = "mcp_connection_status"
MSG_AGENT_TOOL_RESPONSE = "agent_tool_response"
MSG_VAD_SCORE = "vad_score"
MSG_ASR_INITIATION_METADATA = "asr_initiation_metadata"

# Outbound message types
MSG_INITIATION_CLIENT_DATA = "conversation_initiation_client_data"
MSG_PONG = "pong"
MSG_CLIENT_TOOL_RESULT = "client_tool_result"
MSG_USER_MESSAGE = "user_message"
MSG_CONTEXTUAL_UPDATE = "contextual_update"
MSG_USER_ACTIVITY = "user_activity"
MSG_FEEDBACK = "feedback"

FEEDBACK_SCORE_LIKE = "like"
FEEDBACK_SCORE_DISLIKE = "dislike"

# Agent-side tool that terminates the conversation.
END_CALL_TOOL_NAME = "end_call"

# Reasons reported through on_disconnect
DISCONNECT_REASON_USER = "Session ended by user"
DISCONNECT_REASON_CONNECTION_LOST = "Connection lost"
DISCONNECT_REASON_AGENT = "Agent ended the call"

SDK_SOURCE = "python_sdk"
SDK_VERSION = "0.1.0"

__all__ = [
    "DISCONNECT_REASON_AGENT",
    "DISCONNECT_REASON_CONNECTION_LOST",
    "DISCONNECT_REASON_USER",
    "END_CALL_TOOL_NAME",
    "FEEDBACK_SCORE_DISLIKE",
    "FEEDBACK_SCORE_LIKE",
    "KEY_EVENT_ID",
    "KEY_TOOL_CALL_ID",
    "KEY_TYPE",
    "MSG_AGENT_CHAT_RESPONSE_PART",
    "MSG_AGENT_RESPONSE",
    "MSG_AGENT_RESPONSE_CORRECTION",
    "MSG_AGENT_RESPONSE_PART",
    "MSG_AGENT_TOOL_RESPONSE",
    "MSG_ASR_INITIATION_METADATA",
    "MSG_AUDIO",
    "MSG_CLIENT_TOOL_CALL",
    "MSG_CLIENT_TOOL_RESULT",
    "MSG_CONTEXTUAL_UPDATE",
    "MSG_CONVERSATION_METADATA",
    "MSG_FEEDBACK",
    "MSG_INITIATION_CLIENT_DATA",
    "MSG_INTERRUPTION",
    "MSG_MCP_CONNECTION_STATUS",
    "MSG_MCP_TOOL_CALL",
    "MSG_PING",
    "MSG_PONG",
    "MSG_TENTATIVE_AGENT_RESPONSE",
    "MSG_TENTATIVE_USER_TRANSCRIPT",
    "MSG_USER_ACTIVITY",
    "MSG_USER_MESSAGE",
    "MSG_USER_TRANSCRIPT",
    "MSG_USER_TRANSCRIPTION",
    "MSG_VAD_SCORE",
    "SDK_SOURCE",
    "SDK_VERSION",
]
