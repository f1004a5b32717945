"""Outbound envelope construction (pure functions, no I/O).

Optional inputs that are ``None`` are left out of the envelope entirely; a
serialised ``null`` would override the agent's configured value.
"""

from __future__ import annotations

from typing import Any

from convai.tools.client_tools import ClientToolResult
from convai.state.overrides import SessionConfig, SessionOverrides
from convai.config.protocol import (
    KEY_TYPE,
    MSG_PONG,
    SDK_SOURCE,
    SDK_VERSION,
    KEY_EVENT_ID,
    MSG_FEEDBACK,
    KEY_TOOL_CALL_ID,
    MSG_USER_MESSAGE,
    MSG_USER_ACTIVITY,
    FEEDBACK_SCORE_LIKE,
    MSG_CONTEXTUAL_UPDATE,
    MSG_CLIENT_TOOL_RESULT,
    FEEDBACK_SCORE_DISLIKE,
    MSG_INITIATION_CLIENT_DATA,
)


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def build_user_message(text: str) -> dict[str, Any]:
    return {KEY_TYPE: MSG_USER_MESSAGE, "text": text}


def build_contextual_update(text: str) -> dict[str, Any]:
    return {KEY_TYPE: MSG_CONTEXTUAL_UPDATE, "text": text}


def build_user_activity() -> dict[str, Any]:
    return {KEY_TYPE: MSG_USER_ACTIVITY}


def build_feedback(*, is_positive: bool, event_id: int) -> dict[str, Any]:
    return {
        KEY_TYPE: MSG_FEEDBACK,
        "score": FEEDBACK_SCORE_LIKE if is_positive else FEEDBACK_SCORE_DISLIKE,
        KEY_EVENT_ID: event_id,
    }


def build_pong(event_id: int) -> dict[str, Any]:
    return {KEY_TYPE: MSG_PONG, KEY_EVENT_ID: event_id}


def build_client_tool_result(tool_call_id: str, result: ClientToolResult) -> dict[str, Any]:
    return {
        KEY_TYPE: MSG_CLIENT_TOOL_RESULT,
        KEY_TOOL_CALL_ID: tool_call_id,
        "result": result.to_dict(),
    }


def _build_config_override(overrides: SessionOverrides) -> dict[str, Any]:
    groups: dict[str, Any] = {}

    if overrides.agent is not None:
        agent = overrides.agent
        groups["agent"] = _compact({
            "prompt": {"prompt": agent.prompt} if agent.prompt is not None else None,
            "first_message": agent.first_message,
            "language": agent.language,
        })

    if overrides.tts is not None:
        tts = overrides.tts
        groups["tts"] = _compact({
            "voice_id": tts.voice_id,
            "speed": tts.speed,
            "stability": tts.stability,
            "similarity_boost": tts.similarity_boost,
        })

    if overrides.conversation is not None:
        groups["conversation"] = _compact({"text_only": overrides.conversation.text_only})

    # Drop groups that ended up empty after compaction.
    return {name: group for name, group in groups.items() if group}


def build_initiation_client_data(config: SessionConfig) -> dict[str, Any]:
    """Build the first message of every session (``conversation_initiation_client_data``)."""
    envelope: dict[str, Any] = {KEY_TYPE: MSG_INITIATION_CLIENT_DATA}

    overrides = config.overrides
    if overrides is not None:
        config_override = _build_config_override(overrides)
        if config_override:
            envelope["conversation_config_override"] = config_override

    client = overrides.client if overrides is not None else None
    envelope["source_info"] = {
        "source": (client.source if client is not None and client.source else SDK_SOURCE),
        "version": (client.version if client is not None and client.version else SDK_VERSION),
    }

    if config.custom_llm_extra_body is not None:
        envelope["custom_llm_extra_body"] = config.custom_llm_extra_body
    if config.dynamic_variables is not None:
        envelope["dynamic_variables"] = config.dynamic_variables
    if config.user_id is not None:
        envelope["user_id"] = config.user_id
    return envelope


__all__ = [
    "build_client_tool_result",
    "build_contextual_update",
    "build_feedback",
    "build_initiation_client_data",
    "build_pong",
    "build_user_activity",
    "build_user_message",
]
