"""Per-session configuration overrides sent at conversation initiation."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AgentOverrides:
    prompt: str | None = None
    first_message: str | None = None
    language: str | None = None


@dataclass(frozen=True, slots=True)
class TtsOverrides:
    voice_id: str | None = None
    speed: float | None = None
    stability: float | None = None
    similarity_boost: float | None = None


@dataclass(frozen=True, slots=True)
class ConversationBehaviorOverrides:
    text_only: bool | None = None


@dataclass(frozen=True, slots=True)
class ClientOverrides:
    """Replaces the SDK name/version reported in ``source_info``."""

    source: str | None = None
    version: str | None = None


@dataclass(frozen=True, slots=True)
class SessionOverrides:
    agent: AgentOverrides | None = None
    tts: TtsOverrides | None = None
    conversation: ConversationBehaviorOverrides | None = None
    client: ClientOverrides | None = None


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Everything ``start_session`` needs to open a conversation.

    Exactly one of ``agent_id`` (public agents, token fetched on demand) or
    ``conversation_token`` (private agents, token minted by your backend) is
    normally provided; when both are set the token wins.
    """

    agent_id: str | None = None
    conversation_token: str | None = None
    user_id: str | None = None
    overrides: SessionOverrides | None = None
    custom_llm_extra_body: dict[str, Any] | None = None
    dynamic_variables: dict[str, Any] | None = None


__all__ = [
    "AgentOverrides",
    "ClientOverrides",
    "ConversationBehaviorOverrides",
    "SessionConfig",
    "SessionOverrides",
    "TtsOverrides",
]
