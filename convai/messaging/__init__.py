from .sender import OutboundSender
from .dispatcher import EventDispatcher
from .codec import decode_payload, encode_envelope
from .builder import (
    build_pong,
    build_feedback,
    build_user_activity,
    build_user_message,
    build_contextual_update,
    build_client_tool_result,
    build_initiation_client_data,
)

__all__ = [
    "EventDispatcher",
    "OutboundSender",
    "build_client_tool_result",
    "build_contextual_update",
    "build_feedback",
    "build_initiation_client_data",
    "build_pong",
    "build_user_activity",
    "build_user_message",
    "decode_payload",
    "encode_envelope",
]
