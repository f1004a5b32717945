"""Inbound event dispatch for the conversational data channel."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable, Awaitable

import orjson

from convai.errors import ParseError, ToolExecutionError
from convai.events.decode import decode_event
from convai.state.session import Role, ConversationMode
from convai.state.callbacks import SessionCallbacks, emit
from convai.config.protocol import KEY_TYPE, END_CALL_TOOL_NAME
from convai.tools.client_tools import ClientTool, ClientToolRegistry, invoke_tool
from convai.events.inbound import (
    VadScore,
    PingEvent,
    AudioChunk,
    McpToolCall,
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

from .codec import decode_payload, encode_envelope
from .sender import OutboundSender
from .builder import build_pong, build_client_tool_result

logger = logging.getLogger(__name__)

HandlerFn = Callable[[Any], Awaitable[None]]


class EventDispatcher:
    """Decode inbound buffers, track the agent event id and route typed events.

    ``handle`` never raises: malformed input is reported through the error or
    debug callbacks and the next message is processed normally. Client tool
    calls run as background tasks so a slow tool never blocks the stream.
    """

    def __init__(
        self,
        *,
        callbacks: SessionCallbacks,
        sender: OutboundSender,
        client_tools: ClientToolRegistry | None = None,
    ) -> None:
        self._callbacks = callbacks
        self._sender = sender
        self._client_tools: dict[str, ClientTool] = dict(client_tools or {})
        self._current_event_id = 0
        self._handlers: dict[type[Any], HandlerFn] = {
            ConversationMetadata: self._handle_metadata,
            UserTranscript: self._handle_user_transcript,
            TentativeUserTranscript: self._handle_tentative_user_transcript,
            LegacyUserTranscription: self._handle_legacy_user_transcription,
            AgentResponse: self._handle_agent_response,
            AgentChatResponsePart: self._handle_response_part,
            AgentResponseCorrection: self._handle_response_correction,
            TentativeAgentResponse: self._handle_tentative_agent_response,
            AudioChunk: self._handle_audio,
            InterruptionEvent: self._handle_interruption,
            PingEvent: self._handle_ping,
            ClientToolCall: self._handle_client_tool_call,
            McpToolCall: self._handle_mcp_tool_call,
            McpConnectionStatus: self._handle_mcp_connection_status,
            AgentToolResponse: self._handle_agent_tool_response,
            VadScore: self._handle_vad_score,
            AsrInitiationMetadata: self._handle_asr_metadata,
            UnknownEvent: self._handle_unknown,
        }

    @property
    def current_event_id(self) -> int:
        return self._current_event_id

    def reset(self) -> None:
        self._current_event_id = 0

    async def drain(self) -> None:
        """Wait for in-flight tool executions (and their replies) to finish."""
        await self._sender.drain()

    async def handle(self, raw: bytes | str) -> None:
        try:
            await self._process(raw)
        except Exception as exc:
            logger.exception("failed to process inbound message")
            self._report_error("Failed to process message", exc)

    async def _process(self, raw: bytes | str) -> None:
        try:
            msg = decode_payload(raw)
        except ParseError as exc:
            self._report_error("Failed to parse message", exc)
            emit(self._callbacks.on_debug, f"Dropped unparseable message: {exc}")
            return

        if not isinstance(msg, dict):
            return
        msg_type = msg.get(KEY_TYPE)
        # Type-less frames are keepalives/no-ops.
        if not isinstance(msg_type, str) or not msg_type:
            return

        emit(self._callbacks.on_debug, msg)

        try:
            event = decode_event(msg_type, msg)
        except ParseError as exc:
            logger.warning("skipping %s event: %s", msg_type, exc)
            emit(self._callbacks.on_debug, f"Skipped {msg_type} event: {exc}")
            return

        await self._handlers[type(event)](event)

    def _report_error(self, message: str, exc: BaseException | None) -> None:
        emit(self._callbacks.on_error, message, exc)

    def _advance_event_id(self, event_id: int) -> None:
        previous = self._current_event_id
        if event_id < previous:
            # Keep the id monotonic; a regression is a protocol anomaly, not a reset.
            logger.warning("ignoring decreasing event_id %s (current %s)", event_id, previous)
            emit(self._callbacks.on_debug, f"Ignoring decreasing event_id {event_id} (current {previous})")
            return
        self._current_event_id = event_id
        if event_id != previous:
            emit(self._callbacks.on_can_send_feedback_change, True)

    async def _handle_metadata(self, event: ConversationMetadata) -> None:
        emit(self._callbacks.on_conversation_metadata, event)

    async def _handle_user_transcript(self, event: UserTranscript) -> None:
        emit(self._callbacks.on_mode_change, ConversationMode.LISTENING)
        emit(self._callbacks.on_user_transcript, event.transcript, event.event_id)
        if event.transcript:
            emit(self._callbacks.on_message, event.transcript, Role.USER)

    async def _handle_tentative_user_transcript(self, event: TentativeUserTranscript) -> None:
        emit(self._callbacks.on_tentative_user_transcript, event.transcript, event.event_id)

    async def _handle_legacy_user_transcription(self, event: LegacyUserTranscription) -> None:
        if event.transcript:
            emit(self._callbacks.on_message, event.transcript, Role.USER)

    async def _handle_agent_response(self, event: AgentResponse) -> None:
        if event.event_id is not None:
            self._advance_event_id(event.event_id)
        if event.text:
            emit(self._callbacks.on_message, event.text, Role.AI)

    async def _handle_response_part(self, event: AgentChatResponsePart) -> None:
        emit(self._callbacks.on_agent_chat_response_part, event)

    async def _handle_response_correction(self, event: AgentResponseCorrection) -> None:
        if event.event_id is not None:
            self._advance_event_id(event.event_id)
        emit(self._callbacks.on_agent_response_correction, event)

    async def _handle_tentative_agent_response(self, event: TentativeAgentResponse) -> None:
        emit(self._callbacks.on_tentative_agent_response, event.text)

    async def _handle_audio(self, event: AudioChunk) -> None:
        emit(self._callbacks.on_mode_change, ConversationMode.SPEAKING)
        emit(self._callbacks.on_audio, event)

    async def _handle_interruption(self, event: InterruptionEvent) -> None:
        emit(self._callbacks.on_mode_change, ConversationMode.LISTENING)
        emit(self._callbacks.on_interruption, event)

    async def _handle_ping(self, event: PingEvent) -> None:
        await self._sender.deliver(build_pong(event.event_id), context="Failed to send pong")

    async def _handle_client_tool_call(self, event: ClientToolCall) -> None:
        tool = self._client_tools.get(event.tool_name)
        if tool is None:
            logger.info("no client tool registered for %s", event.tool_name)
            emit(self._callbacks.on_unhandled_client_tool_call, event)
            return
        self._sender.spawn(self._run_client_tool(tool, event), context="Client tool execution failed")

    async def _run_client_tool(self, tool: ClientTool, call: ClientToolCall) -> None:
        try:
            result = await invoke_tool(tool, call.parameters)
        except Exception as exc:
            raise ToolExecutionError(f"client tool '{call.tool_name}' raised: {exc}", tool_name=call.tool_name) from exc
        if result is None:
            return

        envelope = build_client_tool_result(call.tool_call_id, result)
        try:
            encode_envelope(envelope)
        except orjson.JSONEncodeError as exc:
            raise ToolExecutionError(
                f"client tool '{call.tool_name}' returned a non-serialisable result: {exc}",
                tool_name=call.tool_name,
            ) from exc
        # After end_session the transport is gone; the send fails and is reported, never retried.
        await self._sender.deliver(envelope, context="Failed to send client tool result")

    async def _handle_mcp_tool_call(self, event: McpToolCall) -> None:
        emit(self._callbacks.on_mcp_tool_call, event)

    async def _handle_mcp_connection_status(self, event: McpConnectionStatus) -> None:
        emit(self._callbacks.on_mcp_connection_status, event)

    async def _handle_agent_tool_response(self, event: AgentToolResponse) -> None:
        emit(self._callbacks.on_agent_tool_response, event)
        if event.tool_name == END_CALL_TOOL_NAME:
            emit(self._callbacks.on_end_call_requested)

    async def _handle_vad_score(self, event: VadScore) -> None:
        emit(self._callbacks.on_vad_score, event.score)

    async def _handle_asr_metadata(self, event: AsrInitiationMetadata) -> None:
        emit(self._callbacks.on_asr_initiation_metadata, event)

    async def _handle_unknown(self, event: UnknownEvent) -> None:
        # Already forwarded verbatim through on_debug above.
        logger.debug("unhandled inbound event type %s", event.type)


__all__ = ["EventDispatcher"]
