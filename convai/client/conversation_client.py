"""Session controller for conversations with a remote agent."""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import replace
from collections.abc import Awaitable

from convai.state.settings import ClientSettings
from convai.runtime.settings_loader import load_settings
from convai.connection.token_service import TokenService
from convai.events.inbound import ConversationMetadata
from convai.tools.client_tools import ClientToolRegistry
from convai.state.callbacks import SessionCallbacks, emit
from convai.messaging.sender import OutboundSender
from convai.messaging.dispatcher import EventDispatcher
from convai.state.overrides import SessionConfig, SessionOverrides
from convai.connection.transport import Transport
from convai.connection.websocket_transport import WebSocketTransport
from convai.errors import AlreadyActiveError, NotConnectedError, InvalidArgumentError
from convai.config.protocol import (
    DISCONNECT_REASON_USER,
    DISCONNECT_REASON_AGENT,
    DISCONNECT_REASON_CONNECTION_LOST,
)
from convai.state.session import (
    SessionSnapshot,
    ConversationMode,
    ConversationStatus,
    DisconnectionDetails,
)
from convai.messaging.builder import (
    build_feedback,
    build_user_message,
    build_user_activity,
    build_contextual_update,
    build_initiation_client_data,
)

from .subscriptions import TransportSubscriptions
from .listeners import Listener, SnapshotListeners

logger = logging.getLogger(__name__)


class ConversationClient:
    """Own one conversation at a time: lifecycle, session state and outbound commands.

    State transitions::

        disconnected -> connecting -> connected -> disconnecting -> disconnected
                           |                |
                           +-> disconnected +-> disconnected (connection lost)

    All mutation happens from the owning event loop: public API calls and the
    inbound subscription, which delivers one message at a time. Outbound sends
    other than the initiation message are fire-and-forget; their failures
    arrive through ``callbacks.on_error``.
    """

    def __init__(
        self,
        *,
        api_endpoint: str | None = None,
        websocket_url: str | None = None,
        callbacks: SessionCallbacks | None = None,
        client_tools: ClientToolRegistry | None = None,
        transport: Transport | None = None,
        token_service: TokenService | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        self._settings = settings or load_settings(api_endpoint=api_endpoint, websocket_url=websocket_url)
        self._callbacks = callbacks or SessionCallbacks()
        self._transport: Transport = transport or WebSocketTransport()
        self._token_service = token_service or TokenService(
            self._settings.api_endpoint,
            timeout_s=self._settings.token_timeout_s,
        )
        self._sender = OutboundSender(self._transport, on_error=self._report_error)
        self._dispatcher = EventDispatcher(
            callbacks=self._internal_callbacks(),
            sender=self._sender,
            client_tools=client_tools,
        )

        self._status = ConversationStatus.DISCONNECTED
        self._mode = ConversationMode.LISTENING
        self._conversation_id: str | None = None
        self._last_feedback_event_id = 0
        self._disconnect_notified = False
        self._listeners = SnapshotListeners(self.snapshot)
        self._subscriptions = TransportSubscriptions(
            self._transport,
            on_data=self._dispatcher.handle,
            on_disconnected=self._on_transport_disconnected,
            on_error=self._report_error,
        )

    # -- observers -----------------------------------------------------------

    @property
    def status(self) -> ConversationStatus:
        return self._status

    @property
    def mode(self) -> ConversationMode:
        return self._mode

    @property
    def is_speaking(self) -> bool:
        return self._mode is ConversationMode.SPEAKING

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def is_muted(self) -> bool:
        return self._transport.is_muted

    @property
    def current_event_id(self) -> int:
        return self._dispatcher.current_event_id

    @property
    def can_send_feedback(self) -> bool:
        return (
            self._dispatcher.current_event_id != self._last_feedback_event_id
            and self._status is ConversationStatus.CONNECTED
        )

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def get_id(self) -> str | None:
        return self._conversation_id

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            mode=self._mode,
            conversation_id=self._conversation_id,
            is_muted=self.is_muted,
            can_send_feedback=self.can_send_feedback,
            current_event_id=self._dispatcher.current_event_id,
        )

    def add_listener(self, listener: Listener) -> None:
        self._listeners.add(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    # -- lifecycle -----------------------------------------------------------

    async def start_session(
        self,
        *,
        agent_id: str | None = None,
        conversation_token: str | None = None,
        user_id: str | None = None,
        overrides: SessionOverrides | None = None,
        custom_llm_extra_body: dict[str, Any] | None = None,
        dynamic_variables: dict[str, Any] | None = None,
    ) -> None:
        """Connect and initiate a conversation.

        Use ``agent_id`` for public agents (a token is fetched) or
        ``conversation_token`` for private agents (token issued by your
        backend). Failures after validation are reported through ``on_error``
        and re-raised.
        """
        if self._status is not ConversationStatus.DISCONNECTED:
            raise AlreadyActiveError("Session already active")
        if not agent_id and not conversation_token:
            raise InvalidArgumentError("Either agent_id or conversation_token must be provided")

        config = SessionConfig(
            agent_id=agent_id,
            conversation_token=conversation_token,
            user_id=user_id,
            overrides=overrides,
            custom_llm_extra_body=custom_llm_extra_body,
            dynamic_variables=dynamic_variables,
        )

        self._disconnect_notified = False
        self._set_status(ConversationStatus.CONNECTING)
        try:
            if config.conversation_token:
                token = config.conversation_token
            else:
                token = await self._token_service.fetch_token(config.agent_id or "")
            self._ensure_still_connecting()

            await self._transport.connect(self._settings.websocket_url, token)
            self._ensure_still_connecting()

            self._subscriptions.start()
            # The agent expects overrides before any other client traffic.
            await self._sender.send(build_initiation_client_data(config))
            self._ensure_still_connecting()

            self._set_status(ConversationStatus.CONNECTED)
        except BaseException as exc:
            await self._teardown_transport()
            self._reset_session()
            self._set_status(ConversationStatus.DISCONNECTED)
            if isinstance(exc, Exception):
                self._report_error("Failed to start session", exc)
            raise

    async def end_session(self) -> None:
        """End the session; safe to call repeatedly and never raises."""
        await self._end(DISCONNECT_REASON_USER)

    async def close(self) -> None:
        await self.end_session()

    async def wait_for_pending(self) -> None:
        """Wait for fire-and-forget sends and running client tools."""
        await self._sender.drain()

    async def __aenter__(self) -> ConversationClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # -- outbound commands ---------------------------------------------------

    def send_user_message(self, text: str) -> None:
        self._ensure_connected()
        self._sender.dispatch(build_user_message(text), context="Failed to send message")

    def send_contextual_update(self, text: str) -> None:
        self._ensure_connected()
        self._sender.dispatch(build_contextual_update(text), context="Failed to send contextual update")

    def send_user_activity(self) -> None:
        self._ensure_connected()
        self._sender.dispatch(build_user_activity(), context="Failed to send user activity")

    def send_feedback(self, is_positive: bool) -> None:
        """Rate the latest agent turn; at most once per agent event id."""
        self._ensure_connected()
        if not self.can_send_feedback:
            self._report_error("Cannot send feedback at this time", None)
            return

        event_id = self._dispatcher.current_event_id
        # Marked before the send completes; a failed send does not re-enable feedback.
        self._last_feedback_event_id = event_id
        self._listeners.notify()
        emit(self._callbacks.on_can_send_feedback_change, False)
        self._sender.dispatch(
            build_feedback(is_positive=is_positive, event_id=event_id),
            context="Failed to send feedback",
        )

    async def set_mic_muted(self, muted: bool) -> None:
        await self._apply_mute(self._transport.set_muted(muted), "Failed to set mic mute state")

    async def toggle_mute(self) -> None:
        await self._apply_mute(self._transport.toggle_muted(), "Failed to toggle mute")

    # -- internals -----------------------------------------------------------

    def _internal_callbacks(self) -> SessionCallbacks:
        return replace(
            self._callbacks,
            on_error=self._report_error,
            on_mode_change=self._on_mode_change,
            on_conversation_metadata=self._on_conversation_metadata,
            on_can_send_feedback_change=self._on_feedback_available,
            on_end_call_requested=self._on_end_call_requested,
        )

    def _set_status(self, status: ConversationStatus) -> None:
        if status is self._status:
            return
        self._status = status
        logger.info("session status: %s", status.value)
        self._listeners.notify()
        emit(self._callbacks.on_status_change, status)

    async def _apply_mute(self, operation: Awaitable[None], context: str) -> None:
        try:
            await operation
        except Exception as exc:
            self._report_error(context, exc)
            return
        self._listeners.notify()

    def _report_error(self, message: str, exc: BaseException | None) -> None:
        if exc is None:
            logger.warning("%s", message)
        else:
            logger.warning("%s: %s", message, exc)
        emit(self._callbacks.on_error, message, exc)

    def _ensure_connected(self) -> None:
        if self._status is not ConversationStatus.CONNECTED:
            raise NotConnectedError("Not connected to agent")

    def _ensure_still_connecting(self) -> None:
        if self._status is not ConversationStatus.CONNECTING:
            raise NotConnectedError("Session ended while connecting")

    def _on_mode_change(self, mode: ConversationMode) -> None:
        if mode is self._mode:
            return
        self._mode = mode
        self._listeners.notify()
        emit(self._callbacks.on_mode_change, mode)

    def _on_conversation_metadata(self, metadata: ConversationMetadata) -> None:
        if metadata.conversation_id is not None:
            self._conversation_id = metadata.conversation_id
            self._listeners.notify()
            emit(self._callbacks.on_connect, metadata.conversation_id)
        emit(self._callbacks.on_conversation_metadata, metadata)

    def _on_feedback_available(self, can_send: bool) -> None:
        self._listeners.notify()
        emit(self._callbacks.on_can_send_feedback_change, can_send)

    def _on_end_call_requested(self) -> None:
        emit(self._callbacks.on_end_call_requested)
        if self._status is ConversationStatus.CONNECTED:
            self._sender.spawn(self._end(DISCONNECT_REASON_AGENT), context="Error ending session")

    async def _on_transport_disconnected(self) -> None:
        if self._status is ConversationStatus.CONNECTED:
            await self._handle_connection_lost()

    async def _handle_connection_lost(self) -> None:
        logger.warning("transport reported disconnect while connected")
        await self._teardown_transport()
        self._reset_session()
        self._notify_disconnect(DISCONNECT_REASON_CONNECTION_LOST)
        self._set_status(ConversationStatus.DISCONNECTED)

    async def _end(self, reason: str) -> None:
        if self._status in (ConversationStatus.DISCONNECTED, ConversationStatus.DISCONNECTING):
            return
        self._set_status(ConversationStatus.DISCONNECTING)
        try:
            await self._subscriptions.cancel()
            await self._transport.disconnect()
        except Exception as exc:
            self._report_error("Error ending session", exc)
        finally:
            self._reset_session()
            self._notify_disconnect(reason)
            self._set_status(ConversationStatus.DISCONNECTED)

    async def _teardown_transport(self) -> None:
        await self._subscriptions.cancel()
        try:
            await self._transport.disconnect()
        except Exception as exc:
            self._report_error("Failed to disconnect transport", exc)

    def _reset_session(self) -> None:
        feedback_pending = self._dispatcher.current_event_id != self._last_feedback_event_id
        self._conversation_id = None
        self._last_feedback_event_id = 0
        self._dispatcher.reset()
        self._listeners.notify()
        self._on_mode_change(ConversationMode.LISTENING)
        if feedback_pending:
            emit(self._callbacks.on_can_send_feedback_change, False)

    def _notify_disconnect(self, reason: str) -> None:
        # The transport's own disconnect notice can race an explicit end; report once.
        if self._disconnect_notified:
            return
        self._disconnect_notified = True
        logger.info("session disconnected: %s", reason)
        emit(self._callbacks.on_disconnect, DisconnectionDetails(reason=reason))


__all__ = ["ConversationClient"]
