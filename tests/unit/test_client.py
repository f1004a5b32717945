from __future__ import annotations

import asyncio
from typing import Any

import pytest

from convai.client import ConversationClient
from convai.state.settings import ClientSettings
from convai.state.overrides import AgentOverrides, SessionOverrides
from convai.state.session import Role, SessionSnapshot, ConversationMode, ConversationStatus
from convai.errors import (
    TransportError,
    TokenFetchError,
    NotConnectedError,
    AlreadyActiveError,
    InvalidArgumentError,
)
from tests.utils import FakeTransport, CallbackRecorder, wait_until

SETTINGS = ClientSettings(
    api_endpoint="https://api.test",
    websocket_url="wss://rtc.test",
    token_timeout_s=5.0,
)


class _FakeTokenService:
    def __init__(self, *, token: str = "fetched-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.requests: list[str] = []

    async def fetch_token(self, agent_id: str) -> str:
        self.requests.append(agent_id)
        if self.error is not None:
            raise self.error
        return self.token


def _make(
    transport: FakeTransport | None = None,
    token_service: _FakeTokenService | None = None,
    client_tools: dict[str, Any] | None = None,
    **overrides: Any,
) -> tuple[ConversationClient, FakeTransport, CallbackRecorder, _FakeTokenService]:
    transport = transport or FakeTransport()
    token_service = token_service or _FakeTokenService()
    recorder = CallbackRecorder()
    client = ConversationClient(
        callbacks=recorder.callbacks(**overrides),
        client_tools=client_tools,
        transport=transport,
        token_service=token_service,  # type: ignore[arg-type]
        settings=SETTINGS,
    )
    return client, transport, recorder, token_service


def _statuses(recorder: CallbackRecorder) -> list[ConversationStatus]:
    return [args[0] for args in recorder.of("on_status_change")]


@pytest.mark.asyncio
async def test_start_with_token_connects_and_sends_initiation_first() -> None:
    client, transport, recorder, tokens = _make()
    seen: list[tuple[ConversationStatus, int]] = []
    client.add_listener(lambda snap: seen.append((snap.status, len(transport.sent))))

    await client.start_session(
        conversation_token="private-token",
        overrides=SessionOverrides(agent=AgentOverrides(first_message="Hi")),
    )

    assert client.status is ConversationStatus.CONNECTED
    assert _statuses(recorder) == [ConversationStatus.CONNECTING, ConversationStatus.CONNECTED]
    assert tokens.requests == []
    assert transport.connect_calls == [("wss://rtc.test", "private-token")]
    assert transport.sent_types() == ["conversation_initiation_client_data"]
    assert transport.sent[0]["conversation_config_override"] == {"agent": {"first_message": "Hi"}}
    # The initiation message is out before anyone observes `connected`.
    first_connected = next(count for status, count in seen if status is ConversationStatus.CONNECTED)
    assert first_connected == 1

    await client.end_session()


@pytest.mark.asyncio
async def test_start_with_agent_id_fetches_token() -> None:
    client, transport, _, tokens = _make()

    await client.start_session(agent_id="agent_123")

    assert tokens.requests == ["agent_123"]
    assert transport.connect_calls == [("wss://rtc.test", "fetched-token")]
    await client.end_session()


@pytest.mark.asyncio
async def test_start_without_credentials_is_rejected_without_side_effects() -> None:
    client, transport, recorder, _ = _make()

    with pytest.raises(InvalidArgumentError):
        await client.start_session()

    assert client.status is ConversationStatus.DISCONNECTED
    assert recorder.calls == []
    assert transport.connect_calls == []


@pytest.mark.asyncio
async def test_second_start_while_connected_is_rejected() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")

    with pytest.raises(AlreadyActiveError):
        await client.start_session(conversation_token="tok")

    assert client.status is ConversationStatus.CONNECTED
    assert len(transport.connect_calls) == 1
    assert recorder.of("on_error") == []
    await client.end_session()


@pytest.mark.asyncio
async def test_second_start_while_connecting_is_rejected() -> None:
    transport = FakeTransport()
    transport.connect_gate = asyncio.Event()
    client, _, _, _ = _make(transport)

    first = asyncio.create_task(client.start_session(conversation_token="tok"))
    await wait_until(lambda: len(transport.connect_calls) == 1)
    assert client.status is ConversationStatus.CONNECTING

    with pytest.raises(AlreadyActiveError):
        await client.start_session(conversation_token="tok")

    transport.connect_gate.set()
    await first
    assert client.status is ConversationStatus.CONNECTED
    await client.end_session()


@pytest.mark.asyncio
async def test_token_failure_is_reported_and_raised() -> None:
    failure = TokenFetchError("Failed to fetch token: 401 - denied", status_code=401, body="denied")
    client, transport, recorder, _ = _make(token_service=_FakeTokenService(error=failure))

    with pytest.raises(TokenFetchError):
        await client.start_session(agent_id="agent")

    assert client.status is ConversationStatus.DISCONNECTED
    assert _statuses(recorder) == [ConversationStatus.CONNECTING, ConversationStatus.DISCONNECTED]
    assert recorder.of("on_error") == [("Failed to start session", failure)]
    assert transport.connect_calls == []


@pytest.mark.asyncio
async def test_transport_failure_is_reported_and_raised() -> None:
    transport = FakeTransport(fail_connect=TransportError("room unreachable"))
    client, _, recorder, _ = _make(transport)

    with pytest.raises(TransportError):
        await client.start_session(conversation_token="tok")

    assert client.status is ConversationStatus.DISCONNECTED
    [(message, exc)] = recorder.of("on_error")
    assert message == "Failed to start session"
    assert isinstance(exc, TransportError)


@pytest.mark.asyncio
async def test_initiation_send_failure_tears_down_transport() -> None:
    transport = FakeTransport(fail_send=TransportError("data channel closed"))
    client, _, recorder, _ = _make(transport)

    with pytest.raises(TransportError):
        await client.start_session(conversation_token="tok")

    assert client.status is ConversationStatus.DISCONNECTED
    assert transport.connected is False
    assert transport.disconnect_calls >= 1
    assert recorder.of("on_disconnect") == []


@pytest.mark.asyncio
async def test_end_session_during_connect_aborts_start() -> None:
    transport = FakeTransport()
    transport.connect_gate = asyncio.Event()
    client, _, _, _ = _make(transport)

    start = asyncio.create_task(client.start_session(conversation_token="tok"))
    await wait_until(lambda: len(transport.connect_calls) == 1)
    await client.end_session()
    transport.connect_gate.set()

    with pytest.raises(NotConnectedError):
        await start

    assert client.status is ConversationStatus.DISCONNECTED
    assert transport.connected is False
    assert transport.sent == []


@pytest.mark.asyncio
async def test_end_session_is_idempotent() -> None:
    client, transport, recorder, _ = _make()
    await client.end_session()
    assert recorder.calls == []

    await client.start_session(conversation_token="tok")
    await client.end_session()
    await client.end_session()

    assert _statuses(recorder) == [
        ConversationStatus.CONNECTING,
        ConversationStatus.CONNECTED,
        ConversationStatus.DISCONNECTING,
        ConversationStatus.DISCONNECTED,
    ]
    [(details,)] = recorder.of("on_disconnect")
    assert details.reason == "Session ended by user"
    assert transport.connected is False


@pytest.mark.asyncio
async def test_end_session_survives_transport_failure() -> None:
    transport = FakeTransport()
    client, _, recorder, _ = _make(transport)
    await client.start_session(conversation_token="tok")
    transport.fail_disconnect = TransportError("already gone")

    await client.end_session()

    assert client.status is ConversationStatus.DISCONNECTED
    [(message, exc)] = recorder.of("on_error")
    assert message == "Error ending session"
    assert isinstance(exc, TransportError)
    assert len(recorder.of("on_disconnect")) == 1


@pytest.mark.asyncio
async def test_sends_require_connected_session() -> None:
    client, _, _, _ = _make()

    with pytest.raises(NotConnectedError):
        client.send_user_message("hi")
    with pytest.raises(NotConnectedError):
        client.send_contextual_update("ctx")
    with pytest.raises(NotConnectedError):
        client.send_user_activity()
    with pytest.raises(NotConnectedError):
        client.send_feedback(True)


@pytest.mark.asyncio
async def test_outbound_messages_are_sent_after_initiation() -> None:
    client, transport, _, _ = _make()
    await client.start_session(conversation_token="tok")

    client.send_user_message("What's the weather?")
    client.send_contextual_update("user is on the pricing page")
    client.send_user_activity()
    await client.wait_for_pending()

    assert transport.sent_types() == [
        "conversation_initiation_client_data",
        "user_message",
        "contextual_update",
        "user_activity",
    ]
    await client.end_session()


@pytest.mark.asyncio
async def test_send_failure_is_reported_not_raised() -> None:
    transport = FakeTransport()
    client, _, recorder, _ = _make(transport)
    await client.start_session(conversation_token="tok")
    transport.fail_send = TransportError("channel closed")

    client.send_user_message("hello?")
    await client.wait_for_pending()

    [(message, exc)] = recorder.of("on_error")
    assert message == "Failed to send message"
    assert isinstance(exc, TransportError)
    await client.end_session()


@pytest.mark.asyncio
async def test_feedback_is_allowed_once_per_agent_turn() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")
    assert client.can_send_feedback is False

    transport.push({"type": "agent_response", "agent_response_event": {"agent_response": "Hi", "event_id": 5}})
    await transport.flush()
    assert client.can_send_feedback is True

    client.send_feedback(True)
    assert client.can_send_feedback is False
    client.send_feedback(False)
    await client.wait_for_pending()

    feedback = [msg for msg in transport.sent if msg["type"] == "feedback"]
    assert feedback == [{"type": "feedback", "score": "like", "event_id": 5}]
    assert recorder.of("on_can_send_feedback_change") == [(True,), (False,)]
    assert recorder.of("on_error") == [("Cannot send feedback at this time", None)]
    assert recorder.of("on_message") == [("Hi", Role.AI)]

    transport.push({"type": "agent_response", "agent_response_event": {"agent_response": "More", "event_id": 6}})
    await transport.flush()
    assert client.can_send_feedback is True
    await client.end_session()


@pytest.mark.asyncio
async def test_metadata_sets_conversation_id() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")

    transport.push(
        {
            "type": "conversation_initiation_metadata",
            "conversation_initiation_metadata_event": {"conversation_id": "conv_9"},
        }
    )
    await transport.flush()

    assert client.conversation_id == "conv_9"
    assert client.get_id() == "conv_9"
    assert recorder.of("on_connect") == [("conv_9",)]

    await client.end_session()
    assert client.conversation_id is None


@pytest.mark.asyncio
async def test_mode_changes_are_deduplicated() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")

    transport.push({"type": "audio", "audio_event": {"audio_base_64": "AA", "event_id": 1}})
    transport.push({"type": "audio", "audio_event": {"audio_base_64": "BB", "event_id": 1}})
    await transport.flush()
    assert client.mode is ConversationMode.SPEAKING
    assert client.is_speaking is True

    transport.push({"type": "interruption", "interruption_event": {"event_id": 1}})
    await transport.flush()

    assert recorder.of("on_mode_change") == [(ConversationMode.SPEAKING,), (ConversationMode.LISTENING,)]
    assert len(recorder.of("on_audio")) == 2
    await client.end_session()


@pytest.mark.asyncio
async def test_connection_loss_disconnects_without_disconnecting_state() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")

    transport.drop_connection()
    await wait_until(lambda: client.status is ConversationStatus.DISCONNECTED)

    assert _statuses(recorder)[-1] is ConversationStatus.DISCONNECTED
    assert ConversationStatus.DISCONNECTING not in _statuses(recorder)
    [(details,)] = recorder.of("on_disconnect")
    assert details.reason == "Connection lost"

    # A later explicit end is a no-op.
    await client.end_session()
    assert len(recorder.of("on_disconnect")) == 1


@pytest.mark.asyncio
async def test_agent_end_call_ends_session() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")

    transport.push({"type": "agent_tool_response", "agent_tool_response": {"tool_name": "end_call", "tool_type": "system"}})
    await transport.flush()
    await client.wait_for_pending()

    assert client.status is ConversationStatus.DISCONNECTED
    assert recorder.of("on_end_call_requested") == [()]
    [(details,)] = recorder.of("on_disconnect")
    assert details.reason == "Agent ended the call"


@pytest.mark.asyncio
async def test_state_is_reset_between_sessions() -> None:
    client, transport, _, _ = _make()
    await client.start_session(conversation_token="tok")
    transport.push({"type": "agent_response", "agent_response_event": {"agent_response": "Hi", "event_id": 8}})
    transport.push({"type": "audio", "audio_event": {"audio_base_64": "AA"}})
    await transport.flush()
    assert client.current_event_id == 8

    await client.end_session()

    assert client.current_event_id == 0
    assert client.mode is ConversationMode.LISTENING
    assert client.can_send_feedback is False

    await client.start_session(conversation_token="tok-2")
    assert client.status is ConversationStatus.CONNECTED
    assert transport.connect_calls[-1] == ("wss://rtc.test", "tok-2")
    await client.end_session()


@pytest.mark.asyncio
async def test_listeners_receive_snapshots_until_removed() -> None:
    client, _, _, _ = _make()
    snapshots: list[SessionSnapshot] = []
    client.add_listener(snapshots.append)

    await client.start_session(conversation_token="tok")
    assert snapshots[-1].status is ConversationStatus.CONNECTED
    assert snapshots[-1].current_event_id == 0

    client.remove_listener(snapshots.append)
    count = len(snapshots)
    await client.end_session()
    assert len(snapshots) == count


@pytest.mark.asyncio
async def test_mute_is_delegated_to_transport() -> None:
    client, transport, recorder, _ = _make()

    await client.set_mic_muted(True)
    assert client.is_muted is True
    await client.toggle_mute()
    assert client.is_muted is False

    transport.fail_mute = RuntimeError("no microphone")
    await client.set_mic_muted(True)
    assert client.is_muted is False
    [(message, _)] = recorder.of("on_error")
    assert message == "Failed to set mic mute state"


@pytest.mark.asyncio
async def test_failing_status_callback_does_not_break_start() -> None:
    def explode(status: ConversationStatus) -> None:
        raise RuntimeError("ui crashed")

    client, _, _, _ = _make(on_status_change=explode)

    await client.start_session(conversation_token="tok")

    assert client.status is ConversationStatus.CONNECTED
    await client.end_session()


@pytest.mark.asyncio
async def test_context_manager_ends_session() -> None:
    client, transport, recorder, _ = _make()

    async with client:
        await client.start_session(conversation_token="tok")
        assert client.status is ConversationStatus.CONNECTED

    assert client.status is ConversationStatus.DISCONNECTED
    assert transport.connected is False
    assert len(recorder.of("on_disconnect")) == 1


@pytest.mark.asyncio
async def test_failed_feedback_send_keeps_turn_marked() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")
    transport.push({"type": "agent_response", "agent_response_event": {"agent_response": "Hi", "event_id": 4}})
    await transport.flush()
    transport.fail_send = TransportError("channel closed")

    client.send_feedback(True)
    await client.wait_for_pending()

    [(message, exc)] = recorder.of("on_error")
    assert message == "Failed to send feedback"
    assert isinstance(exc, TransportError)
    assert client.can_send_feedback is False
    transport.fail_send = None
    await client.end_session()


@pytest.mark.asyncio
async def test_tool_reply_after_end_is_reported_not_sent() -> None:
    gate = asyncio.Event()

    async def fetch_order(params: dict[str, Any]) -> dict[str, Any]:
        await gate.wait()
        return {"order": params["id"]}

    client, transport, recorder, _ = _make(client_tools={"fetch_order": fetch_order})
    await client.start_session(conversation_token="tok")
    transport.push(
        {
            "type": "client_tool_call",
            "client_tool_call": {"tool_name": "fetch_order", "tool_call_id": "c1", "parameters": {"id": 3}},
        }
    )
    await transport.flush()

    await client.end_session()
    gate.set()
    await client.wait_for_pending()

    assert "client_tool_result" not in transport.sent_types()
    [(message, exc)] = recorder.of("on_error")
    assert message == "Failed to send client tool result"
    assert isinstance(exc, NotConnectedError)


@pytest.mark.asyncio
async def test_connection_loss_resets_mode_and_feedback_callbacks() -> None:
    client, transport, recorder, _ = _make()
    await client.start_session(conversation_token="tok")
    transport.push({"type": "agent_response", "agent_response_event": {"agent_response": "Hi", "event_id": 2}})
    transport.push({"type": "audio", "audio_event": {"audio_base_64": "AA"}})
    await transport.flush()

    transport.drop_connection()
    await wait_until(lambda: client.status is ConversationStatus.DISCONNECTED)

    assert recorder.of("on_mode_change") == [(ConversationMode.SPEAKING,), (ConversationMode.LISTENING,)]
    assert recorder.of("on_can_send_feedback_change") == [(True,), (False,)]
    assert client.mode is ConversationMode.LISTENING
