"""Unit tests for the player connection session."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidHandshake, InvalidURI

from tests.helpers import FakeWebSocket, wait_for_event
from ytm_remote.exceptions import SessionClosedException
from ytm_remote.models import PlayerEventType, PlayerSnapshot
from ytm_remote.services.connection_session import ConnectionSession, SessionState

CONNECT = "ytm_remote.services.connection_session.websockets.connect"


async def _next_of(queue: asyncio.Queue, event_type: PlayerEventType):
    while True:
        event = await wait_for_event(queue)
        if event.type == event_type:
            return event


async def _drain_state(queue: asyncio.Queue, count: int):
    """Wait until ``count`` STATE_CHANGED events were received."""
    events = []
    while sum(1 for e in events if e.type == PlayerEventType.STATE_CHANGED) < count:
        events.append(await wait_for_event(queue))
    return events


@pytest.mark.asyncio
async def test_connect_success(mock_settings, fake_websocket):
    """Test connect opens the socket and reports CONNECTED."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)) as mock_connect:
        assert await session.connect() is True

        assert session.state == SessionState.CONNECTED
        assert session.is_connected is True
        assert mock_connect.call_args[0][0] == "ws://localhost:26539"
        assert session.current() == PlayerSnapshot()

        await session.close()


@pytest.mark.asyncio
async def test_current_is_none_when_disconnected(mock_settings):
    session = ConnectionSession(settings=mock_settings)

    assert session.current() is None


@pytest.mark.asyncio
async def test_end_to_end_frames(mock_settings, fake_websocket):
    """Test frames are merged in order and track changes are published."""
    session = ConnectionSession(settings=mock_settings)
    queue = session.subscribe()

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        fake_websocket.feed({"type": "PLAYER_STATE", "song": {"title": "A", "videoId": "id1"}})
        fake_websocket.feed({"type": "PLAYER_STATE", "isPlaying": True})
        fake_websocket.feed({"type": "PLAYER_STATE", "song": {"videoId": "id2", "title": "B"}})

        events = await _drain_state(queue, 3)

        track_changes = [e.track.track_id for e in events if e.type == PlayerEventType.TRACK_CHANGED]
        assert track_changes == ["id1", "id2"]

        snapshot = session.current()
        assert snapshot.is_playing is True
        assert snapshot.track.title == "B"

        await session.close()


@pytest.mark.asyncio
async def test_non_player_state_frames_ignored(mock_settings, fake_websocket):
    """Test other message types and non-object payloads are skipped."""
    session = ConnectionSession(settings=mock_settings)
    queue = session.subscribe()

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        fake_websocket.feed({"type": "SOMETHING_ELSE", "volume": 1})
        fake_websocket.feed([1, 2, 3])
        fake_websocket.feed({"type": "PLAYER_STATE", "volume": 42})

        event = await wait_for_event(queue)
        assert event.snapshot.volume_percent == 42
        assert queue.empty()

        await session.close()


@pytest.mark.asyncio
async def test_malformed_frames_do_not_stop_the_loop(mock_settings, fake_websocket):
    """Test decode errors are logged and the next frame is still processed."""
    session = ConnectionSession(settings=mock_settings)
    queue = session.subscribe()

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        fake_websocket.feed("{not json")
        fake_websocket.feed({"type": "PLAYER_STATE", "volume": "loud"})
        fake_websocket.feed(b"\xff\xfe")
        fake_websocket.feed(json.dumps({"type": "PLAYER_STATE", "muted": True}).encode())

        event = await wait_for_event(queue)
        assert event.snapshot.is_muted is True
        assert session.is_connected is True

        await session.close()


@pytest.mark.asyncio
async def test_deeply_nested_frame_does_not_stop_the_loop(mock_settings, fake_websocket):
    """Test a frame nested past the recursion limit is skipped like any bad frame."""
    session = ConnectionSession(settings=mock_settings)
    queue = session.subscribe()

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        fake_websocket.feed("[" * 200000 + "]" * 200000)
        fake_websocket.feed({"type": "PLAYER_STATE", "isPlaying": True})

        event = await wait_for_event(queue)
        assert event.snapshot.is_playing is True
        assert session.is_connected is True
        assert session.current().is_playing is True

        await session.close()


@pytest.mark.asyncio
async def test_send_command_frame(mock_settings, fake_websocket):
    """Test commands are written as ACTION frames."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        assert await session.send_command("setVolume", 40) is True
        assert await session.send_command("play") is True

        assert fake_websocket.sent_frames == [
            {"type": "ACTION", "action": "setVolume", "data": 40},
            {"type": "ACTION", "action": "play"},
        ]
        # data is omitted, not sent as null
        assert "data" not in json.loads(fake_websocket.sent[1])

        await session.close()


@pytest.mark.asyncio
async def test_send_command_when_disconnected(mock_settings):
    """Test commands are dropped while not connected."""
    session = ConnectionSession(settings=mock_settings)

    assert await session.send_command("play") is False


@pytest.mark.asyncio
async def test_concurrent_sends_are_whole_frames(mock_settings, fake_websocket):
    """Test concurrent senders each write exactly one complete frame."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        results = await asyncio.gather(*(session.send_command("setVolume", i) for i in range(10)))

        assert all(results)
        assert sorted(frame["data"] for frame in fake_websocket.sent_frames) == list(range(10))

        await session.close()


@pytest.mark.asyncio
async def test_send_failure_returns_false(mock_settings, fake_websocket):
    """Test a write on a broken socket reports not sent."""
    fake_websocket.send = AsyncMock(side_effect=ConnectionClosedError(None, None))
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        assert await session.send_command("play") is False

        await session.close()


@pytest.mark.asyncio
async def test_abrupt_disconnect(mock_settings, fake_websocket):
    """Test a transport failure leaves the session DISCONNECTED without reconnecting."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)) as mock_connect:
        await session.connect()
        receive_task = session._receive_task

        fake_websocket.fail(ConnectionClosedError(None, None))
        await asyncio.wait_for(receive_task, 1)

        assert session.state == SessionState.DISCONNECTED
        assert session.current() is None
        assert await session.send_command("play") is False
        assert mock_connect.call_count == 1


@pytest.mark.asyncio
async def test_peer_close(mock_settings, fake_websocket):
    """Test an orderly close from the player ends the session."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()
        receive_task = session._receive_task

        await fake_websocket.close()
        await asyncio.wait_for(receive_task, 1)

        assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_sends_normal_closure(mock_settings, fake_websocket):
    """Test disconnect closes with code 1000 and stops the receive loop."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()
        receive_task = session._receive_task

        await session.disconnect()

        assert fake_websocket.closed is True
        assert fake_websocket.close_code == 1000
        assert receive_task.done()
        assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_twice(mock_settings, fake_websocket):
    """Test disconnect is idempotent."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()

        await session.disconnect()
        await session.disconnect()

        assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_when_never_connected(mock_settings):
    session = ConnectionSession(settings=mock_settings)

    await session.disconnect()

    assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_cancels_stuck_receive_loop(mock_settings, fake_websocket):
    """Test the receive loop is cancelled if it does not stop in time."""
    mock_settings.disconnect_timeout = 0.05
    # close() that does not unblock recv()
    fake_websocket.close = AsyncMock()
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()
        receive_task = session._receive_task

        await session.disconnect()
        await asyncio.wait({receive_task}, timeout=1)

        assert receive_task.cancelled()
        assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connect_timeout(mock_settings):
    """Test a connect that exceeds the timeout reports failure."""
    mock_settings.connect_timeout = 0.05

    async def slow_connect(*args, **kwargs):
        await asyncio.sleep(10)

    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=slow_connect)):
        assert await session.connect() is False

    assert session.state == SessionState.DISCONNECTED
    assert await session.connection_manager.get_connect_failure_count() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        OSError("Connection refused"),
        InvalidURI("ws://bad", "invalid"),
        InvalidHandshake("Invalid handshake"),
    ],
)
async def test_connect_transport_errors(mock_settings, error):
    """Test transport errors during connect are reported, not raised."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=error)):
        assert await session.connect() is False

    assert session.state == SessionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connect_after_failed_connect(mock_settings, fake_websocket):
    """Test a failed attempt can be retried and resets the failure count."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=[OSError("refused"), OSError("refused"), fake_websocket])):
        assert await session.connect() is False
        assert await session.connect() is False
        assert await session.connection_manager.get_connect_failure_count() == 2

        assert await session.connect() is True
        assert await session.connection_manager.get_connect_failure_count() == 0

        await session.close()


@pytest.mark.asyncio
async def test_repeated_failures_are_counted(mock_settings):
    """Test consecutive failures keep accumulating."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=OSError("refused"))):
        for _ in range(6):
            await session.connect()

    assert await session.connection_manager.get_connect_failure_count() == 6


@pytest.mark.asyncio
async def test_disconnect_cancels_pending_connect(mock_settings, fake_websocket):
    """Test disconnect during CONNECTING aborts the attempt."""
    started = asyncio.Event()

    async def slow_connect(*args, **kwargs):
        started.set()
        await asyncio.sleep(10)
        return fake_websocket

    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=slow_connect)):
        connect_task = asyncio.create_task(session.connect())
        await asyncio.wait_for(started.wait(), 1)
        assert session.state == SessionState.CONNECTING

        await session.disconnect()

        assert await asyncio.wait_for(connect_task, 1) is False

    assert session.state == SessionState.DISCONNECTED
    # A cancelled attempt is not a failure
    assert await session.connection_manager.get_connect_failure_count() == 0


@pytest.mark.asyncio
async def test_connect_again_after_cancelled_connect(mock_settings, fake_websocket):
    """Test a fresh cancellation signal is used for the next attempt."""
    started = asyncio.Event()

    async def slow_connect(*args, **kwargs):
        started.set()
        await asyncio.sleep(10)

    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=slow_connect)):
        connect_task = asyncio.create_task(session.connect())
        await asyncio.wait_for(started.wait(), 1)
        await session.disconnect()
        await connect_task

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        assert await session.connect() is True

        queue = session.subscribe()
        fake_websocket.feed({"type": "PLAYER_STATE", "volume": 5})
        event = await wait_for_event(queue)
        assert event.snapshot.volume_percent == 5

        await session.close()


@pytest.mark.asyncio
async def test_connect_while_connected_is_noop(mock_settings, fake_websocket):
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)) as mock_connect:
        await session.connect()

        assert await session.connect() is True
        assert mock_connect.call_count == 1

        await session.close()


@pytest.mark.asyncio
async def test_reconnect(mock_settings):
    """Test reconnect closes the old socket and opens a new one."""
    first = FakeWebSocket()
    second = FakeWebSocket()
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(side_effect=[first, second])):
        await session.connect()

        assert await session.reconnect() is True

        assert first.closed is True
        assert second.closed is False
        assert session.is_connected is True

        await session.close()


@pytest.mark.asyncio
async def test_reconnect_while_disconnected(mock_settings, fake_websocket):
    """Test reconnect works when there is nothing to disconnect."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        assert await session.reconnect() is True

        await session.close()


@pytest.mark.asyncio
async def test_reconnect_starts_from_empty_snapshot(mock_settings):
    """Test state from the previous connection is not carried over."""
    first = FakeWebSocket()
    second = FakeWebSocket()
    session = ConnectionSession(settings=mock_settings)
    queue = session.subscribe()

    with patch(CONNECT, new=AsyncMock(side_effect=[first, second])):
        await session.connect()
        first.feed({"type": "PLAYER_STATE", "volume": 5})
        await _next_of(queue, PlayerEventType.STATE_CHANGED)

        await session.reconnect()

        assert session.current() == PlayerSnapshot()

        await session.close()


@pytest.mark.asyncio
async def test_close_is_terminal(mock_settings, fake_websocket):
    """Test a closed session refuses to connect again."""
    session = ConnectionSession(settings=mock_settings)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()
        await session.close()
        await session.close()

        assert session.state == SessionState.CLOSED
        assert fake_websocket.closed is True
        with pytest.raises(SessionClosedException):
            await session.connect()


@pytest.mark.asyncio
async def test_async_context_manager(mock_settings, fake_websocket):
    """Test the session connects on enter and closes on exit."""
    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        async with ConnectionSession(settings=mock_settings) as session:
            assert session.is_connected is True

    assert session.state == SessionState.CLOSED
    assert fake_websocket.closed is True


@pytest.mark.asyncio
async def test_unsubscribe(mock_settings, fake_websocket):
    """Test an unsubscribed queue receives nothing further."""
    session = ConnectionSession(settings=mock_settings)
    kept = session.subscribe()
    dropped = session.subscribe()
    session.unsubscribe(dropped)

    with patch(CONNECT, new=AsyncMock(return_value=fake_websocket)):
        await session.connect()
        fake_websocket.feed({"type": "PLAYER_STATE", "volume": 5})

        await wait_for_event(kept)
        assert dropped.empty()

        await session.close()
