"""Pytest configuration and shared fixtures."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tests.helpers import FakeWebSocket
from ytm_remote.config import Settings
from ytm_remote.models import PlayerSnapshot, TrackInfo

TEST_API_KEY = "test-api-key"


@pytest.fixture
def fake_websocket():
    """Fake player connection."""
    return FakeWebSocket()


@pytest.fixture
def mock_settings(tmp_path):
    """Settings instance with test values."""
    return Settings(
        player_host="localhost",
        player_port=26539,
        connect_timeout=0.5,
        disconnect_timeout=0.5,
        auto_connect=False,
        artwork_cache_dir=tmp_path / "artwork",
        api_host="127.0.0.1",
        api_port=8000,
        remote_api_key=TEST_API_KEY,
        log_level="INFO",
    )


@pytest.fixture
def auth_headers():
    """Authorization header accepted by the API."""
    return {"Authorization": f"Bearer {TEST_API_KEY}"}


@pytest.fixture
def playing_snapshot():
    """Snapshot of a track that is playing at 1:05 of 3:20."""
    return PlayerSnapshot(
        kind="PLAYER_STATE",
        track=TrackInfo(
            title="Song A",
            artist="Artist A",
            album="Album A",
            artwork_url="https://example.com/a.jpg",
            track_id="id1",
            duration_seconds=200,
            is_paused=False,
            elapsed_seconds=65,
        ),
        is_playing=True,
        is_muted=False,
        position_seconds=65,
        volume_percent=50,
        repeat="NONE",
    )


@pytest.fixture
def mock_session(playing_snapshot):
    """Mock player session connected with ``playing_snapshot``."""
    session = AsyncMock()
    session.uri = "ws://localhost:26539"
    session.is_connected = True
    session.current = lambda: playing_snapshot
    session.send_command = AsyncMock(return_value=True)
    session.connect = AsyncMock(return_value=True)
    session.reconnect = AsyncMock(return_value=True)
    session.disconnect = AsyncMock()
    session.subscribe = lambda maxsize=0: asyncio.Queue(maxsize)
    return session
