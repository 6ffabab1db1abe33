"""Application lifespan: shared clients, the player session and its facade."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from ytm_remote import __version__
from ytm_remote.config import Settings
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.middleware.logging_middleware import redact_sensitive_data
from ytm_remote.services.artwork_cache import ArtworkCache
from ytm_remote.services.connection_session import ConnectionSession
from ytm_remote.services.playback_client import PlaybackClient
from ytm_remote.services.query_service import QueryService
from ytm_remote.state_managers import ConnectionStateManager, PlayerStateManager

logger = get_logger(__name__)


async def _log_request(request: httpx.Request) -> None:
    log_with_context(
        logger,
        "debug",
        "Artwork request",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="http_request",
    )


async def _log_response(response: httpx.Response) -> None:
    log_with_context(
        logger,
        "debug",
        "Artwork response",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="http_response",
    )


def create_http_client() -> httpx.AsyncClient:
    """HTTP client shared by the artwork cache."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(10.0, connect=5.0),
        limits=httpx.Limits(max_keepalive_connections=2, max_connections=4, keepalive_expiry=30.0),
        follow_redirects=True,
        event_hooks={"request": [_log_request], "response": [_log_response]},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the player stack on startup and tear it down on shutdown.

    With ``auto_connect`` the session connects right away. An unreachable
    player does not stop startup; ``POST /api/player/reconnect`` retries.
    """
    settings: Settings = app.state.settings
    app.state.startup_time = time.time()
    app.state.request_count = 0

    log_with_context(logger, "info", "Starting YTM remote", version=__version__, event_type="app_startup")

    http_client = create_http_client()
    player_state = PlayerStateManager()
    connection_state = ConnectionStateManager()
    await player_state.initialize()
    await connection_state.initialize()

    session = ConnectionSession(settings=settings, state_manager=player_state, connection_manager=connection_state)
    playback_client = PlaybackClient(session, ArtworkCache(settings.artwork_cache_dir, http_client))

    app.state.http_client = http_client
    app.state.player_session = session
    app.state.playback_client = playback_client
    app.state.query_service = QueryService(playback_client)

    if settings.auto_connect and not await session.connect():
        log_with_context(
            logger,
            "warning",
            "Player not reachable at startup",
            uri=session.uri,
            event_type="app_startup_player_unavailable",
        )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(logger, "info", "Shutting down YTM remote", event_type="app_shutdown")
        # close() also cleans up the player state manager
        await session.close()
        await connection_state.cleanup()
        await http_client.aclose()
