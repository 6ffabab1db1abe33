"""Health and debug endpoints."""

import platform
import sys
import time
from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ytm_remote import __version__
from ytm_remote.config import Settings, get_settings
from ytm_remote.core.middleware import DEFAULT_RATE_LIMIT
from ytm_remote.dependencies import get_http_client, get_playback_client
from ytm_remote.models import DebugInfo, DetailedHealthResponse, HealthResponse
from ytm_remote.security import get_cors_origins, get_trusted_hosts, verify_api_key
from ytm_remote.services.playback_client import PlaybackClient

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health check endpoint.

    Returns simple status for Docker healthcheck and basic monitoring.
    For player connectivity, use `/health/ready`.
    """
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    """Liveness probe - is the process serving requests at all?"""
    return HealthResponse(status="alive", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    client: httpx.AsyncClient = Depends(get_http_client),
    playback_client: PlaybackClient = Depends(get_playback_client),
):
    """Readiness probe - can the application control the player?

    **Returns:**
    - 200: HTTP client ready and player session connected
    - 503: Not ready (use `POST /api/player/reconnect` to retry the player)
    """
    checks = {
        "http_client": "ok" if client else "failed",
        "player": "ok" if playback_client.is_connected else "disconnected",
    }
    all_healthy = all(value == "ok" for value in checks.values())

    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content=DetailedHealthResponse(
            status="healthy" if all_healthy else "unhealthy",
            version=__version__,
            timestamp=datetime.now(UTC),
            checks=checks,
        ).model_dump(mode="json"),
    )


@router.get(
    "/debug",
    response_model=DebugInfo,
    dependencies=[Depends(verify_api_key)],
    responses={
        200: {"description": "System diagnostics and state information"},
        401: {"description": "Unauthorized - missing or invalid API key"},
    },
)
async def debug_info(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    playback_client: PlaybackClient = Depends(get_playback_client),
    settings: Settings = Depends(get_settings),
):
    """Debug endpoint with system state and diagnostics.

    **🔒 Authentication Required:** This endpoint requires Bearer token authentication.
    """
    uptime_seconds = int(time.time() - request.app.state.startup_time)

    system_info = {
        "version": __version__,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "platform": platform.system(),
        "uptime_seconds": uptime_seconds,
        "log_level": settings.log_level,
    }

    session = request.app.state.player_session
    snapshot = playback_client.snapshot
    state_info = {
        "http_client": "initialized" if client else "not_initialized",
        "player_session": session.state.value,
        "player_connect_failures": await session.connection_manager.get_connect_failure_count(),
        "player_subscribers": session.state_manager.subscriber_count,
        "track_id": snapshot.track.track_id if snapshot else None,
    }

    # Config info (sanitized - no secrets)
    config_info = {
        "api_host": settings.api_host,
        "api_port": settings.api_port,
        "player_uri": settings.player_uri,
        "connect_timeout": settings.connect_timeout,
        "artwork_cache_dir": str(settings.artwork_cache_dir),
        "cors_origins": get_cors_origins(settings),
        "trusted_hosts": get_trusted_hosts(settings),
        "rate_limit_default": DEFAULT_RATE_LIMIT,
    }

    request_stats = {
        "total_requests": request.app.state.request_count,
    }

    return DebugInfo(
        system=system_info,
        state=state_info,
        config=config_info,
        requests=request_stats,
    )
