"""FastAPI dependencies for dependency injection."""

import httpx
from fastapi import Request

from ytm_remote.services.playback_client import PlaybackClient
from ytm_remote.services.query_service import QueryService


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Get the shared HTTP client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared AsyncClient instance.

    Raises:
        RuntimeError: If HTTP client is not initialized.
    """
    client: httpx.AsyncClient | None = getattr(request.app.state, "http_client", None)

    if client is None:
        raise RuntimeError("HTTP client not initialized. This should never happen.")

    return client


async def get_playback_client(request: Request) -> PlaybackClient:
    """
    Get the playback facade from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared PlaybackClient instance.

    Raises:
        RuntimeError: If the playback client is not initialized.
    """
    client: PlaybackClient | None = getattr(request.app.state, "playback_client", None)

    if client is None:
        raise RuntimeError("Playback client not initialized.")

    return client


async def get_query_service(request: Request) -> QueryService:
    """
    Get the query service from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared QueryService instance.

    Raises:
        RuntimeError: If the query service is not initialized.
    """
    service: QueryService | None = getattr(request.app.state, "query_service", None)

    if service is None:
        raise RuntimeError("Query service not initialized.")

    return service
