"""Bearer token authentication and host/origin allow-lists."""

import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ytm_remote.config import Settings, get_settings
from ytm_remote.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(request: Request, detail: str, level: str = "warning") -> HTTPException:
    log_with_context(
        logger,
        level,
        detail,
        path=request.url.path,
        client_ip=request.client.host if request.client else "unknown",
        event_type="auth_failure",
    )
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_api_key(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> None:
    """Require ``Authorization: Bearer <REMOTE_API_KEY>``.

    Player control is refused outright while REMOTE_API_KEY is unset.

    Raises:
        HTTPException: 401 if the key is unset, missing or wrong
    """
    if not settings.remote_api_key:
        raise _unauthorized(request, "REMOTE_API_KEY is not configured", level="error")

    if credentials is None:
        raise _unauthorized(request, "Missing API key")

    if not secrets.compare_digest(credentials.credentials.encode(), settings.remote_api_key.encode()):
        raise _unauthorized(request, "Invalid API key")


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def get_cors_origins(settings: Settings) -> list[str]:
    """Allowed CORS origins from the comma-separated setting."""
    return _split(settings.cors_origins)


def get_trusted_hosts(settings: Settings) -> list[str]:
    """Trusted Host header patterns from the comma-separated setting."""
    return _split(settings.trusted_hosts)
