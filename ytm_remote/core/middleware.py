"""Middleware configuration."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from ytm_remote.config import Settings
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.security import get_cors_origins, get_trusted_hosts

logger = get_logger(__name__)

DEFAULT_RATE_LIMIT = "120/minute"


def setup_middleware(app: FastAPI, settings: Settings) -> Limiter:
    """Install CORS, trusted host and request counting middleware.

    Also stores the shared rate limiter on ``app.state.limiter``, where the
    slowapi exception handler looks for it.

    Returns:
        The application's Limiter
    """
    origins = get_cors_origins(settings)
    hosts = get_trusted_hosts(settings)
    log_with_context(
        logger,
        "info",
        "Configuring HTTP middleware",
        origins=origins,
        hosts=hosts,
        event_type="security_config",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=hosts)

    limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT_RATE_LIMIT])
    app.state.limiter = limiter

    @app.middleware("http")
    async def count_requests(request: Request, call_next):
        # Reported by /debug
        app.state.request_count = getattr(app.state, "request_count", 0) + 1
        return await call_next(request)

    return limiter
