"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from ytm_remote import __version__
from ytm_remote.config import Settings, get_settings
from ytm_remote.core.lifespan import lifespan
from ytm_remote.core.middleware import setup_middleware
from ytm_remote.middleware.error_handlers import register_error_handlers
from ytm_remote.routers import health_router, player_router, query_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with (defaults to the singleton)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="YTM Remote API",
        description="""
        🎵 **YTM Remote** - Control YouTube Music through its companion server

        ## 🔐 Authentication
        All `/api/` endpoints require a Bearer token (`REMOTE_API_KEY`).

        ## 🎛️ Player
        - `/api/player/state` - Current player snapshot
        - `/api/player/{play,pause,next,previous,mute,shuffle,repeat}` - Commands
        - `/api/player/volume`, `/api/player/seek` - `+N`, `-N` or `N` (seek also takes `m:ss`)

        ## 🔎 Query
        - `/api/query?q=vol +10` - Ranked, actionable results for free text
        - `/api/query/execute` - Run the action of a result

        ## 📊 Health & Monitoring
        - `/health`, `/health/live`, `/health/ready`, `/debug`
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )
    app.state.settings = settings

    setup_middleware(app, settings)

    register_error_handlers(app)

    # Routes resolve settings from this app instance
    app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(health_router.router, tags=["health"])
    app.include_router(player_router.router, prefix="/api/player", tags=["player"])
    app.include_router(query_router.router, prefix="/api/query", tags=["query"])

    return app
