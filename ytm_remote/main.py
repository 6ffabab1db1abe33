"""Main FastAPI application entry point."""

from pathlib import Path

from dotenv import load_dotenv
from fastapi.responses import Response

from ytm_remote.config import get_settings
from ytm_remote.core.app_factory import create_app
from ytm_remote.logging_config import setup_logging

# Load environment variables from .env file
load_dotenv(Path(__file__).parent.parent / ".env")

settings = get_settings()

# Configure structured logging (JSON to file + console)
setup_logging(settings.log_level)

app = create_app(settings)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "YTM Remote API", "docs": "/docs"}


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon to prevent 404 errors."""
    return Response(content=b"", media_type="image/x-icon")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ytm_remote.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
