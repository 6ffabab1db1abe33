"""Response models shared by the health, debug and error paths."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    version: str


class DetailedHealthResponse(BaseModel):
    """Readiness report covering the HTTP client and the player connection."""

    status: str = Field(..., description="healthy when every check passes, otherwise unhealthy")
    version: str = Field(..., description="ytm-remote version")
    timestamp: datetime = Field(..., description="Time the checks ran")
    checks: dict[str, str] = Field(..., description="ok, failed or disconnected per check")


class DebugInfo(BaseModel):
    """Runtime view of the session, subscribers and sanitized settings."""

    system: dict[str, Any] = Field(..., description="Interpreter and platform")
    state: dict[str, Any] = Field(..., description="Player session state")
    config: dict[str, Any] = Field(..., description="Settings without secrets")
    requests: dict[str, int] = Field(..., description="Request counters")


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Body of every error response: ``{"error": {code, message, details}}``."""

    error: ErrorDetail
