"""Pydantic models for query results and command requests."""

from typing import Any

from pydantic import BaseModel, Field


class QueryResult(BaseModel):
    """One ranked, actionable item returned for a free-text query."""

    title: str
    subtitle: str = ""
    icon_path: str | None = None
    score: int = 1
    action: str | None = Field(default=None, description="Client action run when the result is chosen")
    data: Any | None = None


class ActionRequest(BaseModel):
    """Run the action carried by a query result."""

    action: str = Field(min_length=1)
    data: Any | None = None


class VolumeRequest(BaseModel):
    """Volume change in the +N / -N / N grammar."""

    value: str = Field(description="e.g. '+10', '-5' or '45'")


class SeekRequest(BaseModel):
    """Seek target in the +N / -N / N grammar; absolute values accept m:ss."""

    value: str = Field(description="e.g. '+30', '-10', '95' or '1:35'")


class CommandResponse(BaseModel):
    """Outcome of a player command."""

    action: str
    sent: bool
    target: int | None = None
