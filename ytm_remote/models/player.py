"""Pydantic models for player state and the companion wire protocol."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PLAYER_STATE_TYPE = "PLAYER_STATE"
ACTION_TYPE = "ACTION"


class RepeatMode(str, Enum):
    """Repeat modes as reported by the player."""

    NONE = "NONE"
    ONE = "ONE"
    ALL = "ALL"


class TrackInfo(BaseModel):
    """The currently loaded track. Empty strings mean unknown."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    artist: str = ""
    album: str = ""
    artwork_url: str = ""
    track_id: str = ""
    duration_seconds: int = Field(default=0, ge=0)
    is_paused: bool = False
    elapsed_seconds: int = Field(default=0, ge=0)


class PlayerSnapshot(BaseModel):
    """Complete, authoritative player state at one point in time.

    Snapshots are immutable; a merge produces a new instance so readers
    never see a half-applied update.
    """

    model_config = ConfigDict(frozen=True)

    kind: str = ""
    track: TrackInfo = Field(default_factory=TrackInfo)
    is_playing: bool = False
    is_muted: bool = False
    position_seconds: int = Field(default=0, ge=0)
    volume_percent: int = Field(default=100, ge=0, le=100)
    repeat: str = RepeatMode.NONE.value


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def is_present(self, field: str) -> bool:
        """True if the peer sent ``field`` with a non-null value."""
        return field in self.model_fields_set and getattr(self, field) is not None


class TrackUpdate(_WireModel):
    """Sparse ``song`` object from a PLAYER_STATE frame.

    ``is_paused`` and ``elapsed_seconds`` always accompany the song object,
    so they default instead of being optional.
    """

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    artwork_url: str | None = Field(default=None, alias="imageSrc")
    track_id: str | None = Field(default=None, alias="videoId")
    duration_seconds: int | None = Field(default=None, alias="songDuration")
    is_paused: bool = Field(default=False, alias="isPaused")
    elapsed_seconds: int = Field(default=0, alias="elapsedSeconds")


class PartialUpdate(_WireModel):
    """Sparse PLAYER_STATE frame; absent fields mean unchanged."""

    kind: str | None = Field(default=None, alias="type")
    track: TrackUpdate | None = Field(default=None, alias="song")
    is_playing: bool | None = Field(default=None, alias="isPlaying")
    is_muted: bool | None = Field(default=None, alias="muted")
    position_seconds: int | None = Field(default=None, alias="position")
    volume_percent: int | None = Field(default=None, alias="volume")
    repeat: str | None = None


class ActionMessage(BaseModel):
    """Outbound command frame."""

    type: Literal["ACTION"] = ACTION_TYPE
    action: str
    data: Any | None = None

    def to_wire(self) -> str:
        # data is omitted, not sent as null, when absent
        return self.model_dump_json(exclude_none=True)


class PlayerEventType(str, Enum):
    """Events published after each merged frame."""

    STATE_CHANGED = "STATE_CHANGED"
    TRACK_CHANGED = "TRACK_CHANGED"


class PlayerEvent(BaseModel):
    """A snapshot-changed or track-changed notification."""

    model_config = ConfigDict(frozen=True)

    type: PlayerEventType
    snapshot: PlayerSnapshot
    track: TrackInfo | None = None
