"""YTM remote models"""

from ytm_remote.models.base_models import DebugInfo, DetailedHealthResponse, ErrorDetail, ErrorResponse, HealthResponse
from ytm_remote.models.player import (
    ActionMessage,
    PartialUpdate,
    PlayerEvent,
    PlayerEventType,
    PlayerSnapshot,
    RepeatMode,
    TrackInfo,
    TrackUpdate,
)
from ytm_remote.models.query import ActionRequest, CommandResponse, QueryResult, SeekRequest, VolumeRequest

__all__ = [
    "ActionMessage",
    "ActionRequest",
    "CommandResponse",
    "DebugInfo",
    "DetailedHealthResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "PartialUpdate",
    "PlayerEvent",
    "PlayerEventType",
    "PlayerSnapshot",
    "QueryResult",
    "RepeatMode",
    "SeekRequest",
    "TrackInfo",
    "TrackUpdate",
    "VolumeRequest",
]
