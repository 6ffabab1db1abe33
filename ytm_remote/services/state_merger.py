"""Fold sparse PLAYER_STATE updates into a complete snapshot."""

from dataclasses import dataclass
from typing import Any

from ytm_remote.models.player import PartialUpdate, PlayerSnapshot, TrackInfo, TrackUpdate
from ytm_remote.services.bounded_command import VOLUME_MAX, VOLUME_MIN, clamp

# Fields copied whenever present in the update
_SCALAR_FIELDS = ("is_playing", "is_muted", "position_seconds", "volume_percent")

# Fields where an empty string means "no new value" rather than "clear"
_NON_EMPTY_FIELDS = ("kind", "repeat")
_TRACK_IDENTITY_FIELDS = ("title", "artist", "album", "artwork_url", "track_id")


@dataclass(frozen=True)
class MergeResult:
    """The next snapshot plus what the merge changed."""

    snapshot: PlayerSnapshot
    track_changed: bool
    previous_track_id: str = ""

    @property
    def track(self) -> TrackInfo:
        return self.snapshot.track


def _merge_track(current: TrackInfo, update: TrackUpdate) -> TrackInfo:
    changes: dict[str, Any] = {}
    for field in _TRACK_IDENTITY_FIELDS:
        value = getattr(update, field)
        if update.is_present(field) and value != "":
            changes[field] = value

    if update.is_present("duration_seconds"):
        changes["duration_seconds"] = max(update.duration_seconds, 0)

    # Sent with every song object, so always fresh
    changes["is_paused"] = update.is_paused
    changes["elapsed_seconds"] = max(update.elapsed_seconds, 0)

    return current.model_copy(update=changes)


def merge(current: PlayerSnapshot, update: PartialUpdate) -> MergeResult:
    """Apply ``update`` on top of ``current``.

    ``current`` is never mutated. The merge is total over valid
    PartialUpdate values.

    Args:
        current: Snapshot before the update
        update: Decoded sparse update

    Returns:
        MergeResult with the new snapshot and a track-changed flag
    """
    changes: dict[str, Any] = {}

    for field in _SCALAR_FIELDS:
        if update.is_present(field):
            changes[field] = getattr(update, field)

    # Peers may report out-of-range numbers; snapshots stay within bounds
    if "volume_percent" in changes:
        changes["volume_percent"] = clamp(changes["volume_percent"], VOLUME_MIN, VOLUME_MAX)
    if "position_seconds" in changes:
        changes["position_seconds"] = max(changes["position_seconds"], 0)

    for field in _NON_EMPTY_FIELDS:
        value = getattr(update, field)
        if update.is_present(field) and value != "":
            changes[field] = value

    old_track_id = current.track.track_id

    if update.is_present("track"):
        track = _merge_track(current.track, update.track)
        changes["track"] = track
        # Position follows the track's elapsed time whenever a song object arrives
        changes["position_seconds"] = track.elapsed_seconds

    snapshot = current.model_copy(update=changes)

    return MergeResult(
        snapshot=snapshot,
        track_changed=snapshot.track.track_id != old_track_id,
        previous_track_id=old_track_id,
    )
