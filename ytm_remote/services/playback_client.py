"""High-level playback controls on top of a player session."""

import asyncio
import logging
from pathlib import Path

from ytm_remote.exceptions import UnknownRepeatModeException
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models.player import PlayerEvent, PlayerSnapshot, RepeatMode, TrackInfo
from ytm_remote.protocols import ArtworkProviderProtocol, PlayerSessionProtocol
from ytm_remote.services import bounded_command
from ytm_remote.services.bounded_command import VOLUME_MAX, VOLUME_MIN, BoundedCommand, clamp

_NEXT_REPEAT_MODE = {
    RepeatMode.NONE: RepeatMode.ALL,
    RepeatMode.ALL: RepeatMode.ONE,
    RepeatMode.ONE: RepeatMode.NONE,
}


def format_seconds(value: int) -> str:
    """Format seconds as m:ss."""
    minutes, seconds = divmod(max(value, 0), 60)
    return f"{minutes}:{seconds:02d}"


def next_repeat_mode(mode: RepeatMode) -> RepeatMode:
    """Mode the player moves to on the next repeat toggle."""
    return _NEXT_REPEAT_MODE[mode]


class PlaybackClient:
    """Facade exposing the player snapshot and state-aware commands.

    Commands return True when a frame was sent. They never raise on a
    missing connection; they simply return False.
    """

    def __init__(
        self,
        session: PlayerSessionProtocol,
        artwork: ArtworkProviderProtocol | None = None,
        logger: logging.Logger | None = None,
    ):
        self._session = session
        self._artwork = artwork
        self._logger = logger or get_logger(__name__)

    @property
    def session(self) -> PlayerSessionProtocol:
        return self._session

    # Read-only accessors

    @property
    def snapshot(self) -> PlayerSnapshot | None:
        """Current snapshot, or None when there is no live session."""
        return self._session.current()

    @property
    def is_connected(self) -> bool:
        return self._session.is_connected

    @property
    def is_muted(self) -> bool:
        snapshot = self.snapshot
        return snapshot.is_muted if snapshot else False

    @property
    def repeat_mode(self) -> RepeatMode:
        """Repeat mode mapped from the wire value.

        Raises:
            UnknownRepeatModeException: If the player reported an unknown value
        """
        snapshot = self.snapshot
        if snapshot is None:
            return RepeatMode.NONE
        try:
            return RepeatMode(snapshot.repeat)
        except ValueError:
            raise UnknownRepeatModeException(snapshot.repeat) from None

    @property
    def current_volume(self) -> int:
        snapshot = self.snapshot
        return snapshot.volume_percent if snapshot else 0

    @property
    def current_position(self) -> int:
        snapshot = self.snapshot
        return snapshot.position_seconds if snapshot else 0

    @property
    def current_track(self) -> TrackInfo | None:
        snapshot = self.snapshot
        return snapshot.track if snapshot else None

    @property
    def current_track_name(self) -> str:
        track = self.current_track
        return track.title if track and track.title else "Unknown"

    def summary(self) -> str:
        """One-line playback summary, e.g. "Now Playing 1:05/3:20 | by Artist"."""
        snapshot = self.snapshot
        if snapshot is None:
            return "No playback data"
        status = "Now Playing" if snapshot.is_playing else "Paused"
        return (
            f"{status} {format_seconds(snapshot.position_seconds)}/"
            f"{format_seconds(snapshot.track.duration_seconds)} | by {snapshot.track.artist}"
        )

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue[PlayerEvent]:
        """Event queue receiving TRACK_CHANGED and STATE_CHANGED events."""
        return self._session.subscribe(maxsize)

    # Connection lifecycle

    async def connect(self) -> bool:
        return await self._session.connect()

    async def disconnect(self) -> None:
        await self._session.disconnect()

    async def reconnect(self) -> bool:
        return await self._session.reconnect()

    # Commands

    async def play(self) -> bool:
        snapshot = self.snapshot
        if snapshot is None or snapshot.is_playing:
            return False
        return await self._session.send_command("play")

    async def pause(self) -> bool:
        snapshot = self.snapshot
        if snapshot is None or not snapshot.is_playing:
            return False
        return await self._session.send_command("pause")

    async def toggle_play(self) -> bool:
        snapshot = self.snapshot
        if snapshot is None:
            return False
        return await (self.pause() if snapshot.is_playing else self.play())

    async def skip(self) -> bool:
        return await self._session.send_command("next")

    async def skip_back(self) -> bool:
        return await self._session.send_command("previous")

    async def shuffle(self) -> bool:
        return await self._session.send_command("shuffle")

    async def toggle_mute(self) -> bool:
        return await self._session.send_command("mute")

    async def toggle_repeat(self) -> bool:
        return await self._session.send_command("repeat")

    async def set_volume(self, volume_percent: int) -> bool:
        """Set an absolute volume, clamped to 0..100; no frame is sent if it is unchanged."""
        volume_percent = clamp(volume_percent, VOLUME_MIN, VOLUME_MAX)
        snapshot = self.snapshot
        if snapshot is None or snapshot.volume_percent == volume_percent:
            return False
        log_with_context(
            self._logger,
            "info",
            "Setting volume",
            previous=snapshot.volume_percent,
            target=volume_percent,
            event_type="set_volume",
        )
        return await self._session.send_command("setVolume", volume_percent)

    async def set_position(self, position_seconds: int) -> bool:
        """Seek to an absolute position.

        The player treats seek data as an offset from the current position,
        so the delta is sent. No frame is sent if the position is unchanged.
        """
        snapshot = self.snapshot
        if snapshot is None or snapshot.position_seconds == position_seconds:
            return False
        return await self._session.send_command("seek", position_seconds - snapshot.position_seconds)

    async def adjust_volume(self, text: str | None) -> tuple[BoundedCommand, bool]:
        """Apply a "+N" / "-N" / "N" volume command.

        Returns:
            The parsed command and whether a frame was sent
        """
        command = bounded_command.parse_volume(text, self.current_volume)
        if not command.valid:
            return command, False
        return command, await self.set_volume(command.target)

    async def seek(self, text: str | None) -> tuple[BoundedCommand, bool]:
        """Apply a "+N" / "-N" / "N" / "m:ss" seek command."""
        track = self.current_track
        duration = track.duration_seconds if track else 0
        command = bounded_command.parse_seek(text, self.current_position, duration)
        if not command.valid:
            return command, False
        return command, await self.set_position(command.target)

    async def get_artwork(self, track: TrackInfo | None = None) -> Path | None:
        """Local artwork file for ``track`` (default: current track), or None."""
        track = track or self.current_track
        if track is None or self._artwork is None:
            return None
        if not track.track_id and not track.artwork_url:
            return None
        return await self._artwork.fetch(track.track_id, track.artwork_url)
