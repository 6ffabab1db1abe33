"""Turn free-text queries into ranked, actionable results."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ytm_remote.exceptions import InvalidCommandException, UnknownActionException
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models.player import RepeatMode
from ytm_remote.models.query import QueryResult
from ytm_remote.services import bounded_command
from ytm_remote.services.playback_client import PlaybackClient, format_seconds, next_repeat_mode

DEFAULT_ICON = "icon.png"

_REPEAT_LABELS = {
    RepeatMode.NONE: "Repeat Off",
    RepeatMode.ALL: "Repeat Current Queue",
    RepeatMode.ONE: "Repeat Current Song",
}


class QueryService:
    """Keyword router in front of a PlaybackClient.

    ``query`` never raises; errors are reported as a single result.
    ``execute`` runs the action a result carries.
    """

    def __init__(self, client: PlaybackClient, logger: logging.Logger | None = None):
        self._client = client
        self._logger = logger or get_logger(__name__)

        self._terms: dict[str, Callable[[str], list[QueryResult]]] = {
            "next": self._next,
            "last": self._last,
            "pause": self._pause,
            "play": self._play,
            "muted": self._toggle_mute,
            "vol": self._volume,
            "volume": self._volume,
            "shuffle": self._shuffle,
            "repeat": self._toggle_repeat,
            "seek": self._seek,
            "reconnect": self._reconnect,
        }

        self._actions: dict[str, Callable[[Any], Awaitable[bool]]] = {
            "play": lambda _: client.play(),
            "pause": lambda _: client.pause(),
            "toggle_play": lambda _: client.toggle_play(),
            "next": lambda _: client.skip(),
            "previous": lambda _: client.skip_back(),
            "mute": lambda _: client.toggle_mute(),
            "shuffle": lambda _: client.shuffle(),
            "repeat": lambda _: client.toggle_repeat(),
            "setVolume": client.set_volume,
            "seek": client.set_position,
            "reconnect": lambda _: client.reconnect(),
        }

    async def execute(self, action: str, data: Any | None = None) -> bool:
        """Run a result action.

        Args:
            action: Action name from a QueryResult
            data: Action payload from the same result

        Returns:
            True if the player was sent a command (or reconnected)

        Raises:
            UnknownActionException: If the action is not known
            InvalidCommandException: If a setVolume/seek payload is not an integer
        """
        handler = self._actions.get(action)
        if handler is None:
            raise UnknownActionException(action)
        if action in ("setVolume", "seek"):
            if data is None:
                return False
            try:
                data = int(data)
            except (TypeError, ValueError):
                raise InvalidCommandException(str(data), details={"action": action}) from None
        return await handler(data)

    def query(self, text: str | None) -> list[QueryResult]:
        """Ranked results for a query such as "", "vol +10" or "seek 1:30"."""
        try:
            results = self._query(text or "")
        except Exception as e:
            log_with_context(
                self._logger,
                "error",
                "Query processing error",
                query=text,
                error=str(e),
                error_type=type(e).__name__,
                event_type="query_error",
            )
            results = [QueryResult(title="YouTube Music Error", subtitle=str(e), icon_path=DEFAULT_ICON)]
        return sorted(results, key=lambda result: result.score, reverse=True)

    def _query(self, text: str) -> list[QueryResult]:
        if not self._client.is_connected:
            return [
                QueryResult(
                    title="Not connected - Reconnect",
                    subtitle="Not connected to YouTube Music. Reconnect",
                    icon_path=DEFAULT_ICON,
                    action="reconnect",
                )
            ]

        first, _, rest = text.strip().partition(" ")
        if not first:
            return self.now_playing()

        handler = self._terms.get(first.lower())
        if handler is None:
            return self.now_playing()
        return handler(rest.strip())

    def now_playing(self) -> list[QueryResult]:
        """Current track followed by the common controls."""
        snapshot = self._client.snapshot
        if snapshot is None or not snapshot.track.track_id:
            return [QueryResult(title="No song playing", subtitle="Start playback in YouTube Music", icon_path=DEFAULT_ICON)]

        track = snapshot.track
        toggle_label = "Pause" if snapshot.is_playing else "Resume"

        return [
            QueryResult(
                title=track.title or "Not Available",
                subtitle=self._client.summary(),
                icon_path=DEFAULT_ICON,
                score=1000,
            ),
            QueryResult(
                title="Pause / Resume",
                subtitle=f"{toggle_label}: {track.title}",
                icon_path=DEFAULT_ICON,
                score=950,
                action="toggle_play",
            ),
            *self._next(""),
            *self._last(""),
            *self._toggle_mute(""),
            *self._shuffle(""),
            *self._seek(""),
            *self._toggle_repeat(""),
            *self._volume(""),
        ]

    def _result(self, title: str, subtitle: str, action: str | None = None, data: Any | None = None) -> list[QueryResult]:
        return [QueryResult(title=title, subtitle=subtitle, icon_path=DEFAULT_ICON, action=action, data=data)]

    def _play(self, _: str) -> list[QueryResult]:
        return self._result("Play", f"Resume: {self._client.current_track_name}", action="play")

    def _pause(self, _: str) -> list[QueryResult]:
        return self._result("Pause", f"Pause: {self._client.current_track_name}", action="pause")

    def _next(self, _: str) -> list[QueryResult]:
        return self._result("Next", f"Skip: {self._client.current_track_name}", action="next")

    def _last(self, _: str) -> list[QueryResult]:
        return self._result("Last", "Skip Backwards", action="previous")

    def _shuffle(self, _: str) -> list[QueryResult]:
        return self._result("Shuffle", "Shuffle queue", action="shuffle")

    def _reconnect(self, _: str) -> list[QueryResult]:
        return self._result("Reconnect", "Force a reconnection", action="reconnect")

    def _toggle_mute(self, _: str) -> list[QueryResult]:
        label = "Unmute" if self._client.is_muted else "Mute"
        return self._result("Toggle Mute", f"{label}: {self._client.current_track_name}", action="mute")

    def _toggle_repeat(self, _: str) -> list[QueryResult]:
        label = _REPEAT_LABELS[next_repeat_mode(self._client.repeat_mode)]
        return self._result("Toggle Repeat", f"{label}: {self._client.current_track_name}", action="repeat")

    def _volume(self, arg: str) -> list[QueryResult]:
        current = self._client.current_volume
        command = bounded_command.parse_volume(arg, current)
        if command.valid:
            return self._result(
                f"Set Volume to {command.target}",
                f"Current Volume: {current}",
                action="setVolume",
                data=command.target,
            )
        return self._result("Volume", f"Current Volume: {current}")

    def _seek(self, arg: str) -> list[QueryResult]:
        position = self._client.current_position
        track = self._client.current_track
        duration = track.duration_seconds if track else 0
        command = bounded_command.parse_seek(arg, position, duration)
        if command.valid:
            return self._result(
                f"Seek to {format_seconds(command.target)}",
                f"Current Position: {format_seconds(position)}",
                action="seek",
                data=command.target,
            )
        return self._result("Position", f"Current Position: {format_seconds(position)}")
