"""Protocol definitions for dependency injection."""

import asyncio
from pathlib import Path
from typing import Any, Protocol

from ytm_remote.models.player import PlayerEvent, PlayerSnapshot


class PlayerSessionProtocol(Protocol):
    """Protocol for player sessions.

    This protocol defines the interface the playback facade needs from a
    session, allowing for dependency injection and easier testing.
    """

    @property
    def uri(self) -> str: ...

    @property
    def is_connected(self) -> bool: ...

    def current(self) -> PlayerSnapshot | None:
        """Current snapshot, or None when not connected."""
        ...

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue[PlayerEvent]: ...

    async def send_command(self, action: str, data: Any | None = None) -> bool:
        """Send one action frame.

        Args:
            action: Player action name
            data: Optional payload

        Returns:
            True if the frame was written
        """
        ...

    async def connect(self) -> bool: ...

    async def disconnect(self) -> None: ...

    async def reconnect(self) -> bool: ...


class ArtworkProviderProtocol(Protocol):
    """Protocol for artwork caches keyed by track id and artwork URL."""

    async def fetch(self, track_id: str, artwork_url: str) -> Path | None:
        """Local path of the artwork, or None when unavailable."""
        ...
