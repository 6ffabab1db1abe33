"""State managers for handling application-wide mutable state.

This module provides task-safe state management using asyncio.Lock
for async operations. All state managers inherit from StateManager ABC.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models.player import PartialUpdate, PlayerEvent, PlayerEventType, PlayerSnapshot
from ytm_remote.services.state_merger import MergeResult, merge


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide task-safe access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during shutdown)."""
        pass


class PlayerStateManager(StateManager):
    """Owns the authoritative player snapshot and its subscribers.

    Only the writer takes the lock. Snapshots are immutable and replaced
    wholesale, so ``snapshot`` can be read at any time without waiting
    and always returns either the old or the new state.
    """

    def __init__(self, logger: logging.Logger | None = None):
        """Initialize the player state manager."""
        self._snapshot = PlayerSnapshot()
        self._lock = asyncio.Lock()
        self._subscribers: list[asyncio.Queue[PlayerEvent]] = []
        self._logger = logger or get_logger(__name__)

    async def initialize(self) -> None:
        """Start from an empty snapshot."""
        await self.reset()

    async def cleanup(self) -> None:
        """Drop the snapshot and all subscribers."""
        await self.reset()
        self._subscribers.clear()

    @property
    def snapshot(self) -> PlayerSnapshot:
        return self._snapshot

    async def reset(self) -> None:
        """Replace the current snapshot with a default one."""
        async with self._lock:
            self._snapshot = PlayerSnapshot()

    async def apply(self, update: PartialUpdate) -> MergeResult:
        """Merge an update and notify subscribers.

        Events are published in the order updates are applied:
        TRACK_CHANGED first (when the track id changed), then STATE_CHANGED.

        Args:
            update: Decoded sparse update

        Returns:
            MergeResult of the merge
        """
        async with self._lock:
            result = merge(self._snapshot, update)
            self._snapshot = result.snapshot

        if result.track_changed:
            log_with_context(
                self._logger,
                "info",
                "Track changed",
                previous_track_id=result.previous_track_id,
                track_id=result.track.track_id,
                title=result.track.title,
                event_type="track_changed",
            )
            self._publish(PlayerEvent(type=PlayerEventType.TRACK_CHANGED, snapshot=result.snapshot, track=result.track))

        self._publish(PlayerEvent(type=PlayerEventType.STATE_CHANGED, snapshot=result.snapshot))
        return result

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue[PlayerEvent]:
        """Register a new event queue.

        Args:
            maxsize: Queue bound; 0 means unbounded

        Returns:
            Queue receiving every subsequent PlayerEvent
        """
        queue: asyncio.Queue[PlayerEvent] = asyncio.Queue(maxsize=maxsize)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[PlayerEvent]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _publish(self, event: PlayerEvent) -> None:
        for queue in self._subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                log_with_context(
                    self._logger,
                    "warning",
                    "Subscriber queue full, dropping event",
                    player_event=event.type.value,
                    event_type="subscriber_overflow",
                )


class ConnectionStateManager(StateManager):
    """Tracks consecutive player connect failures.

    Provides task-safe failure counting for monitoring and debugging.
    """

    def __init__(self):
        """Initialize the connection state manager."""
        self._connect_failure_count: int = 0
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection state manager."""
        await self.reset_connect_failures()

    async def cleanup(self) -> None:
        """Reset counter on shutdown."""
        await self.reset_connect_failures()

    async def get_connect_failure_count(self) -> int:
        """Get the current connect failure count.

        Returns:
            Number of consecutive connect failures
        """
        async with self._lock:
            return self._connect_failure_count

    async def increment_connect_failure(self) -> int:
        """Increment connect failure count.

        Returns:
            Updated failure count
        """
        async with self._lock:
            self._connect_failure_count += 1
            return self._connect_failure_count

    async def reset_connect_failures(self) -> None:
        """Reset connect failure count to zero."""
        async with self._lock:
            self._connect_failure_count = 0
