"""Test doubles shared across the test suite."""

import asyncio
import json
from typing import Any

from websockets.exceptions import ConnectionClosedOK


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection.

    Frames queued with ``feed`` are returned by ``recv`` in order. Queued
    exceptions are raised from ``recv`` instead, which is how tests
    simulate a closed or broken connection.
    """

    def __init__(self):
        self.inbound: asyncio.Queue[Any] = asyncio.Queue()
        self.sent: list[str] = []
        self.closed = False
        self.close_code: int | None = None

    def feed(self, payload: Any) -> None:
        if isinstance(payload, dict | list):
            payload = json.dumps(payload)
        self.inbound.put_nowait(payload)

    def fail(self, exc: Exception) -> None:
        self.inbound.put_nowait(exc)

    @property
    def sent_frames(self) -> list[dict[str, Any]]:
        return [json.loads(frame) for frame in self.sent]

    async def recv(self) -> Any:
        item = await self.inbound.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.closed:
            return
        self.closed = True
        self.close_code = code
        self.inbound.put_nowait(ConnectionClosedOK(None, None))


async def wait_for_event(queue: asyncio.Queue, timeout: float = 1.0) -> Any:
    """Next event from a subscriber queue, failing the test on timeout."""
    return await asyncio.wait_for(queue.get(), timeout)


