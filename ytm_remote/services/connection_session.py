"""WebSocket session with the YouTube Music companion server."""

import asyncio
import json
import logging
from enum import Enum
from typing import Any

import websockets
from pydantic import ValidationError
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    ConnectionClosedOK,
    InvalidHandshake,
    InvalidURI,
)

from ytm_remote.config import Settings, get_settings
from ytm_remote.exceptions import SessionClosedException
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models.player import PLAYER_STATE_TYPE, ActionMessage, PartialUpdate, PlayerEvent, PlayerSnapshot
from ytm_remote.state_managers import ConnectionStateManager, PlayerStateManager

# Log an error once this many connect attempts in a row have failed
FAILURE_ALERT_THRESHOLD = 5

NORMAL_CLOSURE = 1000


class SessionState(str, Enum):
    """Lifecycle states of a ConnectionSession."""

    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    DISCONNECTING = "DISCONNECTING"
    CLOSED = "CLOSED"


class ConnectionSession:
    """Owns one WebSocket connection to the player.

    Runs a single receive loop that merges PLAYER_STATE frames into the
    shared snapshot and publishes events, and serializes outbound ACTION
    frames. Transport failures never raise out of the public methods;
    they are logged and leave the session DISCONNECTED so the caller can
    reconnect.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        state_manager: PlayerStateManager | None = None,
        connection_manager: ConnectionStateManager | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize the session.

        Args:
            settings: Settings instance (defaults to singleton)
            state_manager: Snapshot owner shared with readers
            connection_manager: Connect failure tracking
            logger: Logger for session events (defaults to the module logger)
        """
        self._settings = settings or get_settings()
        self._logger = logger or get_logger(__name__)
        self._state_manager = state_manager or PlayerStateManager(self._logger)
        self._connection_manager = connection_manager or ConnectionStateManager()

        self._state = SessionState.DISCONNECTED
        self._websocket: Any | None = None
        self._connect_task: asyncio.Task | None = None
        self._receive_task: asyncio.Task | None = None
        self._cancelled = asyncio.Event()
        self._send_lock = asyncio.Lock()

    async def __aenter__(self) -> "ConnectionSession":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def uri(self) -> str:
        return self._settings.player_uri

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    @property
    def state_manager(self) -> PlayerStateManager:
        return self._state_manager

    @property
    def connection_manager(self) -> ConnectionStateManager:
        return self._connection_manager

    def current(self) -> PlayerSnapshot | None:
        """Return the current snapshot, or None when not connected.

        Never blocks: the snapshot reference is swapped atomically by the
        receive loop.
        """
        if not self.is_connected:
            return None
        return self._state_manager.snapshot

    def subscribe(self, maxsize: int = 0) -> asyncio.Queue[PlayerEvent]:
        """Queue of TRACK_CHANGED / STATE_CHANGED events, in receive order."""
        return self._state_manager.subscribe(maxsize)

    def unsubscribe(self, queue: asyncio.Queue[PlayerEvent]) -> None:
        self._state_manager.unsubscribe(queue)

    async def connect(self) -> bool:
        """Open the WebSocket and start the receive loop.

        Only valid from DISCONNECTED; in any other live state this is a
        no-op that reports whether the session is connected.

        Returns:
            True if the session is now connected, False if the attempt
            timed out, failed or was cancelled by disconnect().

        Raises:
            SessionClosedException: If close() was already called.
        """
        if self._state is SessionState.CLOSED:
            raise SessionClosedException(details={"uri": self.uri})

        if self._state is not SessionState.DISCONNECTED:
            log_with_context(
                self._logger,
                "debug",
                "Connect ignored, session not disconnected",
                session_state=self._state.value,
                event_type="player_connect_ignored",
            )
            return self.is_connected

        self._state = SessionState.CONNECTING
        # A set event cannot be reused, so every attempt gets a fresh one
        self._cancelled = asyncio.Event()
        cancelled = self._cancelled
        self._connect_task = asyncio.ensure_future(self._open())

        try:
            websocket = await asyncio.wait_for(self._connect_task, timeout=self._settings.connect_timeout)
        except asyncio.CancelledError:
            if not cancelled.is_set():
                self._state = SessionState.DISCONNECTED
                raise
            log_with_context(
                self._logger,
                "info",
                "Connect attempt cancelled",
                uri=self.uri,
                event_type="player_connect_cancelled",
            )
            self._state = SessionState.DISCONNECTED
            return False
        except TimeoutError:
            await self._connect_failed("Player connection timeout", error_type="connect_timeout")
            return False
        except InvalidURI as e:
            await self._connect_failed(f"Invalid player WebSocket URI: {e}", error_type="invalid_uri")
            return False
        except InvalidHandshake as e:
            await self._connect_failed(f"Player WebSocket handshake failed: {e}", error_type="invalid_handshake")
            return False
        except OSError as e:
            await self._connect_failed(f"Cannot reach player at {self.uri}: {e}", error_type="network_error")
            return False
        finally:
            self._connect_task = None

        await self._state_manager.reset()
        await self._connection_manager.reset_connect_failures()

        if cancelled.is_set():
            # disconnect() ran after the handshake finished but before we resumed
            await self._close_quietly(websocket)
            self._state = SessionState.DISCONNECTED
            return False

        self._websocket = websocket
        self._state = SessionState.CONNECTED
        self._receive_task = asyncio.create_task(self._receive_loop(websocket, cancelled))

        log_with_context(
            self._logger,
            "info",
            "Connected to player",
            uri=self.uri,
            event_type="player_connected",
        )
        return True

    async def disconnect(self) -> None:
        """Stop the receive loop and close the socket.

        Valid from CONNECTED or CONNECTING; a no-op otherwise, so calling
        it repeatedly is safe.
        """
        if self._state not in (SessionState.CONNECTED, SessionState.CONNECTING):
            return

        self._state = SessionState.DISCONNECTING
        self._cancelled.set()

        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()

        websocket = self._websocket
        if websocket is not None:
            await self._close_quietly(websocket)

        receive_task = self._receive_task
        if receive_task is not None and not receive_task.done():
            done, _ = await asyncio.wait({receive_task}, timeout=self._settings.disconnect_timeout)
            if not done:
                receive_task.cancel()
                log_with_context(
                    self._logger,
                    "warning",
                    "Receive loop did not stop in time, cancelled",
                    timeout=self._settings.disconnect_timeout,
                    event_type="player_receive_loop_cancelled",
                )

        self._websocket = None
        self._receive_task = None
        self._state = SessionState.DISCONNECTED

        log_with_context(
            self._logger,
            "info",
            "Disconnected from player",
            uri=self.uri,
            event_type="player_disconnected",
        )

    async def reconnect(self) -> bool:
        """Disconnect if needed, then connect again."""
        if self._state in (SessionState.CONNECTED, SessionState.CONNECTING):
            await self.disconnect()
        return await self.connect()

    async def close(self) -> None:
        """Disconnect and retire the session for good."""
        if self._state is SessionState.CLOSED:
            return
        await self.disconnect()
        await self._state_manager.cleanup()
        self._state = SessionState.CLOSED

    async def send_command(self, action: str, data: Any | None = None) -> bool:
        """Send one ACTION frame.

        Args:
            action: Player action name, e.g. "play" or "setVolume"
            data: Optional payload; omitted from the frame when None

        Returns:
            True if the frame was written, False if the session is not
            connected or the write failed.
        """
        websocket = self._websocket
        if self._state is not SessionState.CONNECTED or websocket is None:
            log_with_context(
                self._logger,
                "debug",
                "Not connected, command dropped",
                action=action,
                session_state=self._state.value,
                event_type="player_command_dropped",
            )
            return False

        message = ActionMessage(action=action, data=data).to_wire()

        try:
            async with self._send_lock:
                await websocket.send(message)
        except (ConnectionClosed, OSError) as e:
            log_with_context(
                self._logger,
                "warning",
                "Send action failed",
                action=action,
                error=str(e),
                event_type="player_command_failed",
            )
            return False

        log_with_context(
            self._logger,
            "debug",
            "Command sent",
            action=action,
            data=data,
            event_type="player_command_sent",
        )
        return True

    async def _open(self) -> Any:
        return await websockets.connect(
            self.uri,
            open_timeout=self._settings.connect_timeout,
            close_timeout=self._settings.disconnect_timeout,
            ping_interval=20,
            ping_timeout=20,
        )

    async def _connect_failed(self, message: str, error_type: str) -> None:
        self._state = SessionState.DISCONNECTED
        count = await self._connection_manager.increment_connect_failure()
        log_with_context(
            self._logger,
            "warning",
            message,
            uri=self.uri,
            attempt=count,
            error_type=error_type,
            event_type="player_connect_failure",
        )

        if count >= FAILURE_ALERT_THRESHOLD:
            log_with_context(
                self._logger,
                "error",
                "Player connection failed multiple times",
                uri=self.uri,
                failure_count=count,
                event_type="player_connect_multiple_failures",
            )

    async def _close_quietly(self, websocket: Any) -> None:
        try:
            await websocket.close(code=NORMAL_CLOSURE, reason="Client closing")
        except (ConnectionClosed, OSError) as e:
            log_with_context(
                self._logger,
                "debug",
                "Error while closing player socket",
                error=str(e),
                event_type="player_close_error",
            )

    async def _receive_loop(self, websocket: Any, cancelled: asyncio.Event) -> None:
        try:
            while not cancelled.is_set():
                frame = await websocket.recv()
                await self._handle_frame(frame)

        except ConnectionClosedOK:
            # websockets answers the peer's close frame for us
            log_with_context(
                self._logger,
                "info",
                "Player closed the connection",
                uri=self.uri,
                event_type="player_connection_closed",
            )

        except (ConnectionClosedError, OSError) as e:
            log_with_context(
                self._logger,
                "warning",
                "Player connection closed unexpectedly",
                uri=self.uri,
                error=str(e),
                event_type="player_connection_lost",
            )

        except asyncio.CancelledError:
            log_with_context(
                self._logger,
                "info",
                "Receive loop cancelled",
                event_type="player_receive_loop_cancelled",
            )
            raise

        finally:
            if self._websocket is websocket:
                self._websocket = None
                if self._state is SessionState.CONNECTED:
                    self._state = SessionState.DISCONNECTED

    async def _handle_frame(self, frame: str | bytes) -> None:
        if isinstance(frame, bytes):
            try:
                frame = frame.decode("utf-8")
            except UnicodeDecodeError:
                log_with_context(
                    self._logger,
                    "debug",
                    "Ignoring non UTF-8 binary frame",
                    size=len(frame),
                    event_type="player_frame_ignored",
                )
                return

        try:
            payload = json.loads(frame)
        except (json.JSONDecodeError, RecursionError) as e:
            log_with_context(
                self._logger,
                "warning",
                "Ignoring malformed frame",
                error=str(e),
                event_type="player_frame_malformed",
            )
            return

        if not isinstance(payload, dict) or payload.get("type") != PLAYER_STATE_TYPE:
            log_with_context(
                self._logger,
                "debug",
                "Ignoring frame",
                frame_type=payload.get("type") if isinstance(payload, dict) else type(payload).__name__,
                event_type="player_frame_ignored",
            )
            return

        try:
            update = PartialUpdate.model_validate(payload)
        except ValidationError as e:
            log_with_context(
                self._logger,
                "warning",
                "Failed to decode player state",
                error=str(e),
                event_type="player_state_decode_error",
            )
            return

        await self._state_manager.apply(update)
