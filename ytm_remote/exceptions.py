"""Custom exceptions for the YTM remote with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    REMOTE_ERROR = "REMOTE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Player errors
    PLAYER_ERROR = "PLAYER_ERROR"
    PLAYER_CONNECTION_ERROR = "PLAYER_CONNECTION_ERROR"
    PLAYER_NOT_CONNECTED = "PLAYER_NOT_CONNECTED"
    SESSION_CLOSED = "SESSION_CLOSED"
    UNKNOWN_REPEAT_MODE = "UNKNOWN_REPEAT_MODE"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"

    # Artwork errors
    ARTWORK_ERROR = "ARTWORK_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"


class RemoteException(Exception):
    """Base exception for remote errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.REMOTE_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize remote exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class PlayerException(RemoteException):
    """Player-related errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.PLAYER_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class PlayerConnectionException(PlayerException):
    """Connecting to the player failed."""

    def __init__(self, message: str = "Failed to connect to player", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.PLAYER_CONNECTION_ERROR,
            status_code=503,
            details=details,
        )


class PlayerNotConnectedException(PlayerException):
    """No live player session, so there is no state to read or act on."""

    def __init__(self, message: str = "Not connected to player", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.PLAYER_NOT_CONNECTED,
            status_code=503,
            details=details,
        )


class SessionClosedException(PlayerException):
    """The session was closed and cannot be reused."""

    def __init__(self, message: str = "Player session is closed", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.SESSION_CLOSED,
            status_code=500,
            details=details,
        )


class UnknownRepeatModeException(PlayerException):
    """The player reported a repeat value outside NONE/ONE/ALL."""

    def __init__(self, value: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Unknown repeat mode: {value!r}",
            code=ErrorCode.UNKNOWN_REPEAT_MODE,
            status_code=502,
            details={"repeat": value, **(details or {})},
        )


class UnknownActionException(PlayerException):
    """A query result referenced an action the client does not provide."""

    def __init__(self, action: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Unknown action: {action}",
            code=ErrorCode.UNKNOWN_ACTION,
            status_code=400,
            details={"action": action, **(details or {})},
        )


class InvalidCommandException(PlayerException):
    """A volume or seek value did not match the +N / -N / N grammar."""

    def __init__(self, value: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Invalid command value: {value!r}",
            code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            details={"value": value, **(details or {})},
        )


class ArtworkException(RemoteException):
    """Artwork download or caching failed."""

    def __init__(self, message: str = "Artwork unavailable", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.ARTWORK_ERROR,
            status_code=502,
            details=details,
        )


class ConfigurationException(RemoteException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
