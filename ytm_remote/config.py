from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent  # ytm-remote/

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings with validation.

    Every field has a working default so the remote starts against a local
    player without any configuration. Values can be overridden through
    environment variables or a .env file.
    """

    # Player companion server - fixed local endpoint
    player_host: str = Field(default="localhost", min_length=1, description="Player WebSocket host")
    player_port: int = Field(default=26539, ge=1, le=65535, description="Player WebSocket port")
    connect_timeout: float = Field(default=3.0, gt=0, description="Connect timeout in seconds")
    disconnect_timeout: float = Field(default=1.0, gt=0, description="Max wait for the receive loop on disconnect")
    auto_connect: bool = Field(default=True, description="Connect to the player on startup")

    artwork_cache_dir: Path = Field(default=BASE_DIR / "cache", description="Directory for cached artwork")

    # API server settings
    api_host: str = Field(default="127.0.0.1", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="API server port")
    remote_api_key: str = Field(default="", description="Bearer token required by /api routes")
    cors_origins: str = Field(default="http://localhost:8000,http://127.0.0.1:8000")
    trusted_hosts: str = Field(default="localhost,127.0.0.1,testserver")

    log_level: str = Field(default="INFO", description="Root log level")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @property
    def player_uri(self) -> str:
        """WebSocket URI of the player companion server."""
        return f"ws://{self.player_host}:{self.player_port}"

    @field_validator("player_host", "api_host", mode="after")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Ensure hosts are not empty or whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("host cannot be empty")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return v


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    This function creates a singleton to avoid re-reading .env file
    on every request. Use this with FastAPI's Depends() for
    dependency injection.

    Returns:
        Cached Settings instance
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
