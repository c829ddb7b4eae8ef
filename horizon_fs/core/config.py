"""Application configuration with validation."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Filesystem store settings.

    Values come from environment variables (case-insensitive) or a local
    ``.env`` file, validated by Pydantic.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./horizon_fs.db",
        description="Read-write database connection URL"
    )
    read_only_database_url: Optional[str] = Field(
        default=None,
        description="Read replica URL for lookups (falls back to database_url)"
    )
    # Connection pool tuning (ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled (prevents stale connections)"
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log"
    )

    # Content Store
    compress_content: bool = Field(
        default=True,
        description="Gzip payloads before digesting and storing them"
    )

    # Favorites & Recency
    recently_visited_limit: int = Field(
        default=20,
        description="Default number of entries returned for recently visited folders"
    )
    activity_workers: int = Field(
        default=2,
        description="Worker threads used to record activity in the background"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError("Invalid log format. Must be 'json' or 'text'")
        return v_lower

    @field_validator('recently_visited_limit', 'activity_workers')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Must be a positive integer")
        return v

    def get_read_only_database_url(self) -> str:
        """Return the replica URL, or the read-write URL when no replica is set."""
        return self.read_only_database_url or self.database_url


# Global settings instance
settings = Settings()
