"""
Application settings and configuration management.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from subfeed import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="subfeed")
    app_version: str = Field(default=__version__)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Storage
    config_dir: Path = Field(default=Path.home() / ".config" / "subfeed")
    database_url: str = Field(default="")  # Empty -> SQLite file in config_dir
    subscriptions_file: Path = Field(default=Path("./subscriptions.csv"))
    logs_dir: Path = Field(default=Path("./logs"))

    # Feeds
    feed_url_template: str = Field(
        default="https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
    )
    thumbnail_host: str = Field(default="img.youtube.com")
    request_timeout: float = Field(default=15.0)

    # Aggregation
    cache_max_age_minutes: int = Field(default=30)
    batch_size: int = Field(default=50)
    batch_delay: float = Field(default=0.5)
    auto_refresh_interval: float = Field(default=300.0)

    # Thumbnails
    thumbnail_cache_size: int = Field(default=100)
    prefetch_limit: int = Field(default=3)
    prefetch_group_size: int = Field(default=2)
    prefetch_pause: float = Field(default=0.1)
    # Comma-separated in the environment, parsed below rather than as JSON
    thumbnail_width_breakpoints: Annotated[tuple[int, int, int], NoDecode] = Field(
        default=(30, 45, 70)
    )

    @field_validator("config_dir", "subscriptions_file", "logs_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure directory paths are Path objects."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("thumbnail_width_breakpoints", mode="before")
    @classmethod
    def parse_breakpoints(cls, v: str | tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Parse breakpoints from a comma-separated string or sequence."""
        if isinstance(v, str):
            v = [int(part.strip()) for part in v.split(",") if part.strip()]
        values = tuple(int(part) for part in v)
        if len(values) != 3 or list(values) != sorted(values):
            raise ValueError(
                f"thumbnail_width_breakpoints must be three ascending integers, got {v}"
            )
        return values

    @field_validator(
        "batch_size", "thumbnail_cache_size", "prefetch_group_size", "cache_max_age_minutes"
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate counts and sizes are positive."""
        if v < 1:
            raise ValueError(f"Value must be a positive integer, got {v}")
        return v

    def create_directories(self) -> None:
        """Create required directories if they don't exist."""
        for directory in [self.config_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Default SQLite database file location."""
        return self.config_dir / "app.db"

    @property
    def preferences_path(self) -> Path:
        """User preferences JSON file location."""
        return self.config_dir / "config.json"

    @property
    def effective_database_url(self) -> str:
        """Get the database URL, defaulting to the SQLite file in config_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.database_path}"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "SUBFEED_",
    }


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
