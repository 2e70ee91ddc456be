"""Lightweight configuration for hexfog."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="HEXFOG_"
    )

    hex_size: float = Field(
        default=1.0, description="Hex radius used for planar layout positions", gt=0.0
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    local_player: str | None = Field(
        default=None,
        description="Player whose view is mirrored onto Tile.visibility; unset means shared view",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
