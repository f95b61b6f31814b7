"""Application configuration."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    steam_api_key: str
    session_secret: str
    public_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("public_url", "render_external_url"),
    )
    image_dir: Path = Path("data/images")
    template_path: Path | None = None
    banned_steam_ids: str | None = None
    banned_redirect_url: str = "/"
    convert_command: str = "convert"
    conversion_timeout_seconds: float = 30.0
    steam_timeout_seconds: float = 10.0
    profile_cache_ttl_seconds: int = 300
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def parse_banned_ids(raw: str | None) -> frozenset[str]:
    """Parse banned Steam ids from env."""
    if raw is None:
        return frozenset()
    ids: set[str] = set()
    for chunk in raw.split(","):
        value = chunk.strip()
        if value.isdigit():
            ids.add(value)
    return frozenset(ids)
