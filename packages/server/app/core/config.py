"""
Application configuration loaded from environment variables.
"""

from functools import lru_cache

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Fake snippets API server configuration."""

    model_config = SettingsConfigDict(env_prefix="FSA_", env_file=".env", extra="ignore")

    # Database (in-process by default; every engine gets its own store)
    database_url: str = "sqlite+aiosqlite://"

    # Logging
    log_level: str = "info"
    log_json: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3020
    debug: bool = False
    seed_on_startup: bool = True

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Orgs
    max_avatar_bytes: int = 5 * 1024 * 1024
    invitation_expiry_days: int = 7
    invite_base_url: str = "http://localhost:5173"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency: the settings the running app was created with."""
    return request.app.state.settings
