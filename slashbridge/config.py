"""Centralized configuration loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings sourced from .env / environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────
    slashbridge_env: str = "development"
    slashbridge_log_level: str = "INFO"

    # ── API Server ───────────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ── External action server ───────────────────────────────────────
    action_server_url: str = "http://localhost:3000"
    http_timeout_seconds: float = 10.0

    # ── Command sync ─────────────────────────────────────────────────
    plugin_id: str = "com.mattermost.demo-dynamic-slash-commands"
    sync_interval_seconds: int = 2
    sync_on_start: bool = True

    @field_validator("action_server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("sync_interval_seconds", "http_timeout_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    # ── Derived ──────────────────────────────────────────────────────
    @property
    def completion_path(self) -> str:
        """Path the dynamic autocomplete protocol queries for argument values."""
        return f"/plugins/{self.plugin_id}"

    @property
    def list_actions_url(self) -> str:
        return f"{self.action_server_url}/list-actions"

    @property
    def perform_action_url(self) -> str:
        return f"{self.action_server_url}/perform-action"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
