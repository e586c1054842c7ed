"""Shared test fixtures and configuration."""

from __future__ import annotations

import os
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("SLASHBRIDGE_ENV", "test")
os.environ.setdefault("SLASHBRIDGE_LOG_LEVEL", "WARNING")
os.environ.setdefault("ACTION_SERVER_URL", "http://actions.test")

from slashbridge.config import Settings
from slashbridge.modules.commands.registry import CommandRegistry


@pytest.fixture
def settings() -> Settings:
    """Return test settings."""
    return Settings(
        slashbridge_env="test",
        slashbridge_log_level="WARNING",
        action_server_url="http://actions.test",
        plugin_id="com.example.slashbridge",
        sync_interval_seconds=1,
        http_timeout_seconds=5,
        _env_file=None,
    )


@pytest.fixture
def registry() -> CommandRegistry:
    """Provide an empty, isolated command registry."""
    return CommandRegistry()


def make_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: Optional[dict[str, str]] = None,
) -> MagicMock:
    """Build a stand-in for an httpx.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.headers = headers or {}
    response.aread = AsyncMock(return_value=content)
    response.aclose = AsyncMock()
    return response


def mock_async_client(mock_cls: MagicMock, **methods: Any) -> AsyncMock:
    """Wire a patched httpx.AsyncClient class so ``async with`` yields a client mock."""
    mock_instance = AsyncMock()
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    for name, value in methods.items():
        setattr(mock_instance, name, value)
    mock_cls.return_value = mock_instance
    return mock_instance
