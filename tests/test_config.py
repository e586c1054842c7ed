"""Tests for configuration module."""

from __future__ import annotations

import os
from unittest.mock import patch

import pydantic
import pytest

from slashbridge.config import Settings


class TestSettings:
    """Tests for the Settings configuration class."""

    @patch.dict(os.environ, {}, clear=True)
    def test_default_values(self) -> None:
        """Settings loads with sane defaults."""
        s = Settings(_env_file=None)
        assert s.slashbridge_env == "development"
        assert s.action_server_url == "http://localhost:3000"
        assert s.sync_interval_seconds == 2
        assert s.http_timeout_seconds == 10.0
        assert s.api_port == 8000
        assert s.sync_on_start is True

    @patch.dict(os.environ, {"ACTION_SERVER_URL": "http://remote:9000/", "SYNC_INTERVAL_SECONDS": "30"}, clear=True)
    def test_from_environment(self) -> None:
        """Environment variables override defaults; trailing slash is dropped."""
        s = Settings(_env_file=None)
        assert s.action_server_url == "http://remote:9000"
        assert s.sync_interval_seconds == 30
        assert s.list_actions_url == "http://remote:9000/list-actions"
        assert s.perform_action_url == "http://remote:9000/perform-action"

    def test_completion_path(self) -> None:
        s = Settings(plugin_id="com.example.demo", _env_file=None)
        assert s.completion_path == "/plugins/com.example.demo"

    @pytest.mark.parametrize("field", ["sync_interval_seconds", "http_timeout_seconds"])
    def test_rejects_non_positive(self, field: str) -> None:
        with pytest.raises(pydantic.ValidationError):
            Settings(**{field: 0}, _env_file=None)
