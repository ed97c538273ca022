"""
Unit Tests for Settings
"""
import pytest
from pydantic import ValidationError

from md_mcp_server.config import Settings, server_info


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MD_MCP_TRANSPORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.transport == "stdio"
        assert settings.max_sessions == 100
        assert server_info(settings).name == "md-mcp-server"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MD_MCP_TRANSPORT", "http")
        monkeypatch.setenv("MD_MCP_MAX_SESSIONS", "7")
        settings = Settings(_env_file=None)

        assert settings.transport == "http"
        assert settings.max_sessions == 7

    def test_rejects_zero_sessions(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_sessions=0)
