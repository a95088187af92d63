"""
Unit tests for environment-sourced settings.
"""

import os

import pytest

from auggie_mcp.core.config import Settings


@pytest.mark.unit
class TestSettingsFromEnv:
    """Settings.from_env parsing rules."""

    def test_defaults_keep_everything_off(self, tmp_path):
        settings = Settings.from_env({"AUGGIE_MCP_REPO_ROOT": str(tmp_path)})

        assert settings.allow_exec is False
        assert settings.mock_stream is False
        assert settings.http_port is None
        assert settings.http_enabled is False
        assert settings.heartbeat_ms == 0
        assert settings.http_host == "127.0.0.1"
        assert settings.repo_root == os.path.realpath(str(tmp_path))

    def test_flags_require_literal_true(self):
        for value in ("1", "yes", "True", "TRUE", ""):
            settings = Settings.from_env(
                {"AUGGIE_MCP_ALLOW_EXEC": value, "AUGGIE_MCP_MOCK_STREAM": value}
            )
            assert settings.allow_exec is False
            assert settings.mock_stream is False

        settings = Settings.from_env(
            {"AUGGIE_MCP_ALLOW_EXEC": "true", "AUGGIE_MCP_MOCK_STREAM": "true"}
        )
        assert settings.allow_exec is True
        assert settings.mock_stream is True

    def test_port_parsing(self):
        assert Settings.from_env({"AUGGIE_MCP_HTTP_PORT": "5051"}).http_port == 5051
        assert Settings.from_env({"AUGGIE_MCP_HTTP_PORT": "8080abc"}).http_port == 8080
        # no leading digits still enables HTTP, on an ephemeral port
        garbage = Settings.from_env({"AUGGIE_MCP_HTTP_PORT": "abc"})
        assert garbage.http_port == 0
        assert garbage.http_enabled is True
        assert Settings.from_env({"AUGGIE_MCP_HTTP_PORT": ""}).http_enabled is False

    def test_heartbeat_parsing(self):
        assert Settings.from_env({"AUGGIE_MCP_HEARTBEAT_MS": "1500"}).heartbeat_ms == 1500
        assert Settings.from_env({"AUGGIE_MCP_HEARTBEAT_MS": "nope"}).heartbeat_ms == 0
        assert Settings.from_env({}).heartbeat_ms == 0

    @pytest.mark.parametrize("raw", ["inf", "Infinity", "-inf", "nan"])
    def test_non_finite_heartbeat_disables_it(self, raw):
        assert Settings.from_env({"AUGGIE_MCP_HEARTBEAT_MS": raw}).heartbeat_ms == 0

    def test_settings_are_immutable(self):
        settings = Settings.from_env({"AUGGIE_MCP_ALLOW_EXEC": "true"})

        with pytest.raises(AttributeError):
            settings.allow_exec = False  # type: ignore[misc]

    def test_snapshot_ignores_later_env_changes(self, monkeypatch):
        monkeypatch.setenv("AUGGIE_MCP_ALLOW_EXEC", "true")
        settings = Settings.from_env()
        monkeypatch.setenv("AUGGIE_MCP_ALLOW_EXEC", "false")

        assert settings.allow_exec is True
