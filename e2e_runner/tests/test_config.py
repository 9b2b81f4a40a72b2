"""
Tests for runner configuration and error classes.
"""

import json

import pytest

from e2e_runner import (
    Config,
    ConfigError,
    ConnectionFailedError,
    ContractAssertionError,
    E2EError,
    InvalidTargetError,
    RunnerSettings,
)


ENV_VARS = (
    "E2E_TARGETS",
    "E2E_STREAMABLE_ATTEMPTS",
    "E2E_STREAMABLE_RETRY_DELAY",
    "E2E_SSE_RETRY_DELAY",
    "E2E_CLOSE_DELAY",
    "E2E_TIMEOUT",
    "E2E_LOG_LEVEL",
    "E2E_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


# ============================================================================
# Config Tests
# ============================================================================

class TestConfig:
    """Tests for Config."""

    def test_defaults(self):
        config = Config()

        assert config.get_targets() == "http://127.0.0.1:8080/mcp"
        assert config.get_log_level() == "WARNING"
        assert config.get_log_file() is None
        assert config.to_settings() == RunnerSettings()

    def test_default_settings(self):
        settings = RunnerSettings()

        assert settings.streamable_attempts == 3
        assert settings.streamable_retry_delay == 0.25
        assert settings.sse_retry_delay == 0.2
        assert settings.close_delay == 0.05
        assert settings.timeout == 30.0
        assert settings.client_name == "e2e-client"
        assert settings.client_version == "1.0.0"

    def test_environment_overrides(self, clean_env):
        clean_env.setenv("E2E_TARGETS", "http://a/mcp,http://b/mcp")
        clean_env.setenv("E2E_STREAMABLE_ATTEMPTS", "5")
        clean_env.setenv("E2E_SSE_RETRY_DELAY", "1.5")
        clean_env.setenv("E2E_LOG_LEVEL", "debug")

        config = Config()
        settings = config.to_settings()

        assert config.get_targets() == "http://a/mcp,http://b/mcp"
        assert settings.streamable_attempts == 5
        assert settings.sse_retry_delay == 1.5
        assert config.get_log_level() == "debug"

    def test_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "e2e.json"
        path.write_text(json.dumps({
            "targets": ["http://a/mcp", "http://b/sse"],
            "connection": {"closeDelay": 0},
            "client": {"name": "ci-client"},
        }))

        config = Config(str(path))
        settings = config.to_settings()

        assert config.get_targets() == "http://a/mcp,http://b/sse"
        assert settings.close_delay == 0.0
        assert settings.streamable_attempts == 3
        assert settings.client_name == "ci-client"
        assert config.get("connection.timeout") == 30.0

    def test_environment_beats_file(self, clean_env, tmp_path):
        path = tmp_path / "e2e.json"
        path.write_text(json.dumps({"targets": "http://file/mcp"}))
        clean_env.setenv("E2E_TARGETS", "http://env/mcp")

        assert Config(str(path)).get_targets() == "http://env/mcp"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config(str(tmp_path / "missing.json"))

        assert config.get_targets() == "http://127.0.0.1:8080/mcp"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            Config(str(path))

    def test_dotenv_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("E2E_TARGETS=http://dotenv/mcp\nE2E_CLOSE_DELAY=0.1\n")

        config = Config(env_file=str(env_file))

        assert config.get_targets() == "http://dotenv/mcp"
        assert config.to_settings().close_delay == 0.1

    def test_process_environment_beats_dotenv(self, clean_env, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("E2E_TARGETS=http://dotenv/mcp\n")
        clean_env.setenv("E2E_TARGETS", "http://process/mcp")

        assert Config(env_file=str(env_file)).get_targets() == "http://process/mcp"

    @pytest.mark.parametrize("name,value", [
        ("E2E_STREAMABLE_ATTEMPTS", "0"),
        ("E2E_STREAMABLE_ATTEMPTS", "three"),
        ("E2E_STREAMABLE_RETRY_DELAY", "-1"),
        ("E2E_TIMEOUT", "0"),
        ("E2E_LOG_LEVEL", "loud"),
    ])
    def test_invalid_values(self, clean_env, name, value):
        clean_env.setenv(name, value)

        with pytest.raises(ConfigError):
            Config()

    def test_get_missing_key(self):
        config = Config()

        assert config.get("connection.nope", "fallback") == "fallback"

    def test_to_dict_is_a_copy(self):
        config = Config()
        data = config.to_dict()
        data["connection"]["streamableAttempts"] = 99

        assert config.get("connection.streamableAttempts") == 3


# ============================================================================
# Error Classes Tests
# ============================================================================

class TestErrorClasses:
    """Tests for error exception classes."""

    def test_base_error(self):
        error = E2EError("Something broke")

        assert error.message == "Something broke"
        assert error.target is None
        assert str(error) == "Something broke"

    def test_base_error_with_target(self):
        error = E2EError("Something broke", target="http://a/mcp")

        assert str(error) == "[http://a/mcp] Something broke"

    def test_config_error(self):
        error = ConfigError("Invalid value", config_key="connection.timeout")

        assert str(error) == "Invalid value (config: connection.timeout)"

    def test_invalid_target_error(self):
        error = InvalidTargetError("Malformed target URL", target="nope")

        assert isinstance(error, E2EError)
        assert str(error) == "[nope] Malformed target URL"

    def test_connection_failed_error(self):
        error = ConnectionFailedError(
            "Unable to connect via Streamable HTTP or SSE",
            target="http://a/mcp",
            transports=["Streamable HTTP", "SSE"],
            attempts=5,
        )

        assert error.transports == ["Streamable HTTP", "SSE"]
        assert str(error) == "[http://a/mcp] Unable to connect via Streamable HTTP or SSE (5 attempts)"

    def test_contract_error_is_assertion_error(self):
        error = ContractAssertionError("tools list must be an array")

        assert isinstance(error, AssertionError)
        assert isinstance(error, E2EError)
        assert str(error) == "tools list must be an array"
