"""Tests for ServerConfig loading: defaults, TOML, env overrides, warnings."""

import logging
import os

import pytest

from steadfast_mcp.config import (
    ElicitationConfig,
    GovernanceConfig,
    ServerConfig,
    SummarizerConfig,
    VerificationConfig,
    _parse_bool,
)
from steadfast_mcp.core.governance import HttpSummarizer, NullSummarizer


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real user config and STEADFAST_MCP_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("STEADFAST_MCP_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def write_toml(tmp_path, text):
    path = tmp_path / "custom.toml"
    path.write_text(text)
    return path


class TestDefaults:
    """Tests for configuration defaults."""

    def test_defaults(self):
        config = ServerConfig.from_env()
        assert config.log_level == "INFO"
        assert config.tool_timeout == 30.0
        assert config.governance == GovernanceConfig()
        assert config.verification.poll_interval == 5.0
        assert config.verification.poll_timeout == 300.0
        assert config.elicitation.enabled is True
        assert config.summarizer.enabled is False
        assert config.startup_warnings == []

    def test_default_budget_and_poll_config(self):
        config = ServerConfig()
        budget = config.governance.to_budget()
        assert budget.threshold_bytes == config.governance.threshold_bytes
        assert budget.summarizer_timeout_seconds == config.governance.summarizer_timeout
        poll = config.verification.to_poll_config()
        assert (poll.interval_seconds, poll.timeout_seconds) == (5.0, 300.0)


class TestTomlLoading:
    """Tests for TOML sections."""

    def test_explicit_file(self, tmp_path):
        path = write_toml(
            tmp_path,
            """
[logging]
level = "debug"
structured = false

[server]
tool_timeout = 12.5

[governance]
threshold_bytes = 1024
max_chars = 4096
max_items = 4

[verification]
poll_interval = 2
poll_timeout = 60
verify_mutations = "false"

[elicitation]
enabled = false
timeout = 10

[summarizer]
enabled = true
endpoint = "https://example.openai.azure.com"
api_key = "from-toml"
deployment = "gpt-4o-mini"
""",
        )
        config = ServerConfig.from_env(str(path))
        assert config.log_level == "DEBUG"
        assert config.structured_logging is False
        assert config.tool_timeout == 12.5
        assert config.governance.max_items == 4
        assert config.verification.poll_interval == 2.0
        assert config.verification.verify_mutations is False
        assert config.elicitation == ElicitationConfig(enabled=False, timeout=10.0)
        assert isinstance(config.summarizer.build(), HttpSummarizer)

    def test_config_file_env_var(self, tmp_path, monkeypatch):
        path = write_toml(tmp_path, "[server]\ntool_timeout = 7\n")
        monkeypatch.setenv("STEADFAST_MCP_CONFIG_FILE", str(path))
        assert ServerConfig.from_env().tool_timeout == 7.0

    def test_project_file_is_discovered(self, tmp_path):
        (tmp_path / "steadfast-mcp.toml").write_text("[elicitation]\ntimeout = 3\n")
        assert ServerConfig.from_env().elicitation.timeout == 3.0

    def test_missing_file_keeps_defaults(self, tmp_path, caplog):
        config = ServerConfig.from_env(str(tmp_path / "nope.toml"))
        assert config.tool_timeout == 30.0
        assert "Config file not found" in caplog.text

    def test_invalid_toml_keeps_defaults(self, tmp_path):
        path = write_toml(tmp_path, "[governance\nmax_chars = ")
        assert ServerConfig.from_env(str(path)).governance == GovernanceConfig()


class TestEnvOverrides:
    """Tests for STEADFAST_MCP_* environment variables."""

    def test_env_beats_toml(self, tmp_path, monkeypatch):
        path = write_toml(tmp_path, "[governance]\nmax_chars = 4096\n")
        monkeypatch.setenv("STEADFAST_MCP_GOVERNANCE_MAX_CHARS", "8192")
        monkeypatch.setenv("STEADFAST_MCP_POLL_TIMEOUT", "90")
        monkeypatch.setenv("STEADFAST_MCP_ELICITATION_ENABLED", "no")
        monkeypatch.setenv("STEADFAST_MCP_SUMMARIZER_API_KEY", "from-env")
        config = ServerConfig.from_env(str(path))
        assert config.governance.max_chars == 8192
        assert config.verification.poll_timeout == 90.0
        assert config.elicitation.enabled is False
        assert config.summarizer.api_key == "from-env"

    def test_invalid_number_is_ignored(self, monkeypatch, caplog):
        caplog.set_level(logging.WARNING)
        monkeypatch.setenv("STEADFAST_MCP_TOOL_TIMEOUT", "soon")
        config = ServerConfig.from_env()
        assert config.tool_timeout == 30.0
        assert "STEADFAST_MCP_TOOL_TIMEOUT" in caplog.text

    def test_empty_value_is_unset(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_LOG_LEVEL", "")
        assert ServerConfig.from_env().log_level == "INFO"

    @pytest.mark.parametrize("value, expected", [("true", True), ("1", True), ("On", True), ("0", False), ("", False)])
    def test_parse_bool(self, value, expected):
        assert _parse_bool(value) is expected


class TestStartupWarnings:
    """Tests for startup configuration warnings."""

    def test_incomplete_summarizer(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_SUMMARIZER_ENABLED", "true")
        config = ServerConfig.from_env()
        assert any("Summarizer enabled" in w for w in config.startup_warnings)
        assert isinstance(config.summarizer.build(), NullSummarizer)

    def test_threshold_above_max_chars(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_GOVERNANCE_THRESHOLD_BYTES", "100000")
        config = ServerConfig.from_env()
        assert any("threshold_bytes" in w for w in config.startup_warnings)

    def test_interval_above_timeout(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_POLL_INTERVAL", "600")
        config = ServerConfig.from_env()
        assert any("poll_interval" in w for w in config.startup_warnings)


class TestDomainConfigs:
    """Tests for the per-engine config classes."""

    def test_summarizer_requires_model_or_deployment(self):
        config = SummarizerConfig(enabled=True, endpoint="https://a", api_key="k")
        assert config.is_complete is False
        config.model = "small"
        assert config.is_complete is True
        assert isinstance(config.build(), HttpSummarizer)

    def test_disabled_summarizer_builds_null(self):
        config = SummarizerConfig(enabled=False, endpoint="https://a", api_key="k", model="m")
        assert isinstance(config.build(), NullSummarizer)

    def test_verification_from_toml_dict(self):
        config = VerificationConfig.from_toml_dict({"max_concurrent": "8"})
        assert config.max_concurrent == 8
        assert config.verify_mutations is True

    def test_invalid_budget_raises(self):
        with pytest.raises(ValueError):
            GovernanceConfig(max_chars=10).to_budget()


class TestInvalidValues:
    """Tests for values the engines would reject."""

    def test_tiny_max_chars_falls_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_GOVERNANCE_MAX_CHARS", "50")
        config = ServerConfig.from_env()
        assert config.governance == GovernanceConfig()
        assert any("Invalid governance settings" in w for w in config.startup_warnings)
        config.governance.to_budget()

    def test_negative_poll_interval_falls_back(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_POLL_INTERVAL", "-1")
        monkeypatch.setenv("STEADFAST_MCP_VERIFY_MUTATIONS", "false")
        config = ServerConfig.from_env()
        assert config.verification.poll_interval == 5.0
        assert config.verification.verify_mutations is False

    def test_zero_max_concurrent_is_raised_to_one(self, monkeypatch):
        monkeypatch.setenv("STEADFAST_MCP_VERIFY_MAX_CONCURRENT", "0")
        assert ServerConfig.from_env().verification.max_concurrent == 1

    def test_bad_toml_value_skips_section(self, tmp_path, caplog):
        path = write_toml(tmp_path, '[governance]\nmax_chars = "abc"\n\n[elicitation]\ntimeout = 3\n')
        config = ServerConfig.from_env(str(path))
        assert config.governance == GovernanceConfig()
        assert config.elicitation.timeout == 3.0
        assert "Ignoring [governance]" in caplog.text

    def test_bad_tool_timeout_is_ignored(self, tmp_path):
        path = write_toml(tmp_path, '[server]\ntool_timeout = "soon"\n')
        assert ServerConfig.from_env(str(path)).tool_timeout == 30.0
