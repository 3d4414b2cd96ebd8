"""Shared fixtures for CLI command tests."""

import json
import os

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Run every command without the developer's own config files or env."""
    for key in list(os.environ):
        if key.startswith("STEADFAST_MCP_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def large_payload_file(tmp_path):
    """JSON list well above a 200-byte threshold."""
    path = tmp_path / "indexes.json"
    path.write_text(json.dumps([{"name": f"index-{i}", "fields": list(range(10))} for i in range(40)]))
    return path
