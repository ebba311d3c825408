from pathlib import Path

import pytest
from pydantic import ValidationError

from ae_config import get_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in (
        "AE_MCP_MAILBOX_DIR",
        "AE_MCP_FRESHNESS_WINDOW_SECONDS",
        "AE_MCP_DEFAULT_WAIT_MS",
        "AE_MCP_RESOURCE_WAIT_MS",
        "LITELLM_MODEL",
    ):
        monkeypatch.delenv(key, raising=False)
    # Keep a stray .env in the working tree out of the test
    monkeypatch.chdir(tmp_path)


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("TEMP", str(tmp_path))
    config = get_config([])
    assert config.mailbox_dir == Path(tmp_path)
    assert config.command_file == "ae_command.json"
    assert config.result_file == "ae_mcp_result.json"
    assert config.freshness_window_seconds == 30.0
    assert config.default_wait_ms == 5000
    assert config.resource_wait_ms == 1000


def test_environment_then_cli_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("AE_MCP_MAILBOX_DIR", str(tmp_path / "env"))
    monkeypatch.setenv("AE_MCP_FRESHNESS_WINDOW_SECONDS", "45")
    config = get_config(["serve", f"--mailbox-dir={tmp_path / 'cli'}", "--wait-ms=8000"])

    assert config.mailbox_dir == tmp_path / "cli"
    assert config.freshness_window_seconds == 45.0
    assert config.default_wait_ms == 8000


def test_out_of_range_wait_is_rejected():
    with pytest.raises(ValidationError):
        get_config(["--wait-ms=100"])
