import os
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ae_mailbox import COMMAND_FILE_NAME, RESULT_FILE_NAME


def default_mailbox_dir() -> str:
    """Same directory the After Effects panel resolves as Folder.temp."""
    return os.getenv("TEMP") or os.getenv("TMP") or tempfile.gettempdir()


class BridgeConfig(BaseModel):
    mailbox_dir: Path
    command_file: str = COMMAND_FILE_NAME
    result_file: str = RESULT_FILE_NAME
    freshness_window_seconds: float = Field(30.0, gt=0)
    default_wait_ms: int = Field(5000, ge=1000, le=30000)
    resource_wait_ms: int = Field(1000, ge=0, le=30000)
    listener_poll_seconds: float = Field(1.0, gt=0, le=60)
    log_level: str = "INFO"
    # Agent mode only
    model: str = "gpt-4.1-nano"
    api_key: Optional[str] = None
    max_turns: int = Field(10, ge=1)


_ENV_FIELDS = {
    "mailbox_dir": "AE_MCP_MAILBOX_DIR",
    "command_file": "AE_MCP_COMMAND_FILE",
    "result_file": "AE_MCP_RESULT_FILE",
    "freshness_window_seconds": "AE_MCP_FRESHNESS_WINDOW_SECONDS",
    "default_wait_ms": "AE_MCP_DEFAULT_WAIT_MS",
    "resource_wait_ms": "AE_MCP_RESOURCE_WAIT_MS",
    "listener_poll_seconds": "AE_MCP_LISTENER_POLL_SECONDS",
    "log_level": "AE_MCP_LOG_LEVEL",
    "model": "LITELLM_MODEL",
    "api_key": "LITELLM_API_KEY",
    "max_turns": "AGENT_MAX_TURNS",
}

_CLI_FLAGS = {
    "--mailbox-dir=": "mailbox_dir",
    "--freshness-window=": "freshness_window_seconds",
    "--wait-ms=": "default_wait_ms",
    "--resource-wait-ms=": "resource_wait_ms",
    "--poll-seconds=": "listener_poll_seconds",
    "--log-level=": "log_level",
    "--model=": "model",
    "--api-key=": "api_key",
}


def get_config(argv: Optional[List[str]] = None) -> BridgeConfig:
    """Get configuration from .env, environment variables, then CLI args"""
    load_dotenv()

    values = {"mailbox_dir": default_mailbox_dir()}
    for field_name, env_key in _ENV_FIELDS.items():
        raw = os.getenv(env_key)
        if raw:
            values[field_name] = raw

    # Parse CLI args for overrides
    for arg in sys.argv[1:] if argv is None else argv:
        for flag, field_name in _CLI_FLAGS.items():
            if arg.startswith(flag):
                values[field_name] = arg.split("=", 1)[1]

    # pydantic coerces the env strings and raises ValidationError on bad values
    return BridgeConfig(**values)
