"""
After Effects Mailbox - File-backed command/result slots

This module owns the two well-known JSON documents shared with the
After Effects bridge panel: the command slot and the result slot.
Each slot holds a single document and the last writer wins.
"""

import json
import logging
import os
import tempfile
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

COMMAND_FILE_NAME = "ae_command.json"
RESULT_FILE_NAME = "ae_mcp_result.json"

WAITING_MESSAGE = "Waiting for After Effects to execute new command..."

CommandStatus = Literal["pending", "running", "completed", "error"]


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MailboxError(Exception):
    """
    Raised when a mailbox slot cannot be written or read.

    Carries a structured payload so callers can render recovery steps.
    Payload shape: { code: str, message: str, details: dict }
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details: Dict[str, Any] = details or {}
        self.payload = {"code": code, "message": message, "details": self.details}
        super().__init__(message)


class CommandEnvelope(BaseModel):
    """The single outstanding command handed to the host."""

    command: str
    args: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=utc_timestamp)
    status: CommandStatus = "pending"
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)


def waiting_placeholder() -> Dict[str, Any]:
    return {"status": "waiting", "message": WAITING_MESSAGE, "timestamp": utc_timestamp()}


@dataclass
class ResultSnapshot:
    """Raw view of the result slot at read time."""

    exists: bool
    data: Any = None
    modified_at: Optional[float] = None
    read_at: float = 0.0

    @property
    def age_seconds(self) -> Optional[float]:
        if self.modified_at is None:
            return None
        return max(0.0, self.read_at - self.modified_at)


class MailboxChannel(Protocol):
    """Single-slot, last-writer-wins channel to the host process."""

    def write_command(self, envelope: CommandEnvelope) -> None: ...

    def reset_result(self, placeholder: Dict[str, Any]) -> None: ...

    def read_result(self) -> ResultSnapshot: ...


class FileMailbox:
    """
    MailboxChannel backed by two JSON files in a shared directory.

    The host panel polls `command_path` and writes `result_path`.
    Writes go through a sibling temp file and os.replace so the panel never
    observes a partially written document.
    """

    def __init__(
        self,
        directory: Path | str,
        command_file: str = COMMAND_FILE_NAME,
        result_file: str = RESULT_FILE_NAME,
    ):
        self.directory = Path(directory)
        self.command_path = self.directory / command_file
        self.result_path = self.directory / result_file

    # Producer side
    def write_command(self, envelope: CommandEnvelope) -> None:
        self._write_json(self.command_path, envelope.model_dump())

    def reset_result(self, placeholder: Dict[str, Any]) -> None:
        self._write_json(self.result_path, placeholder)

    def read_result(self) -> ResultSnapshot:
        now = time.time()
        try:
            modified_at = self.result_path.stat().st_mtime
        except FileNotFoundError:
            return ResultSnapshot(exists=False, read_at=now)
        except OSError as e:
            raise MailboxError(
                "FILE_READ_ERROR",
                f"Failed to read file: {self.result_path}",
                {"path": str(self.result_path), "reason": str(e)},
            ) from e
        try:
            data = self._read_json(self.result_path)
        except MailboxError as e:
            # Removed between stat and read
            if e.code == "FILE_NOT_FOUND":
                return ResultSnapshot(exists=False, read_at=now)
            raise
        return ResultSnapshot(exists=True, data=data, modified_at=modified_at, read_at=now)

    # Consumer side, used by listeners
    def read_command(self) -> Optional[Dict[str, Any]]:
        if not self.command_path.exists():
            return None
        return self._read_json(self.command_path)

    def claim_command(self) -> Optional[Dict[str, Any]]:
        """
        Take the pending command out of the slot.

        The slot is renamed away before it is read, so a command written by
        the producer after the claim lands in a fresh slot and is never
        overwritten or removed by this listener.
        """
        claim_path = self.command_path.with_name(f".{self.command_path.name}.claimed")
        try:
            os.replace(self.command_path, claim_path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise MailboxError(
                "FILE_READ_ERROR",
                f"Failed to claim file: {self.command_path}",
                {"path": str(self.command_path), "reason": str(e)},
            ) from e
        try:
            return self._read_json(claim_path)
        finally:
            try:
                os.unlink(claim_path)
            except OSError:
                pass

    def write_result(self, result: Any) -> None:
        self._write_json(self.result_path, result)

    def file_age(self, path: Path) -> Optional[float]:
        """Seconds since the file was last modified, None when absent."""
        try:
            return max(0.0, time.time() - path.stat().st_mtime)
        except OSError:
            return None

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        except OSError as e:
            raise MailboxError(
                "FILE_WRITE_ERROR",
                f"Failed to write file: {path}",
                {"path": str(path), "reason": str(e)},
            ) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise MailboxError(
                "FILE_WRITE_ERROR",
                f"Failed to write file: {path}",
                {"path": str(path), "reason": str(e)},
            ) from e
        logger.debug(f"💾 Wrote {path.name} ({path})")

    def _read_json(self, path: Path) -> Any:
        try:
            content = path.read_text(encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise MailboxError("FILE_NOT_FOUND", f"File does not exist: {path}", {"path": str(path)}) from e
        except OSError as e:
            raise MailboxError(
                "FILE_READ_ERROR",
                f"Failed to read file: {path}",
                {"path": str(path), "reason": str(e)},
            ) from e
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise MailboxError(
                "JSON_PARSE_ERROR",
                f"JSON parsing failed: {e}",
                {"path": str(path)},
            ) from e
