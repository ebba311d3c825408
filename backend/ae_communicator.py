"""
After Effects Communicator - Command Manager

This module provides the communication layer between the Python server
and the After Effects bridge panel through the single-slot mailbox.

The panel runs on its own timer inside After Effects, so there is no
request/response pairing at the transport level. Ordering relies on the
sequence reset result -> write command -> wait -> read result.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from ae_mailbox import (
    CommandEnvelope,
    MailboxChannel,
    MailboxError,
    waiting_placeholder,
)

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_WINDOW_SECONDS = 30.0
DEFAULT_WAIT_MS = 5000
DEFAULT_RESOURCE_WAIT_MS = 1000

ReadState = Literal["fresh", "stale", "missing", "error"]

MISSING_RESULTS_MESSAGE = (
    "Results file does not exist. Please ensure After Effects is running "
    "and MCP Bridge Auto panel is open."
)
STALE_RESULTS_WARNING = (
    "Results file may be stale, After Effects may not have updated results correctly."
)
UNCORRELATED_RESULTS_WARNING = (
    "Results belong to a different command than the one dispatched; "
    "another command may have overwritten the mailbox."
)


@dataclass
class CommandHandle:
    """Returned by dispatch; pass to await_result or discard for fire-and-forget."""

    command_id: str
    command: str
    args: Dict[str, Any]
    dispatched_at: str


@dataclass
class ReadOutcome:
    """Interpretation of the result slot at one point in time."""

    state: ReadState
    data: Any = None
    age_seconds: Optional[float] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    correlated: Optional[bool] = None

    @property
    def success(self) -> bool:
        return self.state in ("fresh", "stale")

    @property
    def stale(self) -> bool:
        return self.state == "stale"

    @property
    def waiting(self) -> bool:
        """True while the reset placeholder is still in the slot."""
        return isinstance(self.data, dict) and self.data.get("status") == "waiting"


@dataclass
class ManagerStats:
    commands_dispatched: int = 0
    results_cleared: int = 0
    reads: Dict[str, int] = field(default_factory=lambda: {"fresh": 0, "stale": 0, "missing": 0, "error": 0})
    last_command: Optional[str] = None
    last_dispatch_at: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        total_reads = sum(self.reads.values())
        return {
            "totalCommands": self.commands_dispatched,
            "resultsCleared": self.results_cleared,
            "reads": dict(self.reads),
            "freshReadRate": round(self.reads["fresh"] / total_reads, 3) if total_reads else None,
            "lastCommand": self.last_command,
            "lastDispatchAt": self.last_dispatch_at,
        }


class CommandManager:
    """
    Hands commands to the After Effects panel and interprets its results.

    This class manages:
    - Writing command envelopes into the command slot
    - Resetting the result slot before a dispatch that will be awaited
    - Reading the result slot with staleness detection
    - A best-effort "execute and wait" built from a single fixed sleep
    """

    def __init__(
        self,
        mailbox: MailboxChannel,
        freshness_window: float = DEFAULT_FRESHNESS_WINDOW_SECONDS,
        default_wait_ms: int = DEFAULT_WAIT_MS,
        resource_wait_ms: int = DEFAULT_RESOURCE_WAIT_MS,
    ):
        """
        Initialize the command manager.

        Args:
            mailbox: The channel holding the command and result slots
            freshness_window: Max result age in seconds before it is reported as stale (default: 30.0)
            default_wait_ms: Wait used by await flows when the caller gives none (default: 5000)
            resource_wait_ms: Wait used by resource reads (default: 1000)
        """
        self.mailbox = mailbox
        self.freshness_window = freshness_window
        self.default_wait_ms = default_wait_ms
        self.resource_wait_ms = resource_wait_ms
        self.last_command_id: Optional[str] = None
        self._stats = ManagerStats()

    def write_command(self, command: str, args: Optional[Dict[str, Any]] = None) -> CommandEnvelope:
        """
        Write a command envelope, overwriting whatever the slot held.

        Raises:
            MailboxError: If the command file cannot be written
        """
        envelope = CommandEnvelope(command=command, args=args or {})
        self.mailbox.write_command(envelope)
        self._stats.commands_dispatched += 1
        self._stats.last_command = command
        self._stats.last_dispatch_at = envelope.timestamp
        self.last_command_id = envelope.id
        logger.info(f"✅ Command \"{command}\" written to mailbox (ID: {envelope.id})")
        return envelope

    def clear_results(self) -> None:
        """Replace the result slot with the waiting placeholder."""
        self.mailbox.reset_result(waiting_placeholder())
        self._stats.results_cleared += 1
        logger.info("🧹 Results file cleared")

    def read_results(self, expected_id: Optional[str] = None) -> ReadOutcome:
        """
        Read the result slot without consuming it.

        Args:
            expected_id: Correlation id of the command being awaited, if any

        Returns:
            ReadOutcome in one of four states: fresh, stale, missing, error
        """
        try:
            snapshot = self.mailbox.read_result()
        except MailboxError as e:
            logger.error(f"❌ Failed to read results: {e.message}")
            return self._record(ReadOutcome(state="error", error=e.message, error_code=e.code))

        if not snapshot.exists:
            logger.warning("📭 Results file does not exist yet")
            return self._record(
                ReadOutcome(state="missing", error=MISSING_RESULTS_MESSAGE, error_code="RESULTS_NOT_FOUND")
            )

        age = snapshot.age_seconds
        if age is not None and age > self.freshness_window:
            logger.warning(f"⏳ Results file is {age:.1f}s old (window: {self.freshness_window:.0f}s)")
            outcome = ReadOutcome(state="stale", data=snapshot.data, age_seconds=age, warning=STALE_RESULTS_WARNING)
        else:
            outcome = ReadOutcome(state="fresh", data=snapshot.data, age_seconds=age)

        if expected_id is not None:
            self._check_correlation(outcome, expected_id)
        return self._record(outcome)

    def dispatch(self, command: str, args: Optional[Dict[str, Any]] = None) -> CommandHandle:
        """Reset the result slot and hand the command to the panel."""
        self.clear_results()
        envelope = self.write_command(command, args)
        return CommandHandle(
            command_id=envelope.id,
            command=envelope.command,
            args=envelope.args,
            dispatched_at=envelope.timestamp,
        )

    async def await_result(self, handle: CommandHandle, timeout_ms: int) -> ReadOutcome:
        """
        Wait once for `timeout_ms`, then read the result slot.

        This does not guarantee the panel has finished; it only guarantees the
        read happens no earlier than `timeout_ms` after the call.
        """
        start_time = time.time()
        await asyncio.sleep(max(0, timeout_ms) / 1000.0)
        outcome = self.read_results(expected_id=handle.command_id)
        elapsed = time.time() - start_time
        if outcome.waiting:
            logger.warning(f"⏰ {handle.command} still waiting after {elapsed:.3f}s (ID: {handle.command_id})")
        else:
            logger.info(f"🎯 Read result for {handle.command} after {elapsed:.3f}s, state={outcome.state}")
        return outcome

    async def execute_command(
        self, command: str, args: Optional[Dict[str, Any]] = None, timeout_ms: int = 2000
    ) -> ReadOutcome:
        """clear_results -> write_command -> fixed wait -> read_results."""
        handle = self.dispatch(command, args)
        return await self.await_result(handle, timeout_ms)

    def stats(self) -> Dict[str, Any]:
        return self._stats.as_dict()

    def _check_correlation(self, outcome: ReadOutcome, expected_id: str) -> None:
        data = outcome.data
        if not isinstance(data, dict) or "commandId" not in data:
            return
        outcome.correlated = data.get("commandId") == expected_id
        if not outcome.correlated:
            logger.warning(f"🔀 Result commandId={data.get('commandId')} does not match {expected_id}")
            outcome.warning = (
                f"{outcome.warning} {UNCORRELATED_RESULTS_WARNING}" if outcome.warning else UNCORRELATED_RESULTS_WARNING
            )

    def _record(self, outcome: ReadOutcome) -> ReadOutcome:
        self._stats.reads[outcome.state] += 1
        return outcome


# Global command manager instance (will be set by main.py)
_command_manager: Optional[CommandManager] = None


def set_command_manager(manager: CommandManager) -> None:
    """Set the global command manager instance."""
    global _command_manager
    _command_manager = manager


def get_command_manager() -> CommandManager:
    """Get the global command manager instance."""
    if _command_manager is None:
        raise RuntimeError("Command manager not initialized. Call set_command_manager() first.")
    return _command_manager


async def execute_command(command: str, args: Optional[Dict[str, Any]] = None, timeout_ms: int = 2000) -> ReadOutcome:
    """
    Convenience function to execute a command using the global command manager.

    Args:
        command: The registry operation name
        args: Optional arguments
        timeout_ms: Fixed wait before reading the result slot

    Returns:
        The ReadOutcome observed after the wait
    """
    manager = get_command_manager()
    return await manager.execute_command(command, args, timeout_ms)