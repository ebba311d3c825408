import asyncio
import os
import time

import pytest

import ae_communicator
from ae_communicator import STALE_RESULTS_WARNING, CommandManager, get_command_manager
from ae_mailbox import FileMailbox, MailboxError


def _age_result_file(mailbox, seconds):
    past = time.time() - seconds
    os.utime(mailbox.result_path, (past, past))


def test_clear_then_read_reports_waiting(manager):
    manager.clear_results()
    outcome = manager.read_results()

    assert outcome.state == "fresh"
    assert outcome.success
    assert outcome.waiting
    assert outcome.data["status"] == "waiting"


def test_result_within_window_is_fresh(manager, mailbox):
    mailbox.write_result({"status": "success"})
    _age_result_file(mailbox, 25)

    outcome = manager.read_results()
    assert outcome.state == "fresh"
    assert outcome.warning is None
    assert 24 <= outcome.age_seconds <= 30


def test_result_past_window_is_stale(manager, mailbox):
    mailbox.write_result({"status": "success"})
    _age_result_file(mailbox, 35)

    outcome = manager.read_results()
    assert outcome.state == "stale"
    assert outcome.success
    assert outcome.data == {"status": "success"}
    assert outcome.warning == STALE_RESULTS_WARNING


def test_freshness_window_is_configurable(mailbox):
    manager = CommandManager(mailbox, freshness_window=5.0)
    mailbox.write_result({"status": "success"})
    _age_result_file(mailbox, 10)
    assert manager.read_results().state == "stale"


def test_missing_result_file(manager):
    outcome = manager.read_results()
    assert outcome.state == "missing"
    assert not outcome.success
    assert outcome.error_code == "RESULTS_NOT_FOUND"
    assert "does not exist" in outcome.error


def test_unreadable_result_is_an_error_outcome(manager, mailbox):
    mailbox.result_path.write_text("{broken", encoding="utf-8")
    outcome = manager.read_results()
    assert outcome.state == "error"
    assert outcome.error_code == "JSON_PARSE_ERROR"


def test_write_command_overwrites_previous(manager, mailbox):
    first = manager.write_command("listCompositions")
    second = manager.write_command("getProjectInfo", {"includeItems": False})

    document = mailbox.read_command()
    assert first.id != second.id
    assert document["command"] == "getProjectInfo"
    assert document["id"] == second.id


def test_write_failure_propagates(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    manager = CommandManager(FileMailbox(blocker))
    with pytest.raises(MailboxError):
        manager.write_command("listCompositions")


def test_mismatched_command_id_is_flagged(manager, mailbox):
    handle = manager.dispatch("listCompositions")
    mailbox.write_result({"status": "success", "commandId": "someone-else"})

    outcome = manager.read_results(expected_id=handle.command_id)
    assert outcome.state == "fresh"
    assert outcome.correlated is False
    assert "different command" in outcome.warning


def test_result_without_command_id_is_accepted(manager, mailbox):
    handle = manager.dispatch("listCompositions")
    mailbox.write_result({"status": "success"})

    outcome = manager.read_results(expected_id=handle.command_id)
    assert outcome.correlated is None
    assert outcome.warning is None


def test_execute_command_with_simulated_host(manager, host):
    started = time.monotonic()
    outcome = asyncio.run(
        manager.execute_command("createComposition", {"name": "Intro", "width": 1920, "height": 1080}, 2000)
    )

    assert time.monotonic() - started >= 1.9
    assert outcome.state == "fresh"
    assert outcome.correlated is True
    assert outcome.data["status"] == "success"
    assert outcome.data["composition"]["name"] == "Intro"


def test_execute_command_without_host_returns_placeholder(manager):
    outcome = asyncio.run(manager.execute_command("listCompositions", {}, 50))
    assert outcome.waiting


def test_stats_count_dispatches_and_reads(manager):
    manager.dispatch("listCompositions")
    manager.read_results()
    stats = manager.stats()

    assert stats["totalCommands"] == 1
    assert stats["resultsCleared"] == 1
    assert stats["reads"]["fresh"] == 1
    assert stats["lastCommand"] == "listCompositions"


def test_global_manager_must_be_set(monkeypatch):
    monkeypatch.setattr(ae_communicator, "_command_manager", None)
    with pytest.raises(RuntimeError):
        get_command_manager()
