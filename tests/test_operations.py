import asyncio
import os
import time

import ae_communicator
from ae_operations import get_help, get_results, run_script


def test_unknown_script_never_touches_the_mailbox(manager, mailbox):
    response = asyncio.run(run_script("deleteEverything", {}))

    assert response.is_error
    assert "not found or not allowed" in response.text
    assert "createComposition" in response.text
    assert not mailbox.command_path.exists()
    assert not mailbox.result_path.exists()


def test_missing_parameters_are_listed_together(manager, mailbox):
    response = asyncio.run(run_script("setLayerKeyframe", {"compIndex": 1}))

    assert response.is_error
    assert "layerIndex, propertyName, timeInSeconds, value" in response.text
    assert not mailbox.command_path.exists()


def test_invalid_parameters_carry_hints(manager, mailbox):
    response = asyncio.run(run_script("createComposition", {"name": "Intro", "width": -1}))

    assert response.is_error
    assert any("width" in s for s in response.suggestions)
    assert response.data["errors"][0]["field"] == "width"
    assert not mailbox.command_path.exists()


def test_timeout_outside_range_is_rejected(manager, mailbox):
    response = asyncio.run(run_script("listCompositions", {}, True, 500))
    assert response.is_error
    assert "timeout" in response.text
    assert not mailbox.command_path.exists()


def test_fire_and_forget_queues_command(manager, mailbox):
    response = asyncio.run(run_script("createComposition", {"name": "Intro", "width": 1920, "height": 1080}))

    assert response.kind == "queued"
    document = mailbox.read_command()
    assert document["command"] == "createComposition"
    assert document["status"] == "pending"
    details = response.data["details"]
    assert details["commandId"] == document["id"]
    assert details["category"] == "creation"
    assert details["estimatedTime"] == "Quick"
    assert mailbox.read_result().data["status"] == "waiting"


def test_expression_on_any_property_is_queued(manager, mailbox):
    parameters = {"compIndex": 1, "layerIndex": 1, "propertyName": "Source Text", "expressionString": "time.toFixed(2)"}
    response = asyncio.run(run_script("setLayerExpression", parameters))

    assert response.kind == "queued"
    document = mailbox.read_command()
    assert document["command"] == "setLayerExpression"
    assert document["args"]["propertyName"] == "Source Text"


def test_oversized_dimensions_are_queued_with_warning(manager, mailbox):
    response = asyncio.run(run_script("createComposition", {"name": "Huge", "width": 8193, "height": 1080}))

    assert response.kind == "queued"
    assert response.data["details"]["warnings"]
    assert mailbox.read_command()["args"]["width"] == 8193


def test_wait_for_result_with_host(manager, host):
    response = asyncio.run(run_script("createComposition", {"name": "Intro"}, True, 2000))

    assert response.kind == "success"
    assert "Intro" in response.text
    assert response.data["composition"]["name"] == "Intro"
    assert host.processed == 1


def test_wait_for_result_without_host_warns(manager):
    response = asyncio.run(run_script("listCompositions", {}, True, 1000))

    assert response.kind == "success"
    assert "has not written a result yet" in response.warning


def test_mailbox_write_failure_suggests_filesystem_checks(tmp_path, monkeypatch):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    from ae_communicator import CommandManager
    from ae_mailbox import FileMailbox

    monkeypatch.setattr(ae_communicator, "_command_manager", CommandManager(FileMailbox(blocker)))
    response = asyncio.run(run_script("listCompositions"))

    assert response.is_error
    assert "AE_MCP_MAILBOX_DIR" in response.text
    assert response.data["code"] == "FILE_WRITE_ERROR"


def test_get_results_without_file(manager):
    response = asyncio.run(get_results())
    assert response.is_error
    assert "does not exist" in response.text


def test_get_results_renders_batch_summary(manager, mailbox):
    mailbox.write_result({"status": "success", "totalItems": 4, "successful": 3, "failed": 1})

    formatted = asyncio.run(get_results("formatted"))
    assert "3/4 items processed successfully" in formatted.text
    assert "**batchOperation:** Yes" in formatted.text

    summary = asyncio.run(get_results("summary", False))
    assert "Batch Operation: 3/4 successful" in summary.text
    assert "batchOperation" not in summary.text


def test_get_results_raw_and_debug(manager, mailbox):
    mailbox.write_result({"status": "success", "value": 1})

    raw = asyncio.run(get_results("raw"))
    assert '"value": 1' in raw.text

    debug = asyncio.run(get_results("debug"))
    assert "Debug Information" in debug.text
    assert '"state": "fresh"' in debug.text


def test_get_results_stale_is_flagged(manager, mailbox):
    mailbox.write_result({"status": "success"})
    past = time.time() - 120
    os.utime(mailbox.result_path, (past, past))

    response = asyncio.run(get_results())
    assert not response.is_error
    assert "**state:** stale" in response.text
    assert response.warning


def test_get_results_rejects_unknown_format(manager):
    response = asyncio.run(get_results("xml"))
    assert response.is_error


def test_get_results_is_not_consuming(manager, mailbox):
    mailbox.write_result({"status": "success"})
    asyncio.run(get_results())
    assert mailbox.read_result().data == {"status": "success"}


def test_help_topics(manager):
    tools = asyncio.run(get_help("tools"))
    assert "batchSetLayerKeyframes" in tools.text
    assert "Required: layerProperties" in tools.text

    everything = asyncio.run(get_help())
    assert "Troubleshooting" in everything.text
    assert "Setup" in everything.text

    bad = asyncio.run(get_help("cooking"))
    assert bad.is_error
