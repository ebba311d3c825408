import asyncio
import json
import os
import time

import ae_communicator
import ae_resources
from ae_mailbox import ResultSnapshot
from ae_prompts import analyze_project, create_animation
from ae_validator import EFFECT_TEMPLATES


def test_command_resource_returns_host_data(manager, host):
    body = json.loads(asyncio.run(ae_resources.read_command_resource("aftereffects://compositions")))
    assert body["status"] == "success"
    assert body["totalCount"] == 0


def test_command_resource_error_body_when_nothing_answers(manager, mailbox, monkeypatch):
    monkeypatch.setattr(mailbox, "read_result", lambda: ResultSnapshot(exists=False))
    body = json.loads(asyncio.run(ae_resources.read_command_resource("aftereffects://project/info")))
    assert body["error"] == "Failed to get data"
    assert "does not exist" in body["message"]


def test_command_resource_without_manager(monkeypatch):
    monkeypatch.setattr(ae_communicator, "_command_manager", None)
    body = json.loads(asyncio.run(ae_resources.read_command_resource("aftereffects://composition/active/layers")))
    assert body["error"] == "Failed to get Layer Info"


def test_effect_template_catalog_matches_validator():
    catalog = json.loads(ae_resources.effect_templates())
    names = [name for group in ("basic", "composite") for name in catalog[group]]
    assert sorted(names) == sorted(EFFECT_TEMPLATES)
    assert catalog["metadata"]["totalTemplates"] == len(EFFECT_TEMPLATES)


def test_system_status_recent_and_stale(manager, mailbox):
    status = ae_resources.system_status()
    assert status["afterEffects"]["connectionStatus"] == "unknown"
    assert status["files"]["resultFileExists"] is False

    mailbox.write_result({"status": "success"})
    assert ae_resources.system_status()["afterEffects"]["connectionStatus"] == "recent"

    past = time.time() - 90
    os.utime(mailbox.result_path, (past, past))
    status = ae_resources.system_status()
    assert status["afterEffects"]["connectionStatus"] == "stale"
    assert status["afterEffects"]["lastResultTime"].endswith("Z")


def test_performance_metrics_include_manager_counters(manager):
    manager.dispatch("listCompositions")
    metrics = ae_resources.performance_metrics()
    assert metrics["operations"]["totalCommands"] == 1
    assert metrics["system"]["uptimeSeconds"] >= 0


def test_analyze_project_prompt():
    text = analyze_project("performance", "yes")
    assert "rendering efficiency" in text
    assert "Optimization Suggestions" in text

    assert "Optimization Suggestions" not in analyze_project("structure", "no")
    assert "comprehensive" in analyze_project("unknown-kind")


def test_create_animation_prompt():
    text = create_animation("logo", "minimal", "5", "High")
    assert "logo animation" in text
    assert "**Style**: minimal" in text
    assert "**Duration**: 5 seconds" in text

    defaults = create_animation("something-else", "bold")
    assert "text animation" in defaults
    assert "TBD" in defaults
