"""
After Effects Tools - OpenAI Agent Tools

This module defines the tools that the in-process OpenAI Agent can use to
drive After Effects through the bridge panel. They wrap the same operations
the MCP server exposes, so both front ends behave identically.
"""

import logging
from typing import Any, Dict, Optional

from agents import function_tool

import ae_operations
import ae_resources
from ae_formatter import to_json

logger = logging.getLogger(__name__)


# ============================================
# === Category 1: Orientation ================
# ============================================

@function_tool
async def get_help(topic: str = "all") -> str:
    """Return the usage guide for the After Effects bridge.

    Purpose & Use Case
    --------------------
    Lists every allow-listed operation with its category, estimated time and
    required parameters, plus guides for effects, animation and troubleshooting.

    Parameters (Args)
    ------------------
    topic (str, optional): One of "setup", "tools", "effects", "animation",
        "troubleshooting", "performance" or "all". Defaults to "all".

    Returns
    -------
    (str): Markdown guide text. An unknown topic returns an error message listing
    the valid choices.

    Agent Guidance
    --------------
    When to Use:
        - Before the first `run_script` call of a task, with topic "tools", to confirm operation names.
        - When a result says "waiting" or "stale", with topic "troubleshooting".
    """
    logger.info(f"📖 Getting help (topic={topic})")
    response = await ae_operations.get_help(topic)
    return response.text


@function_tool
async def get_system_status() -> str:
    """Report whether the After Effects panel has answered recently.

    Returns
    -------
    (str): JSON with mailbox paths, whether each file exists, the last result
    time and `connectionStatus` ("recent" under 60 seconds, "stale", "unknown" or "error").
    """
    logger.info("🩺 Getting system status")
    return to_json(ae_resources.system_status())


# ============================================
# === Category 2: Execution ==================
# ============================================

@function_tool(strict_mode=False)
async def run_script(
    script: str,
    parameters: Optional[Dict[str, Any]] = None,
    wait_for_result: bool = True,
    timeout_ms: Optional[int] = None,
) -> str:
    """Run one allow-listed After Effects operation.

    Purpose & Use Case
    --------------------
    The single entry point for every change or query in After Effects. The
    operation name is checked against the allow-list and its parameters are
    validated before anything reaches After Effects, so a rejected call has no
    side effects.

    Parameters (Args)
    ------------------
    script (str): Operation name, e.g. "createComposition", "batchSetLayerKeyframes".
    parameters (dict, optional): Operation arguments, e.g. {"name": "Intro", "width": 1920, "height": 1080}.
    wait_for_result (bool, optional): Wait and return After Effects' result in the same call.
        Defaults to True. With False the command is only queued; call `get_results` later.
    timeout_ms (int, optional): How long to wait, 1000 to 30000 ms. Defaults to the server setting.

    Returns
    -------
    (str): Markdown text. Success text includes the JSON the panel wrote. A
    queued response includes the command id. Errors start with "❌ **Error:**"
    and list the problem fields with remediation hints.

    Agent Guidance
    --------------
    When to Use:
        - For every After Effects operation. Prefer batch operations for more than a few items.

    When NOT to Use:
        - Do not fire several commands without waiting; only one command can be in flight and
          a second one overwrites the first.

    Chain of Thought Example
    -------------------------
    1. User asks: "Make a 10 second HD comp called Intro."
    2. Agent calls `run_script("createComposition", {"name": "Intro", "width": 1920, "height": 1080, "duration": 10})`.
    3. The success text shows the composition the panel created.
    """
    logger.info(f"🛠️ Running script {script} (wait={wait_for_result}, timeout={timeout_ms})")
    response = await ae_operations.run_script(script, parameters, wait_for_result, timeout_ms)
    if response.is_error:
        logger.error(f"❌ Tool run_script failed for {script}")
    return response.text


@function_tool
async def get_results(format: str = "formatted", include_metadata: bool = True) -> str:
    """Read the last result After Effects wrote, without consuming it.

    Parameters (Args)
    ------------------
    format (str, optional): "raw", "formatted", "summary" or "debug". Defaults to "formatted".
    include_metadata (bool, optional): Append state, age and warning metadata. Defaults to True.

    Returns
    -------
    (str): Rendered result text. `state: stale` in the metadata means the result
    probably belongs to an earlier command. A "waiting" status means the panel
    has not answered the latest command yet.
    """
    logger.info(f"📬 Getting results (format={format})")
    response = await ae_operations.get_results(format, include_metadata)
    return response.text


ALL_TOOLS = [get_help, get_system_status, run_script, get_results]
