"""
Front-end operations shared by the MCP server and the agent tools.

get_help, run_script and get_results compose registry -> validator ->
command manager -> response formatter. None of them raise: every outcome,
including unexpected failures, comes back as a ToolResponse.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ae_communicator import ReadOutcome, get_command_manager
from ae_formatter import FILESYSTEM_TROUBLESHOOTING, ResponseFormatter, ToolResponse, is_batch_result, to_json
from ae_mailbox import MailboxError, utc_timestamp
from ae_registry import ALLOWED_SCRIPTS, lookup, missing_required_params, scripts_by_category
from ae_validator import ANIMATABLE_PROPERTIES, EFFECT_TEMPLATES, validate_arguments

logger = logging.getLogger(__name__)

HelpTopic = Literal["setup", "tools", "effects", "animation", "troubleshooting", "performance", "all"]
ResultFormat = Literal["raw", "formatted", "summary", "debug"]

MIN_TIMEOUT_MS = 1000
MAX_TIMEOUT_MS = 30000

PARAMETER_SUGGESTIONS: List[str] = [
    "Check the script's required parameters with the `get-help` tool (topic \"tools\")",
    "Pass parameters as a JSON object keyed by parameter name",
]

RESULTS_SUGGESTIONS: List[str] = [
    "Ensure a script command has been executed",
    "Check After Effects status and the MCP Bridge Auto panel",
    "Wait for script execution to complete before getting results",
]


class HelpArgs(BaseModel):
    topic: HelpTopic = "all"


class RunScriptArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script: str = Field(min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    wait_for_result: bool = Field(False, alias="waitForResult")
    timeout: int = Field(5000, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)


class GetResultsArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    format: ResultFormat = "formatted"
    include_metadata: bool = Field(True, alias="includeMetadata")


def _argument_errors(error: ValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in e['loc']) or 'arguments'}: {e['msg']}" for e in error.errors()]


def _script_catalog() -> str:
    return "\n".join(
        f"• `{name}`: {info.description} ({info.category})" for name, info in ALLOWED_SCRIPTS.items()
    )


def _join_warnings(*warnings: Optional[str]) -> Optional[str]:
    present = [w for w in warnings if w]
    return " ".join(present) if present else None


# =============================================
# get-help
# =============================================


def _tools_section() -> str:
    lines = [
        "# 🛠️ Tools",
        "",
        "- `get-help`: this guide",
        "- `run-script`: run one allow-listed After Effects operation",
        "- `get-results`: read the last result the panel wrote",
        "",
        "Workflow: `run-script` queues the command, the panel picks it up on its next poll,",
        "then `get-results` shows what it wrote. Pass `waitForResult: true` to wait in one call.",
    ]
    for category, names in scripts_by_category().items():
        lines.append("")
        lines.append(f"## {category}")
        for name in names:
            info = ALLOWED_SCRIPTS[name]
            required = ", ".join(info.required_params) or "none"
            lines.append(f"- `{name}` ({info.estimated_time}): {info.description}. Required: {required}")
    return "\n".join(lines)


def _help_sections() -> Dict[str, str]:
    return {
        "setup": (
            "# 🚀 Setup\n\n"
            "1. Install the bridge panel script into After Effects' ScriptUI Panels folder\n"
            "2. Open After Effects and choose Window > mcp-bridge-auto.jsx\n"
            "3. Turn auto-run ON and keep the panel open; it checks for commands every second\n"
            "4. Check the `aftereffects://system/status` resource to confirm the panel is answering\n\n"
            "The server and the panel share two files in the temp directory: "
            "ae_command.json and ae_mcp_result.json. Set AE_MCP_MAILBOX_DIR if After Effects "
            "resolves a different temp directory than this process."
        ),
        "tools": _tools_section(),
        "effects": (
            "# ✨ Effects\n\n"
            "- `applyEffect`: one effect by match name, e.g. \"ADBE Gaussian Blur 2\"\n"
            "- `applyEffectTemplate`: one preset template on one layer\n"
            "- `batchApplyEffects`: effects on several layers of one composition\n"
            "- `batchApplyEffectTemplates`: up to 50 template applications\n\n"
            "Templates: " + ", ".join(f"`{t}`" for t in EFFECT_TEMPLATES) + "\n\n"
            "```json\n"
            + to_json(
                {
                    "script": "applyEffectTemplate",
                    "parameters": {"templateName": "cinematic-look", "compName": "Color Comp", "layerIndex": 1},
                }
            )
            + "\n```"
        ),
        "animation": (
            "# 🎬 Animation\n\n"
            "Keyframes target these properties: "
            + ", ".join(ANIMATABLE_PROPERTIES)
            + ". Expressions can target any property by name, such as \"Source Text\".\n"
            "Position, Scale and Anchor Point take arrays such as [960, 540]; Rotation takes a "
            "number; Opacity takes 0 to 100.\n\n"
            "```json\n"
            + to_json(
                {
                    "script": "setLayerKeyframe",
                    "parameters": {
                        "compIndex": 1,
                        "layerIndex": 1,
                        "propertyName": "Position",
                        "timeInSeconds": 0,
                        "value": [100, 100],
                    },
                }
            )
            + "\n```\n\n"
            "`batchSetLayerKeyframes` accepts up to 200 keyframes in one command."
        ),
        "troubleshooting": (
            "# 🔧 Troubleshooting\n\n"
            "- Results say \"waiting\": the panel has not answered yet. Call `get-results` again.\n"
            "- Results file does not exist: the panel never wrote one. Check that it is open.\n"
            "- Results may be stale: the file is older than the freshness window, so it probably "
            "belongs to an earlier command.\n"
            "- Results belong to a different command: another client overwrote the mailbox. "
            "Only one command can be in flight at a time.\n"
            "- File write errors: check AE_MCP_MAILBOX_DIR exists and is writable."
        ),
        "performance": (
            "# ⚡ Performance\n\n"
            "- Prefer batch operations over many single calls; each command costs at least one panel poll\n"
            "- Batch limits: 50 layers to create, 100 property sets, 200 keyframes\n"
            "- Raise `timeout` for Long operations when using `waitForResult`\n"
            "- See `aftereffects://system/performance` for command counters"
        ),
    }


async def get_help(topic: str = "all") -> ToolResponse:
    """Usage guide for one topic, or every topic when topic is "all"."""
    try:
        args = HelpArgs(topic=topic)
    except ValidationError as e:
        return ResponseFormatter.error(f"Unknown help topic \"{topic}\"", _argument_errors(e))

    sections = _help_sections()
    content = "\n\n".join(sections.values()) if args.topic == "all" else sections[args.topic]
    return ResponseFormatter.info("After Effects MCP Help", content)


# =============================================
# run-script
# =============================================


def _outcome_response(script: str, outcome: ReadOutcome, advisory: Optional[str]) -> ToolResponse:
    if outcome.state == "missing":
        return ResponseFormatter.error(outcome.error or "Results file does not exist", RESULTS_SUGGESTIONS)
    if outcome.state == "error":
        return ResponseFormatter.error(
            f"Failed to read results: {outcome.error}", FILESYSTEM_TROUBLESHOOTING, {"code": outcome.error_code}
        )

    still_waiting = (
        "After Effects has not written a result yet; use the get-results tool to check again."
        if outcome.waiting
        else None
    )
    return ResponseFormatter.success(
        f"Script \"{script}\" execution completed",
        outcome.data,
        warning=_join_warnings(outcome.warning, still_waiting, advisory),
    )


async def run_script(
    script: str,
    parameters: Optional[Dict[str, Any]] = None,
    wait_for_result: bool = False,
    timeout: Optional[int] = None,
) -> ToolResponse:
    """
    Validate an operation and hand it to the After Effects panel.

    Args:
        script: Registry operation name
        parameters: Argument bag for the operation
        wait_for_result: Wait `timeout` ms and return what the panel wrote
        timeout: Wait in milliseconds (1000-30000), defaults to the configured wait

    Returns:
        A queued response, a success response, or an error response
    """
    try:
        manager = get_command_manager()
        args = RunScriptArgs(
            script=script,
            parameters=parameters or {},
            wait_for_result=wait_for_result,
            timeout=timeout if timeout is not None else manager.default_wait_ms,
        )
    except ValidationError as e:
        return ResponseFormatter.error("Invalid run-script arguments", _argument_errors(e))
    except RuntimeError as e:
        logger.error(f"❌ {e}")
        return ResponseFormatter.error(str(e))

    info = lookup(args.script)
    if info is None:
        logger.warning(f"🚫 Rejected unknown script \"{args.script}\"")
        return ResponseFormatter.error(
            f"Script \"{args.script}\" not found or not allowed",
            ["Check script name spelling", "Available scripts:\n" + _script_catalog()],
        )

    missing = missing_required_params(info, args.parameters)
    if missing:
        return ResponseFormatter.error(
            f"Missing required parameters: {', '.join(missing)}",
            PARAMETER_SUGGESTIONS,
            {"script": args.script, "missing": missing},
        )

    report = validate_arguments(args.script, args.parameters)
    if not report.ok:
        return ResponseFormatter.error(
            f"Invalid parameters for \"{args.script}\"",
            report.hints(),
            {"script": args.script, "errors": [asdict(issue) for issue in report.errors]},
        )
    advisory = "; ".join(report.warning_messages()) or None

    try:
        handle = manager.dispatch(args.script, args.parameters)
        if args.wait_for_result:
            outcome = await manager.await_result(handle, args.timeout)
            return _outcome_response(args.script, outcome, advisory)

        details: Dict[str, Any] = {
            **args.parameters,
            "category": info.category,
            "estimatedTime": info.estimated_time,
            "commandId": handle.command_id,
        }
        if advisory:
            details["warnings"] = report.warning_messages()
        return ResponseFormatter.queued_command(args.script, details)
    except MailboxError as e:
        logger.error(f"❌ Mailbox error for {args.script}: {e.message}")
        return ResponseFormatter.error(
            f"Failed to hand \"{args.script}\" to After Effects: {e.message}", FILESYSTEM_TROUBLESHOOTING, e.payload
        )
    except Exception as e:
        logger.exception(f"❌ Unexpected failure running {args.script}")
        return ResponseFormatter.error(f"Script execution failed: {e}")


# =============================================
# get-results
# =============================================


async def get_results(format: str = "formatted", include_metadata: bool = True) -> ToolResponse:
    """Read the result slot and render it without consuming it."""
    try:
        args = GetResultsArgs(format=format, include_metadata=include_metadata)
    except ValidationError as e:
        return ResponseFormatter.error("Invalid get-results arguments", _argument_errors(e))

    try:
        manager = get_command_manager()
        outcome = manager.read_results(expected_id=manager.last_command_id)
        if outcome.state == "missing":
            return ResponseFormatter.error(outcome.error or "Failed to get results", RESULTS_SUGGESTIONS)
        if outcome.state == "error":
            return ResponseFormatter.error(
                f"Error occurred when getting results: {outcome.error}",
                FILESYSTEM_TROUBLESHOOTING,
                {"code": outcome.error_code},
            )

        debug_info = {"timestamp": utc_timestamp(), "outcome": asdict(outcome)} if args.format == "debug" else None
        content = ResponseFormatter.render_result(outcome.data, args.format, debug_info)
        metadata = None
        if args.include_metadata:
            metadata = {
                "timestamp": utc_timestamp(),
                "format": args.format,
                "state": outcome.state,
                "ageSeconds": round(outcome.age_seconds, 1) if outcome.age_seconds is not None else "unknown",
                "dataType": type(outcome.data).__name__,
                "warning": outcome.warning or "None",
                "batchOperation": "Yes" if is_batch_result(outcome.data) else "No",
            }
        response = ResponseFormatter.info("Script Execution Results", content, metadata, data=outcome.data)
        response.warning = outcome.warning
        return response
    except Exception as e:
        logger.exception("❌ Unexpected failure reading results")
        return ResponseFormatter.error(f"Error occurred when getting results: {e}", FILESYSTEM_TROUBLESHOOTING)
