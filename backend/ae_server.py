"""
MCP stdio server for After Effects.

Registers the three tools, six resources and two prompts on a FastMCP
instance. All behavior lives in ae_operations / ae_resources / ae_prompts;
this module only adapts it to the MCP wire surface.
"""

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

import ae_operations
import ae_prompts
import ae_resources
from ae_formatter import ToolResponse, to_json

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "AfterEffectsServer",
    instructions=(
        "This server controls a running Adobe After Effects instance through the MCP Bridge Auto panel. "
        "Use run-script to queue one allow-listed operation, then get-results to read what After Effects "
        "wrote. Only one command can be in flight at a time. Call get-help for the operation catalog."
    ),
)


def _deliver(response: ToolResponse) -> str:
    # Raising marks the MCP result as isError while keeping the formatted text
    if response.is_error:
        raise ToolError(response.text)
    return response.text


# =============================================
# Tools
# =============================================


@mcp.tool(
    name="get-help",
    description="Get the usage guide for After Effects MCP integration",
)
async def get_help(topic: str = "all") -> str:
    """topic: setup, tools, effects, animation, troubleshooting, performance or all"""
    logger.info(f"📖 get-help topic={topic}")
    return _deliver(await ae_operations.get_help(topic))


@mcp.tool(
    name="run-script",
    description="Execute an allow-listed After Effects operation through the bridge panel",
)
async def run_script(
    script: str,
    parameters: Optional[Dict[str, Any]] = None,
    waitForResult: bool = False,
    timeout: Optional[int] = None,
) -> str:
    """
    script: operation name, see get-help topic "tools"
    parameters: operation arguments
    waitForResult: wait `timeout` ms and return the panel's result
    timeout: wait in milliseconds, 1000 to 30000 (default 5000)
    """
    logger.info(f"🛠️ run-script {script} wait={waitForResult}")
    return _deliver(await ae_operations.run_script(script, parameters, waitForResult, timeout))


@mcp.tool(
    name="get-results",
    description="Get and format the last result written by After Effects",
)
async def get_results(format: str = "formatted", includeMetadata: bool = True) -> str:
    """format: raw, formatted, summary or debug"""
    logger.info(f"📬 get-results format={format}")
    return _deliver(await ae_operations.get_results(format, includeMetadata))


# =============================================
# Resources
# =============================================


@mcp.resource(
    "aftereffects://compositions",
    name="compositions",
    description="All compositions in the open project",
    mime_type="application/json",
)
async def compositions() -> str:
    return await ae_resources.read_command_resource("aftereffects://compositions")


@mcp.resource(
    "aftereffects://project/info",
    name="project-info",
    description="Details of the open project",
    mime_type="application/json",
)
async def project_info() -> str:
    return await ae_resources.read_command_resource("aftereffects://project/info")


@mcp.resource(
    "aftereffects://composition/active/layers",
    name="layers",
    description="Layers of the active composition",
    mime_type="application/json",
)
async def active_layers() -> str:
    return await ae_resources.read_command_resource("aftereffects://composition/active/layers")


@mcp.resource(
    "aftereffects://effects/templates",
    name="effect-templates",
    description="Effect template catalog",
    mime_type="application/json",
)
def effect_templates() -> str:
    return ae_resources.effect_templates()


@mcp.resource(
    "aftereffects://system/status",
    name="system-status",
    description="Mailbox paths and After Effects connection status",
    mime_type="application/json",
)
def system_status() -> str:
    return to_json(ae_resources.system_status())


@mcp.resource(
    "aftereffects://system/performance",
    name="performance-metrics",
    description="Server process metrics and command counters",
    mime_type="application/json",
)
def performance_metrics() -> str:
    return to_json(ae_resources.performance_metrics())


# =============================================
# Prompts
# =============================================


@mcp.prompt(
    name="analyze-project",
    description="Analyze After Effects project structure, performance and optimization opportunities",
)
def analyze_project(analysisType: str = "comprehensive", includeRecommendations: str = "yes") -> str:
    return ae_prompts.analyze_project(analysisType, includeRecommendations)


@mcp.prompt(
    name="create-animation",
    description="Plan and build an animation step by step",
)
def create_animation(
    animationType: str = "text",
    style: str = "modern",
    duration: Optional[str] = None,
    complexity: Optional[str] = None,
) -> str:
    return ae_prompts.create_animation(animationType, style, duration, complexity)


def serve() -> None:
    """Run over stdio until the client disconnects."""
    logger.info("🚀 After Effects MCP server starting on stdio")
    mcp.run(transport="stdio")
