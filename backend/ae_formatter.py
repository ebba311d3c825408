"""
Response Formatter

Every tool outcome leaves the server through one of these constructors so
callers always see the same shapes: success, queued, error, info.
"""

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ResponseKind = Literal["success", "queued", "error", "info"]

DEFAULT_TROUBLESHOOTING: List[str] = [
    "Ensure After Effects is running",
    "Ensure the \"MCP Bridge Auto\" panel is open and auto-run is ON",
    "Use the `get-help` tool with topic \"troubleshooting\" for more guidance",
]

FILESYSTEM_TROUBLESHOOTING: List[str] = [
    "Verify the mailbox directory exists (AE_MCP_MAILBOX_DIR, default TEMP)",
    "Verify this process and After Effects can read and write files there",
    "Restart After Effects and the MCP server if the problem persists",
]


def to_json(data: Any) -> str:
    """Pretty JSON for caller-facing text, falling back to str() for odd values."""
    try:
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return json.dumps({"result": str(data)}, indent=2, ensure_ascii=False)


def is_batch_result(data: Any) -> bool:
    return isinstance(data, dict) and "totalItems" in data and "successful" in data


class ToolResponse(BaseModel):
    kind: ResponseKind
    text: str
    is_error: bool = False
    data: Any = None
    suggestions: List[str] = Field(default_factory=list)
    warning: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)

    def to_mcp(self) -> Dict[str, Any]:
        """MCP tool result shape."""
        return {"content": [{"type": "text", "text": self.text}], "isError": self.is_error, "_meta": self.meta}


class ResponseFormatter:
    @staticmethod
    def success(title: str, data: Any = None, warning: Optional[str] = None) -> ToolResponse:
        text = f"✅ {title}"
        if warning:
            text += f"\n\n⚠️ **Warning:** {warning}"
        if data is not None:
            text += f"\n\n📊 **Details:**\n```json\n{to_json(data)}\n```"
        return ToolResponse(kind="success", text=text, data=data, warning=warning)

    @staticmethod
    def queued_command(operation: str, details: Optional[Dict[str, Any]] = None) -> ToolResponse:
        details = details or {}
        param_text = f"\n\n📁 **Parameters:**\n```json\n{to_json(details)}\n```" if details else ""
        text = (
            f"✅ Command \"{operation}\" has been queued for execution{param_text}\n\n"
            "📋 **Next steps:**\n"
            "1. Ensure After Effects is running\n"
            "2. Ensure \"MCP Bridge Auto\" panel is open\n"
            "3. Wait a few seconds for execution to complete\n"
            "4. Use the \"get-results\" tool to view execution results"
        )
        return ToolResponse(kind="queued", text=text, data={"operation": operation, "details": details})

    @staticmethod
    def error(message: str, suggestions: Optional[List[str]] = None, data: Any = None) -> ToolResponse:
        steps = [s for s in (suggestions or []) if s] or list(DEFAULT_TROUBLESHOOTING)
        text = f"❌ **Error:** {message}\n\n🔧 **Troubleshooting suggestions:**\n"
        text += "\n".join(f"• {step}" for step in steps)
        return ToolResponse(kind="error", text=text, is_error=True, data=data, suggestions=steps)

    @staticmethod
    def info(title: str, content: str, extra: Optional[Dict[str, Any]] = None, data: Any = None) -> ToolResponse:
        text = f"ℹ️ **{title}**\n\n{content}"
        if extra:
            text += "\n\n📋 **Additional info:**\n"
            text += "\n".join(f"• **{key}:** {value}" for key, value in extra.items())
        return ToolResponse(kind="info", text=text, data=data, meta=dict(extra or {}))

    @staticmethod
    def render_result(data: Any, fmt: str = "formatted", debug_info: Optional[Dict[str, Any]] = None) -> str:
        """Render a result document as raw, formatted, summary or debug text."""
        if fmt == "raw":
            return to_json(data)

        if fmt == "summary":
            if not isinstance(data, dict):
                return f"Results type: {type(data).__name__}"
            lines = [f"• {key}: {type(value).__name__}" for key, value in data.items()]
            if is_batch_result(data):
                lines.append(f"• Batch Operation: {data['successful']}/{data['totalItems']} successful")
            return "📊 **Results Summary:**\n" + "\n".join(lines)

        if fmt == "debug":
            return f"🔧 **Debug Information:**\n```json\n{to_json(debug_info or {'result': data})}\n```"

        if not isinstance(data, (dict, list)):
            return f"📋 **Execution Results:**\n{data}"
        text = f"📋 **Execution Results:**\n```json\n{to_json(data)}\n```"
        if is_batch_result(data):
            text += f"\n\n📈 **Batch Summary:** {data['successful']}/{data['totalItems']} items processed successfully"
        return text
