"""
Read-only resources exposed to MCP clients. Every resource body is JSON text.
"""

import logging
import os
import platform
import sys
import time
from typing import Any, Dict, Optional

from ae_communicator import get_command_manager
from ae_formatter import to_json
from ae_mailbox import FileMailbox, MailboxError, utc_timestamp

logger = logging.getLogger(__name__)

RECENT_CONNECTION_SECONDS = 60.0

_STARTED_AT = time.time()
_STARTED_AT_ISO = utc_timestamp()

COMMAND_RESOURCES: Dict[str, Dict[str, str]] = {
    "aftereffects://compositions": {"name": "Compositions List", "command": "listCompositions"},
    "aftereffects://project/info": {"name": "Project Info", "command": "getProjectInfo"},
    "aftereffects://composition/active/layers": {"name": "Layer Info", "command": "getLayerInfo"},
}

EFFECT_TEMPLATE_CATALOG: Dict[str, Dict[str, Any]] = {
    "basic": {
        "gaussian-blur": {
            "description": "Gaussian Blur, a soft blur",
            "category": "blur",
            "matchName": "ADBE Gaussian Blur 2",
            "parameters": {"blurriness": {"type": "number", "default": 20, "range": [0, 1000], "unit": "pixels"}},
            "performance": "Medium",
        },
        "directional-blur": {
            "description": "Directional Blur, motion-style blur along one angle",
            "category": "blur",
            "matchName": "ADBE Motion Blur",
            "parameters": {
                "direction": {"type": "number", "default": 0, "range": [0, 360], "unit": "degrees"},
                "blur_length": {"type": "number", "default": 10, "range": [0, 1000], "unit": "pixels"},
            },
            "performance": "Medium",
        },
        "color-balance": {
            "description": "Hue/Saturation adjustment",
            "category": "color",
            "matchName": "ADBE HUE SATURATION",
            "parameters": {
                "hue": {"type": "number", "default": 0, "range": [-180, 180]},
                "saturation": {"type": "number", "default": 0, "range": [-100, 100]},
                "lightness": {"type": "number", "default": 0, "range": [-100, 100]},
            },
            "performance": "Low",
        },
        "brightness-contrast": {
            "description": "Brightness & Contrast",
            "category": "color",
            "matchName": "ADBE Brightness & Contrast 2",
            "parameters": {
                "brightness": {"type": "number", "default": 0, "range": [-150, 150]},
                "contrast": {"type": "number", "default": 0, "range": [-100, 100]},
            },
            "performance": "Low",
        },
        "curves": {
            "description": "Curves tonal adjustment",
            "category": "color",
            "matchName": "ADBE CurvesCustom",
            "parameters": {},
            "performance": "Low",
        },
        "glow": {
            "description": "Glow around bright areas",
            "category": "stylize",
            "matchName": "ADBE Glo2",
            "parameters": {
                "glow_threshold": {"type": "number", "default": 50, "range": [0, 100], "unit": "%"},
                "glow_radius": {"type": "number", "default": 15, "range": [0, 1000], "unit": "pixels"},
                "glow_intensity": {"type": "number", "default": 1, "range": [0, 255]},
            },
            "performance": "Medium",
        },
        "drop-shadow": {
            "description": "Drop Shadow behind the layer",
            "category": "stylize",
            "matchName": "ADBE Drop Shadow",
            "parameters": {
                "color": {"type": "color", "default": [0, 0, 0, 1]},
                "opacity": {"type": "number", "default": 50, "range": [0, 100], "unit": "%"},
                "direction": {"type": "number", "default": 135, "range": [0, 360], "unit": "degrees"},
                "distance": {"type": "number", "default": 10, "range": [0, 500], "unit": "pixels"},
                "softness": {"type": "number", "default": 10, "range": [0, 100], "unit": "pixels"},
            },
            "performance": "Low",
        },
    },
    "composite": {
        "cinematic-look": {
            "description": "Curves, vibrance and vignette for a graded film look",
            "category": "color-grading",
            "effects": ["ADBE CurvesCustom", "ADBE Vibrance", "ADBE Vignette"],
            "parameters": {
                "vibrance": {"type": "number", "default": 15, "range": [-100, 100]},
                "saturation": {"type": "number", "default": -5, "range": [-100, 100]},
                "vignette_amount": {"type": "number", "default": 15, "range": [0, 100]},
            },
            "performance": "High",
        },
        "text-pop": {
            "description": "Drop shadow and glow to lift text off busy backgrounds",
            "category": "text",
            "effects": ["ADBE Drop Shadow", "ADBE Glo2"],
            "parameters": {
                "shadow_opacity": {"type": "number", "default": 75, "range": [0, 100]},
                "glow_intensity": {"type": "number", "default": 1.5, "range": [0, 5]},
            },
            "performance": "Medium",
        },
    },
}


def _error_body(error: str, message: Optional[str]) -> str:
    return to_json({"error": error, "message": message, "timestamp": utc_timestamp()})


async def read_command_resource(uri: str) -> str:
    """Dispatch the read command behind `uri`, wait once, return what the panel wrote."""
    entry = COMMAND_RESOURCES[uri]
    try:
        manager = get_command_manager()
        outcome = await manager.execute_command(entry["command"], {}, manager.resource_wait_ms)
    except (MailboxError, RuntimeError) as e:
        logger.error(f"❌ Failed to get {entry['name']}: {e}")
        return _error_body(f"Failed to get {entry['name']}", getattr(e, "message", str(e)))

    if not outcome.success:
        return _error_body("Failed to get data", outcome.error)
    return to_json(outcome.data)


def effect_templates() -> str:
    catalog: Dict[str, Any] = {group: dict(templates) for group, templates in EFFECT_TEMPLATE_CATALOG.items()}
    categories = sorted({t["category"] for group in EFFECT_TEMPLATE_CATALOG.values() for t in group.values()})
    catalog["metadata"] = {
        "lastUpdated": utc_timestamp(),
        "totalTemplates": sum(len(group) for group in EFFECT_TEMPLATE_CATALOG.values()),
        "categories": categories,
    }
    return to_json(catalog)


def system_status() -> Dict[str, Any]:
    status: Dict[str, Any] = {
        "mcpServer": {"status": "running", "startTime": _STARTED_AT_ISO},
        "afterEffects": {"connectionStatus": "unknown", "lastResultTime": None, "bridgePanelRequired": True},
        "files": {},
    }
    try:
        mailbox = get_command_manager().mailbox
        if not isinstance(mailbox, FileMailbox):
            return status
        status["files"] = {
            "mailboxDirectory": str(mailbox.directory),
            "commandFile": str(mailbox.command_path),
            "resultFile": str(mailbox.result_path),
            "commandFileExists": mailbox.command_path.exists(),
            "resultFileExists": mailbox.result_path.exists(),
        }
        age = mailbox.file_age(mailbox.result_path)
        if age is not None:
            last = time.time() - age
            status["afterEffects"]["lastResultTime"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(last))
            status["afterEffects"]["connectionStatus"] = "recent" if age < RECENT_CONNECTION_SECONDS else "stale"
    except (OSError, RuntimeError) as e:
        logger.warning(f"⚠️ Could not inspect mailbox: {e}")
        status["afterEffects"]["connectionStatus"] = "error"
    return status


def _memory_usage() -> Optional[Dict[str, Any]]:
    if sys.platform == "win32":
        return None
    import resource

    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    scale = 1 if sys.platform == "darwin" else 1024
    return {"maxResidentBytes": usage.ru_maxrss * scale}


def performance_metrics() -> Dict[str, Any]:
    try:
        operations = get_command_manager().stats()
    except RuntimeError:
        operations = {}
    return {
        "timestamp": utc_timestamp(),
        "memory": _memory_usage(),
        "system": {
            "platform": platform.platform(),
            "pythonVersion": platform.python_version(),
            "pid": os.getpid(),
            "uptimeSeconds": round(time.time() - _STARTED_AT, 1),
        },
        "operations": operations,
        "recommendations": [
            "Prefer batch operations over many single commands",
            "Close unused compositions to keep After Effects responsive",
            "Restart After Effects periodically to release memory",
        ],
    }
