"""
Mailbox Listener - host-side half of the bridge

The real listener is the "MCP Bridge Auto" panel running inside After Effects.
This module implements the same mailbox contract in Python so the server can
be exercised without After Effects (tests and the `simulate-host` run mode).

Contract:
- poll the command file on a bounded interval
- take the command out of the slot before running it
- run the named command with its args
- write a JSON result to the result file
"""

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional

from ae_mailbox import FileMailbox, MailboxError, utc_timestamp
from ae_registry import ALLOWED_SCRIPTS

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Any]


class MailboxListener:
    def __init__(self, mailbox: FileMailbox, handlers: Mapping[str, Handler], poll_interval: float = 1.0):
        self.mailbox = mailbox
        self.handlers = dict(handlers)
        self.poll_interval = poll_interval
        self.processed = 0

    def poll_once(self) -> bool:
        """Process the pending command, if any. Returns True when one ran."""
        try:
            document = self.mailbox.claim_command()
        except MailboxError as e:
            logger.error(f"❌ Could not read command file: {e.message}")
            return False
        if not isinstance(document, dict) or document.get("status", "pending") != "pending":
            return False

        command = str(document.get("command", ""))
        command_id = document.get("id")
        logger.info(f"🛠️ Executing {command} (ID: {command_id})")

        handler = self.handlers.get(command)
        if handler is None:
            result = {"status": "error", "message": f"Function not found: {command}"}
        else:
            try:
                data = handler(dict(document.get("args") or {}))
                result = {"status": "success", **data} if isinstance(data, dict) else {"status": "success", "data": data}
            except Exception as e:
                logger.exception(f"❌ Handler for {command} failed")
                result = {"status": "error", "message": str(e)}

        result.update({"command": command, "commandId": command_id, "timestamp": utc_timestamp()})
        self.mailbox.write_result(result)
        self.processed += 1
        return True

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """Poll until stop_event is set."""
        stop_event = stop_event or threading.Event()
        logger.info(f"🎧 Listening on {self.mailbox.command_path} every {self.poll_interval}s")
        while not stop_event.is_set():
            try:
                self.poll_once()
            except MailboxError as e:
                logger.error(f"❌ Mailbox error while processing command: {e.message}")
            stop_event.wait(self.poll_interval)
        logger.info("🛑 Listener stopped")


def _create_composition(args: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "composition": {
            "name": args.get("name"),
            "width": args.get("width", 1920),
            "height": args.get("height", 1080),
            "duration": args.get("duration", 10),
            "frameRate": args.get("frameRate", 30),
        }
    }


def _list_compositions(args: Dict[str, Any]) -> Dict[str, Any]:
    return {"compositions": [], "totalCount": 0}


def _get_project_info(args: Dict[str, Any]) -> Dict[str, Any]:
    return {"project": {"name": "Untitled Project", "numItems": 0}}


def _get_layer_info(args: Dict[str, Any]) -> Dict[str, Any]:
    return {"composition": args.get("compName") or None, "layers": []}


def _batch(items_field: str) -> Handler:
    def handler(args: Dict[str, Any]) -> Dict[str, Any]:
        items = args.get(items_field) or []
        return {"totalItems": len(items), "successful": len(items), "failed": 0, "results": []}

    return handler


def demo_handlers() -> Dict[str, Handler]:
    """Canned responses for every registry operation."""

    def echo(name: str) -> Handler:
        return lambda args: {"command": name, "args": args}

    handlers: Dict[str, Handler] = {name: echo(name) for name in ALLOWED_SCRIPTS}
    handlers.update(
        {
            "createComposition": _create_composition,
            "listCompositions": _list_compositions,
            "getProjectInfo": _get_project_info,
            "getLayerInfo": _get_layer_info,
            "batchCreateTextLayers": _batch("textLayers"),
            "batchCreateShapeLayers": _batch("shapeLayers"),
            "batchCreateSolidLayers": _batch("solidLayers"),
            "batchSetLayerProperties": _batch("layerProperties"),
            "batchSetLayerKeyframes": _batch("keyframes"),
            "batchSetLayerExpressions": _batch("expressions"),
            "batchApplyEffectTemplates": _batch("effectApplications"),
        }
    )
    return handlers
