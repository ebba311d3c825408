import asyncio
import logging
import signal
import sys
import threading
from typing import List, Optional

from pydantic import ValidationError

from ae_communicator import CommandManager, set_command_manager
from ae_config import BridgeConfig, get_config
from ae_mailbox import FileMailbox

RUN_MODES = ("serve", "agent", "simulate-host")

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # stdout carries the MCP transport, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [ae-bridge] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )


def parse_mode(argv: List[str]) -> str:
    positional = [arg for arg in argv if not arg.startswith("--")]
    mode = positional[0] if positional else "serve"
    if mode not in RUN_MODES:
        logger.error(f"Unknown run mode \"{mode}\", expected one of: {', '.join(RUN_MODES)}")
        sys.exit(2)
    return mode


def build_mailbox(config: BridgeConfig) -> FileMailbox:
    mailbox = FileMailbox(config.mailbox_dir, config.command_file, config.result_file)
    if not mailbox.directory.exists():
        logger.warning(f"📁 Mailbox directory {mailbox.directory} does not exist, creating it")
        mailbox.directory.mkdir(parents=True, exist_ok=True)
    return mailbox


def setup_command_manager(config: BridgeConfig, mailbox: FileMailbox) -> CommandManager:
    manager = CommandManager(
        mailbox,
        freshness_window=config.freshness_window_seconds,
        default_wait_ms=config.default_wait_ms,
        resource_wait_ms=config.resource_wait_ms,
    )
    set_command_manager(manager)
    return manager


def run_serve() -> None:
    from ae_server import serve

    try:
        serve()
    except KeyboardInterrupt:
        logger.info("Server interrupted")


def run_agent(config: BridgeConfig) -> None:
    if not config.api_key:
        logger.error("LITELLM_API_KEY environment variable is required for agent mode")
        sys.exit(1)

    from ae_agent import AfterEffectsAgent

    agent = AfterEffectsAgent(config.model, config.api_key, max_turns=config.max_turns)

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        agent.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        asyncio.run(agent.repl())
    except KeyboardInterrupt:
        logger.info("Agent interrupted")
    finally:
        agent.shutdown()


def run_simulated_host(config: BridgeConfig, mailbox: FileMailbox) -> None:
    from ae_listener import MailboxListener, demo_handlers

    listener = MailboxListener(mailbox, demo_handlers(), poll_interval=config.listener_poll_seconds)
    stop_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    listener.run(stop_event)
    logger.info(f"Processed {listener.processed} commands")


def main(argv: Optional[List[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = get_config(argv)
    except ValidationError as e:
        configure_logging("INFO")
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(1)

    configure_logging(config.log_level)
    mode = parse_mode(argv)

    logger.info(f"Starting After Effects bridge ({mode})")
    logger.info(f"Mailbox directory: {config.mailbox_dir}")
    logger.info(f"Freshness window: {config.freshness_window_seconds}s")

    mailbox = build_mailbox(config)
    if mode == "simulate-host":
        run_simulated_host(config, mailbox)
        return

    setup_command_manager(config, mailbox)
    if mode == "agent":
        logger.info(f"LiteLLM Model: {config.model}")
        run_agent(config)
    else:
        run_serve()


if __name__ == "__main__":
    main()
