import threading

import pytest

import ae_communicator
from ae_communicator import CommandManager
from ae_listener import MailboxListener, demo_handlers
from ae_mailbox import FileMailbox


@pytest.fixture
def mailbox(tmp_path):
    return FileMailbox(tmp_path)


@pytest.fixture
def manager(mailbox, monkeypatch):
    """A CommandManager installed as the process-wide manager for the test."""
    manager = CommandManager(mailbox, freshness_window=30.0, default_wait_ms=1000, resource_wait_ms=500)
    monkeypatch.setattr(ae_communicator, "_command_manager", manager)
    return manager


@pytest.fixture
def host(mailbox):
    """Reference listener polling the mailbox on a background thread."""
    listener = MailboxListener(mailbox, demo_handlers(), poll_interval=0.05)
    stop_event = threading.Event()
    thread = threading.Thread(target=listener.run, args=(stop_event,), daemon=True)
    thread.start()
    yield listener
    stop_event.set()
    thread.join(timeout=2)
