from ae_listener import MailboxListener, demo_handlers
from ae_mailbox import CommandEnvelope


def test_idle_mailbox_does_nothing(mailbox):
    listener = MailboxListener(mailbox, demo_handlers())
    assert listener.poll_once() is False
    assert not mailbox.result_path.exists()


def test_pending_command_is_executed_once(mailbox):
    envelope = CommandEnvelope(command="createComposition", args={"name": "Intro"})
    mailbox.write_command(envelope)
    listener = MailboxListener(mailbox, demo_handlers())

    assert listener.poll_once() is True
    result = mailbox.read_result().data
    assert result["status"] == "success"
    assert result["composition"]["name"] == "Intro"
    assert result["command"] == "createComposition"
    assert result["commandId"] == envelope.id
    assert mailbox.read_command() is None

    assert listener.poll_once() is False
    assert listener.processed == 1


def test_unknown_command_reports_error(mailbox):
    mailbox.write_command(CommandEnvelope(command="notAThing"))
    listener = MailboxListener(mailbox, demo_handlers())

    listener.poll_once()
    result = mailbox.read_result().data
    assert result["status"] == "error"
    assert "Function not found: notAThing" in result["message"]
    assert mailbox.read_command() is None


def test_handler_exception_becomes_error_result(mailbox):
    def explode(args):
        raise ValueError("no active composition")

    mailbox.write_command(CommandEnvelope(command="getLayerInfo"))
    listener = MailboxListener(mailbox, {"getLayerInfo": explode})

    listener.poll_once()
    result = mailbox.read_result().data
    assert result == {
        "status": "error",
        "message": "no active composition",
        "command": "getLayerInfo",
        "commandId": result["commandId"],
        "timestamp": result["timestamp"],
    }


def test_non_dict_handler_result_is_wrapped(mailbox):
    mailbox.write_command(CommandEnvelope(command="bridgeTestEffects"))
    listener = MailboxListener(mailbox, {"bridgeTestEffects": lambda args: "pong"})

    listener.poll_once()
    assert mailbox.read_result().data["data"] == "pong"


def test_batch_handler_counts_items(mailbox):
    mailbox.write_command(CommandEnvelope(command="batchCreateTextLayers", args={"textLayers": [{"text": "a"}, {"text": "b"}]}))
    MailboxListener(mailbox, demo_handlers()).poll_once()

    result = mailbox.read_result().data
    assert result["totalItems"] == 2
    assert result["successful"] == 2


def test_command_dispatched_during_handler_survives(mailbox):
    follow_up = CommandEnvelope(command="listCompositions")

    def create_and_follow_up(args):
        mailbox.write_command(follow_up)
        return {"composition": {"name": args.get("name")}}

    mailbox.write_command(CommandEnvelope(command="createComposition", args={"name": "Intro"}))
    listener = MailboxListener(mailbox, {**demo_handlers(), "createComposition": create_and_follow_up})

    assert listener.poll_once() is True
    pending = mailbox.read_command()
    assert pending["id"] == follow_up.id
    assert pending["status"] == "pending"

    assert listener.poll_once() is True
    assert listener.processed == 2
    assert mailbox.read_result().data["commandId"] == follow_up.id
    assert mailbox.read_command() is None
