import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_, contains_string, has_entries, instance_of

from fleetlink.commands import CloseCommand, RequestCommand, node_commands
from fleetlink.connector.base import ConnectionNotConnectedError

PLAYER = "550e8400-e29b-41d4-a716-446655440000"


def console():
    sender = Mock(spec=['send_message'])
    return sender


class CloseCommandTest(unittest.TestCase):
    def setUp(self):
        self.node = Mock()
        self.sut = CloseCommand(self.node)

    def test_close_true_opens(self):
        sender = console()
        assert_that(self.sut(sender, ["true"]), is_(True))
        self.node.set_accepting_players.assert_called_once_with(True)
        sender.send_message.assert_called_once()

    def test_close_false_closes(self):
        assert_that(self.sut(console(), ["false"]), is_(True))
        self.node.set_accepting_players.assert_called_once_with(False)

    def test_bad_argument_is_a_usage_error(self):
        for args in ([], ["maybe"], ["true", "false"]):
            sender = console()
            assert_that(self.sut(sender, args), is_(False))
            assert_that(sender.send_message.call_args.args[0], contains_string("usage"))
        self.node.set_accepting_players.assert_not_called()


class RequestCommandTest(unittest.TestCase):
    def setUp(self):
        self.node = Mock()
        self.sut = RequestCommand(self.node, log=Mock())

    def test_player_request_carries_the_player(self):
        sender = Mock()
        sender.unique_id = PLAYER
        assert_that(self.sut(sender, ["spleef"]), is_(True))
        self.node.request.assert_called_once_with("spleef", PLAYER)

    def test_console_request_has_no_player(self):
        assert_that(self.sut(console(), ["spleef"]), is_(True))
        self.node.request.assert_called_once_with("spleef", None)

    def test_not_connected_is_reported_to_the_sender(self):
        self.node.request.side_effect = ConnectionNotConnectedError("not connected")
        sender = console()
        assert_that(self.sut(sender, ["spleef"]), is_(True))
        assert_that(sender.send_message.call_args.args[0], contains_string("not connected"))

    def test_missing_kind_is_a_usage_error(self):
        sender = console()
        assert_that(self.sut(sender, []), is_(False))
        self.node.request.assert_not_called()


class NodeCommandsTest(unittest.TestCase):
    def test_commands_by_name(self):
        node = Mock()
        commands = node_commands(node)
        assert_that(commands, has_entries(close=instance_of(CloseCommand), request=instance_of(RequestCommand)))
        assert_that(commands["close"].node, is_(node))
