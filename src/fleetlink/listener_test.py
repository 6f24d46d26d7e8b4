import unittest
from unittest.mock import Mock

from hamcrest import assert_that, is_, none, calling, raises

from fleetlink.listener import AuthenticatingListener, ControllerEventListener
from fleetlink.protocol.messages import Authentication, Ping, ServerKind


class ControllerEventListenerTest(unittest.TestCase):
    def test_on_connect_must_be_implemented(self):
        sut = ControllerEventListener()
        assert_that(calling(sut.on_connect).with_args(Mock()), raises(NotImplementedError))

    def test_packet_handlers_do_nothing_by_default(self):
        sut = ControllerEventListener()
        sut.on_disconnect()
        sut.on_ping_packet(Ping(1))


class AuthenticatingListenerTest(unittest.TestCase):
    def setUp(self):
        self.authentication = Authentication("lobby-1", "0.0.0.0:25565", ServerKind.lobby())
        self.sut = AuthenticatingListener(self.authentication, log=Mock())

    def test_writes_authentication_on_connect(self):
        connection = Mock()
        self.sut.on_connect(connection)
        connection.write.assert_called_once_with(self.authentication)
        assert_that(self.sut.connection, is_(connection))

    def test_failed_authentication_keeps_no_connection(self):
        connection = Mock()
        connection.write.side_effect = BrokenPipeError()
        assert_that(calling(self.sut.on_connect).with_args(connection), raises(BrokenPipeError))
        assert_that(self.sut.connection, is_(none()))

    def test_disconnect_forgets_connection(self):
        self.sut.on_connect(Mock())
        self.sut.on_disconnect()
        assert_that(self.sut.connection, is_(none()))
