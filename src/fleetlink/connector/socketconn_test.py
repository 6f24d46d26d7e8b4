import socket
import unittest
from unittest.mock import Mock, patch

from hamcrest import assert_that, is_, calling, raises, instance_of

from fleetlink.conduit.socket_conduit import SocketConduit
from fleetlink.connector.base import ConnectorError
from fleetlink.connector.socketconn import CONTROLLER_PORT, SocketConnector, TCPServerEndpoint


class TCPServerEndpointTest(unittest.TestCase):
    def test_key_prefers_hostname(self):
        assert_that(TCPServerEndpoint('controller', '10.0.0.1', 25550).key(), is_('controller:25550'))

    def test_address_prefers_ip_address(self):
        assert_that(TCPServerEndpoint('controller', '10.0.0.1', 25550).address, is_(('10.0.0.1', 25550)))

    def test_address_falls_back_to_hostname(self):
        assert_that(TCPServerEndpoint('controller', None).address, is_(('controller', CONTROLLER_PORT)))

    def test_default_port(self):
        assert_that(CONTROLLER_PORT, is_(25550))


class SocketConnectorTest(unittest.TestCase):
    def setUp(self):
        self.endpoint = TCPServerEndpoint(None, '127.0.0.1', 25550)

    @patch('socket.socket')
    def test_connect_returns_socket_conduit(self, socket_class):
        sock = socket_class.return_value
        sut = SocketConnector(self.endpoint, connect_timeout=3)
        conduit = sut()
        assert_that(conduit, is_(instance_of(SocketConduit)))
        assert_that(conduit.target, is_(sock))
        sock.settimeout.assert_any_call(3)
        sock.settimeout.assert_called_with(None)
        sock.connect.assert_called_once_with(('127.0.0.1', 25550))

    @patch('socket.socket')
    def test_connect_failure_raises_connector_error_and_closes(self, socket_class):
        sock = socket_class.return_value
        sock.connect.side_effect = ConnectionRefusedError()
        sut = SocketConnector(self.endpoint, report_errors=False)
        assert_that(calling(sut), raises(ConnectorError))
        sock.close.assert_called_once()

    def test_each_call_opens_a_new_socket(self):
        server = socket.socket()
        server.bind(('127.0.0.1', 0))
        server.listen(2)
        try:
            host, port = server.getsockname()
            sut = SocketConnector(TCPServerEndpoint(None, host, port))
            first, second = sut(), sut()
            try:
                assert_that(first.target is second.target, is_(False))
                assert_that(first.open, is_(True))
            finally:
                first.close()
                second.close()
        finally:
            server.close()

    def test_endpoint(self):
        assert_that(SocketConnector(self.endpoint).endpoint, is_(self.endpoint))
