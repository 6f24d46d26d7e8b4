import logging
import socket

from fleetlink.conduit.base import Conduit
from fleetlink.conduit.socket_conduit import SocketConduit
from fleetlink.connector.base import Connector, ConnectorError

logger = logging.getLogger(__name__)

CONTROLLER_PORT = 25550


class TCPServerEndpoint:
    """
    Describes a TCP server endpoint.
    At least one of name or ip_address should be given. If both are given, the ip_address is used
    to connect.
    """
    def __init__(self, hostname, ip_address, port=CONTROLLER_PORT):
        self.hostname = hostname
        self.ip_address = ip_address
        self.port = port

    def key(self):
        """
        >>> TCPServerEndpoint(None, 'ipaddr', 55).key()
        'ipaddr:55'
        >>> TCPServerEndpoint('name', 'ipaddr', 55).key()
        'name:55'
        """
        return str(self.hostname or self.ip_address) + ':' + str(self.port)

    @property
    def address(self):
        """ the (host, port) tuple passed to socket.connect() """
        return (self.ip_address or self.hostname), self.port

    def __str__(self):
        return self.key()


class SocketConnector(Connector):
    """
    A connector that opens a TCP socket to the endpoint each time it is called.
    """
    def __init__(self, endpoint: TCPServerEndpoint, connect_timeout=5, sock_args=(socket.AF_INET, socket.SOCK_STREAM),
                 report_errors=True):
        """
        :param endpoint The server to connect to.
        :param connect_timeout seconds to wait for the connection to be established. Once connected,
            reads and writes block without a timeout.
        :param sock_args arguments for the socket.socket() call
        :param report_errors when False, failures to connect are logged at debug level rather than as warnings.
        """
        super().__init__()
        self._endpoint = endpoint
        self._connect_timeout = connect_timeout
        self._sock_args = sock_args
        self._report_errors = report_errors

    @property
    def endpoint(self):
        return self._endpoint

    def _connect(self) -> Conduit:
        sock = socket.socket(*self._sock_args)
        try:
            sock.settimeout(self._connect_timeout)
            sock.connect(self._endpoint.address)
            sock.settimeout(None)
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as e:
            sock.close()
            method = logger.warning if self._report_errors else logger.debug
            method("error opening socket to %s: %s", self._endpoint, e)
            raise ConnectorError("unable to connect to %s" % self._endpoint) from e
        logger.info("opened socket to %s", self._endpoint)
        return SocketConduit(sock)
