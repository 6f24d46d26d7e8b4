import logging
from abc import abstractmethod

from fleetlink.protocol.connection import ControllerConnection
from fleetlink.protocol.messages import Authentication, LinkServer, Ping, Request, TransportPlayer, UnlinkServer

logger = logging.getLogger(__name__)


class ControllerEventListener:
    """
    Receives the events of a controller link.

    on_connect() is called once for each new connection, before any message is read. Exceptions it raises
    end that connection. on_disconnect() is called once when a connection that on_connect() accepted ends.
    The packet handlers are called on the link's read loop, in the order the messages arrived, and may write
    to the connection.
    """

    @abstractmethod
    def on_connect(self, connection: ControllerConnection):
        raise NotImplementedError

    def on_disconnect(self):
        pass

    def on_link_server_packet(self, packet: LinkServer):
        pass

    def on_unlink_server_packet(self, packet: UnlinkServer):
        pass

    def on_transport_player_packet(self, packet: TransportPlayer):
        pass

    def on_request_packet(self, packet: Request):
        logger.info("ignoring request from controller: %s", packet)

    def on_ping_packet(self, packet: Ping):
        pass


class AuthenticatingListener(ControllerEventListener):
    """
    Writes the satellite's Authentication message as the first frame of every connection, and remembers the
    connection so that other threads can write to it while it is live.
    """

    def __init__(self, authentication: Authentication, log=logger):
        self.authentication = authentication
        self.logger = log
        self.connection = None

    def on_connect(self, connection: ControllerConnection):
        connection.write(self.authentication)
        self.connection = connection
        self.logger.info("authenticated with controller as %s (%s)", self.authentication.name,
                         self.authentication.kind.tag)

    def on_disconnect(self):
        self.connection = None
        self.logger.info("%s disconnected from controller", self.authentication.name)
