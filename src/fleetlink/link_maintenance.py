"""
Maintains the link to the controller.

A ManagedControllerLink runs on its own background thread. It asks its connector for a fresh conduit,
hands the conduit to a ControllerConnection, lets the listener authenticate, and then reads messages and
dispatches them to the listener until the connection fails. It then starts over.

Failing to open a conduit is retried with exponential backoff: 1, 2, 4, ... seconds, capped at 30.
Opening a conduit resets the backoff, so after a connection ends the next attempt comes 1 second later.
"""
import enum
import logging

from fleetlink.connector.base import Connector, ConnectorError
from fleetlink.listener import ControllerEventListener
from fleetlink.protocol.codec import EndOfStreamError, UnknownVariantError
from fleetlink.protocol.connection import ControllerConnection
from fleetlink.protocol.messages import CONTROLLER_TO_SATELLITE, LinkServer, Ping, Request, TransportPlayer, \
    UnlinkServer
from fleetlink.support.background import BackgroundLoop
from fleetlink.support.events import EventSource
from fleetlink.support.mixins import StringerMixin
from fleetlink.support.retry_strategy import ExponentialBackoffRetryStrategy, RetryStrategy

logger = logging.getLogger(__name__)


class LinkState(enum.Enum):
    CONNECTING = 'connecting'
    RUNNING = 'running'
    DRAINING = 'draining'
    BACKING_OFF = 'backing off'
    STOPPED = 'stopped'


class LinkEvent(StringerMixin):
    """ base class for link events. """
    def __init__(self, link):
        self.link = link


class LinkConnectedEvent(LinkEvent):
    """ the link connected and the listener accepted the connection. """


class LinkDisconnectedEvent(LinkEvent):
    """ a connection the listener accepted has ended. """


class ManagedControllerLink(BackgroundLoop):
    """
    Keeps a connection to the controller open, reconnecting whenever it fails.

    :param connector: called to open a new conduit to the controller. Raises ConnectorError on failure.
    :param listener: receives the connection and the messages read from it.
    :param retry_strategy: gives the delay before the next attempt. Defaults to exponential backoff
        from 1 to 30 seconds.
    """

    handlers = {
        LinkServer: 'on_link_server_packet',
        UnlinkServer: 'on_unlink_server_packet',
        TransportPlayer: 'on_transport_player_packet',
        Request: 'on_request_packet',
        Ping: 'on_ping_packet',
    }

    def __init__(self, connector: Connector, listener: ControllerEventListener, retry_strategy: RetryStrategy=None,
                 name='controller-link', log=logger):
        super().__init__(name=name, log=log)
        self.connector = connector
        self.listener = listener
        self.retry_strategy = retry_strategy or ExponentialBackoffRetryStrategy()
        self.events = EventSource()
        self.state = LinkState.CONNECTING
        self._connection = None

    @property
    def connection(self):
        """ the live connection, or None while not connected. """
        return self._connection

    def loop(self):
        """ one attempt: connect, run the connection until it fails, then back off. """
        conduit = self._open()
        if conduit is not None:
            self._run_connection(ControllerConnection(conduit))
        if self.running():
            self.state = LinkState.BACKING_OFF
            self.sleep(self._next_delay(conduit is not None))

    def _open(self):
        """
        attempts to open a conduit to the controller.
        :return: the conduit, or None if the connector failed.
        """
        self.state = LinkState.CONNECTING
        self.logger.info("connecting to controller...")
        try:
            conduit = self.connector()
        except ConnectorError as e:
            self.logger.info("failed to connect to controller, backing off for %s seconds: %s",
                             self.retry_strategy(dryRun=True), e)
            return None
        self.retry_strategy.reset()
        return conduit

    def _next_delay(self, connected):
        # only consecutive failures to connect grow the delay
        return self.retry_strategy(dryRun=connected)

    def _run_connection(self, connection: ControllerConnection):
        """ runs a connection until it fails or the link is stopped. The connection is always closed. """
        accepted = False
        self._connection = connection
        try:
            if not self.running():
                return
            self.listener.on_connect(connection)
            accepted = True
            self.state = LinkState.RUNNING
            self.events.fire(LinkConnectedEvent(self))
            while self.running():
                self._read_and_dispatch(connection)
        except EndOfStreamError:
            self.logger.info("controller closed the connection")
        except (IOError, ConnectorError) as e:
            if self.running():
                self.logger.info("error while talking to controller: %s", e)
        except Exception as e:
            self.logger.exception("unexpected error handling controller connection: %s", e)
        finally:
            self.state = LinkState.DRAINING
            self._connection = None
            connection.close()
            if accepted:
                self._disconnected()

    def _disconnected(self):
        try:
            self.listener.on_disconnect()
        except Exception as e:
            self.logger.exception("listener failed handling disconnect: %s", e)
        self.events.fire(LinkDisconnectedEvent(self))

    def _read_and_dispatch(self, connection: ControllerConnection):
        try:
            message = connection.read()
        except UnknownVariantError as e:
            self.logger.warning("skipping message: %s", e)
            return
        self.dispatch(message)

    def dispatch(self, message):
        """ calls the listener's handler for the message. Messages only the satellite sends are logged and
            ignored. """
        handler = self.handlers.get(type(message))
        if handler is None:
            self.logger.info("unexpected %s message from controller, ignoring: %s", message.tag, message)
            return
        if message.direction != CONTROLLER_TO_SATELLITE:
            self.logger.info("controller sent %s, which it should not send", message.tag)
        getattr(self.listener, handler)(message)

    def stop(self, timeout=None):
        """ stops the link. A blocked read is aborted by closing the live connection. """
        self.stop_event.set()
        connection = self._connection
        if connection is not None:
            connection.close()
        super().stop(timeout)
        self.state = LinkState.STOPPED
