"""
The controller listener of a backend server.

The controller pings each backend. A backend answers only while it accepts players, so the controller
stops sending players to a backend that has closed. Operators open and close the backend with the
close command, and players ask for a minigame with the request command.
"""
import logging
import threading

from fleetlink.connector.base import ConnectionNotConnectedError
from fleetlink.listener import AuthenticatingListener
from fleetlink.protocol.messages import Authentication, Ping, Pong, Request, ServerKind, UpdateActive

logger = logging.getLogger(__name__)


class NodeController(AuthenticatingListener):
    def __init__(self, authentication: Authentication, log=logger):
        super().__init__(authentication, log)
        self._accepting_players = False
        self._lock = threading.Lock()

    @property
    def accepting_players(self) -> bool:
        with self._lock:
            return self._accepting_players

    def on_ping_packet(self, packet: Ping):
        accepting = self.accepting_players
        self.logger.debug("received %s, accepting players: %s", packet, accepting)
        if accepting:
            self.connection.write(Pong(packet.timer))

    def set_accepting_players(self, value: bool):
        """ opens or closes the backend. The controller is told straight away if it can be, and otherwise
            learns of it from the next ping. """
        # held across the write so the last update sent matches the flag
        with self._lock:
            self._accepting_players = value
            connection = self.connection
            if connection is None:
                self.logger.debug("not connected, controller learns accepting=%s from the next ping", value)
                return
            try:
                connection.write(UpdateActive(value))
            except IOError as e:
                self.logger.debug("could not send accepting=%s to controller: %s", value, e)

    def request(self, minigame_kind, player=None):
        """
        Asks the controller for a minigame server.
        :param minigame_kind: the kind of minigame
        :param player: the uuid string of the requesting player, if any
        :raises ConnectionNotConnectedError: if there is no live connection to the controller,
            or the request could not be written to it.
        """
        message = Request(ServerKind.minigame(minigame_kind), player)
        connection = self.connection
        if connection is None:
            raise ConnectionNotConnectedError("not connected to the controller")
        try:
            connection.write(message)
        except IOError as e:
            raise ConnectionNotConnectedError("lost connection to the controller: %s" % e) from e
        self.logger.info("requested %s", message)
