"""
The host process a satellite runs in. The proxy role needs a host that can register backends and move
players between them; the backend role only needs the host's listener address.
"""
import logging
import threading
from abc import abstractmethod

from fleetlink.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)


class HostAdapter:
    """ The operations the satellite needs from its host. Handles returned by the host are opaque. """

    @abstractmethod
    def register_backend(self, name, address, port):
        """ adds a backend. A backend already registered under the same name is replaced. """
        raise NotImplementedError

    @abstractmethod
    def deregister_backend(self, name) -> bool:
        """ removes a backend.
            :return: False if no backend was registered under the name. """
        raise NotImplementedError

    @abstractmethod
    def lookup_backend(self, name):
        """ :return: the handle of the named backend, or None """
        raise NotImplementedError

    @abstractmethod
    def listener_address(self) -> str:
        """ the address players connect to, as it is reported to the controller. """
        raise NotImplementedError

    @abstractmethod
    def find_player(self, player_id):
        """ :param player_id: a uuid.UUID
            :return: the handle of the connected player, or None """
        raise NotImplementedError

    @abstractmethod
    def move_player(self, player, backend):
        """ sends a player to a backend, both given as handles. """
        raise NotImplementedError

    @abstractmethod
    def set_reconnect_target(self, fn):
        """ installs the function the host calls to find the backend name for an arriving player. """
        raise NotImplementedError


class Backend(CommonEqualityMixin, StringerMixin):
    def __init__(self, name, address, port):
        self.name = name
        self.address = address
        self.port = port


class Player(CommonEqualityMixin, StringerMixin):
    def __init__(self, player_id, name=None):
        self.player_id = player_id
        self.name = name
        self.backend = None


class InMemoryHost(HostAdapter):
    """
    A host that keeps its backends and players in dictionaries.
    Used when embedding the satellite in a process without a game server, and in tests.
    """

    def __init__(self, listener_address='/0.0.0.0:25577', log=logger):
        self._listener_address = listener_address
        self.logger = log
        self.backends = {}
        self.players = {}
        self.moves = []
        self.reconnect_target = None
        self._lock = threading.Lock()

    def register_backend(self, name, address, port):
        with self._lock:
            self.backends[name] = Backend(name, address, port)
        self.logger.info("registered backend %s at %s:%s", name, address, port)

    def deregister_backend(self, name) -> bool:
        with self._lock:
            backend = self.backends.pop(name, None)
        return backend is not None

    def lookup_backend(self, name):
        with self._lock:
            return self.backends.get(name)

    def listener_address(self) -> str:
        return self._listener_address

    def add_player(self, player_id, name=None):
        player = Player(player_id, name)
        with self._lock:
            self.players[player_id] = player
        return player

    def find_player(self, player_id):
        with self._lock:
            return self.players.get(player_id)

    def move_player(self, player, backend):
        with self._lock:
            player.backend = backend
            self.moves.append((player, backend))

    def set_reconnect_target(self, fn):
        self.reconnect_target = fn

    def reconnect_server(self, player=None):
        """ the backend an arriving player is sent to, as chosen by the reconnect target. """
        name = self.reconnect_target() if self.reconnect_target else None
        backend = self.lookup_backend(name) if name is not None else None
        self.logger.info("sending player %s to %s", player.name if player else None, name)
        return backend
