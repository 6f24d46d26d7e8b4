"""
Routing on the proxy.

The controller tells the proxy which backends exist with LinkServer and UnlinkServer messages. Each
backend has a priority. Arriving players are sent to the default route: the first backend, in descending
priority and then in the order they were linked, that the host still has registered.
"""
import logging
import threading
import uuid

from fleetlink.host import HostAdapter
from fleetlink.listener import AuthenticatingListener
from fleetlink.protocol.messages import Authentication, LinkServer, ServerKind, TransportPlayer, UnlinkServer

logger = logging.getLogger(__name__)

PROXY_NAME = 'proxy'


class PriorityDirectory:
    """
    Backend names grouped into buckets by priority. A name is in at most one bucket.
    Iterating yields the names by descending priority, and within a bucket in the order they were added.

    >>> d = PriorityDirectory()
    >>> d.add('lobby-1', 10); d.add('limbo', 0); d.add('lobby-2', 10)
    >>> list(d)
    ['lobby-1', 'lobby-2', 'limbo']
    """

    def __init__(self):
        self._buckets = {}
        self._priorities = {}

    def add(self, name, priority):
        """ adds a name to the end of its bucket. A name already present is moved. """
        self.remove(name)
        self._buckets.setdefault(priority, []).append(name)
        self._priorities[name] = priority

    def remove(self, name) -> bool:
        priority = self._priorities.pop(name, None)
        if priority is None:
            return False
        bucket = self._buckets[priority]
        bucket.remove(name)
        if not bucket:
            del self._buckets[priority]
        return True

    def bucket(self, priority):
        return list(self._buckets.get(priority, ()))

    def priorities(self):
        """ the priorities that have names, highest first. """
        return sorted(self._buckets, reverse=True)

    def __iter__(self):
        for priority in self.priorities():
            yield from self._buckets[priority]

    def __contains__(self, name):
        return name in self._priorities

    def __len__(self):
        return len(self._priorities)


class DirectoryRouter(AuthenticatingListener):
    """
    The proxy's controller listener. Registers the linked backends with the host, keeps them in a
    PriorityDirectory, and moves players when the controller asks for it.

    The directory is changed on the link's read loop and read by the host when players arrive,
    so all access goes through a lock.
    """

    def __init__(self, host: HostAdapter, directory: PriorityDirectory=None, log=logger):
        super().__init__(Authentication(PROXY_NAME, host.listener_address(), ServerKind.proxy()), log)
        self.host = host
        self.directory = directory if directory is not None else PriorityDirectory()
        self._default = None
        self._lock = threading.Lock()

    def on_disconnect(self):
        super().on_disconnect()
        self.logger.info("keeping %d linked backends until the controller relinks them", len(self.directory))

    def on_link_server_packet(self, packet: LinkServer):
        self.on_link(packet.name, packet.address, packet.port, packet.priority)

    def on_unlink_server_packet(self, packet: UnlinkServer):
        self.on_unlink(packet.name)

    def on_transport_player_packet(self, packet: TransportPlayer):
        self.on_transport_player(packet.player, packet.to)

    def on_link(self, name, address, port, priority):
        self.logger.info("linking backend %s at %s:%s with priority %s", name, address, port, priority)
        self.host.register_backend(name, address, port)
        with self._lock:
            self.directory.add(name, priority)
            self.logger.debug("priority %s bucket: %s", priority, self.directory.bucket(priority))
        self.refresh_default_route()

    def on_unlink(self, name):
        self.logger.info("unlinking backend %s", name)
        if not self.host.deregister_backend(name):
            self.logger.warning("backend %s is not registered with the host", name)
        with self._lock:
            self.directory.remove(name)
        self.refresh_default_route()

    def on_transport_player(self, player, to):
        try:
            player_id = uuid.UUID(player)
        except ValueError:
            self.logger.warning("cannot transport player, %r is not a uuid", player)
            return
        handle = self.host.find_player(player_id)
        if handle is None:
            self.logger.warning("cannot transport player %s, they are not connected", player_id)
            return
        backend = self.host.lookup_backend(to)
        if backend is None:
            self.logger.warning("cannot transport player %s, backend %s is not registered", player_id, to)
            return
        self.host.move_player(handle, backend)
        self.logger.info("transported player %s to %s", player_id, to)

    def refresh_default_route(self):
        """
        points the default route at the first name in the directory that the host has registered.
        The host is not called while the lock is held, so a host may read current_default() from
        inside its own calls. Only the link thread refreshes the route.
        """
        with self._lock:
            candidates = list(self.directory)
        name = next((name for name in candidates if self.host.lookup_backend(name) is not None), None)
        with self._lock:
            if name is None:
                if self._default is not None:
                    self.logger.warning("no registered backend to route players to, keeping %s", self._default)
                else:
                    self.logger.warning("no registered backend to route players to")
                return self._default
            if name != self._default:
                self.logger.info("default route is now %s", name)
            self._default = name
            return name

    def current_default(self):
        """ the name of the backend arriving players are sent to, or None before any backend was linked. """
        with self._lock:
            return self._default
