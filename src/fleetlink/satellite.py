"""
Starts a satellite in its host.

A host calls start_proxy() or start_backend() once at startup. These read the configuration, build the
controller listener for the role, and start the link to the controller on its background thread.
If the configuration is unusable the error is logged and the satellite does not start.
"""
import logging
import os

from fleetlink.commands import node_commands
from fleetlink.config.config import BACKEND, PROXY, StartupConfigError, configure_logging, load_satellite_config, \
    resolve_controller_address, server_kind
from fleetlink.connector.socketconn import SocketConnector, TCPServerEndpoint
from fleetlink.directory import DirectoryRouter
from fleetlink.host import HostAdapter
from fleetlink.link_maintenance import ManagedControllerLink
from fleetlink.node import NodeController
from fleetlink.protocol.messages import Authentication
from fleetlink.support.events import QueuedEventSource
from fleetlink.support.retry_strategy import ExponentialBackoffRetryStrategy

logger = logging.getLogger(__name__)


class Satellite:
    """
    The running parts of a satellite.

    Link events are queued as they happen on the link's thread; update() delivers them to the
    handlers in events on the calling thread.
    """

    def __init__(self, config, listener, link: ManagedControllerLink, commands=None):
        self.config = config
        self.listener = listener
        self.link = link
        self.commands = commands or {}
        self.events = QueuedEventSource()
        link.events += self.events.fire

    def start(self):
        self.link.start()
        return self

    def update(self):
        """ delivers the queued link events. """
        self.events.publish()

    def stop(self, timeout=None):
        """ stops the link, closing its connection. """
        self.link.stop(timeout)


def controller_link(config, listener, log=logger) -> ManagedControllerLink:
    """ builds the link to the configured controller. """
    controller = config['controller']
    address = resolve_controller_address(controller['host'])
    endpoint = TCPServerEndpoint(controller['host'], address, controller['port'])
    connector = SocketConnector(endpoint, connect_timeout=controller['connect_timeout'])
    backoff = ExponentialBackoffRetryStrategy(config['backoff']['initial'], config['backoff']['maximum'])
    log.info("linking to controller at %s", endpoint)
    return ManagedControllerLink(connector, listener, backoff)


def _start(role, host: HostAdapter, environ, config_file, log):
    try:
        config = load_satellite_config(role, environ, config_file)
        configure_logging(config)
        if role == PROXY:
            listener = DirectoryRouter(host)
            commands = None
        else:
            listener = NodeController(Authentication(config['server']['name'], host.listener_address(),
                                                     server_kind(config)))
            commands = node_commands(listener)
        link = controller_link(config, listener, log)
    except (StartupConfigError, ValueError) as e:
        log.error("not starting %s satellite: %s", role, e)
        return None
    if role == PROXY:
        host.set_reconnect_target(listener.current_default)
    return Satellite(config, listener, link, commands).start()


def start_proxy(host: HostAdapter, environ=os.environ, config_file=None, log=logger):
    """
    Starts the satellite of a proxy.
    :return: the running Satellite, whose listener is the DirectoryRouter, or None when the
        configuration is unusable.
    """
    return _start(PROXY, host, environ, config_file, log)


def start_backend(host: HostAdapter, environ=os.environ, config_file=None, log=logger):
    """
    Starts the satellite of a backend server.
    :return: the running Satellite, whose listener is the NodeController and whose commands are the
        close and request commands, or None when the configuration is unusable.
    """
    return _start(BACKEND, host, environ, config_file, log)
