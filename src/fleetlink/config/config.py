"""
Startup configuration of a satellite.

Values are layered: an optional configuration file is read first, and environment variables override
it. The result is validated against SATELLITE_SPEC, which also fills in the defaults.

An example configuration file::

    [controller]
    host = controller.internal
    port = 25550

    [server]
    name = alpha
    kind = Minigame
    minigame_kind = tag-ctf

    [backoff]
    maximum = 10
"""
import logging
import os
import socket

from configobj import ConfigObj, ConfigObjError, flatten_errors
from validate import Validator

from fleetlink.protocol.messages import ServerKind

# names the path of the configuration file
CONFIG_FILE_VARIABLE = 'FLEETLINK_CONFIG'

PROXY = 'proxy'
BACKEND = 'backend'
roles = (PROXY, BACKEND)

SATELLITE_SPEC = [
    "[controller]",
    "host = string(min=1)",
    "port = integer(min=1, max=65535, default=25550)",
    "connect_timeout = float(min=0, default=5.0)",
    "[server]",
    "name = string(min=1, default=None)",
    "kind = option('Proxy', 'Lobby', 'Minigame', 'Limbo', default=None)",
    "minigame_kind = string(min=1, default=None)",
    "[backoff]",
    "initial = float(min=0.001, default=1.0)",
    "maximum = float(min=0.001, default=30.0)",
    "[logging]",
    "level = option('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL', default='INFO')",
]

# environment variables and the configuration values they set
environment = {
    'CONTROLLER_IP': ('controller', 'host'),
    'SERVER_NAME': ('server', 'name'),
    'SERVER_KIND': ('server', 'kind'),
    'MINIGAME_KIND': ('server', 'minigame_kind'),
}


class StartupConfigError(ConfigObjError):
    """ the satellite cannot start with the configuration it was given. """


def setting_name(section, key):
    """
    The name a setting is known by to the operator: its environment variable, if it has one.

    >>> setting_name('controller', 'host')
    'CONTROLLER_IP'
    >>> setting_name('backoff', 'maximum')
    'backoff.maximum'
    """
    for variable, path in environment.items():
        if path == (section, key):
            return variable
    return '%s.%s' % (section, key)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def environment_config(environ) -> dict:
    """ the configuration values set by environment variables. Empty variables are ignored. """
    config = {}
    for variable, (section, key) in environment.items():
        value = environ.get(variable)
        if value:
            config.setdefault(section, {})[key] = value
    return config


def load_satellite_config(role, environ=os.environ, config_file=None) -> ConfigObj:
    """
    Loads and validates the configuration for a satellite.
    :param role: PROXY or BACKEND
    :param environ: the environment variables
    :param config_file: the configuration file to read. Defaults to the file named by FLEETLINK_CONFIG.
    :return: the validated configuration
    :raises StartupConfigError: when a required value is missing, or a value is invalid.
    """
    if role not in roles:
        raise ValueError("unknown role %s" % role)
    config_file = config_file or environ.get(CONFIG_FILE_VARIABLE)
    config = ConfigObj(configspec=SATELLITE_SPEC, interpolation='Template')
    if config_file:
        try:
            config.merge(load_config_file_base(config_file))
        except (IOError, ConfigObjError) as e:
            raise StartupConfigError("cannot read configuration file %s: %s" % (config_file, e)) from e
    config.merge(environment_config(environ))
    if role == PROXY:
        config.merge({'server': {'name': 'proxy', 'kind': 'Proxy'}})

    result = config.validate(Validator(), preserve_errors=True)
    problems = []
    if result is not True:
        for sections, key, error in flatten_errors(config, result):
            name = setting_name(sections[0] if sections else '', key)
            problems.append("%s is required" % name if error is False else "%s: %s" % (name, error))
    if role == BACKEND:
        server = config['server']
        missing = [key for key in ('name', 'kind') if server[key] is None]
        if server['kind'] == 'Minigame' and server['minigame_kind'] is None:
            missing.append('minigame_kind')
        problems.extend("%s is required" % setting_name('server', key) for key in missing)
    if problems:
        raise StartupConfigError("invalid configuration: %s" % ', '.join(problems))
    if role == PROXY:
        config['server']['minigame_kind'] = None
    return config


def server_kind(config) -> ServerKind:
    """ the kind of server the configuration describes. """
    server = config['server']
    kind = server['kind']
    return ServerKind.of(kind, server['minigame_kind'] if kind == 'Minigame' else None)


def resolve_controller_address(host):
    """
    Resolves the controller's hostname.
    :raises StartupConfigError: when the name does not resolve.
    """
    try:
        return socket.gethostbyname(host)
    except (socket.gaierror, UnicodeError) as e:
        raise StartupConfigError("cannot resolve controller address %s: %s" % (host, e)) from e


def configure_logging(config, root='fleetlink'):
    """ applies the configured level to the package's loggers. """
    logging.getLogger(root).setLevel(config['logging']['level'])
