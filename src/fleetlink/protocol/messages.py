"""
The messages exchanged with the controller.

Each message is exactly one variant. A variant is its own class deriving from Message; the class
attribute `tag` is the name the variant has on the wire and `fields` lists the payload keys in order.
Values are validated on construction, so a message that exists is a message that can be encoded.
"""
from fleetlink.support.mixins import CommonEqualityMixin, StringerMixin

I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1
U16_MAX = (1 << 16) - 1

SATELLITE_TO_CONTROLLER = 'satellite->controller'
CONTROLLER_TO_SATELLITE = 'controller->satellite'


def check_string(name, value):
    if not isinstance(value, str):
        raise ValueError("%s must be a string, not %r" % (name, value))
    return value


def check_int(name, value, low, high):
    # bool is an int subclass, but never a valid integer field
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("%s must be an integer, not %r" % (name, value))
    if not low <= value <= high:
        raise ValueError("%s out of range %d..%d: %d" % (name, low, high, value))
    return value


def check_i32(name, value):
    return check_int(name, value, I32_MIN, I32_MAX)


def check_bool(name, value):
    if not isinstance(value, bool):
        raise ValueError("%s must be a boolean, not %r" % (name, value))
    return value


class MinigamePayload(CommonEqualityMixin, StringerMixin):
    """ names the variety of minigame a Minigame server hosts. """

    def __init__(self, kind):
        self.kind = check_string('kind', kind)


class ServerKind(CommonEqualityMixin, StringerMixin):
    """
    The kind of server a satellite runs in. The payload is present only for minigame servers.
    """
    PROXY = 'Proxy'
    LOBBY = 'Lobby'
    MINIGAME = 'Minigame'
    LIMBO = 'Limbo'
    tags = (PROXY, LOBBY, MINIGAME, LIMBO)

    def __init__(self, tag, payload: MinigamePayload=None):
        if tag not in self.tags:
            raise ValueError("unknown server kind %r" % (tag,))
        if (tag == self.MINIGAME) != (payload is not None):
            raise ValueError("a payload is required for, and only for, %s servers (got %s with %s)"
                             % (self.MINIGAME, tag, payload))
        self.tag = tag
        self.payload = payload

    @classmethod
    def proxy(cls):
        return cls(cls.PROXY)

    @classmethod
    def lobby(cls):
        return cls(cls.LOBBY)

    @classmethod
    def limbo(cls):
        return cls(cls.LIMBO)

    @classmethod
    def minigame(cls, kind):
        return cls(cls.MINIGAME, MinigamePayload(kind))

    @classmethod
    def of(cls, tag, minigame_kind=None):
        """ builds the kind from its tag, and the minigame kind when the tag is Minigame. """
        return cls.minigame(minigame_kind) if tag == cls.MINIGAME else cls(tag)


class Message(CommonEqualityMixin, StringerMixin):
    """ base class of all message variants. """
    tag = None
    fields = ()
    direction = None


class Authentication(Message):
    """ the first message sent on every connection, identifying the satellite. """
    tag = 'Authentication'
    fields = ('name', 'ip', 'kind')
    direction = SATELLITE_TO_CONTROLLER

    def __init__(self, name, ip, kind: ServerKind):
        self.name = check_string('name', name)
        self.ip = check_string('ip', ip)
        if not isinstance(kind, ServerKind):
            raise ValueError("kind must be a ServerKind, not %r" % (kind,))
        self.kind = kind


class LinkServer(Message):
    """ tells the proxy a backend is available for players. Higher priorities are preferred. """
    tag = 'LinkServer'
    fields = ('name', 'address', 'port', 'priority')
    direction = CONTROLLER_TO_SATELLITE

    def __init__(self, name, address, port, priority):
        self.name = check_string('name', name)
        self.address = check_string('address', address)
        self.port = check_int('port', port, 0, U16_MAX)
        self.priority = check_i32('priority', priority)


class UnlinkServer(Message):
    tag = 'UnlinkServer'
    fields = ('name',)
    direction = CONTROLLER_TO_SATELLITE

    def __init__(self, name):
        self.name = check_string('name', name)


class TransportPlayer(Message):
    """ asks the proxy to move a player to the named backend. """
    tag = 'TransportPlayer'
    fields = ('player', 'to')
    direction = CONTROLLER_TO_SATELLITE

    def __init__(self, player, to):
        self.player = check_string('player', player)
        self.to = check_string('to', to)


class Request(Message):
    """ asks the controller for a server of the given kind, optionally on behalf of a player. """
    tag = 'Request'
    fields = ('kind', 'player')
    direction = SATELLITE_TO_CONTROLLER

    def __init__(self, kind: ServerKind, player=None):
        if not isinstance(kind, ServerKind):
            raise ValueError("kind must be a ServerKind, not %r" % (kind,))
        self.kind = kind
        self.player = None if player is None else check_string('player', player)


class Ping(Message):
    tag = 'Ping'
    fields = ('timer',)
    direction = CONTROLLER_TO_SATELLITE

    def __init__(self, timer):
        self.timer = check_i32('timer', timer)


class Pong(Message):
    tag = 'Pong'
    fields = ('timer',)
    direction = SATELLITE_TO_CONTROLLER

    def __init__(self, timer):
        self.timer = check_i32('timer', timer)


class UpdateActive(Message):
    tag = 'UpdateActive'
    fields = ('active',)
    direction = SATELLITE_TO_CONTROLLER

    def __init__(self, active):
        self.active = check_bool('active', active)


variants = (Authentication, LinkServer, UnlinkServer, TransportPlayer, Request, Ping, Pong, UpdateActive)

variants_by_tag = {variant.tag: variant for variant in variants}
