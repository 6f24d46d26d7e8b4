"""
Encodes messages to and from bytes, and reads and writes them as frames on a stream.

A frame is a 4 byte big-endian length followed by that many bytes of MessagePack payload.
The payload is a map with a single entry: the variant tag mapped to a map of the variant's fields.

    >>> frame(Ping(7))
    b'\\x00\\x00\\x00\\x0e\\x81\\xa4Ping\\x81\\xa5timer\\x07'
"""
import struct

import msgpack

from fleetlink.protocol.io import read_exactly
from fleetlink.protocol.messages import Authentication, LinkServer, MinigamePayload, Ping, Pong, Request, \
    ServerKind, TransportPlayer, UnlinkServer, UpdateActive, variants_by_tag

LENGTH = struct.Struct('>I')
MAX_PAYLOAD = (1 << 32) - 1


class FrameError(IOError):
    """ base class for errors reading or writing frames. """


class EndOfStreamError(FrameError):
    """ the stream ended cleanly between frames. """


class ShortReadError(FrameError):
    """ the stream ended part way through a frame. """


class MalformedMessageError(FrameError):
    """ the payload is not a valid encoding of a known message. """


class UnknownVariantError(FrameError):
    """ the payload is a single-entry map, but the key names no known variant.
        The frame has been fully consumed, so the stream is still usable. """
    def __init__(self, tag):
        super().__init__("unknown message variant %r" % (tag,))
        self.tag = tag


class FrameTooLargeError(FrameError):
    """ the encoded payload does not fit the 32-bit length prefix. """


def _encode_kind(kind: ServerKind):
    result = {'tag': kind.tag}
    if kind.payload is not None:
        result['payload'] = {'kind': kind.payload.kind}
    return result


def _encode_value(value):
    return _encode_kind(value) if isinstance(value, ServerKind) else value


def encode_fields(message):
    """ the payload record of a message. None values are left out. """
    return {name: _encode_value(value) for name, value in
            ((name, getattr(message, name)) for name in message.fields)
            if value is not None}


def encode(message) -> bytes:
    """ encodes the payload of a message, without the length prefix. """
    return msgpack.packb({message.tag: encode_fields(message)}, use_bin_type=True)


def frame(message) -> bytes:
    """ encodes a message as a complete frame: length prefix followed by the payload. """
    payload = encode(message)
    if len(payload) > MAX_PAYLOAD:
        raise FrameTooLargeError("payload of %d bytes is too large for a frame" % len(payload))
    return LENGTH.pack(len(payload)) + payload


def _required(record, name):
    try:
        return record[name]
    except KeyError:
        raise MalformedMessageError("missing field %r" % name) from None


def _decode_kind(value):
    if not isinstance(value, dict):
        raise MalformedMessageError("server kind must be a map, not %r" % (value,))
    tag = _required(value, 'tag')
    payload = value.get('payload')
    if payload is not None:
        if not isinstance(payload, dict):
            raise MalformedMessageError("server kind payload must be a map, not %r" % (payload,))
        payload = MinigamePayload(_required(payload, 'kind'))
    return ServerKind(tag, payload)


def _field_decoders():
    """ per variant, a function taking the payload record and returning the message. """
    return {
        Authentication: lambda r: Authentication(_required(r, 'name'), _required(r, 'ip'),
                                                 _decode_kind(_required(r, 'kind'))),
        LinkServer: lambda r: LinkServer(_required(r, 'name'), _required(r, 'address'),
                                         _required(r, 'port'), _required(r, 'priority')),
        UnlinkServer: lambda r: UnlinkServer(_required(r, 'name')),
        TransportPlayer: lambda r: TransportPlayer(_required(r, 'player'), _required(r, 'to')),
        Request: lambda r: Request(_decode_kind(_required(r, 'kind')), r.get('player')),
        Ping: lambda r: Ping(_required(r, 'timer')),
        Pong: lambda r: Pong(_required(r, 'timer')),
        UpdateActive: lambda r: UpdateActive(_required(r, 'active')),
    }


decoders = _field_decoders()


def decode(payload: bytes):
    """
    decodes a payload produced by encode(). Fields the variant does not know are ignored.
    :raises MalformedMessageError: the payload is not a single variant with valid fields
    :raises UnknownVariantError: the payload is a single variant that is not known
    """
    try:
        value = msgpack.unpackb(payload, raw=False, strict_map_key=False)
    except (ValueError, TypeError, msgpack.exceptions.UnpackException) as e:
        raise MalformedMessageError("payload is not valid MessagePack: %s" % e) from e
    if not isinstance(value, dict) or len(value) != 1:
        raise MalformedMessageError("payload must be a map with a single variant, not %r" % (value,))
    (tag, record), = value.items()
    variant = variants_by_tag.get(tag)
    if variant is None:
        raise UnknownVariantError(tag)
    if not isinstance(record, dict):
        raise MalformedMessageError("%s fields must be a map, not %r" % (tag, record))
    try:
        return decoders[variant](record)
    except ValueError as e:
        raise MalformedMessageError("invalid %s: %s" % (tag, e)) from e


def write_message(stream, message):
    """ writes a message as a single frame. The caller serializes concurrent writers. """
    stream.write(frame(message))


def read_message(stream):
    """
    reads exactly one frame from a stream and decodes it.
    :raises EndOfStreamError: the stream ended before any byte of the frame
    :raises ShortReadError: the stream ended part way through the frame
    """
    header = read_exactly(stream, LENGTH.size)
    if not header:
        raise EndOfStreamError("end of stream")
    if len(header) < LENGTH.size:
        raise ShortReadError("stream ended after %d bytes of the frame length" % len(header))
    length, = LENGTH.unpack(header)
    payload = read_exactly(stream, length)
    if len(payload) < length:
        raise ShortReadError("stream ended after %d of %d payload bytes" % (len(payload), length))
    return decode(payload)


class MessageReader:
    """ iterates the messages read from a stream until it ends between frames.
        Used by tests to decode everything a satellite wrote. """

    def __init__(self, stream):
        self.stream = stream

    def __iter__(self):
        return self

    def __next__(self):
        try:
            return read_message(self.stream)
        except EndOfStreamError:
            raise StopIteration from None
