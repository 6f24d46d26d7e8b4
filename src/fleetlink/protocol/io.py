"""
some useful stream classes and helpers.
"""

import io
import threading


def read_exactly(stream, count) -> bytes:
    """
    Reads count bytes from a stream, calling read() as often as needed. Fewer bytes are returned
    only when the stream ends first.
    >>> read_exactly(io.BytesIO(b"abcdef"), 4)
    b'abcd'
    >>> read_exactly(io.BytesIO(b"ab"), 4)
    b'ab'
    """
    parts = []
    remaining = count
    while remaining > 0:
        data = stream.read(remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b''.join(parts)


class TrickleReader(io.RawIOBase):
    """
    A readable stream over fixed content that returns at most chunk bytes from each read,
    the way a socket hands over data as it arrives. A test aid for code that must cope with short reads.
    >>> TrickleReader(b"abc", chunk=2).read(3)
    b'ab'
    """

    def __init__(self, data: bytes, chunk=1):
        super().__init__()
        self._data = memoryview(bytes(data))
        self._position = 0
        self.chunk = chunk
        self.reads = 0

    def readable(self):
        return True

    def readinto(self, b):
        self._checkClosed()
        count = min(len(b), self.chunk, len(self._data) - self._position)
        b[:count] = self._data[self._position:self._position + count]
        self._position += count
        self.reads += 1
        return count

    def remaining(self) -> bytes:
        return bytes(self._data[self._position:])


class RecordingWriter(io.RawIOBase):
    """
    A writable stream that records each write() call separately. The calls are appended under a lock,
    so the order of the chunks is the order the writes happened in. A test aid: unlike BytesIO
    the recorded bytes can still be read after the stream is closed.
    """

    def __init__(self, on_write=None):
        super().__init__()
        self.chunks = []
        self._lock = threading.Lock()
        self._on_write = on_write

    def writable(self):
        return True

    def write(self, b):
        data = bytes(b)
        with self._lock:
            self.chunks.append(data)
        if self._on_write:
            self._on_write(data)
        return len(data)

    def getvalue(self):
        with self._lock:
            return b''.join(self.chunks)
