import logging
import threading

from fleetlink.conduit.base import Conduit
from fleetlink.protocol.codec import UnknownVariantError, frame, read_message

logger = logging.getLogger(__name__)


class ConnectionClosedError(IOError):
    """ the connection was closed. """


class ConnectionPoisonedError(IOError):
    """ an earlier read or write on the connection failed, so the stream position is unknown. """


class ControllerConnection:
    """
    Reads and writes whole messages on a conduit to the controller.

    Reads are performed by a single thread, the link's read loop. Writes may come from any thread and
    are serialized so that each frame reaches the stream in one piece.
    After any failed read or write the connection is poisoned and all further operations fail.
    The connection never reconnects itself.

    :param conduit: the open conduit. The connection owns it from now on, and closes it on close().
    """

    def __init__(self, conduit: Conduit, log=logger):
        self.conduit = conduit
        self.logger = log
        self._write_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._closed = False
        self._poisoned = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def usable(self) -> bool:
        """ True while the connection is neither closed nor poisoned. """
        return not self._closed and self._poisoned is None

    def _check_usable(self):
        if self._closed:
            raise ConnectionClosedError("connection to %s is closed" % (self.conduit.target,))
        if self._poisoned is not None:
            raise ConnectionPoisonedError("connection to %s failed earlier: %s"
                                          % (self.conduit.target, self._poisoned)) from self._poisoned

    def _poison(self, e):
        with self._state_lock:
            if self._poisoned is None:
                self._poisoned = e

    def read(self):
        """ blocks until the next message arrives. """
        self._check_usable()
        try:
            message = read_message(self.conduit.input)
        except UnknownVariantError:
            raise
        except (IOError, ValueError) as e:
            # ValueError: the stream was closed from another thread
            self._poison(e)
            if self._closed:
                raise ConnectionClosedError("connection closed while reading") from e
            raise
        self.logger.debug("received %s", message)
        return message

    def write(self, message):
        """ writes one message and flushes it to the conduit. """
        data = frame(message)
        with self._write_lock:
            self._check_usable()
            try:
                output = self.conduit.output
                output.write(data)
                output.flush()
            except (IOError, ValueError) as e:
                self._poison(e)
                if self._closed:
                    raise ConnectionClosedError("connection closed while writing") from e
                raise
        self.logger.debug("sent %s", message)

    def close(self):
        """ closes the conduit. Calling close again does nothing.
            Closing from another thread makes a blocked read() fail. """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
        self.conduit.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
