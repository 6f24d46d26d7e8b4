import socket

from fleetlink.conduit import base


class SocketConduit(base.Conduit):
    """
    A conduit over a connected TCP socket. Reads and writes go through buffered files made from the socket.
    """

    def __init__(self, sock: socket.socket):
        self.sock = sock
        try:
            self._peer = sock.getpeername()
        except OSError:
            self._peer = None
        self._reader = sock.makefile('rb')
        self._writer = sock.makefile('wb')

    @property
    def open(self) -> bool:
        return self.sock.fileno() >= 0

    @property
    def target(self):
        """ the peer address the socket was connected to when the conduit was made. """
        return self._peer

    @property
    def input(self):
        return self._reader

    @property
    def output(self):
        return self._writer

    def close(self):
        # shutting down first wakes a reader blocked on another thread
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # already disconnected
        try:
            self._writer.close()
        except OSError:
            pass    # buffered output could not be flushed to the dead socket
        finally:
            self._reader.close()
            self.sock.close()
