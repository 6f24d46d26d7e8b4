from abc import abstractmethod
from io import IOBase


class Conduit:
    """
    A bi-directional byte channel to the controller, made of a stream to read from and a stream to write to.
    Closing the conduit closes both streams; a read blocked on another thread then fails.
    """

    @property
    @abstractmethod
    def target(self):
        """ what the conduit is connected to, used in log messages. """
        raise NotImplementedError

    @property
    @abstractmethod
    def input(self) -> IOBase:
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def close(self):
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class DefaultConduit(Conduit):
    """ a conduit over two given file-like objects. A single object may serve as both input and output. """

    def __init__(self, read, write=None, target=None):
        self._read = read
        self._write = write if write is not None else read
        self._target = target
        self._open = True

    def close(self):
        if not self._open:
            return
        self._open = False
        try:
            self._write.close()
        finally:
            if self._read is not self._write:
                self._read.close()

    @property
    def target(self):
        return self._target

    @property
    def open(self):
        return self._open

    @property
    def input(self) -> IOBase:
        return self._read

    @property
    def output(self) -> IOBase:
        return self._write


class ConduitFactory:
    """ opens a fresh conduit each time it is called. The caller owns the conduit and must close it. """

    @abstractmethod
    def __call__(self) -> Conduit:
        raise NotImplementedError
