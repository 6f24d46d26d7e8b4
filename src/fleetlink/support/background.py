"""
A loop that runs on its own daemon thread until it is stopped.
"""
import logging
import threading
from abc import abstractmethod

logger = logging.getLogger(__name__)


class BackgroundLoop:
    """
    Calls loop() repeatedly on a background thread, between one call to startup() and one to shutdown().
    An exception raised by any of these is passed to exception_handler() and the loop carries on.
    The thread is a daemon, so it does not keep the host process alive.
    """

    def __init__(self, name=None, log=logger):
        """
        :param name: the name given to the background thread
        """
        self.name = name
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log
        self._lock = threading.Lock()

    def start(self):
        """ starts the background thread. Starting a loop that is already started does nothing. """
        with self._lock:
            if self.background_thread is None and self.running():
                self.background_thread = threading.Thread(target=self._run, name=self.name, daemon=True)
                self.background_thread.start()

    def startup(self):
        pass

    @abstractmethod
    def loop(self):
        raise NotImplementedError

    def shutdown(self):
        pass

    def exception_handler(self, e):
        self.logger.exception("%s: %s", self.name, e)

    def _run(self):
        self._call(self.startup)
        while self.running():
            self._call(self.loop)
        self._call(self.shutdown)
        self.logger.info("%s exiting", self.name or "background thread")

    def _call(self, fn):
        try:
            fn()
        except Exception as e:
            self.exception_handler(e)

    def running(self):
        return not self.stop_event.is_set()

    def stop(self, timeout=None):
        """ signals the loop to stop and waits for the background thread to finish,
            unless called from the background thread itself. """
        self.stop_event.set()
        with self._lock:
            thread = self.background_thread
            self.background_thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def sleep(self, seconds):
        """ waits for the given time, returning early if the loop is stopped.
            :return: True if the loop was stopped while waiting.
        """
        return self.stop_event.wait(seconds)
