"""
Event sources for link events.

Handlers are added and removed from any thread. A handler that raises is logged and does not stop the
remaining handlers, so a faulty handler cannot end the link that fired the event.
"""
import logging
import threading
from queue import Empty, Queue

logger = logging.getLogger(__name__)


class EventSource:
    """
    Calls each handler with the event passed to fire(), on the firing thread, in the order the
    handlers were added.
    """

    def __init__(self, log=logger):
        self._handlers = []
        self._lock = threading.Lock()
        self.logger = log

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, event):
        self._deliver(event)

    def fire_all(self, events):
        for event in events:
            self.fire(event)

    def _deliver(self, event):
        for handler in self.handlers():
            try:
                handler(event)
            except Exception as e:
                self.logger.exception("event handler %s failed on %s: %s", handler, event, e)


class QueuedEventSource(EventSource):
    """
    fire() only queues the event. The queued events are delivered when a thread calls publish(),
    which lets a host handle link events on its own thread.
    """
    def __init__(self, log=logger):
        super().__init__(log)
        self.event_queue = Queue()

    def fire(self, event):
        self.event_queue.put(event)

    def publish(self) -> int:
        """ delivers the events queued so far on the calling thread.
            :return: the number of events delivered """
        count = 0
        while True:
            try:
                event = self.event_queue.get_nowait()
            except Empty:
                return count
            self._deliver(event)
            count += 1
