import threading
import unittest
from unittest.mock import Mock, call

from hamcrest import assert_that, is_, empty

from fleetlink.support.events import EventSource, QueuedEventSource


class EventSourceTest(unittest.TestCase):
    def setUp(self):
        self.log = Mock()
        self.sut = EventSource(self.log)

    def test_no_handlers(self):
        assert_that(self.sut.handlers(), is_(empty()))
        self.sut.fire("connected")

    def test_add_and_remove(self):
        handler = Mock()
        self.sut += handler
        assert_that(self.sut.handlers(), is_((handler,)))
        self.sut -= handler
        self.sut -= handler
        assert_that(self.sut.handlers(), is_(empty()))

    def test_handlers_are_called_in_order_added(self):
        parent = Mock()
        self.sut.add(parent.first).add(parent.second)
        self.sut.fire_all(["connected", "disconnected"])
        assert_that(parent.mock_calls, is_([call.first("connected"), call.second("connected"),
                                            call.first("disconnected"), call.second("disconnected")]))

    def test_failing_handler_does_not_stop_the_others(self):
        failing = Mock(side_effect=RuntimeError("boom"))
        later = Mock()
        self.sut += failing
        self.sut += later
        self.sut.fire("connected")
        later.assert_called_once_with("connected")
        self.log.exception.assert_called_once()

    def test_handler_can_remove_itself_while_firing(self):
        later = Mock()

        def once(event):
            self.sut.remove(once)

        self.sut += once
        self.sut += later
        self.sut.fire(1)
        self.sut.fire(2)
        assert_that(later.mock_calls, is_([call(1), call(2)]))
        assert_that(self.sut.handlers(), is_((later,)))

    def test_handlers_fire_on_the_firing_thread(self):
        threads = []
        self.sut += lambda event: threads.append(threading.current_thread())
        t = threading.Thread(target=self.sut.fire, args=("connected",))
        t.start()
        t.join()
        assert_that(threads, is_([t]))


class QueuedEventSourceTest(unittest.TestCase):
    def test_nothing_to_publish(self):
        sut = QueuedEventSource()
        assert_that(sut.publish(), is_(0))

    def test_fire_is_queued_until_published(self):
        sut = QueuedEventSource()
        handler = Mock()
        sut += handler
        sut.fire(1)
        sut.fire_all([2, 3])
        handler.assert_not_called()
        assert_that(sut.publish(), is_(3))
        assert_that(handler.mock_calls, is_([call(1), call(2), call(3)]))
        assert_that(sut.publish(), is_(0))

    def test_events_fired_on_another_thread_are_delivered_on_the_publisher(self):
        sut = QueuedEventSource()
        threads = []
        sut += lambda event: threads.append(threading.current_thread())
        t = threading.Thread(target=sut.fire, args=("connected",))
        t.start()
        t.join()
        sut.publish()
        assert_that(threads, is_([threading.current_thread()]))
