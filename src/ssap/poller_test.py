import threading
import unittest

import timeout_decorator
from hamcrest import assert_that, calling, has_item, is_, raises

from ssap.errors import InvalidIdentifierError, WriteError
from ssap.poller import Poller
from ssap.protocol.lines import ResponseQueue
from ssap.test.timing import debug_timeout, wait_until
from ssap.values import ValueStore


class PollerTest(unittest.TestCase):

    def setUp(self):
        self.writes = []
        self.fail = False
        self.responses = ResponseQueue()
        self.values = ValueStore()
        self.sut = Poller(self.write, self.responses, self.values, interval=0.005, name='test')

    def tearDown(self):
        self.sut.stop()

    def write(self, data):
        if self.fail:
            raise WriteError("unplugged")
        self.writes.append(data)

    def test_not_polling_before_start(self):
        assert_that(self.sut.polling, is_(False))
        assert_that(self.sut.targets, is_(None))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_writes_request_for_targets(self):
        self.sut.start(['A0', 'D2'])
        assert_that(wait_until(lambda: len(self.writes) >= 2), is_(True))
        assert_that(self.writes[0], is_(b'A0?\rD2?\r'))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_restart_replaces_targets(self):
        self.sut.start(['A0'])
        threads = threading.active_count()
        self.sut.start(['D5'])
        assert_that(threading.active_count(), is_(threads))
        assert_that(self.sut.targets, is_(('D5',)))
        assert_that(wait_until(lambda: self.writes and self.writes[-1] == b'D5?\r'), is_(True))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_rejected_identifiers_leave_poller_unstarted(self):
        assert_that(calling(self.sut.start).with_args(['Aé']), raises(InvalidIdentifierError))
        assert_that(self.sut.polling, is_(False))
        assert_that(self.sut.write_loop.started, is_(False))

        self.sut.start(['A0'])
        assert_that(self.sut.write_loop.started, is_(True))
        assert_that(wait_until(lambda: b'A0?\r' in self.writes), is_(True))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_rejected_identifiers_keep_current_targets(self):
        self.sut.start(['A0'])
        assert_that(calling(self.sut.start).with_args(['D2', 'Dé']), raises(InvalidIdentifierError))
        assert_that(self.sut.targets, is_(('A0',)))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_write_failures_are_retried(self):
        self.fail = True
        self.sut.start(['A0'])
        assert_that(self.sut.write_loop.wait(0.05), is_(False))
        self.fail = False
        assert_that(wait_until(lambda: len(self.writes) > 0), is_(True))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_responses_update_values(self):
        self.sut.start(['A0', 'D2'])
        for line in ['A0:17', 'rubbish', 'D2:x', 'D9:1', 'D2:1']:
            self.responses.push(line)
        assert_that(wait_until(lambda: self.values.get('D2') == 1), is_(True))
        assert_that(self.values.get('A0'), is_(17))
        assert_that(self.values.get('D9'), is_(None))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_previously_polled_inputs_are_still_stored(self):
        self.sut.start(['A0'])
        self.sut.start(['D2'])
        self.responses.push('A0:3')
        assert_that(wait_until(lambda: self.values.get('A0') == 3), is_(True))
        assert_that(self.sut.targets, has_item('D2'))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
