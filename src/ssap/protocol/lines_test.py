import threading
import unittest

import timeout_decorator
from hamcrest import assert_that, contains_exactly, empty, is_

from ssap.protocol.lines import LineFramer, ResponseQueue
from ssap.test.timing import debug_timeout


class LineFramerTest(unittest.TestCase):

    def setUp(self):
        self.sut = LineFramer()

    def test_cr_terminates(self):
        assert_that(self.sut.feed(b'SSAP_V01\r'), contains_exactly('SSAP_V01'))

    def test_lf_terminates(self):
        assert_that(self.sut.feed(b'A0:5\n'), contains_exactly('A0:5'))

    def test_crlf_yields_one_line(self):
        assert_that(self.sut.feed(b'A0:5\r\nD2:1\r\n'), contains_exactly('A0:5', 'D2:1'))

    def test_runs_of_terminators_emit_nothing(self):
        assert_that(self.sut.feed(b'\r\n\r\r\n\n'), is_(empty()))

    def test_partial_line_is_kept(self):
        assert_that(self.sut.feed(b'A0:5'), is_(empty()))
        assert_that(self.sut.pending, is_(b'A0:5'))
        assert_that(self.sut.feed(b'12\r'), contains_exactly('A0:512'))
        assert_that(self.sut.pending, is_(b''))

    def test_line_split_over_many_feeds(self):
        lines = []
        for b in b'D13:1\rA5:1023\n':
            lines += self.sut.feed(bytes([b]))
        assert_that(lines, contains_exactly('D13:1', 'A5:1023'))

    def test_no_length_limit(self):
        long = b'x' * 100000
        assert_that(self.sut.feed(long + b'\r'), contains_exactly(long.decode()))

    def test_reset_drops_pending(self):
        self.sut.feed(b'garbage')
        self.sut.reset()
        assert_that(self.sut.feed(b'SSAP_V01\r'), contains_exactly('SSAP_V01'))

    def test_line_count_matches_terminated_runs(self):
        samples = [b'', b'\r', b'a', b'a\r', b'\ra\r\n\nb\n', b'ab\r\rcd\n\r\nef', b'\n\n\nx']
        for data in samples:
            sut = LineFramer()
            expected = len([part for part in data.replace(b'\n', b'\r').split(b'\r')[:-1] if part])
            assert_that(len(sut.feed(data)), is_(expected), repr(data))


class ResponseQueueTest(unittest.TestCase):

    def setUp(self):
        self.sut = ResponseQueue()

    def test_empty(self):
        assert_that(self.sut.pop(), is_(None))
        assert_that(self.sut.wait(0), is_(False))
        assert_that(len(self.sut), is_(0))

    def test_fifo(self):
        self.sut.push('a')
        self.sut.push('b')
        assert_that(self.sut.wait(0), is_(True))
        assert_that(self.sut.pop(), is_('a'))
        assert_that(self.sut.wait(0), is_(True))
        assert_that(self.sut.pop(), is_('b'))

    def test_signal_cleared_when_last_line_popped(self):
        self.sut.push('a')
        self.sut.pop()
        assert_that(self.sut.wait(0), is_(False))

    def test_clear(self):
        self.sut.push('a')
        self.sut.push('b')
        self.sut.clear()
        assert_that(self.sut.wait(0), is_(False))
        assert_that(self.sut.pop(), is_(None))

    @timeout_decorator.timeout(debug_timeout(2))
    def test_wait_wakes_on_push(self):
        threading.Timer(0.05, self.sut.push, args=('late',)).start()
        assert_that(self.sut.wait(5), is_(True))
        assert_that(self.sut.pop(), is_('late'))

    @timeout_decorator.timeout(debug_timeout(5))
    def test_concurrent_producer_and_consumer(self):
        received = []

        def consume():
            while len(received) < 1000:
                if self.sut.wait(1):
                    line = self.sut.pop()
                    if line is not None:
                        received.append(line)

        consumer = threading.Thread(target=consume)
        consumer.start()
        for i in range(1000):
            self.sut.push(str(i))
        consumer.join()
        assert_that(received, is_([str(i) for i in range(1000)]))


