"""
Polling of device inputs.

Two loops run for as long as the session is open: the write loop sends the query for every
polled input on each tick, and the response loop turns each reply line into a stored value.
"""
import logging
import threading

from ssap import settings
from ssap.errors import WriteError
from ssap.protocol.background import AsyncLoop
from ssap.protocol.lines import ResponseQueue
from ssap.protocol.ssap import parse_reading, poll_request
from ssap.values import ValueStore

logger = logging.getLogger(__name__)


class Poller:
    """
    :param write: callable that sends bytes on the link, raising WriteError on failure.
    :param responses: the queue of lines read from the link.
    :param values: where parsed readings are stored.
    :param interval: seconds between poll writes.
    """

    # how long the response loop blocks before checking for a stop request
    idle_timeout = 0.1

    def __init__(self, write, responses: ResponseQueue, values: ValueStore, interval=None, name='ssap'):
        self._write = write
        self._responses = responses
        self._values = values
        self.interval = settings.poll_interval if interval is None else interval
        self._lock = threading.Lock()
        self._targets = None
        self._known = set()     # every identifier ever polled
        self._request = b''
        self.write_loop = AsyncLoop(self._write_poll, name='%s-poll-write' % name, log=logger)
        self.response_loop = AsyncLoop(self._read_response, name='%s-poll-response' % name, log=logger)

    @property
    def targets(self):
        """ the identifiers currently polled, or None before polling starts. """
        with self._lock:
            return None if self._targets is None else tuple(self._targets)

    @property
    def polling(self):
        with self._lock:
            return self._targets is not None

    def start(self, identifiers):
        """
        Replaces the set of polled inputs. The loops are started by the first call only;
        later calls take effect from the next write.
        :raises InvalidIdentifierError: when an identifier cannot be sent. Nothing changes.
        """
        targets = tuple(identifiers)
        request = poll_request(targets)
        with self._lock:
            was_polling = self._targets is not None
            self._targets = targets
            self._known.update(targets)
            self._request = request
        logger.debug("polling %s" % ', '.join(targets))
        if was_polling:
            return
        self.response_loop.start()
        self.write_loop.start()

    def stop(self):
        self.write_loop.stop()
        self.response_loop.stop()

    def _write_poll(self):
        with self._lock:
            request = self._request
        if request:
            try:
                self._write(request)
            except WriteError as e:
                # retried on the next tick
                logger.debug("poll write failed: %s" % e)
        self.write_loop.wait(self.interval)

    def _read_response(self):
        if not self._responses.wait(self.idle_timeout):
            return
        line = self._responses.pop()
        reading = parse_reading(line)
        if reading is None:
            logger.debug("ignored response '%s'" % line)
            return
        identifier, value = reading
        with self._lock:
            known = identifier in self._known
        if not known:
            logger.debug("ignored reading for unpolled input '%s'" % identifier)
            return
        self._values.set(identifier, value)
