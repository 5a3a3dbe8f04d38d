"""
A session with one SSAP device.

The session owns the transport for the link. Opening it performs the identity handshake; once
validated, inputs can be polled and outputs driven. All writes to the link, from the handshake,
the poll loop and the command senders, go through one lock owned by the session, so every
message reaches the device in one piece.

    session = DeviceSession(Link('COM3', dtr=True, rts=True))
    if session.open():
        session.start_poll(['A0', 'D2'])
        session.set_output_percent('D3', 75)
        value = session.try_get_value('A0')
    else:
        print(session.error)
    session.dispose()
"""
import logging
import threading
from enum import Enum

from ssap import settings
from ssap.conduit.base import Conduit, Link, read_available
from ssap.conduit.serial_conduit import serial_conduit_factory
from ssap.errors import ConnectorError, HandshakeTimeout, OpenError, SessionNotOpenError, WriteError
from ssap.poller import Poller
from ssap.protocol.background import AsyncLoop
from ssap.protocol.lines import LineFramer, ResponseQueue
from ssap.protocol.ssap import WHO_ARE_YOU, check_firmware, motor_command, output_command
from ssap.support.events import EventSource
from ssap.values import ValueStore

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CLOSED = 'closed'
    OPEN = 'open'       # the handshake succeeded
    FAILED = 'failed'


class SessionEvent:
    """ base class for session events. """
    def __init__(self, session):
        self.session = session


class SessionOpenedEvent(SessionEvent):
    """ The device answered the handshake with the expected firmware. """


class SessionFailedEvent(SessionEvent):
    """ The link could not be opened or the device was not recognised. """


class SessionDisposedEvent(SessionEvent):
    """ The session released its transport. """


class DeviceSession:
    """
    :param link: the link to the device.
    :param conduit_factory: a callable that opens a link and returns a Conduit, raising OpenError
        if it cannot. Defaults to a serial port.
    :param handshake_timeout: seconds to wait for the identity line.
    :param poll_interval: seconds between poll writes.
    """

    def __init__(self, link: Link, conduit_factory=None, handshake_timeout=None, poll_interval=None):
        self.link = link
        self._conduit_factory = conduit_factory or serial_conduit_factory()
        self.handshake_timeout = settings.handshake_timeout if handshake_timeout is None else handshake_timeout
        self._conduit = None
        self._state = SessionState.CLOSED
        self._error = None
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._framer = LineFramer()
        self.responses = ResponseQueue()
        self.values = ValueStore()
        self.events = EventSource()
        self._reader = AsyncLoop(self._read_input, name='%s-reader' % link.port, log=logger)
        self.poller = Poller(self._write_quietly, self.responses, self.values, poll_interval, name=link.port)

    @property
    def port(self):
        return self.link.port

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is SessionState.OPEN

    @property
    def error(self):
        """ describes why open() failed, or None. """
        return self._error

    @property
    def conduit(self) -> Conduit:
        return self._conduit

    def open(self) -> bool:
        """
        Opens the link and checks the device identity. A session is opened at most once; there is
        no retry after a failure.
        :return: True when the device answered with the expected firmware.
        """
        with self._state_lock:
            if self._state is not SessionState.CLOSED or self._conduit is not None:
                return self.is_open
            try:
                self._handshake()
            except ConnectorError as e:
                self._fail(e)
                fired = SessionFailedEvent(self)
            else:
                self._state = SessionState.OPEN
                logger.info("%s: found firmware on device" % self.port)
                fired = SessionOpenedEvent(self)
        self.events.fire(fired)
        return self.is_open

    def _handshake(self):
        try:
            self._conduit = self._conduit_factory(self.link)
            # nothing is read until the reader starts, so stale input is dropped here
            self._conduit.discard_buffers()
        except OSError as e:
            raise OpenError("Unable to open - %s" % e) from e
        self._framer.reset()
        self.responses.clear()
        self._reader.start()
        try:
            self._write(WHO_ARE_YOU)
        except WriteError as e:
            raise WriteError("Unable to send data - %s" % e) from e
        if not self.responses.wait(self.handshake_timeout):
            raise HandshakeTimeout("No response received")
        # any further lines are left for the poller
        check_firmware(self.responses.pop())

    def _fail(self, e):
        self._error = "%s: %s" % (self.port, e)
        self._state = SessionState.FAILED
        logger.debug(self._error)
        self._release()

    def _release(self):
        self.poller.stop()
        self._reader.stop()
        conduit = self._conduit
        if conduit is not None:
            with self._write_lock:
                try:
                    conduit.close()
                except OSError as e:
                    logger.warning("%s: error closing link: %s" % (self.port, e))

    def dispose(self):
        """
        Stops the background loops and closes the transport.
        """
        with self._state_lock:
            self._release()
            if self._state is SessionState.OPEN:
                self._state = SessionState.CLOSED
        self.events.fire(SessionDisposedEvent(self))

    def check_open(self):
        if not self.is_open:
            raise SessionNotOpenError("%s is not open" % self.port)

    def start_poll(self, identifiers):
        """
        Polls the given inputs from now on, replacing any previous set.
        """
        self.check_open()
        self.poller.start(identifiers)

    def try_get_value(self, identifier):
        """
        :return: the last value read for the input, or None if none has been read.
        """
        return self.values.get(identifier)

    def set_output_percent(self, identifier, percent: int):
        """ sets an output to the given duty cycle. Returns once the command is handed to the link. """
        self.check_open()
        self._write_quietly(output_command(identifier, percent))

    def set_motor(self, identifier, angle: int):
        """ turns the servo on the given pin to an angle. Returns once the command is handed to the link. """
        self.check_open()
        self._write_quietly(motor_command(identifier, angle))

    def _write(self, data: bytes):
        with self._write_lock:
            conduit = self._conduit
            if conduit is None or not conduit.open:
                raise WriteError("%s is closed" % self.port)
            try:
                conduit.output.write(data)
            except OSError as e:
                raise WriteError(str(e)) from e

    def _write_quietly(self, data: bytes):
        try:
            self._write(data)
        except WriteError as e:
            logger.debug("%s: write failed: %s" % (self.port, e))

    def _read_input(self):
        """ called on the reader thread: frames whatever arrived and queues the complete lines. """
        conduit = self._conduit
        if conduit is None or not conduit.open:
            self._reader.stop()
            return
        try:
            data = read_available(conduit.input)
        except OSError as e:
            if self._reader.running():
                logger.debug("%s: read failed: %s" % (self.port, e))
                self._reader.wait(settings.read_timeout)
            return
        for line in self._framer.feed(data):
            self.responses.push(line)

    def __repr__(self):
        return 'DeviceSession(%r, state=%s)' % (self.link, self._state.value)
