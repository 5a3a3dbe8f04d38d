"""
An in-process stand-in for an Arduino running the SSAP sketch.

The device answers the identity query, replies to `<pin>?` polls from its pin table and applies
output and motor commands. Everything written to it is kept, both per write call and as one
continuous byte stream (the "wire"), so callers can check exactly what was sent.
"""

import logging
import threading
import time

from ssap.conduit.base import Conduit, Link
from ssap.errors import OpenError
from ssap.protocol.lines import LineFramer
from ssap.protocol.ssap import EXPECTED_FIRMWARE, WHO_ARE_YOU

logger = logging.getLogger(__name__)


class SimulatedDevice:
    """
    The firmware side of the protocol.

    :param firmware: the identity line returned for `WHO ARE YOU?`. None stays silent.
    :param pins: initial pin values, e.g. {'A0': 512, 'D2': 1}
    :param newline: the terminator appended to each reply.
    """

    def __init__(self, firmware=EXPECTED_FIRMWARE, pins=None, newline='\r\n'):
        self.firmware = firmware
        self.pins = dict(pins or {})
        self.outputs = {}
        self.motors = {}
        self.newline = newline
        self.writes = []            # each write call, as received
        self.wire = bytearray()     # every byte received, in arrival order
        self.fail_writes = False
        self.byte_delay = 0         # seconds to dwell between bytes of a write
        self._framer = LineFramer()
        self._lock = threading.RLock()
        self._pending = bytearray()
        self._readable = threading.Condition(self._lock)

    def set_pin(self, pin, value):
        with self._lock:
            self.pins[pin] = value

    def inject(self, data):
        """ queues raw bytes for the host to read, as if the device had sent them unprompted. """
        with self._lock:
            self._pending.extend(data.encode('ascii') if isinstance(data, str) else data)
            self._readable.notify_all()

    def receive(self, data: bytes):
        """ accepts one write from the host. """
        if self.fail_writes:
            raise OSError("simulated write failure")
        with self._lock:
            self.writes.append(bytes(data))
        for b in data:
            with self._lock:
                self.wire.append(b)
            if self.byte_delay:
                time.sleep(self.byte_delay)
        for line in self._framer.feed(data):
            self._handle(line)

    def reply(self, line):
        self.inject(line + self.newline)

    def _handle(self, line):
        if line == WHO_ARE_YOU.decode('ascii').rstrip('\r'):
            if self.firmware is not None:
                self.reply(self.firmware)
        elif line.endswith('?'):
            pin = line[:-1]
            with self._lock:
                value = self.pins.get(pin)
            if value is not None:
                self.reply('%s:%d' % (pin, value))
        elif ':' in line and line[-1] in '%*':
            pin, value = line[:-1].split(':', 1)
            target = self.outputs if line[-1] == '%' else self.motors
            try:
                with self._lock:
                    target[pin] = int(value)
            except ValueError:
                logger.debug("simulated device ignored '%s'" % line)
        else:
            logger.debug("simulated device ignored '%s'" % line)

    def read(self, count, timeout):
        """ returns up to count pending bytes, waiting at most timeout seconds for the first. """
        with self._lock:
            if not self._pending:
                self._readable.wait(timeout)
            data = bytes(self._pending[:count])
            del self._pending[:count]
            return data

    def in_waiting(self):
        with self._lock:
            return len(self._pending)

    def discard(self):
        with self._lock:
            self._pending.clear()

    def wake(self):
        with self._lock:
            self._readable.notify_all()


class _DeviceStream:
    """ file-like view of the simulated device for one conduit. """

    def __init__(self, conduit):
        self._conduit = conduit

    @property
    def in_waiting(self):
        return self._conduit.device.in_waiting()

    def read(self, count=1):
        if not self._conduit.open:
            raise OSError("simulated port is closed")
        return self._conduit.device.read(count, self._conduit.read_timeout)

    def write(self, data):
        if not self._conduit.open:
            raise OSError("simulated port is closed")
        self._conduit.device.receive(data)
        return len(data)

    def flush(self):
        pass


class SimulatedConduit(Conduit):
    """
    A conduit connected to a SimulatedDevice.
    """

    def __init__(self, device: SimulatedDevice, read_timeout=0.05):
        self.device = device
        self.read_timeout = read_timeout
        self._open = True
        self._stream = _DeviceStream(self)

    @property
    def target(self):
        return self.device

    @property
    def input(self):
        return self._stream

    @property
    def output(self):
        return self._stream

    @property
    def open(self) -> bool:
        return self._open

    def discard_buffers(self):
        self.device.discard()

    def close(self):
        self._open = False
        self.device.wake()


def simulated_conduit_factory(devices, read_timeout=0.05):
    """
    Creates a factory that connects links to simulated devices.
    :param devices: a SimulatedDevice used for every link, or a mapping from port name to device.
        Ports missing from the mapping fail to open.
    """
    def open_link(link: Link):
        device = devices.get(link.port) if isinstance(devices, dict) else devices
        if device is None:
            raise OpenError("Unable to open - no device on %s" % link.port)
        return SimulatedConduit(device, read_timeout)

    return open_link
