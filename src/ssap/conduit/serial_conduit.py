"""
Implements a conduit over a serial port.
"""

import logging
import re

import serial
from serial.tools import list_ports

from ssap import settings
from ssap.conduit.base import Conduit, Link
from ssap.errors import OpenError

logger = logging.getLogger(__name__)


class SerialConduit(Conduit):
    """
    A conduit that provides comms via a serial port.
    """

    def __init__(self, ser: serial.Serial):
        self.ser = ser
        # flushing blocks until the output drains, which locks up if the device
        # is unplugged mid-write.
        ser.flush = self._no_flush

    def _no_flush(self, *args, **kwargs):
        pass

    @property
    def target(self):
        return self.ser

    @property
    def input(self):
        return self.ser

    @property
    def output(self):
        return self.ser

    @property
    def open(self) -> bool:
        return self.ser.is_open

    def discard_buffers(self):
        self.ser.reset_input_buffer()
        self.ser.reset_output_buffer()

    def close(self):
        self.ser.close()


def open_serial_conduit(link: Link, baud_rate=None, write_timeout=None, read_timeout=None) -> SerialConduit:
    """
    Opens the port named by the link at 8 data bits, no parity and one stop bit.
    Values not given are taken from ssap.settings.
    :raises OpenError: when the port cannot be acquired.
    """
    ser = serial.Serial()
    ser.port = link.port
    ser.baudrate = baud_rate or settings.baud_rate
    ser.bytesize = serial.EIGHTBITS
    ser.parity = serial.PARITY_NONE
    ser.stopbits = serial.STOPBITS_ONE
    ser.write_timeout = settings.write_timeout if write_timeout is None else write_timeout
    ser.timeout = settings.read_timeout if read_timeout is None else read_timeout
    ser.dtr = link.dtr
    ser.rts = link.rts
    try:
        ser.open()
    except (serial.SerialException, ValueError) as e:
        raise OpenError("Unable to open - %s" % e) from e
    logger.debug("opened serial port %s at %d baud" % (link.port, ser.baudrate))
    return SerialConduit(ser)


def serial_conduit_factory(**kwargs):
    """
    Creates a factory function that opens a link as a serial conduit.
    All arguments are passed to `open_serial_conduit`.
    """
    def open_link(link: Link):
        return open_serial_conduit(link, **kwargs)

    return open_link


arduino_devices = {
    (r"%mega2560\.name%.*", r"USB VID:PID=2341:0010.*"): "Arduino Mega2560",
    (r"Arduino.*Leonardo.*", r"USB VID:PID=2341:8036.*"): "Arduino Leonardo",
    (r"Arduino Uno.*", r"USB VID:PID=2341:0043.*"): "Arduino Uno",
    (r"Arduino Nano.*", r"USB VID:PID=1A86:7523.*"): "Arduino Nano (CH340)",
}

known_devices = dict(arduino_devices)


def matches(text, regex):
    """
    >>> bool(matches("A", "a"))
    True
    >>> bool(matches("A", "b"))
    False
    >>> bool(matches("USB VID:PID=2341:8036 SER=5 LOCATION=1-1.2:1.0", r"USB VID:PID=2341:8036.*"))
    True
    """
    return re.match(regex, text, flags=re.IGNORECASE)


def is_recognised_device(p):
    """
    >>> is_recognised_device(("COM3", "Blah", "USB VID:PID=2341:0043 SER=0000"))
    True
    >>> is_recognised_device(("COM1", "Communications Port", "ACPI\\\\PNP0501\\\\1"))
    False
    """
    port, name, desc = p[0], p[1], p[2]
    for d in known_devices.keys():
        # linux only reports the hardware id in desc
        if matches(desc, d[1]):
            return True
    return False


def serial_port_info():
    """
    :return: a tuple of serial port info tuples (port, name, hwid)
    """
    return tuple(tuple(p) for p in list_ports.comports())


def serial_ports(recognised_only=False):
    """
    Returns a generator for the available serial port device names.
    :param recognised_only: only list ports whose hardware id is a known Arduino board.
    """
    for port in serial_port_info():
        if not recognised_only or is_recognised_device(port):
            yield port[0]
