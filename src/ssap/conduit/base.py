from abc import abstractmethod
from io import IOBase


class Link:
    """
    Identifies a physical connection point: the port name plus the two line control flags that
    are asserted on open. Some bootloaders (e.g. the Leonardo) only start the sketch when DTR and
    RTS are enabled.
    """

    __slots__ = ('_port', '_dtr', '_rts')

    def __init__(self, port: str, dtr=False, rts=False):
        self._port = port
        self._dtr = bool(dtr)
        self._rts = bool(rts)

    @property
    def port(self) -> str:
        return self._port

    @property
    def dtr(self) -> bool:
        return self._dtr

    @property
    def rts(self) -> bool:
        return self._rts

    def _key(self):
        return self._port, self._dtr, self._rts

    def __eq__(self, other):
        return isinstance(other, Link) and self._key() == other._key()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return 'Link(%r, dtr=%r, rts=%r)' % self._key()

    def __str__(self):
        return self._port


class Conduit:
    """
    A conduit allows two-way communication. It provides a file-like input endpoint and a file-like output endpoint.
    """

    @property
    @abstractmethod
    def target(self):
        raise NotImplementedError

    @property
    @abstractmethod
    def input(self) -> IOBase:
        """ fetches the I/O stream that provides input.
            Reads block for at most the read timeout the conduit was opened with. """
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        """ fetches the I/O stream that provides output. """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, the streams provided by
            input and output can be read from/written to."""
        raise NotImplementedError

    @abstractmethod
    def discard_buffers(self):
        """
        Drops any bytes received but not yet read, and any bytes written but not yet sent.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """
        Closes both the input and output streams.
        """
        raise NotImplementedError


def read_available(stream) -> bytes:
    """
    Blocks for the first byte (bounded by the stream timeout) and then takes whatever else is
    already waiting, so a burst of replies is handed on in one piece.
    """
    data = stream.read(1)
    if data:
        waiting = getattr(stream, 'in_waiting', 0)
        if waiting:
            data += stream.read(waiting)
    return data
