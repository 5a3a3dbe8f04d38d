import threading
from collections import deque

TERMINATORS = b'\r\n'


class LineFramer:
    """
    Splits a byte stream into lines. Either CR or LF ends a line and empty lines are never
    produced, so a CRLF pair yields a single line.

    Not thread safe: a framer belongs to the one reader that feeds it.
    """

    def __init__(self):
        self._pending = bytearray()

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    def reset(self):
        self._pending.clear()

    def feed(self, data: bytes) -> list:
        """
        Consumes the given bytes.
        :return: the lines completed by this data, decoded, without terminators.
        """
        lines = []
        for b in data:
            if b in TERMINATORS:
                if self._pending:
                    lines.append(self._pending.decode('ascii', errors='replace'))
                    self._pending.clear()
            else:
                self._pending.append(b)
        return lines


class ResponseQueue:
    """
    An ordered handoff of complete lines from the reader to whichever consumer is waiting.
    The available signal is set while at least one line is queued.
    """

    def __init__(self):
        self._lines = deque()
        self._lock = threading.Lock()
        self._available = threading.Event()

    def __len__(self):
        with self._lock:
            return len(self._lines)

    def push(self, line):
        with self._lock:
            self._lines.append(line)
            self._available.set()

    def pop(self):
        """
        Removes the oldest line, resetting the available signal when it was the last one.
        :return: the line, or None when nothing is queued.
        """
        with self._lock:
            if not self._lines:
                self._available.clear()
                return None
            line = self._lines.popleft()
            if not self._lines:
                self._available.clear()
            return line

    def wait(self, timeout=None) -> bool:
        """ blocks until a line is available or the timeout expires.
        :return: True if a line is available. """
        return self._available.wait(timeout)

    def clear(self):
        with self._lock:
            self._lines.clear()
            self._available.clear()
