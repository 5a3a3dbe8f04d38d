import threading


class ValueStore:
    """
    The last known reading of each polled input. Readings replace the previous value; no history
    is kept.
    """

    def __init__(self):
        self._values = {}
        self._lock = threading.Lock()

    def get(self, identifier):
        """
        :return: the most recent value for the identifier, or None if it was never read.
        """
        with self._lock:
            return self._values.get(identifier)

    def set(self, identifier, value: int):
        with self._lock:
            self._values[identifier] = value

    def __contains__(self, identifier):
        with self._lock:
            return identifier in self._values

    def snapshot(self) -> dict:
        """ a copy of all the known readings. """
        with self._lock:
            return dict(self._values)
