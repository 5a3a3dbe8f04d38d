import threading


class EventSource(object):
    """
    A list of handlers that are invoked with each event fired.
    Handlers may be added and removed from any thread; an event is delivered
    to the handlers registered at the time it is fired.
    """

    def __init__(self):
        self._handlers = []
        self._lock = threading.Lock()

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        with self._lock:
            self._handlers.append(handler)
        return self

    def remove(self, handler):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
        return self

    def handlers(self):
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        for handler in self.handlers():
            handler(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self.fire(e)
