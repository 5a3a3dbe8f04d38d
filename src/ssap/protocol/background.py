"""
Background loops. Each loop runs a function repeatedly on its own daemon thread until stopped.
"""
import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class AsyncLoop:
    """ Continually runs a given function on a background thread.
        Exceptions are logged and posted to a given handler.
        The background thread is registered as a daemon.
    """

    def __init__(self, fn: Callable = None, args=(), name=None, log=logger):
        """
        :param fn the function to run
        :param args arguments to pass to fn
        :param name the name given to the background thread
        """
        self.fn = fn
        self.args = args
        self.name = name
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log
        self._lock = threading.Lock()

    def start(self):
        """
        Starts the background thread. Starting a loop that is already running does nothing.
        """
        with self._lock:
            if self.background_thread is None and not self.stop_event.is_set():
                t = threading.Thread(target=self._run, name=self.name, daemon=True)
                self.background_thread = t
                t.start()

    @property
    def started(self):
        return self.background_thread is not None

    def exception_handler(self, e):
        self.logger.exception(e)

    def _run(self):
        """ The processing loop for the background thread.
             Invokes the callable for as long as the stop signal is not received.
        """
        self._do(self.startup)
        while self.running():
            self._do(self.loop)
        self._do(self.shutdown)
        self.logger.debug("background thread %s exiting" % (self.name or ''))

    def _do(self, callme):
        """ runs a function and captures any exceptions """
        try:
            time.sleep(0)
            callme()
        except Exception as e:
            time.sleep(0)
            self.exception_handler(e)

    def startup(self):
        """ template method called when the thread starts"""
        pass

    def loop(self):
        self.fn(*self.args)

    def shutdown(self):
        """ template method called when the thread exits """
        pass

    def running(self):
        return not self.stop_event.is_set()

    def wait(self, timeout):
        """ sleeps for the given time, returning early (True) when the loop is stopped. """
        return self.stop_event.wait(timeout)

    def stop(self):
        """ signals the loop to stop and waits for the background thread to exit.
            When called from the loop's own thread, returns without waiting. """
        self.stop_event.set()
        with self._lock:
            thread = self.background_thread
            self.background_thread = None
        if thread and thread is not threading.current_thread():
            thread.join()
