"""
Finds the SSAP device among the available serial ports.

Every candidate port gets its own session and all of them attempt the handshake at the same time.
Once every attempt has finished, the first validated session in port order is kept and the others
are disposed.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from ssap import settings
from ssap.conduit.base import Link
from ssap.conduit.serial_conduit import serial_ports
from ssap.session import DeviceSession, SessionFailedEvent, SessionOpenedEvent

logger = logging.getLogger(__name__)


def candidate_links(ports=None, dtr=True, rts=True, recognised_only=False):
    """
    Builds a link for each port to try.
    :param ports: port names, or None for every serial port present.
    :param dtr, rts: line control flags asserted on open. Both are needed to wake a Leonardo.
    """
    if ports is None:
        ports = serial_ports(recognised_only)
    return [Link(p, dtr=dtr, rts=rts) for p in ports]


def log_session_events(event):
    if isinstance(event, SessionOpenedEvent):
        logger.debug("%s: device validated" % event.session.port)
    elif isinstance(event, SessionFailedEvent):
        logger.debug("%s: no device - %s" % (event.session.port, event.session.error))


def open_all(sessions):
    """
    Opens all the sessions concurrently and waits for every attempt to finish.
    :return: the results of open(), in the order of the sessions given.
    """
    sessions = list(sessions)
    if not sessions:
        return []
    with ThreadPoolExecutor(max_workers=len(sessions), thread_name_prefix='ssap-open') as executor:
        return list(executor.map(lambda s: s.open(), sessions))


def select_session(sessions):
    """
    Picks the first open session by port name. Other open sessions are disposed.
    :return: the chosen session, or None if no session is open.
    """
    chosen = None
    for s in sorted(sessions, key=lambda s: s.port):
        if s.is_open:
            if chosen is None:
                logger.info("%s: Good Arduino! Will take that one..." % s.port)
                chosen = s
            else:
                logger.info("%s: Good Arduino too, but already took %s" % (s.port, chosen.port))
                s.dispose()
        else:
            logger.info(s.error)
    return chosen


def discover(links, session_factory=DeviceSession):
    """
    Runs one round of discovery over the given links.
    :param session_factory: callable creating a session for a link.
    :return: the validated session, or None.
    """
    sessions = [session_factory(link) for link in links]
    for s in sessions:
        s.events += log_session_events
        logger.info("%s: checking for an Arduino..." % s.port)
    open_all(sessions)
    return select_session(sessions)


def find_device(session_factory=DeviceSession, ports=None, dtr=None, rts=None, retry_period=None,
                stop_event: threading.Event = None):
    """
    Repeats discovery until a device is found.
    :param ports: the ports to try, or None to enumerate the serial ports on each attempt.
    :param retry_period: seconds between attempts.
    :param stop_event: when set, the search is abandoned.
    :return: the validated session, or None if stopped first.
    """
    dtr = settings.dtr if dtr is None else dtr
    rts = settings.rts if rts is None else rts
    retry_period = settings.retry_period if retry_period is None else retry_period
    stop_event = stop_event or threading.Event()
    while not stop_event.is_set():
        links = candidate_links(ports, dtr=dtr, rts=rts)
        if links:
            session = discover(links, session_factory)
            if session is not None:
                return session
            logger.warning("No Arduino found on %s" % ', '.join(link.port for link in links))
        else:
            logger.warning("No serial ports found")
        logger.warning("Trying again in %g seconds..." % retry_period)
        stop_event.wait(retry_period)
    return None
