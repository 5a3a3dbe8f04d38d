"""
The HTTP interface used by Scratch 2 offline extensions.

Scratch polls `/poll` many times a second and sends blocks as GET requests:

    /poll                               current input values, one per line
    /startPolling/A0,D2                 inputs to poll from now on
    /setOutput/D3/75                    output D3 at 75%
    /setMotor/D9/90                     servo on D9 at 90 degrees
"""
import logging
import re
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote, urlsplit

from ssap import settings
from ssap.errors import ConnectorError, InvalidIdentifierError

logger = logging.getLogger(__name__)

INPUT_SEPARATORS = re.compile(r'[,;\t ]+')


def string_to_int(s):
    """
    Converts a number from Scratch into an integer, rounding halves up.
    Either '.' or ',' may be the decimal separator. Anything unparsable is 0.

    >>> string_to_int('42')
    42
    >>> string_to_int('2,5')
    3
    >>> string_to_int('abc')
    0
    """
    try:
        return int(float(s.strip().replace(',', '.')) + 0.5)
    except (ValueError, OverflowError):
        return 0


def parse_inputs(inputs):
    """
    >>> parse_inputs('A0, D2;D3')
    ['A0', 'D2', 'D3']
    """
    return [s for s in INPUT_SEPARATORS.split(inputs or '') if s]


def is_analog(identifier):
    return identifier.upper().startswith('A')


class ScratchBridge:
    """
    Translates Scratch requests into session operations.
    """

    def __init__(self, session):
        self.session = session
        self._inputs = []
        self._lock = threading.Lock()

    @property
    def inputs(self):
        with self._lock:
            return list(self._inputs)

    def poll(self) -> str:
        """
        Formats the known values of the polled inputs. Analog inputs report their value,
        digital inputs report true/false along with the inverted `~` input.
        """
        lines = []
        with self._lock:
            for i in self._inputs:
                value = self.session.try_get_value(i)
                if value is None:
                    continue
                if is_analog(i):
                    lines.append('%s %d\n' % (i, value))
                else:
                    lines.append('%s %s\n' % (i, 'false' if value == 0 else 'true'))
                    lines.append('~%s %s\n' % (i, 'true' if value == 0 else 'false'))
        return ''.join(lines)

    def start_polling(self, inputs):
        logger.info("StartPolling: %s" % inputs)
        parsed = parse_inputs(inputs)
        with self._lock:
            if parsed:
                self.session.start_poll(list(parsed))
            self._inputs = parsed

    def set_output(self, output, value_percent):
        logger.info("SetOutput %s: %s%%" % (output, value_percent))
        percent = min(max(string_to_int(value_percent), 0), 100)
        self.session.set_output_percent(output, percent)

    def set_motor(self, output, angle):
        logger.info("SetMotor %s: %s deg" % (output, angle))
        self.session.set_motor(output, string_to_int(angle))


class BridgeRequestHandler(BaseHTTPRequestHandler):
    """
    Routes GET requests to the ScratchBridge held by the server.
    """

    routes = (
        (re.compile(r'^/poll/?$'), 'poll'),
        (re.compile(r'^/startPolling/?(?P<inputs>[^/]*)/?$'), 'start_polling'),
        (re.compile(r'^/setOutput/(?P<output>[^/]+)/(?P<value_percent>[^/]+)/?$'), 'set_output'),
        (re.compile(r'^/setMotor/(?P<output>[^/]+)/(?P<angle>[^/]+)/?$'), 'set_motor'),
    )

    def do_GET(self):
        path = urlsplit(self.path).path
        for pattern, name in self.routes:
            match = pattern.match(path)
            if match:
                args = {k: unquote(v) for k, v in match.groupdict().items()}
                try:
                    result = getattr(self.server.bridge, name)(**args)
                except InvalidIdentifierError as e:
                    logger.warning("%s rejected: %s" % (path, e))
                    self._respond(400, str(e))
                except ConnectorError as e:
                    logger.warning("%s failed: %s" % (path, e))
                    self._respond(503, str(e))
                else:
                    self._respond(200, result or '')
                return
        self._respond(404, '')

    def _respond(self, status, body):
        content = body.encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.send_header('Content-Length', str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def log_message(self, format, *args):
        logger.debug("%s - %s" % (self.address_string(), format % args))


class BridgeServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, bridge: ScratchBridge, host=None, port=None):
        address = (settings.http_host if host is None else host, settings.http_port if port is None else port)
        super().__init__(address, BridgeRequestHandler)
        self.bridge = bridge

    @property
    def port(self):
        return self.server_address[1]
