"""
Runs the bridge between Scratch and an SSAP device.

    python -m ssap --port COM3
    python -m ssap --simulate --log-level DEBUG
"""
import argparse
import logging
import sys
import threading
from functools import partial

from ssap import settings
from ssap.bridge import BridgeServer, ScratchBridge
from ssap.conduit.loopback import SimulatedDevice, simulated_conduit_factory
from ssap.discovery import find_device
from ssap.session import DeviceSession

logger = logging.getLogger(__name__)

simulated_pins = {'A0': 512, 'A1': 0, 'D2': 1, 'D3': 0}


def parse_args(args=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='ssap-bridge', description="Scratch bridge for SSAP Arduino devices")
    parser.add_argument('--config-dir', default=None,
                        help="directory containing ssap.cfg and its flavors (default: the packaged configuration)")
    parser.add_argument('--port', default=None,
                        help="serial port of the device, or 'auto' to search every port")
    parser.add_argument('--http-port', type=int, default=None, help="port Scratch connects to")
    parser.add_argument('--simulate', action='store_true', help="use a simulated device instead of a serial port")
    parser.add_argument('--log-level', default=None, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(args)


def apply_args(args):
    settings.configure(args.config_dir)
    if args.port is not None:
        settings.port = args.port
    if args.http_port is not None:
        settings.http_port = args.http_port
    if args.log_level is not None:
        settings.log_level = args.log_level


def connect(simulate=False, stop_event=None):
    """
    Finds the device, or creates a simulated one.
    :return: the open session, or None if stopped before a device was found.
    """
    ports = None if settings.auto_port() else [settings.port]
    if simulate:
        factory = simulated_conduit_factory(SimulatedDevice(pins=simulated_pins))
        return find_device(partial(DeviceSession, conduit_factory=factory), ports=ports or ['SIMULATED'],
                           stop_event=stop_event)
    return find_device(ports=ports, stop_event=stop_event)


def main(args=None):
    args = parse_args(args)
    apply_args(args)
    logging.basicConfig(level=settings.log_level,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    stop_event = threading.Event()
    try:
        session = connect(args.simulate, stop_event)
    except KeyboardInterrupt:
        return 1
    if session is None:
        return 1

    server = BridgeServer(ScratchBridge(session))
    logger.info("Serving Scratch on http://%s:%d/" % (settings.http_host, server.port))
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
        session.dispose()
    return 0


if __name__ == '__main__':
    sys.exit(main())
