"""
Runtime settings shared by the connector modules.

The values below are the built-in defaults. `configure()` replaces them with the values from
the [ssap] [[settings]] section of the configuration files.
"""
import os
import sys

from ssap.config.config import configure_module

# serial port of the device, or 'auto' to search every port
port = 'auto'
dtr = True
rts = True
baud_rate = 115200
write_timeout = 1.0
read_timeout = 0.1
handshake_timeout = 2.0
poll_interval = 0.03
retry_period = 5.0
http_host = '127.0.0.1'
http_port = 15001
log_level = 'INFO'

config_name = 'ssap'
config_directory = os.path.join(os.path.dirname(__file__), 'config')

this_module = sys.modules[__name__]


def configure(directory=None, user_file=None):
    """
    Loads the ssap configuration files and applies them to this module.
    :param directory: where the configuration files are, by default the ones packaged with ssap.
    :param user_file: the user override, by default ~/.ssap.cfg
    :return: the loaded configuration
    """
    return configure_module(this_module, config_name, directory or config_directory, user_file)


def auto_port():
    return port is None or port.lower() == 'auto'
