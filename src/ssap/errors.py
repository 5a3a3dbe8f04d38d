"""
Errors raised while opening and talking to an SSAP device.

OpenError, HandshakeTimeout and HandshakeRejected end a session: the session records the message
and closes its transport. WriteError is raised by the transport write path and is swallowed by the
fire-and-forget callers.
"""


class ConnectorError(Exception):
    """ Indicates an error condition with a connection. """


class SessionNotOpenError(ConnectorError):
    """ Indicates the session has not been validated when an open session is required. """


class OpenError(ConnectorError):
    """ The link could not be acquired, e.g. the port does not exist or is in use. """


class WriteError(ConnectorError):
    """ Writing to the link failed. """


class HandshakeError(ConnectorError):
    """ The device did not identify itself as a supported firmware. """


class HandshakeTimeout(HandshakeError):
    """ No identity line arrived in time. """


class HandshakeRejected(HandshakeError):
    """ An identity line arrived but it was empty or named another firmware. """


class InvalidIdentifierError(ConnectorError):
    """ An identifier or command cannot be sent because it is not plain ASCII. """
