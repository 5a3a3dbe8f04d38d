"""
Encoding and decoding of SSAP messages.

Every message is an ASCII line. The host ends its lines with CR; the device may use CR, LF or both.

    host                        device
    WHO ARE YOU?\\r       ->    SSAP_V01...
    A0?\\rD2?\\r          ->    A0:512  D2:1
    D3:75%\\r             ->    (no reply)
    D9:90*\\r             ->    (no reply)
"""

from ssap.errors import HandshakeRejected, InvalidIdentifierError

WHO_ARE_YOU = b'WHO ARE YOU?\r'
EXPECTED_FIRMWARE = 'SSAP_V01'


def tobytes(arg):
    """
    Converts a string to bytes
    >>> tobytes("abc")
    b'abc'
    >>> tobytes(b"abc")
    b'abc'
    :raises InvalidIdentifierError: when the string is not ASCII.
    """
    if isinstance(arg, str):
        try:
            arg = bytes(arg, encoding='ascii')
        except UnicodeEncodeError as e:
            raise InvalidIdentifierError("cannot send %r: not ASCII" % arg) from e
    return arg


def poll_request(identifiers) -> bytes:
    """
    Builds the single write that queries all the given inputs.
    >>> poll_request(['A0', 'D2'])
    b'A0?\\rD2?\\r'
    """
    return tobytes(''.join('%s?\r' % i for i in identifiers))


def output_command(identifier, percent) -> bytes:
    """
    >>> output_command('D3', 75)
    b'D3:75%\\r'
    """
    return tobytes('%s:%d%%\r' % (identifier, percent))


def motor_command(identifier, angle) -> bytes:
    """
    >>> motor_command('D3', 90)
    b'D3:90*\\r'
    """
    return tobytes('%s:%d*\r' % (identifier, angle))


def _parse_int(text):
    """ base 10 integers only, with an optional sign and surrounding whitespace. """
    stripped = text.strip()
    digits = stripped[1:] if stripped[:1] in ('+', '-') else stripped
    if not digits or not (digits.isascii() and digits.isdigit()):
        return None
    return int(stripped)


def parse_reading(line):
    """
    Decodes a poll response.
    :return: (identifier, value) or None when the line is not a well formed reading.

    >>> parse_reading('A0:512')
    ('A0', 512)
    >>> parse_reading('A0:') is None
    True
    >>> parse_reading('A0:1:2') is None
    True
    >>> parse_reading(' D2:1')
    ('D2', 1)
    """
    line = line.strip() if line else line
    if not line:
        return None
    parts = line.split(':')
    if len(parts) != 2:
        return None
    identifier, text = parts
    if not identifier or not text:
        return None
    value = _parse_int(text)
    if value is None:
        return None
    return identifier, value


def check_firmware(line):
    """
    Validates the identity line returned by the device.
    :raises HandshakeRejected: when the line is empty or names another firmware.
    """
    if not line:
        raise HandshakeRejected("No valid Arduino - empty firmware response")
    if not line.startswith(EXPECTED_FIRMWARE):
        raise HandshakeRejected("No valid Arduino - expected firmware %s, but Arduino returned %s"
                                % (EXPECTED_FIRMWARE, line))
    return line
