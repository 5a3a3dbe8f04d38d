import unittest

from hamcrest import assert_that, calling, is_, raises

from ssap.errors import HandshakeRejected, InvalidIdentifierError
from ssap.protocol.ssap import WHO_ARE_YOU, check_firmware, motor_command, output_command, parse_reading, \
    poll_request, tobytes


class EncodingTest(unittest.TestCase):

    def test_who_are_you(self):
        assert_that(WHO_ARE_YOU, is_(b'WHO ARE YOU?\r'))

    def test_poll_request_concatenates_without_separator(self):
        assert_that(poll_request(['A0', 'D2', 'D13']), is_(b'A0?\rD2?\rD13?\r'))

    def test_poll_request_empty(self):
        assert_that(poll_request([]), is_(b''))

    def test_output_command(self):
        assert_that(output_command('D3', 75), is_(b'D3:75%\r'))

    def test_output_command_is_not_clamped(self):
        assert_that(output_command('D3', 250), is_(b'D3:250%\r'))

    def test_motor_command(self):
        assert_that(motor_command('D3', 90), is_(b'D3:90*\r'))
        assert_that(motor_command('D9', -10), is_(b'D9:-10*\r'))

    def test_tobytes(self):
        assert_that(tobytes('abc'), is_(b'abc'))
        assert_that(tobytes(b'abc'), is_(b'abc'))

    def test_non_ascii_identifiers_are_rejected(self):
        assert_that(calling(tobytes).with_args('A\u00e9'), raises(InvalidIdentifierError, 'not ASCII'))
        assert_that(calling(poll_request).with_args(['A0', 'A\u00e9']), raises(InvalidIdentifierError))
        assert_that(calling(output_command).with_args('\u00e9', 5), raises(InvalidIdentifierError))
        assert_that(calling(motor_command).with_args('\u00e9', 5), raises(InvalidIdentifierError))


class ParseReadingTest(unittest.TestCase):

    def test_reading(self):
        assert_that(parse_reading('A0:512'), is_(('A0', 512)))
        assert_that(parse_reading('D2:-1'), is_(('D2', -1)))
        assert_that(parse_reading('D2:+7'), is_(('D2', 7)))

    def test_malformed(self):
        for line in [None, '', 'A0', 'A0:', ':5', 'A0:abc', 'A0:1:2', 'A0:1.5', 'A0:0x10', 'A0:-']:
            assert_that(parse_reading(line), is_(None), repr(line))

    def test_identifier_is_opaque(self):
        assert_that(parse_reading('a0:1'), is_(('a0', 1)))


class CheckFirmwareTest(unittest.TestCase):

    def test_accepts_prefix(self):
        assert_that(check_firmware('SSAP_V01'), is_('SSAP_V01'))
        assert_that(check_firmware('SSAP_V01 build 7'), is_('SSAP_V01 build 7'))

    def test_rejects_empty(self):
        assert_that(calling(check_firmware).with_args(''), raises(HandshakeRejected, 'empty firmware response'))
        assert_that(calling(check_firmware).with_args(None), raises(HandshakeRejected))

    def test_rejects_other_firmware(self):
        assert_that(calling(check_firmware).with_args('NOPE'),
                    raises(HandshakeRejected, 'expected firmware SSAP_V01, but Arduino returned NOPE'))
