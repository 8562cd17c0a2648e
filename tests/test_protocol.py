"""
Test ClearCore Protocol Codec

Command framing, reply checking and integer parsing.
"""

import pytest

from clearcore.communication.protocol import (
    CR, STX, check_reply, decode_device_identity, encode_command, is_failed_reply,
    make_prefix, num_to_bytes, parse_digit, parse_int, reply_payload, scale_value
)
from clearcore.core.exceptions import FailedReplyError, ProtocolDecodeError, ProtocolError


class TestCommandEncoding:
    """Test command frame construction"""

    @pytest.mark.parametrize("tag", [b'M', b'I', b'A', b'O', b'H'])
    def test_identity_round_trip(self, tag):
        for index in range(10):
            assert decode_device_identity(make_prefix(tag, index)) == (tag, index)

    def test_prefix_bytes(self):
        assert make_prefix(b'M', 2) == bytes([0x02, ord('M'), ord('2')])

    @pytest.mark.parametrize("index", [-1, 10, 42])
    def test_prefix_rejects_multi_digit_index(self, index):
        with pytest.raises(ValueError):
            make_prefix(b'M', index)

    def test_prefix_rejects_long_tag(self):
        with pytest.raises(ValueError):
            make_prefix(b'MM', 0)

    def test_absolute_move_frame(self):
        frame = encode_command(b'M', 2, 'AM', 1500)
        assert list(frame) == [0x02, ord('M'), ord('2'), ord('A'), ord('M'),
                               ord('1'), ord('5'), ord('0'), ord('0'), 0x0D]

    def test_frame_without_payload(self):
        assert encode_command(b'M', 0, 'GS') == b'\x02M0GS\r'

    def test_negative_payload(self):
        assert encode_command(b'M', 1, 'RM', -250) == b'\x02M1RM-250\r'

    def test_zero_payload_is_encoded(self):
        assert encode_command(b'M', 1, 'SV', 0) == b'\x02M1SV0\r'

    def test_command_code_must_be_two_characters(self):
        with pytest.raises(ValueError):
            encode_command(b'M', 0, 'G')
        with pytest.raises(ValueError):
            encode_command(b'M', 0, 'GSX')

    def test_frame_delimiters(self):
        frame = encode_command(b'O', 5, 'SS', 1)
        assert frame[0] == STX
        assert frame[-1] == CR

    def test_num_to_bytes(self):
        assert num_to_bytes(-42) == b'-42'
        assert num_to_bytes(0) == b'0'

    def test_decode_identity_rejects_unframed(self):
        with pytest.raises(ProtocolDecodeError):
            decode_device_identity(b'M2AM')
        with pytest.raises(ProtocolDecodeError):
            decode_device_identity(b'\x02MX')


class TestScaling:
    """Test user unit to controller unit conversion"""

    def test_scale_exact(self):
        assert scale_value(1.5, 1000) == 1500

    def test_truncates_toward_zero(self):
        assert scale_value(1.2345, 1000) == 1234
        assert scale_value(-1.2345, 1000) == -1234
        assert scale_value(0.9, 1) == 0
        assert scale_value(-0.9, 1) == 0


class TestReplyDecoding:
    """Test reply checking and payload parsing"""

    def test_success_reply_passes(self):
        check_reply(b'\x02M23\r')

    def test_failed_reply_carries_full_text(self):
        reply = b'\x02M2?AM1500\r'
        assert is_failed_reply(reply)

        with pytest.raises(FailedReplyError) as exc_info:
            check_reply(reply)

        assert exc_info.value.message == reply.decode('ascii')
        assert exc_info.value.reply == reply
        assert isinstance(exc_info.value, ProtocolError)

    def test_failed_reply_with_utf8_text(self):
        reply = b'\x02M0?temp 80\xc2\xb0C\r'

        with pytest.raises(FailedReplyError) as exc_info:
            check_reply(reply)

        assert exc_info.value.message == '\x02M0?temp 80°C\r'
        assert exc_info.value.reply == reply

    def test_undecodable_failure_text(self):
        with pytest.raises(ProtocolDecodeError):
            check_reply(b'\x02M2?\xff\xfe\r')

    def test_short_reply_is_decode_error(self):
        with pytest.raises(ProtocolDecodeError):
            check_reply(b'\x02M2')

    def test_reply_payload(self):
        assert reply_payload(b'\x02M0-2500\r') == b'-2500\r'

    def test_parse_digit(self):
        assert parse_digit(b'\x02M04\r') == 4
        with pytest.raises(ProtocolDecodeError):
            parse_digit(b'\x02M0x\r')


class TestParseInt:
    """Test signed ASCII integer parsing"""

    def test_negative_with_terminator(self):
        assert parse_int(b'-123' + bytes([CR])) == -123

    def test_leading_zeros(self):
        assert parse_int(b'0045') == 45

    def test_zero(self):
        assert parse_int(b'0') == 0

    def test_large_values(self):
        assert parse_int(b'2147483648') == 2147483648
        assert parse_int(b'-2147483648\r') == -2147483648

    def test_minus_only_counts_when_leading(self):
        assert parse_int(b'12-3') == 123

    def test_no_digits_is_decode_error(self):
        with pytest.raises(ProtocolDecodeError):
            parse_int(b'-\r')
        with pytest.raises(ProtocolDecodeError):
            parse_int(b'')
