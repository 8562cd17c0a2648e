"""
ClearCore ASCII Command/Reply Codec

Pure encode/decode rules for the controller's wire format. Nothing in this
module touches a connection.

Command frame::

    STX | device type | '0'+index | code0 code1 | [signed ASCII int] | CR

Reply frame::

    STX | device type | index digit | '?' or payload ... | CR

Byte 3 of a reply is the discriminator: '?' marks a failure report,
anything else starts the payload (a status digit or a signed decimal
integer).

Author: ClearCore Client Development
Created: October 2026
"""

from typing import Optional, Tuple

from ..core.exceptions import FailedReplyError, ProtocolDecodeError

STX = 0x02
CR = 0x0D
RESULT_IDX = 3
FAILED_REPLY = ord('?')

MAX_DEVICE_INDEX = 9
COMMAND_CODE_LENGTH = 2

_ZERO = ord('0')
_NINE = ord('9')
_MINUS = ord('-')


def _tag_byte(device_type: bytes) -> int:
    if isinstance(device_type, str):
        device_type = device_type.encode('ascii')
    if len(device_type) != 1:
        raise ValueError(f"Device type tag must be a single byte, got {device_type!r}")
    return device_type[0]


def make_prefix(device_type: bytes, device_index: int) -> bytes:
    """Build the three-byte prefix (STX, type tag, index digit) of a command."""
    if not 0 <= device_index <= MAX_DEVICE_INDEX:
        raise ValueError(f"Device index must be 0-{MAX_DEVICE_INDEX}, got {device_index}")
    return bytes([STX, _tag_byte(device_type), _ZERO + device_index])


def num_to_bytes(number: int) -> bytes:
    """ASCII decimal representation of an integer."""
    return str(int(number)).encode('ascii')


def scale_value(value: float, scale: int) -> int:
    """Convert a user-unit value to controller units, truncating toward zero."""
    return int(value * scale)


def encode_command(device_type: bytes, device_index: int, code: str,
                   payload: Optional[int] = None) -> bytes:
    """
    Encode a complete command frame

    Args:
        device_type: Single-byte device type tag (e.g. b'M')
        device_index: Device index 0-9
        code: Two-letter command code (e.g. 'AM')
        payload: Optional signed integer argument

    Returns:
        The framed command, CR-terminated
    """
    if len(code) != COMMAND_CODE_LENGTH:
        raise ValueError(f"Command code must be {COMMAND_CODE_LENGTH} characters, got {code!r}")

    frame = bytearray(make_prefix(device_type, device_index))
    frame += code.encode('ascii')
    if payload is not None:
        frame += num_to_bytes(payload)
    frame.append(CR)
    return bytes(frame)


def decode_device_identity(frame: bytes) -> Tuple[bytes, int]:
    """Recover (device type tag, device index) from a command or reply frame."""
    if len(frame) < RESULT_IDX or frame[0] != STX:
        raise ProtocolDecodeError(f"Not a framed message: {frame!r}", module="communication")

    index_byte = frame[2]
    if not _ZERO <= index_byte <= _NINE:
        raise ProtocolDecodeError(f"Invalid device index byte in {frame!r}", module="communication")

    return bytes([frame[1]]), index_byte - _ZERO


def is_failed_reply(reply: bytes) -> bool:
    """True if the reply's discriminator byte marks a failure report."""
    return len(reply) > RESULT_IDX and reply[RESULT_IDX] == FAILED_REPLY


def check_reply(reply: bytes) -> None:
    """
    Raise if the reply is a failure report

    Raises:
        FailedReplyError: Byte 3 is '?'; the message is the full reply text
        ProtocolDecodeError: The reply is too short, or its failure text is not valid UTF-8
    """
    if len(reply) <= RESULT_IDX:
        raise ProtocolDecodeError(f"Reply too short: {reply!r}", module="communication")

    if not is_failed_reply(reply):
        return

    try:
        text = reply.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ProtocolDecodeError(f"Undecodable failure reply {reply!r}: {e}",
                                  module="communication") from e

    raise FailedReplyError(text, reply=reply)


def reply_payload(reply: bytes) -> bytes:
    """Bytes of a reply from the discriminator offset onward."""
    if len(reply) <= RESULT_IDX:
        raise ProtocolDecodeError(f"Reply has no payload: {reply!r}", module="communication")
    return reply[RESULT_IDX:]


def parse_int(data: bytes) -> int:
    """
    Parse a signed ASCII integer

    A leading '-' negates the result; every other non-digit byte (such as
    the CR terminator) is ignored.

    Raises:
        ProtocolDecodeError: No digit is present
    """
    if not data:
        raise ProtocolDecodeError("Empty integer payload", module="communication")

    sign = -1 if data[0] == _MINUS else 1
    acc = 0
    seen_digit = False
    for byte in data:
        if _ZERO <= byte <= _NINE:
            acc = acc * 10 + (byte - _ZERO)
            seen_digit = True

    if not seen_digit:
        raise ProtocolDecodeError(f"Malformed integer payload: {data!r}", module="communication")

    return acc * sign


def parse_digit(reply: bytes) -> int:
    """Decode the single status digit at the discriminator offset."""
    byte = reply_payload(reply)[0]
    if not _ZERO <= byte <= _NINE:
        raise ProtocolDecodeError(f"Expected a status digit in {reply!r}", module="communication")
    return byte - _ZERO
