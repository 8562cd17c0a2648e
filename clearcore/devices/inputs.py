"""
ClearCore Input Handles

Digital and analog inputs on the controller's IO bank. Each is a thin
wrapper over the device handle: one query command, one scalar reply.

Author: ClearCore Client Development
Created: October 2026
"""

import logging

from ..communication.dispatcher import ConnectionDispatcher
from ..communication.handle import DeviceHandle
from ..communication.protocol import parse_digit, parse_int, reply_payload
from ..core.exceptions import ProtocolDecodeError

logger = logging.getLogger(__name__)

DIGITAL_INPUT_DEVICE_TYPE = b'I'
ANALOG_INPUT_DEVICE_TYPE = b'A'


def decode_state(reply: bytes) -> bool:
    """Decode a '0'/'1' state digit"""
    digit = parse_digit(reply)
    if digit not in (0, 1):
        raise ProtocolDecodeError(f"Invalid IO state digit {digit} in {reply!r}", module="devices")
    return digit == 1


class DigitalInput:
    """Handle for one digital input"""

    def __init__(self, index: int, dispatcher: ConnectionDispatcher):
        self.index = index
        self._handle = DeviceHandle(dispatcher, DIGITAL_INPUT_DEVICE_TYPE, index)

    def __repr__(self):
        return f"DigitalInput({self.index})"

    def clone(self) -> "DigitalInput":
        return DigitalInput(self.index, self._handle.dispatcher)

    async def get_state(self) -> bool:
        reply = await self._handle.request('GS')
        return decode_state(reply)


class AnalogInput:
    """Handle for one analog input, reporting raw controller counts"""

    def __init__(self, index: int, dispatcher: ConnectionDispatcher):
        self.index = index
        self._handle = DeviceHandle(dispatcher, ANALOG_INPUT_DEVICE_TYPE, index)

    def __repr__(self):
        return f"AnalogInput({self.index})"

    def clone(self) -> "AnalogInput":
        return AnalogInput(self.index, self._handle.dispatcher)

    async def get_value(self) -> int:
        reply = await self._handle.request('GV')
        return parse_int(reply_payload(reply))
