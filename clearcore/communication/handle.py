"""
Device Handle

The one capability every device type shares: encode a command for a fixed
(device type, index) identity, submit it through the dispatcher and hand
back the raw reply. Device classes hold a DeviceHandle rather than
inheriting from one; typed decoding of replies stays with them.

Author: ClearCore Client Development
Created: October 2026
"""

import logging
from typing import Optional, Union

from .dispatcher import ConnectionDispatcher
from .protocol import check_reply, encode_command, make_prefix

logger = logging.getLogger(__name__)


class DeviceHandle:
    """Identity of one addressable device plus the shared dispatcher"""

    __slots__ = ('dispatcher', 'device_type', 'index', 'prefix')

    def __init__(self, dispatcher: ConnectionDispatcher, device_type: Union[bytes, str], index: int):
        if isinstance(device_type, str):
            device_type = device_type.encode('ascii')
        self.dispatcher = dispatcher
        self.device_type = device_type
        self.index = index
        self.prefix = make_prefix(device_type, index)

    def __repr__(self):
        return f"DeviceHandle({self.device_type.decode('ascii')}{self.index})"

    def __eq__(self, other):
        if not isinstance(other, DeviceHandle):
            return NotImplemented
        return (self.dispatcher is other.dispatcher
                and self.device_type == other.device_type
                and self.index == other.index)

    def __hash__(self):
        return hash((id(self.dispatcher), self.device_type, self.index))

    def clone(self) -> "DeviceHandle":
        """Shallow copy; shares the dispatcher, never opens a connection"""
        return DeviceHandle(self.dispatcher, self.device_type, self.index)

    def command(self, code: str, payload: Optional[int] = None) -> bytes:
        """Encode a command addressed to this device"""
        return encode_command(self.device_type, self.index, code, payload)

    async def write(self, buffer: bytes) -> bytes:
        """Submit an already encoded command and return the raw reply"""
        return await self.dispatcher.submit(buffer)

    async def request(self, code: str, payload: Optional[int] = None) -> bytes:
        """
        Encode, submit and check a command

        Returns:
            The raw reply, guaranteed not to be a failure report

        Raises:
            FailedReplyError: The controller rejected the command
        """
        reply = await self.write(self.command(code, payload))
        check_reply(reply)
        return reply
