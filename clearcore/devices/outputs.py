"""
ClearCore Output Handles

Digital outputs and H-bridge drivers. H-bridge power is given as a
fraction in [-1, 1] and scaled to the controller's PWM range.

Author: ClearCore Client Development
Created: October 2026
"""

import logging

from .inputs import decode_state
from ..communication.dispatcher import ConnectionDispatcher
from ..communication.handle import DeviceHandle
from ..communication.protocol import scale_value

logger = logging.getLogger(__name__)

DIGITAL_OUTPUT_DEVICE_TYPE = b'O'
H_BRIDGE_DEVICE_TYPE = b'H'
DEFAULT_H_BRIDGE_SCALE = 32700


class DigitalOutput:
    """Handle for one digital output"""

    def __init__(self, index: int, dispatcher: ConnectionDispatcher):
        self.index = index
        self._handle = DeviceHandle(dispatcher, DIGITAL_OUTPUT_DEVICE_TYPE, index)

    def __repr__(self):
        return f"DigitalOutput({self.index})"

    def clone(self) -> "DigitalOutput":
        return DigitalOutput(self.index, self._handle.dispatcher)

    async def set_state(self, state: bool) -> None:
        await self._handle.request('SS', 1 if state else 0)
        logger.debug(f"Output {self.index} set {'on' if state else 'off'}")

    async def get_state(self) -> bool:
        reply = await self._handle.request('GS')
        return decode_state(reply)


class HBridge:
    """Handle for one H-bridge driver"""

    def __init__(self, index: int, scale: int, dispatcher: ConnectionDispatcher):
        self.index = index
        self.scale = scale
        self._handle = DeviceHandle(dispatcher, H_BRIDGE_DEVICE_TYPE, index)

    def __repr__(self):
        return f"HBridge({self.index}, scale={self.scale})"

    def clone(self) -> "HBridge":
        return HBridge(self.index, self.scale, self._handle.dispatcher)

    async def set_power(self, power: float) -> None:
        """Drive at a fraction of full power; the sign selects direction"""
        power = min(max(power, -1.0), 1.0)
        await self._handle.request('SP', scale_value(power, self.scale))
