"""
ClearCore Motor Control

Motor axis handle built on the shared device handle. Every operation is
one or more command/reply round trips through the connection dispatcher;
multi-step operations (enable, wait_for_move) poll the motor status on a
fixed interval until the transition completes.

Real-valued arguments are converted to controller units by multiplying by
the motor's scale factor and truncating toward zero. No range checking is
done here; the controller rejects out-of-range values with a failure reply.

Author: ClearCore Client Development
Created: October 2026
"""

import asyncio
import logging
from typing import Optional

from .base import MotorStatus
from .polling import IntervalTicker
from ..communication.dispatcher import ConnectionDispatcher
from ..communication.handle import DeviceHandle
from ..communication.protocol import parse_int, reply_payload, scale_value
from ..core.exceptions import MotionTimeoutError, MotorFaultedError

logger = logging.getLogger(__name__)

MOTOR_DEVICE_TYPE = b'M'
DEFAULT_ENABLE_POLL_INTERVAL = 0.25  # seconds


class ClearCoreMotor:
    """
    Handle for one motor axis

    Cheap to clone: clones share the dispatcher and identity, so any number
    of tasks can drive the same motor concurrently.
    """

    def __init__(self, id: int, scale: int, dispatcher: ConnectionDispatcher,
                 poll_interval: float = DEFAULT_ENABLE_POLL_INTERVAL):
        if scale <= 0:
            raise ValueError(f"Motor scale must be a positive integer, got {scale}")

        self.id = id
        self.scale = scale
        self.poll_interval = poll_interval
        self._handle = DeviceHandle(dispatcher, MOTOR_DEVICE_TYPE, id)

    def __repr__(self):
        return f"ClearCoreMotor(id={self.id}, scale={self.scale})"

    @property
    def prefix(self) -> bytes:
        return self._handle.prefix

    @property
    def dispatcher(self) -> ConnectionDispatcher:
        return self._handle.dispatcher

    def clone(self) -> "ClearCoreMotor":
        return ClearCoreMotor(self.id, self.scale, self._handle.dispatcher, self.poll_interval)

    # State transitions

    async def enable(self, timeout: Optional[float] = None) -> None:
        """
        Enable the motor and wait for the enable sequence to finish

        Args:
            timeout: Optional deadline in seconds for the whole sequence

        Raises:
            FailedReplyError: The controller rejected the enable command
            MotorFaultedError: The motor faulted while enabling
            MotionTimeoutError: The sequence did not finish within timeout
        """
        await self._handle.request('EN')
        logger.info(f"Motor {self.id} enabling")

        status = await self._poll_while(MotorStatus.ENABLING, self.poll_interval, timeout)
        if status == MotorStatus.FAULTED:
            logger.error(f"❌ Motor {self.id} faulted during enable")
            raise MotorFaultedError(f"Motor {self.id} faulted", module="motion")

        logger.info(f"✅ Motor {self.id} enabled ({status.name})")

    async def disable(self) -> None:
        await self._handle.request('DE')
        logger.info(f"Motor {self.id} disabled")

    async def clear_alerts(self) -> None:
        """Clear motor alerts; the resulting state is up to the controller"""
        await self._handle.request('CA')
        logger.info(f"Motor {self.id} alerts cleared")

    # Motion

    async def absolute_move(self, position: float) -> None:
        await self._handle.request('AM', scale_value(position, self.scale))

    async def relative_move(self, position: float) -> None:
        await self._handle.request('RM', scale_value(position, self.scale))

    async def jog(self, speed: float) -> None:
        await self._handle.request('JG', scale_value(speed, self.scale))

    async def abrupt_stop(self) -> None:
        """Stop immediately without deceleration"""
        await self._handle.request('AS')
        logger.warning(f"Motor {self.id} abrupt stop")

    async def stop(self) -> None:
        """Decelerate to a stop"""
        await self._handle.request('ST')

    # Motion parameters

    async def set_position(self, position: float) -> None:
        """Redefine the motor's current position"""
        await self._handle.request('SP', scale_value(position, self.scale))

    async def set_velocity(self, velocity: float) -> None:
        # Direction comes from the move, not the velocity
        velocity = max(velocity, 0.0)
        await self._handle.request('SV', scale_value(velocity, self.scale))

    async def set_acceleration(self, acceleration: float) -> None:
        await self._handle.request('SA', scale_value(acceleration, self.scale))

    async def set_deceleration(self, deceleration: float) -> None:
        await self._handle.request('SD', scale_value(deceleration, self.scale))

    # Queries

    async def get_status(self) -> MotorStatus:
        """
        Query the motor state

        Raises:
            FailedReplyError: The controller rejected the query
            ProtocolDecodeError: The status digit is not a known state
        """
        reply = await self._handle.request('GS')
        status = MotorStatus.from_digit(reply_payload(reply)[0])
        logger.debug(f"Motor {self.id} status: {status.name}")
        return status

    async def get_position(self) -> float:
        """Query the motor position in user units"""
        reply = await self._handle.request('GP')
        return parse_int(reply_payload(reply)) / self.scale

    async def wait_for_move(self, interval: float, timeout: Optional[float] = None) -> None:
        """
        Poll the motor status every interval seconds until it stops moving

        Raises:
            MotionTimeoutError: Still moving after timeout seconds
        """
        status = await self._poll_while(MotorStatus.MOVING, interval, timeout)
        logger.debug(f"Motor {self.id} move finished ({status.name})")

    async def _poll_while(self, waiting_status: MotorStatus, interval: float,
                          timeout: Optional[float]) -> MotorStatus:
        if timeout is None:
            return await self._poll_loop(waiting_status, interval)

        try:
            return await asyncio.wait_for(self._poll_loop(waiting_status, interval), timeout)
        except asyncio.TimeoutError:
            raise MotionTimeoutError(
                f"Motor {self.id} still {waiting_status.name} after {timeout}s",
                module="motion") from None

    async def _poll_loop(self, waiting_status: MotorStatus, interval: float) -> MotorStatus:
        ticker = IntervalTicker(interval)
        while True:
            await ticker.tick()
            status = await self.get_status()
            if status != waiting_status:
                return status
