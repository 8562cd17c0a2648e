"""
ClearCore Controller Handle

Top-level assembly: one connection dispatcher plus the fixed set of device
handles the controller exposes. Accessors hand out clones, so callers can
move devices into separate tasks freely; every clone routes through the
same dispatcher and no accessor ever opens another connection.

IO bank layout:
- 3 digital inputs (indices 0-2)
- 4 analog inputs (indices 3-6)
- 6 digital outputs (indices 0-5)
- 2 H-bridges (indices 4-5)

Author: ClearCore Client Development
Created: October 2026
"""

import logging
from typing import List, Optional, Sequence

from .communication.dispatcher import ConnectionDispatcher
from .communication.transport import Transport, create_transport
from .core.config_manager import ConfigManager, MotorConfig
from .devices.inputs import AnalogInput, DigitalInput
from .devices.outputs import DEFAULT_H_BRIDGE_SCALE, DigitalOutput, HBridge
from .motion.motor import DEFAULT_ENABLE_POLL_INTERVAL, ClearCoreMotor

logger = logging.getLogger(__name__)

NO_DIGITAL_INPUTS = 3
NO_ANALOG_INPUTS = 4
ANALOG_INPUT_FIRST_INDEX = 3
NO_OUTPUTS = 6
H_BRIDGE_INDICES = (4, 5)


class ControllerHandle:
    """
    Handle for a ClearCore controller

    Usage::

        controller = create_controller(ConfigManager("config/clearcore_config.yaml"))
        async with controller:
            motor = controller.get_motor(0)
            await motor.enable()
            await motor.absolute_move(10.0)
            await motor.wait_for_move(0.1)
    """

    def __init__(self, dispatcher: ConnectionDispatcher, motors: Sequence[MotorConfig],
                 poll_interval: float = DEFAULT_ENABLE_POLL_INTERVAL,
                 h_bridge_scale: int = DEFAULT_H_BRIDGE_SCALE):
        self.dispatcher = dispatcher

        self._motors = [
            ClearCoreMotor(motor.id, motor.scale, dispatcher, poll_interval)
            for motor in motors
        ]
        self._digital_inputs = [DigitalInput(index, dispatcher) for index in range(NO_DIGITAL_INPUTS)]
        self._analog_inputs = [
            AnalogInput(index + ANALOG_INPUT_FIRST_INDEX, dispatcher)
            for index in range(NO_ANALOG_INPUTS)
        ]
        self._outputs = [DigitalOutput(index, dispatcher) for index in range(NO_OUTPUTS)]
        self._h_bridges = [HBridge(index, h_bridge_scale, dispatcher) for index in H_BRIDGE_INDICES]

        logger.debug(f"Controller assembled with {len(self._motors)} motors on {dispatcher!r}")

    @classmethod
    def from_transport(cls, transport: Transport, motors: Sequence[MotorConfig],
                       queue_size: int = 10, request_timeout: Optional[float] = None,
                       **kwargs) -> "ControllerHandle":
        dispatcher = ConnectionDispatcher(transport, queue_size=queue_size,
                                          request_timeout=request_timeout)
        return cls(dispatcher, motors, **kwargs)

    # Connection management

    async def connect(self) -> None:
        await self.dispatcher.start()

    async def disconnect(self) -> None:
        await self.dispatcher.stop()

    def is_connected(self) -> bool:
        return self.dispatcher.running

    async def __aenter__(self) -> "ControllerHandle":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    # Device accessors

    def get_motor(self, id: int) -> ClearCoreMotor:
        return self._motors[id].clone()

    def get_motors(self) -> List[ClearCoreMotor]:
        return [motor.clone() for motor in self._motors]

    def get_digital_input(self, id: int) -> DigitalInput:
        return self._digital_inputs[id].clone()

    def get_digital_inputs(self) -> List[DigitalInput]:
        return [digital_input.clone() for digital_input in self._digital_inputs]

    def get_analog_input(self, id: int) -> AnalogInput:
        return self._analog_inputs[id].clone()

    def get_analog_inputs(self) -> List[AnalogInput]:
        return [analog_input.clone() for analog_input in self._analog_inputs]

    def get_output(self, id: int) -> DigitalOutput:
        return self._outputs[id].clone()

    def get_outputs(self) -> List[DigitalOutput]:
        return [output.clone() for output in self._outputs]

    def get_h_bridge(self, id: int) -> HBridge:
        """Get an H-bridge by its device index (4 or 5)"""
        if id not in H_BRIDGE_INDICES:
            raise IndexError(f"No H-bridge at index {id}; valid indices are {H_BRIDGE_INDICES}")
        return self._h_bridges[id - H_BRIDGE_INDICES[0]].clone()

    def get_h_bridges(self) -> List[HBridge]:
        return [h_bridge.clone() for h_bridge in self._h_bridges]


def create_controller(config_manager: ConfigManager) -> ControllerHandle:
    """Create a controller handle from configuration"""
    connection = config_manager.get_connection_config()
    transport = create_transport(connection)

    return ControllerHandle.from_transport(
        transport,
        config_manager.get_motor_configs(),
        queue_size=connection.queue_size,
        request_timeout=connection.request_timeout,
        poll_interval=connection.poll_interval,
        h_bridge_scale=int(config_manager.get('controller.h_bridge_scale', DEFAULT_H_BRIDGE_SCALE))
    )
