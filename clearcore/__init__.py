"""
ClearCore Client

Asyncio client for ClearCore motion/IO controllers speaking the
STX/CR-framed ASCII command protocol. Motors, inputs, outputs and H-bridges
share one connection through a single dispatcher.
"""

from .controller import ControllerHandle, create_controller
from .core.config_manager import ConfigManager, ConnectionConfig, MotorConfig
from .motion.base import MotorStatus
from .motion.motor import ClearCoreMotor

__version__ = "0.1.0"
