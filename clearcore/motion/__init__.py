"""
Motion Control Module

Handles ClearCore motor axes including:
- Motor status decoding
- Enable/disable and fault detection
- Absolute, relative and jog moves
- Polling for move completion
"""

from .base import MotorStatus
from .motor import ClearCoreMotor
