"""
IO Devices Module

Thin handles for the controller's IO bank:
- Digital and analog inputs
- Digital outputs
- H-bridge drivers
"""

from .inputs import AnalogInput, DigitalInput
from .outputs import DigitalOutput, HBridge
