"""
Motor Status Definitions

The controller reports a motor's state as a single ASCII digit. The set
of states is closed: a digit outside it is a decode error, never a new
state.

    Disabled -> Enabling -> Ready | Faulted
    Ready -> Moving -> Ready

Author: ClearCore Client Development
Created: October 2026
"""

from enum import Enum

from ..core.exceptions import ProtocolDecodeError


class MotorStatus(Enum):
    """Motor states keyed by their status digit"""
    DISABLED = "0"
    ENABLING = "1"
    FAULTED = "2"
    READY = "3"
    MOVING = "4"

    @classmethod
    def from_digit(cls, digit: int) -> "MotorStatus":
        """Map a status byte (ASCII digit) to its state"""
        try:
            return cls(chr(digit))
        except ValueError:
            raise ProtocolDecodeError(f"Unknown motor status {chr(digit)!r}", module="motion") from None

    @property
    def digit(self) -> int:
        return ord(self.value)
