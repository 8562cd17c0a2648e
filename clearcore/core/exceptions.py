"""
Custom Exception Classes for the ClearCore Client

Defines hierarchical exception classes for the different kinds of failure
the client can report: configuration problems, transport failures, protocol
failure replies, decode errors and motor faults. Callers can tell
"protocol worked, device refused" apart from "protocol broke" by catching
the specific subclass.

Author: ClearCore Client Development
Created: October 2026
"""

from typing import Optional


class ClearCoreError(Exception):
    """Base exception for all ClearCore client errors"""

    def __init__(self, message: str, error_code: Optional[str] = None, module: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        self.module = module
        super().__init__(self.message)

    def __str__(self):
        parts = [self.message]
        if self.module:
            parts.append(f"Module: {self.module}")
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        return " | ".join(parts)


# Configuration Errors
class ConfigurationError(ClearCoreError):
    """Raised when configuration is invalid or missing"""
    pass


class ConfigurationNotFoundError(ConfigurationError):
    """Raised when configuration file is not found"""
    pass


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration values are invalid"""
    pass


# Communication Errors
class CommunicationError(ClearCoreError):
    """Base class for controller communication errors"""
    pass


class TransportError(CommunicationError):
    """Raised when a write or read on the controller connection fails"""
    pass


class DispatcherClosedError(TransportError):
    """Raised when a request is submitted to a dispatcher that is not running"""
    pass


class ProtocolError(CommunicationError):
    """Base class for command/reply protocol errors"""
    pass


class FailedReplyError(ProtocolError):
    """Raised when the controller answers a command with a failure reply"""

    def __init__(self, message: str, reply: bytes = b"", error_code: Optional[str] = None,
                 module: Optional[str] = None):
        super().__init__(message, error_code=error_code, module=module)
        self.reply = reply


class ProtocolDecodeError(ProtocolError):
    """Raised when a reply cannot be decoded (unknown status digit, bad integer)"""
    pass


# Motion Control Errors
class MotionControlError(ClearCoreError):
    """Base class for motion control errors"""
    pass


class MotorFaultedError(MotionControlError):
    """Raised when a motor ends its enable sequence in the Faulted state"""
    pass


class MotionTimeoutError(MotionControlError):
    """Raised when a polling wait exceeds its deadline"""
    pass

