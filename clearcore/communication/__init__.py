"""
Communication Module

Handles the single controller connection including:
- ASCII command/reply encoding and decoding
- TCP and serial transports
- Request dispatching and reply correlation
- The device handle shared by every device type
"""

from .dispatcher import ConnectionDispatcher, Request
from .handle import DeviceHandle
from .transport import SerialTransport, TcpTransport, Transport, create_transport
