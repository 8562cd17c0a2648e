"""
Controller Transports

Byte-level connections to the controller. A transport knows how to open,
write a command, read one CR-terminated reply frame and close; framing
rules beyond the terminator and request/reply correlation live elsewhere.

Two implementations are provided:
- TcpTransport: asyncio streams over a TCP socket (the controller's
  Ethernet port)
- SerialTransport: pyserial over the controller's USB serial port, with
  blocking calls pushed to the default executor

Author: ClearCore Client Development
Created: October 2026
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import serial

from .protocol import CR
from ..core.config_manager import ConnectionConfig
from ..core.exceptions import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

TERMINATOR = bytes([CR])


class Transport(ABC):
    """Abstract byte transport to the controller"""

    @abstractmethod
    async def open(self) -> None:
        """
        Open the connection

        Raises:
            TransportError: If the connection cannot be established
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection; safe to call more than once"""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if the connection is open"""
        pass

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write a complete command frame"""
        pass

    @abstractmethod
    async def read_frame(self) -> bytes:
        """Read one reply frame, up to and including the CR terminator"""
        pass


class TcpTransport(Transport):
    """TCP socket transport using asyncio streams"""

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

    def __repr__(self):
        return f"TcpTransport({self.host}:{self.port})"

    async def open(self) -> None:
        try:
            self._reader, self._writer = await asyncio.open_connection(self.host, self.port)
        except OSError as e:
            raise TransportError(f"TCP connection to {self.host}:{self.port} failed: {e}",
                                 module="communication") from e
        logger.info(f"🔌 Connected to controller at {self.host}:{self.port}")

    async def close(self) -> None:
        if self._writer is None:
            return

        writer = self._writer
        self._reader = None
        self._writer = None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.warning(f"Error closing TCP connection: {e}")
        logger.info(f"Disconnected from {self.host}:{self.port}")

    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def write(self, data: bytes) -> None:
        if not self.is_open():
            raise TransportError("TCP connection not open", module="communication")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"TCP write failed: {e}", module="communication") from e

    async def read_frame(self) -> bytes:
        if self._reader is None:
            raise TransportError("TCP connection not open", module="communication")
        try:
            return await self._reader.readuntil(TERMINATOR)
        except asyncio.IncompleteReadError as e:
            raise TransportError(f"Connection closed mid-reply after {len(e.partial)} bytes",
                                 module="communication") from e
        except asyncio.LimitOverrunError as e:
            raise TransportError(f"Reply frame exceeds buffer limit: {e}",
                                 module="communication") from e
        except OSError as e:
            raise TransportError(f"TCP read failed: {e}", module="communication") from e


class SerialTransport(Transport):
    """USB serial transport using pyserial"""

    def __init__(self, port: str, baudrate: int = 115200, timeout: Optional[float] = None):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.serial_connection: Optional[serial.Serial] = None

    def __repr__(self):
        return f"SerialTransport({self.port} @ {self.baudrate})"

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def open(self) -> None:
        try:
            self.serial_connection = await self._run_blocking(self._open_serial)
        except serial.SerialException as e:
            raise TransportError(f"Serial connection failed: {e}", module="communication") from e
        logger.info(f"🔌 Serial connection established: {self.port} @ {self.baudrate}")

    def _open_serial(self) -> serial.Serial:
        return serial.Serial(
            port=self.port,
            baudrate=self.baudrate,
            timeout=self.timeout,
            write_timeout=self.timeout
        )

    async def close(self) -> None:
        if self.serial_connection is None:
            return

        connection = self.serial_connection
        self.serial_connection = None
        try:
            connection.close()
        except serial.SerialException as e:
            logger.warning(f"Error closing serial port: {e}")
        logger.info(f"Serial port {self.port} closed")

    def is_open(self) -> bool:
        return self.serial_connection is not None and self.serial_connection.is_open

    async def write(self, data: bytes) -> None:
        if not self.is_open():
            raise TransportError("Serial connection not open", module="communication")
        try:
            await self._run_blocking(self._write_blocking, data)
        except serial.SerialException as e:
            raise TransportError(f"Serial write failed: {e}", module="communication") from e

    def _write_blocking(self, data: bytes) -> None:
        self.serial_connection.write(data)
        self.serial_connection.flush()

    async def read_frame(self) -> bytes:
        if not self.is_open():
            raise TransportError("Serial connection not open", module="communication")
        try:
            frame = await self._run_blocking(self.serial_connection.read_until, TERMINATOR)
        except serial.SerialException as e:
            raise TransportError(f"Serial read failed: {e}", module="communication") from e

        # read_until returns a partial frame when the port timeout expires
        if not frame.endswith(TERMINATOR):
            raise TransportError(f"Incomplete reply frame: {frame!r}", module="communication")
        return frame


def create_transport(config: ConnectionConfig) -> Transport:
    """Create the transport selected by the connection configuration"""
    if config.connection == 'tcp':
        return TcpTransport(config.host, config.port)
    if config.connection == 'serial':
        return SerialTransport(config.serial_port, config.baudrate, timeout=config.request_timeout)
    raise ConfigurationError(f"Unknown connection type: {config.connection}")
