"""
CI-V Serial Transport

Handles low-level serial communication with Icom transceivers over the CI-V
bus (USB virtual COM port or CT-17 style level converter).

This module provides:
- Serial port initialization and configuration
- Frame-oriented reads (read up to the 0xFD terminator)
- Timeout and error handling
- Serial port enumeration
"""

import logging
from typing import List, Optional, Tuple

import serial
from serial.tools import list_ports

from .errors import CIVTimeout, TransportError
from .frame import TERMINATOR

logger = logging.getLogger(__name__)

TERMINATOR_BYTES = bytes([TERMINATOR])


class SerialTransport:
    """
    Serial transport for the CI-V bus.

    The bus is half duplex with no flow control; the engine writes one frame
    and reads until the terminator before writing again.

    Example:
        transport = SerialTransport(port="/dev/ttyUSB0", baudrate=19200)
        transport.open()
        transport.write(frame)
        reply = transport.read_until(b"\\xFD", timeout=1.0)
        transport.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 19200,
        timeout: float = 1.0,
    ):
        """
        Initialize transport layer.

        Args:
            port: Serial port (e.g., "/dev/ttyUSB0", "COM3")
            baudrate: CI-V baud rate set on the radio (default 19200)
            timeout: Default read/write timeout in seconds
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.ser: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        return bool(self.ser and self.ser.is_open)

    def open(self) -> None:
        """
        Open serial port, 8N1, no flow control.

        Raises:
            TransportError: If port cannot be opened
        """
        try:
            self.ser = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout,
                write_timeout=self.timeout,
                rtscts=False,
                xonxoff=False,
            )
            # Level converters powered from DTR/RTS
            self.ser.dtr = True
            self.ser.rts = True
            logger.debug(f"Opened {self.port} at {self.baudrate} bps (timeout={self.timeout}s)")
        except serial.SerialException as e:
            raise TransportError(f"Cannot open port {self.port}: {e}") from e

    def close(self) -> None:
        """Close serial port."""
        if self.is_open:
            self.ser.close()
            logger.debug(f"Closed {self.port}")
        self.ser = None

    def _require_open(self) -> serial.Serial:
        if not self.is_open:
            raise TransportError("Serial port not open")
        return self.ser

    def flush(self) -> None:
        """Discard anything the radio sent before we started talking."""
        ser = self._require_open()
        try:
            pending = ser.in_waiting
            ser.reset_input_buffer()
            ser.reset_output_buffer()
        except serial.SerialException as e:
            raise TransportError(f"Flush error: {e}") from e
        if pending:
            logger.debug(f"Discarded {pending} stale bytes")

    def write(self, data: bytes) -> None:
        """
        Send raw bytes to the radio.

        Raises:
            TransportError: If write fails or is incomplete
        """
        ser = self._require_open()
        try:
            written = ser.write(data)
            ser.flush()
        except serial.SerialException as e:
            raise TransportError(f"Write error: {e}") from e
        if written != len(data):
            raise TransportError(f"Incomplete write: sent {written}/{len(data)} bytes")
        logger.debug(f">>> {data.hex().upper()}")

    def read_until(
        self,
        terminator: bytes = TERMINATOR_BYTES,
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Read bytes up to and including ``terminator``.

        Args:
            terminator: End-of-frame marker
            timeout: Optional timeout override (seconds)

        Returns:
            Bytes received, ending with ``terminator``

        Raises:
            CIVTimeout: Terminator not seen within the timeout
            TransportError: If the read fails
        """
        ser = self._require_open()
        old_timeout = ser.timeout
        try:
            if timeout is not None:
                ser.timeout = timeout
            data = ser.read_until(expected=terminator)
        except serial.SerialException as e:
            raise TransportError(f"Read error: {e}") from e
        finally:
            if timeout is not None:
                ser.timeout = old_timeout

        if not data.endswith(terminator):
            if data:
                logger.debug(f"<<< {data.hex().upper()} (incomplete)")
            raise CIVTimeout(
                f"No response from radio within {ser.timeout if timeout is None else timeout}s"
            )
        logger.debug(f"<<< {data.hex().upper()}")
        return data


def open_serial(
    port: str,
    baudrate: int = 19200,
    timeout: float = 1.0,
) -> SerialTransport:
    """
    Convenience function to create and open a transport.

    Args:
        port: Serial port
        baudrate: CI-V baud rate
        timeout: Read/write timeout

    Returns:
        Opened SerialTransport instance
    """
    transport = SerialTransport(port, baudrate=baudrate, timeout=timeout)
    transport.open()
    return transport


def list_serial_ports() -> List[Tuple[str, str]]:
    """Return (device, description) for each serial port on this machine."""
    return sorted(
        (info.device, info.description or "-") for info in list_ports.comports()
    )
