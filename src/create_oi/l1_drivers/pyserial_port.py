from __future__ import annotations

from typing import TYPE_CHECKING, Optional
import threading
import logging

import serial  # provided by pyserial
from serial import SerialException
from .serial_port import SerialPort, SerialError

if TYPE_CHECKING:
    from .link_config import LinkConfig

log = logging.getLogger(__name__)


class PySerialPort(SerialPort):
    """
    This class is a concrete implementation of the SerialPort interface
    using the pyserial library. It encapsulates serial communication
    through a specified device and can be handed directly to `OIWriter`
    (as sink) and `OIReader` (as source).

    Current capabilities:
    - Open and close a serial connection.
    - Check if the connection is open.
    - Write bytes to the port in a thread-safe manner.
    - Blocking reads bounded by the configured read timeout.
    """

    def __init__(
        self,
        device: str,
        baudrate: int = 57600,
        timeout: Optional[float] = 0.05,
        write_timeout: Optional[float] = None,
    ) -> None:
        self._device = device
        self._baudrate = baudrate
        self._timeout = timeout
        self._write_timeout = write_timeout

        self._ser: Optional[serial.Serial] = None
        self._write_lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: LinkConfig) -> PySerialPort:
        """Build an (unopened) port from a LinkConfig."""
        return cls(cfg.device, cfg.baudrate, cfg.timeout, cfg.write_timeout)

    @property
    def device(self) -> str:
        return self._device

    def open(self) -> None:
        """
        Open the serial connection.

        Attempts to open the serial device using the configured device path,
        baud rate, and timeouts. If the operation fails, a SerialError is
        raised so higher layers do not need to handle raw pyserial exceptions.

        Raises:
            SerialError: If opening the device fails due to a SerialException.
        """
        try:
            self._ser = serial.Serial(
                self._device,
                self._baudrate,
                timeout=self._timeout,
                write_timeout=self._write_timeout,
            )
        except SerialException as e:
            raise SerialError(f"Failed to open {self._device}: {e}") from e
        log.info("Opened %s @ %d bps", self._device, self._baudrate)

    def close(self) -> None:
        """
        Close the serial connection and reset the internal reference.

        Raises:
            SerialError: If closing the serial port raises a SerialException.
        """
        if self._ser and self._ser.is_open:
            try:
                self._ser.close()
            except SerialException as e:
                raise SerialError(f"Failed to close {self._device}: {e}") from e
            log.info("Closed %s", self._device)
        self._ser = None

    def is_open(self) -> bool:
        """
        Check if the serial connection is currently open.

        Returns:
            bool: True if the underlying pyserial object exists and reports
                itself as open; False otherwise.
        """
        return bool(self._ser and self._ser.is_open)

    def write(self, data: bytes) -> None:
        """
        Write raw bytes to the serial port in a thread-safe manner.

        The write lock keeps a whole command frame together when several
        threads share the port.

        Args:
            data (bytes): The data to be written to the serial port.

        Raises:
            SerialError: If the port is not open, or if the underlying pyserial
                        write/flush operations fail.
        """
        ser = self._require_open()
        try:
            with self._write_lock:
                ser.write(data)
                ser.flush()
        except SerialException as e:
            raise SerialError(f"Write failed on {self._device}: {e}") from e

    def read(self, size: int = 1) -> bytes:
        """
        Read up to `size` bytes, waiting at most the configured timeout.

        Returns:
            bytes: The bytes read; b"" if the timeout expired first.

        Raises:
            SerialError: If the port is not open or the read fails.
        """
        ser = self._require_open()
        try:
            return ser.read(size)
        except SerialException as e:
            raise SerialError(f"Read failed on {self._device}: {e}") from e

    def _require_open(self) -> serial.Serial:
        if not self._ser or not self._ser.is_open:
            raise SerialError("Port not open")
        return self._ser
