from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class SerialError(OSError):
    """Transport-level failure (open/close/read/write) of a serial port."""


class ByteSink(Protocol):
    """Anything the OI writer can send frames to."""

    def write(self, data: bytes) -> object: ...


class ByteSource(Protocol):
    """
    Anything the OI reader can pull bytes from. `read` returns at most
    `size` bytes and b"" at end of stream (or on timeout).
    """

    def read(self, size: int) -> bytes: ...


class SerialPort(ABC):
    """
    Abstract serial port: a full-duplex byte channel that is both a ByteSink
    and a ByteSource once opened.
    """

    @abstractmethod
    def open(self) -> None:
        """Open the underlying device. Raises SerialError on failure."""

    @abstractmethod
    def close(self) -> None:
        """Close the underlying device. Safe to call when already closed."""

    @abstractmethod
    def is_open(self) -> bool:
        """True if the port is open."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all of `data`. Raises SerialError on failure."""

    @abstractmethod
    def read(self, size: int = 1) -> bytes:
        """Read up to `size` bytes; b"" on timeout. Raises SerialError on failure."""

    def __enter__(self) -> SerialPort:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
