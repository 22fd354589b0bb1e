"""
oi_errors.py
============
Exception types raised by the Create Open Interface (OI) codec.

- ArgumentOutOfRange: a command argument is outside its documented bound.
  Raised before anything is written.
- UnknownPacketIdentifier: a sensor packet (or group) id has no entry in the
  sensor table. On the RX side the stream position is no longer aligned to a
  packet boundary; resync policy is up to the caller.
- OIWriteError: the byte sink failed while a command frame was written.
"""


class OIError(Exception):
    """Base class for all codec errors."""


class ArgumentOutOfRange(OIError, ValueError):
    """A command argument violates its numeric bound."""


class UnknownPacketIdentifier(OIError, ValueError):
    """A packet id (or group id) is not in the sensor table."""

    def __init__(self, packet_id: int, message: str | None = None) -> None:
        self.packet_id = packet_id
        super().__init__(message or f"Unknown sensor packet id: {packet_id}")


class OIWriteError(OIError, OSError):
    """Writing a command frame to the byte sink failed."""
