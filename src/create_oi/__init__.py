"""
create_oi
Byte-level codec for the iRobot Create Open Interface (OI).

Public API:
- Opcode, SensorId, SensorGroup, BaudRate, ChargingState, COMMANDS, SENSOR_DATA_BYTES
- command_spec, packet_length, group_length
- OIWriter (TX), OIReader + Packet (RX)
- OIError, ArgumentOutOfRange, UnknownPacketIdentifier, OIWriteError
"""

from .l2_oi.oi_protocol import (  # noqa: F401
    Opcode, SensorId, SensorGroup, BaudRate, ChargingState,
    COMMANDS, SENSOR_DATA_BYTES, GROUP_PACKETS,
    command_spec, packet_length, group_length,
)
from .l2_oi.oi_errors import (  # noqa: F401
    OIError, ArgumentOutOfRange, UnknownPacketIdentifier, OIWriteError,
)
from .l2_oi.oi_writer import OIWriter  # noqa: F401
from .l2_oi.oi_decode import OIReader, Packet  # noqa: F401

__all__ = [
    "Opcode", "SensorId", "SensorGroup", "BaudRate", "ChargingState",
    "COMMANDS", "SENSOR_DATA_BYTES", "GROUP_PACKETS",
    "command_spec", "packet_length", "group_length",
    "OIError", "ArgumentOutOfRange", "UnknownPacketIdentifier", "OIWriteError",
    "OIWriter", "OIReader", "Packet",
]
