"""
oi_protocol.py
==============
Central definitions of the iRobot Create Open Interface (OI) protocol.

This file is the single source of truth for:
- OI command opcodes and the argument layout of every command (TX side).
- OI sensor packet ids, their payload lengths and sensor groups (RX side).
- Baud rate and charging state codes.

Other modules should import from here:
- oi_codec.py / oi_writer.py → to build and send outgoing commands.
- oi_decode.py → to frame incoming sensor packets.

All tables are read-only (`IntEnum` / `MappingProxyType`); nothing here can be
changed at runtime.

Reference: iRobot Create Open Interface Specification
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Union

from construct import (
    Bytes,
    Const,
    Container,
    Int8sb,
    Int8ub,
    Int16sb,
    Padding,
    PrefixedArray,
    Struct,
)

from .oi_errors import UnknownPacketIdentifier

# ============================================================
# OI Command Opcodes (TX)
# ============================================================

class Opcode(IntEnum):
    """Enumeration of Create Open Interface command opcodes."""

    START               = 128    # Start OI (Passive mode)
    BAUD                = 129    # Change baud rate
    SAFE                = 131    # Enter Safe mode
    FULL                = 132    # Enter Full mode
    SPOT                = 134    # Spot cover demo
    COVER               = 135    # Cover demo
    DEMO                = 136    # Run built-in demo (or abort)
    DRIVE               = 137    # Drive with velocity + radius
    LOW_SIDE_DRIVERS    = 138    # Low side drivers on/off
    LED                 = 139    # Control LEDs
    SONG                = 140    # Define song
    PLAY_SONG           = 141    # Play song
    SENSORS             = 142    # Query one sensor packet or group
    COVER_AND_DOCK      = 143    # Cover and dock demo
    PWM_LOW_SIDE_DRIVERS = 144   # Low side driver duty cycles
    DRIVE_DIRECT        = 145    # Drive wheels independently
    DIGITAL_OUTPUTS     = 147    # Cargo bay digital outputs
    STREAM              = 148    # Start continuous streaming of sensor packets
    QUERY_LIST          = 149    # Query multiple packets once
    PAUSE_RESUME_STREAM = 150    # Pause/resume streaming
    SEND_IR             = 151    # Emit IR byte on low side driver 1
    SCRIPT              = 152    # Define script
    PLAY_SCRIPT         = 153    # Play script
    SHOW_SCRIPT         = 154    # Dump script
    WAIT_TIME           = 155    # Script: wait tenths of a second
    WAIT_DISTANCE       = 156    # Script: wait until distance travelled
    WAIT_ANGLE          = 157    # Script: wait until angle turned
    WAIT_EVENT          = 158    # Script: wait for event


class ArgKind(str, Enum):
    """Wire layout of a single command argument."""

    U8 = "u8"              # one unsigned byte
    S8 = "s8"              # one signed byte (two's complement)
    I16 = "i16"            # signed 16-bit, big-endian (hi, lo)
    COUNTED = "counted"    # [N][byte 1]..[byte N]
    NOTES = "notes"        # [N][note 1][duration 1]..[note N][duration N]


_ARG_SIZES = {ArgKind.U8: 1, ArgKind.S8: 1, ArgKind.I16: 2}

_ARG_FORMATS = {
    ArgKind.U8: Int8ub,
    ArgKind.S8: Int8sb,
    ArgKind.I16: Int16sb,
    ArgKind.COUNTED: PrefixedArray(Int8ub, Int8ub),
    ArgKind.NOTES: PrefixedArray(Int8ub, Struct("note" / Int8ub, "duration" / Int8ub)),
}


@dataclass(frozen=True, slots=True)
class ArgSpec:
    """One argument of a command: its field name and wire layout."""
    name: str
    kind: ArgKind


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """
    Immutable description of one OI command.

    Fields:
      - name: command name as used in the OI manual (e.g. "DriveDirect")
      - opcode: the command's opcode byte
      - args: ordered argument layouts following the opcode
    """
    name: str
    opcode: Opcode
    args: tuple[ArgSpec, ...] = ()

    @property
    def data_length(self) -> int | None:
        """Number of data bytes after the opcode, or None if variable."""
        total = 0
        for arg in self.args:
            size = _ARG_SIZES.get(arg.kind)
            if size is None:
                return None
            total += size
        return total


def _cmd(name: str, opcode: Opcode, *args: tuple[str, ArgKind]) -> CommandSpec:
    return CommandSpec(name, opcode, tuple(ArgSpec(n, k) for n, k in args))


_U8, _S8, _I16 = ArgKind.U8, ArgKind.S8, ArgKind.I16

COMMANDS: Mapping[str, CommandSpec] = MappingProxyType({
    spec.name: spec for spec in (
        _cmd("Start",             Opcode.START),
        _cmd("Baud",              Opcode.BAUD, ("baud_code", _U8)),
        _cmd("Safe",              Opcode.SAFE),
        _cmd("Full",              Opcode.FULL),
        _cmd("Spot",              Opcode.SPOT),
        _cmd("Cover",             Opcode.COVER),
        _cmd("Demo",              Opcode.DEMO, ("demo", _U8)),
        _cmd("Drive",             Opcode.DRIVE, ("velocity", _I16), ("radius", _I16)),
        _cmd("LowSideDrivers",    Opcode.LOW_SIDE_DRIVERS, ("driver_bits", _U8)),
        _cmd("LED",               Opcode.LED,
             ("led_bits", _U8), ("power_color", _U8), ("power_intensity", _U8)),
        _cmd("Song",              Opcode.SONG, ("song_number", _U8), ("notes", ArgKind.NOTES)),
        _cmd("PlaySong",          Opcode.PLAY_SONG, ("song_number", _U8)),
        _cmd("Sensors",           Opcode.SENSORS, ("packet_id", _U8)),
        _cmd("CoverAndDock",      Opcode.COVER_AND_DOCK),
        _cmd("PwmLowSideDrivers", Opcode.PWM_LOW_SIDE_DRIVERS,
             ("driver2", _U8), ("driver1", _U8), ("driver0", _U8)),
        _cmd("DriveDirect",       Opcode.DRIVE_DIRECT,
             ("velocity_right", _I16), ("velocity_left", _I16)),
        _cmd("DigitalOutputs",    Opcode.DIGITAL_OUTPUTS, ("output_bits", _U8)),
        _cmd("Stream",            Opcode.STREAM, ("packet_ids", ArgKind.COUNTED)),
        _cmd("QueryList",         Opcode.QUERY_LIST, ("packet_ids", ArgKind.COUNTED)),
        _cmd("PauseResumeStream", Opcode.PAUSE_RESUME_STREAM, ("state", _U8)),
        _cmd("SendIR",            Opcode.SEND_IR, ("value", _U8)),
        _cmd("Script",            Opcode.SCRIPT, ("script", ArgKind.COUNTED)),
        _cmd("PlayScript",        Opcode.PLAY_SCRIPT),
        _cmd("ShowScript",        Opcode.SHOW_SCRIPT),
        _cmd("WaitTime",          Opcode.WAIT_TIME, ("tenths", _U8)),
        _cmd("WaitDistance",      Opcode.WAIT_DISTANCE, ("distance_mm", _I16)),
        _cmd("WaitAngle",         Opcode.WAIT_ANGLE, ("angle_deg", _I16)),
        _cmd("WaitEvent",         Opcode.WAIT_EVENT, ("event", _S8)),
    )
})
"""Mapping of command names to their CommandSpec."""

_COMMANDS_BY_OPCODE: Mapping[int, CommandSpec] = MappingProxyType(
    {int(spec.opcode): spec for spec in COMMANDS.values()}
)


def command_spec(command: Union[str, int]) -> CommandSpec:
    """
    Look up a command by name ("Drive") or opcode (137).

    Raises:
        KeyError: If the command is not part of the OI.
    """
    if isinstance(command, str):
        return COMMANDS[command]
    return _COMMANDS_BY_OPCODE[int(command)]


def command_schema(spec: CommandSpec) -> Struct:
    """
    Build a Construct schema for the full frame of `spec` (opcode included).

    Radius sentinels 32768 and 65535 come back as -32768 and -1, since they
    share the bit pattern of those signed values.
    """
    fields = ["opcode" / Const(int(spec.opcode), Int8ub)]
    fields.extend(arg.name / _ARG_FORMATS[arg.kind] for arg in spec.args)
    return Struct(*fields)


def parse_command(frame: bytes) -> tuple[CommandSpec, Container]:
    """
    Parse an encoded command frame back into its fields.

    Example:
        >>> spec, fields = parse_command(b"\\x89\\x01\\xf4\\x80\\x00")
        >>> spec.name, fields.velocity, fields.radius
        ('Drive', 500, -32768)
    """
    if not frame:
        raise ValueError("empty command frame")
    try:
        spec = command_spec(frame[0])
    except KeyError:
        raise ValueError(f"Unknown opcode {frame[0]}") from None
    return spec, command_schema(spec).parse(frame)


# ============================================================
# Sensor Packets (RX)
# ============================================================

class SensorId(IntEnum):
    """Sensor packet ids. Ids 15-16 are unused."""

    BUMPS_AND_WHEEL_DROPS       = 7
    WALL                        = 8
    CLIFF_LEFT                  = 9
    CLIFF_FRONT_LEFT            = 10
    CLIFF_FRONT_RIGHT           = 11
    CLIFF_RIGHT                 = 12
    VIRTUAL_WALL                = 13
    LOW_SIDE_DRIVER_AND_WHEEL_OVERCURRENTS = 14
    INFRARED                    = 17
    BUTTONS                     = 18
    DISTANCE                    = 19    # signed mm since last request
    ANGLE                       = 20    # signed degrees since last request
    CHARGING_STATE              = 21
    VOLTAGE                     = 22
    CURRENT                     = 23
    BATTERY_TEMPERATURE         = 24
    BATTERY_CHARGE              = 25
    BATTERY_CAPACITY            = 26
    WALL_SIGNAL                 = 27
    CLIFF_LEFT_SIGNAL           = 28
    CLIFF_FRONT_LEFT_SIGNAL     = 29
    CLIFF_FRONT_RIGHT_SIGNAL    = 30
    CLIFF_RIGHT_SIGNAL          = 31
    CARGO_BAY_DIGITAL_INPUTS    = 32
    CARGO_BAY_ANALOG_SIGNAL     = 33
    CHARGING_SOURCES_AVAILABLE  = 34
    OI_MODE                     = 35
    SONG_NUMBER                 = 36
    SONG_PLAYING                = 37
    NUMBER_OF_STREAM_PACKETS    = 38
    REQUESTED_VELOCITY          = 39
    REQUESTED_RADIUS            = 40
    REQUESTED_RIGHT_VELOCITY    = 41
    REQUESTED_LEFT_VELOCITY     = 42


SENSOR_DATA_BYTES: Mapping[int, int] = MappingProxyType({
    SensorId.BUMPS_AND_WHEEL_DROPS: 1,
    SensorId.WALL: 1,
    SensorId.CLIFF_LEFT: 1,
    SensorId.CLIFF_FRONT_LEFT: 1,
    SensorId.CLIFF_FRONT_RIGHT: 1,
    SensorId.CLIFF_RIGHT: 1,
    SensorId.VIRTUAL_WALL: 1,
    SensorId.LOW_SIDE_DRIVER_AND_WHEEL_OVERCURRENTS: 1,
    SensorId.INFRARED: 1,
    SensorId.BUTTONS: 1,
    SensorId.DISTANCE: 2,
    SensorId.ANGLE: 2,
    SensorId.CHARGING_STATE: 1,
    SensorId.VOLTAGE: 2,
    SensorId.CURRENT: 2,
    SensorId.BATTERY_TEMPERATURE: 1,
    SensorId.BATTERY_CHARGE: 2,
    SensorId.BATTERY_CAPACITY: 2,
    SensorId.WALL_SIGNAL: 2,
    SensorId.CLIFF_LEFT_SIGNAL: 2,
    SensorId.CLIFF_FRONT_LEFT_SIGNAL: 2,
    SensorId.CLIFF_FRONT_RIGHT_SIGNAL: 2,
    SensorId.CLIFF_RIGHT_SIGNAL: 2,
    SensorId.CARGO_BAY_DIGITAL_INPUTS: 1,
    SensorId.CARGO_BAY_ANALOG_SIGNAL: 2,
    SensorId.CHARGING_SOURCES_AVAILABLE: 1,
    SensorId.OI_MODE: 1,
    SensorId.SONG_NUMBER: 1,
    SensorId.SONG_PLAYING: 1,
    SensorId.NUMBER_OF_STREAM_PACKETS: 1,
    SensorId.REQUESTED_VELOCITY: 2,
    SensorId.REQUESTED_RADIUS: 2,
    SensorId.REQUESTED_RIGHT_VELOCITY: 2,
    SensorId.REQUESTED_LEFT_VELOCITY: 2,
})
"""Mapping of sensor packet ids to their payload length in bytes."""


def packet_length(packet_id: int) -> int:
    """
    Return the payload length (in bytes) for a given sensor packet id.

    Raises:
        UnknownPacketIdentifier: If the id is not in the sensor table
            (this includes the unused ids 15 and 16).
    """
    try:
        return SENSOR_DATA_BYTES[packet_id]
    except (KeyError, TypeError):
        raise UnknownPacketIdentifier(packet_id) from None


# ============================================================
# Sensor Groups (packet ids 0-6 of the Sensors command)
# ============================================================

class SensorGroup(IntEnum):
    """Ids of sensor packet groups, usable wherever a packet id is."""

    PACKETS_7_26  = 0    # 26 bytes
    PACKETS_7_16  = 1    # 10 bytes
    PACKETS_17_20 = 2    # 6 bytes
    PACKETS_21_26 = 3    # 10 bytes
    PACKETS_27_34 = 4    # 14 bytes
    PACKETS_35_42 = 5    # 12 bytes
    PACKETS_7_42  = 6    # 52 bytes


def _ids(first: int, last: int) -> tuple[int, ...]:
    return tuple(pid for pid in range(first, last + 1) if pid in SENSOR_DATA_BYTES)


GROUP_PACKETS: Mapping[int, tuple[int, ...]] = MappingProxyType({
    SensorGroup.PACKETS_7_26:  _ids(7, 26),
    SensorGroup.PACKETS_7_16:  _ids(7, 16),
    SensorGroup.PACKETS_17_20: _ids(17, 20),
    SensorGroup.PACKETS_21_26: _ids(21, 26),
    SensorGroup.PACKETS_27_34: _ids(27, 34),
    SensorGroup.PACKETS_35_42: _ids(35, 42),
    SensorGroup.PACKETS_7_42:  _ids(7, 42),
})
"""Mapping of group ids to the packet ids they contain, in wire order."""

# Groups that cover ids 15-16 send two zero bytes after packet 14.
_UNUSED_AFTER = SensorId.LOW_SIDE_DRIVER_AND_WHEEL_OVERCURRENTS
_UNUSED_BYTES = 2
_PADDED_GROUPS = frozenset({
    SensorGroup.PACKETS_7_26, SensorGroup.PACKETS_7_16, SensorGroup.PACKETS_7_42,
})


def group_length(group: int) -> int:
    """
    Return the total response length (in bytes) for a sensor group.

    Raises:
        UnknownPacketIdentifier: If `group` is not a group id (0-6).
    """
    if group not in GROUP_PACKETS:
        raise UnknownPacketIdentifier(group, f"Unknown sensor group id: {group}")
    total = sum(SENSOR_DATA_BYTES[pid] for pid in GROUP_PACKETS[group])
    if group in _PADDED_GROUPS:
        total += _UNUSED_BYTES
    return total


def group_field(packet_id: int) -> str:
    """Name of the field holding `packet_id` inside a group schema."""
    return f"packet_{packet_id}"


def group_schema(group: int) -> Struct:
    """
    Build a Construct schema that slices a group response into raw
    per-packet payloads (fields named by `group_field`).

    Raises:
        UnknownPacketIdentifier: If `group` is not a group id (0-6).
    """
    if group not in GROUP_PACKETS:
        raise UnknownPacketIdentifier(group, f"Unknown sensor group id: {group}")
    fields = []
    for pid in GROUP_PACKETS[group]:
        fields.append(group_field(pid) / Bytes(SENSOR_DATA_BYTES[pid]))
        if pid == _UNUSED_AFTER and group in _PADDED_GROUPS:
            fields.append(Padding(_UNUSED_BYTES))
    return Struct(*fields)


def is_request_id(packet_id: int) -> bool:
    """True if `packet_id` may be requested via Sensors/Stream/QueryList."""
    return packet_id in GROUP_PACKETS or packet_id in SENSOR_DATA_BYTES


# ============================================================
# Baud rate and charging state codes
# ============================================================

class BaudRate(IntEnum):
    """Baud codes for the Baud command (default at power up: 57600)."""

    BAUD_300    = 0
    BAUD_600    = 1
    BAUD_1200   = 2
    BAUD_2400   = 3
    BAUD_4800   = 4
    BAUD_9600   = 5
    BAUD_14400  = 6
    BAUD_19200  = 7
    BAUD_28800  = 8
    BAUD_38400  = 9
    BAUD_57600  = 10
    BAUD_115200 = 11

    @property
    def bps(self) -> int:
        """Bits per second selected by this code."""
        return int(self.name.split("_")[1])

    @classmethod
    def from_bps(cls, bps: int) -> "BaudRate":
        """Return the code for `bps`; ValueError if the OI does not support it."""
        for code in cls:
            if code.bps == bps:
                return code
        raise ValueError(f"Unsupported baud rate: {bps}")


class ChargingState(IntEnum):
    """Codes reported by the charging state sensor (packet 21)."""

    NOT_CHARGING             = 0
    RECONDITIONING_CHARGING  = 1
    FULL_CHARGING            = 2
    TRICKLE_CHARGING         = 3
    WAITING                  = 4
    CHARGING_FAULT_CONDITION = 5
