import dataclasses

import pytest

from create_oi.l2_oi.oi_errors import UnknownPacketIdentifier
from create_oi.l2_oi.oi_protocol import (
    COMMANDS,
    GROUP_PACKETS,
    SENSOR_DATA_BYTES,
    BaudRate,
    ChargingState,
    Opcode,
    SensorGroup,
    SensorId,
    command_spec,
    group_length,
    group_schema,
    packet_length,
    parse_command,
)

EXPECTED_OPCODES = {
    "Start": 128, "Baud": 129, "Safe": 131, "Full": 132, "Spot": 134,
    "Cover": 135, "Demo": 136, "Drive": 137, "LowSideDrivers": 138, "LED": 139,
    "Song": 140, "PlaySong": 141, "Sensors": 142, "CoverAndDock": 143,
    "PwmLowSideDrivers": 144, "DriveDirect": 145, "DigitalOutputs": 147,
    "Stream": 148, "QueryList": 149, "PauseResumeStream": 150, "SendIR": 151,
    "Script": 152, "PlayScript": 153, "ShowScript": 154, "WaitTime": 155,
    "WaitDistance": 156, "WaitAngle": 157, "WaitEvent": 158,
}

ONE_BYTE = [7, 8, 9, 10, 11, 12, 13, 14, 17, 18, 21, 24, 32, 34, 35, 36, 37, 38]
TWO_BYTES = [19, 20, 22, 23, 25, 26, 27, 28, 29, 30, 31, 33, 39, 40, 41, 42]


def test_command_table_opcodes():
    assert {name: int(spec.opcode) for name, spec in COMMANDS.items()} == EXPECTED_OPCODES


def test_command_lookup_by_name_and_opcode():
    assert command_spec("Drive") is command_spec(137)
    assert command_spec(Opcode.DRIVE_DIRECT).name == "DriveDirect"
    # 130 (Control) and 133 (Power) are not Create commands
    with pytest.raises(KeyError):
        command_spec(130)
    with pytest.raises(KeyError):
        command_spec("Dock")


def test_command_data_lengths():
    assert COMMANDS["Start"].data_length == 0
    assert COMMANDS["Baud"].data_length == 1
    assert COMMANDS["Drive"].data_length == 4
    assert COMMANDS["DriveDirect"].data_length == 4
    assert COMMANDS["LED"].data_length == 3
    assert COMMANDS["PwmLowSideDrivers"].data_length == 3
    assert COMMANDS["WaitAngle"].data_length == 2
    assert COMMANDS["WaitEvent"].data_length == 1
    # variable length
    assert COMMANDS["Song"].data_length is None
    assert COMMANDS["Stream"].data_length is None
    assert COMMANDS["QueryList"].data_length is None
    assert COMMANDS["Script"].data_length is None


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        COMMANDS["Drive"] = COMMANDS["Start"]
    with pytest.raises(TypeError):
        SENSOR_DATA_BYTES[7] = 2
    with pytest.raises(TypeError):
        GROUP_PACKETS[0] = ()
    with pytest.raises(dataclasses.FrozenInstanceError):
        COMMANDS["Drive"].opcode = Opcode.START


def test_sensor_lengths():
    for pid in ONE_BYTE:
        assert packet_length(pid) == 1, pid
    for pid in TWO_BYTES:
        assert packet_length(pid) == 2, pid
    assert set(SENSOR_DATA_BYTES) == set(ONE_BYTE) | set(TWO_BYTES)
    assert set(SensorId) == set(SENSOR_DATA_BYTES)


@pytest.mark.parametrize("pid", [15, 16, 0, 6, 43, 255, -1])
def test_unknown_packet_ids(pid):
    with pytest.raises(UnknownPacketIdentifier) as exc:
        packet_length(pid)
    assert exc.value.packet_id == pid


def test_unknown_packet_id_is_a_value_error():
    with pytest.raises(ValueError):
        packet_length(16)


def test_group_lengths():
    expected = {0: 26, 1: 10, 2: 6, 3: 10, 4: 14, 5: 12, 6: 52}
    assert {int(g): group_length(g) for g in SensorGroup} == expected
    assert GROUP_PACKETS[SensorGroup.PACKETS_17_20] == (17, 18, 19, 20)
    assert 15 not in GROUP_PACKETS[SensorGroup.PACKETS_7_42]
    with pytest.raises(UnknownPacketIdentifier):
        group_length(7)


def test_group_schema_skips_unused_bytes():
    # packets 7..14 then two unused zero bytes
    raw = bytes([1, 2, 3, 4, 5, 6, 7, 8, 0, 0])
    parsed = group_schema(SensorGroup.PACKETS_7_16).parse(raw)
    assert parsed.packet_7 == b"\x01"
    assert parsed.packet_14 == b"\x08"
    assert group_schema(SensorGroup.PACKETS_7_42).sizeof() == 52


def test_parse_command_song():
    spec, fields = parse_command(b"\x8c\x01\x02\x3c\x20\x40\x10")
    assert spec.name == "Song"
    assert fields.song_number == 1
    assert [(n.note, n.duration) for n in fields.notes] == [(60, 32), (64, 16)]


def test_parse_command_rejects_unknown_opcode():
    with pytest.raises(ValueError):
        parse_command(b"\x07")
    with pytest.raises(ValueError):
        parse_command(b"")


def test_baud_codes():
    assert BaudRate.BAUD_57600 == 10
    assert BaudRate.BAUD_57600.bps == 57600
    assert BaudRate.from_bps(115200) is BaudRate.BAUD_115200
    assert BaudRate.from_bps(300) is BaudRate.BAUD_300
    with pytest.raises(ValueError):
        BaudRate.from_bps(56000)


def test_charging_state_codes():
    assert ChargingState.NOT_CHARGING == 0
    assert ChargingState.CHARGING_FAULT_CONDITION == 5
