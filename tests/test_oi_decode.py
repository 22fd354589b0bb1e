import dataclasses
import io

import pytest

from create_oi.l1_drivers.serial_port import SerialError
from create_oi.l2_oi.oi_decode import OIReader, Packet
from create_oi.l2_oi.oi_errors import UnknownPacketIdentifier
from create_oi.l2_oi.oi_protocol import SENSOR_DATA_BYTES, SensorGroup, SensorId


class _TrickleSource:
    """Hands out at most one byte per read, like a slow serial line."""

    def __init__(self, data: bytes) -> None:
        self._buf = io.BytesIO(data)

    def read(self, size: int) -> bytes:
        return self._buf.read(min(size, 1))


class _BrokenSource:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def read(self, size: int) -> bytes:
        raise self._exc


@pytest.mark.parametrize("pid", sorted(SENSOR_DATA_BYTES))
def test_read_packet_for_every_id(pid):
    payload = bytes(range(0xA0, 0xA0 + SENSOR_DATA_BYTES[pid]))
    stream = io.BytesIO(bytes([pid]) + payload)
    packet = OIReader(stream).read_packet()
    assert packet == Packet(pid, payload)
    assert len(packet.data) == SENSOR_DATA_BYTES[pid]
    # stream left at end of stream
    assert stream.read() == b""


@pytest.mark.parametrize("pid", [15, 16, 0, 6, 43, 200])
def test_read_packet_unknown_id(pid):
    with pytest.raises(UnknownPacketIdentifier) as exc:
        OIReader(io.BytesIO(bytes([pid, 0, 0]))).read_packet()
    assert exc.value.packet_id == pid


def test_read_packet_empty_stream():
    assert OIReader(io.BytesIO(b"")).read_packet() is None


def test_read_packet_short_payload():
    # distance (19) needs 2 bytes
    assert OIReader(io.BytesIO(b"\x13\x00")).read_packet() is None
    assert OIReader(io.BytesIO(b"\x13")).read_packet() is None


def test_read_packet_handles_short_reads():
    reader = OIReader(_TrickleSource(b"\x16\x3a\x98\x07\x01"))
    assert reader.read_packet() == Packet(SensorId.VOLTAGE, b"\x3a\x98")
    assert reader.read_packet() == Packet(SensorId.BUMPS_AND_WHEEL_DROPS, b"\x01")
    assert reader.read_packet() is None


def test_read_packet_io_error_means_no_packet():
    assert OIReader(_BrokenSource(OSError("gone"))).read_packet() is None
    assert OIReader(_BrokenSource(SerialError("Port not open"))).read_packet() is None


def test_packets_iterates_until_stream_is_empty():
    raw = b"\x07\x03" + b"\x14\xff\xa6" + b"\x23\x02"
    packets = list(OIReader(io.BytesIO(raw)).packets())
    assert packets == [
        Packet(7, b"\x03"),
        Packet(20, b"\xff\xa6"),
        Packet(35, b"\x02"),
    ]


def test_packet_is_immutable():
    packet = Packet(8, b"\x01")
    with pytest.raises(dataclasses.FrozenInstanceError):
        packet.data = b"\x00"


def test_read_sensor_without_id_byte():
    reader = OIReader(io.BytesIO(b"\x3a\x98\x01"))
    assert reader.read_sensor(22) == Packet(22, b"\x3a\x98")
    assert reader.read_sensor(21) == Packet(21, b"\x01")
    assert reader.read_sensor(21) is None
    with pytest.raises(UnknownPacketIdentifier):
        reader.read_sensor(15)


def test_read_group_17_20():
    raw = b"\x01\x02\x00\x10\xff\xf6"
    packets = OIReader(io.BytesIO(raw)).read_group(SensorGroup.PACKETS_17_20)
    assert packets == [
        Packet(17, b"\x01"),
        Packet(18, b"\x02"),
        Packet(19, b"\x00\x10"),
        Packet(20, b"\xff\xf6"),
    ]


def test_read_group_skips_unused_bytes():
    stream = io.BytesIO(bytes([1, 2, 3, 4, 5, 6, 7, 8, 0, 0]) + b"\x99")
    packets = OIReader(stream).read_group(SensorGroup.PACKETS_7_16)
    assert [p.id for p in packets] == list(range(7, 15))
    assert [p.data for p in packets] == [bytes([i]) for i in range(1, 9)]
    assert stream.read() == b"\x99"


def test_read_group_all_packets():
    stream = io.BytesIO(bytes(52))
    packets = OIReader(stream).read_group(SensorGroup.PACKETS_7_42)
    assert len(packets) == len(SENSOR_DATA_BYTES)
    assert all(len(p.data) == SENSOR_DATA_BYTES[p.id] for p in packets)
    assert stream.read() == b""


def test_read_group_short_and_unknown():
    assert OIReader(io.BytesIO(bytes(25))).read_group(SensorGroup.PACKETS_7_26) is None
    with pytest.raises(UnknownPacketIdentifier):
        OIReader(io.BytesIO(bytes(10))).read_group(7)


def test_read_sensor_length_comes_from_sensor_table():
    reader = OIReader(io.BytesIO(b"\x00\x01\x02\x03\x04"))
    with pytest.raises(TypeError):
        reader.read_sensor(19, 5)
    packet = reader.read_sensor(19)
    assert packet == Packet(19, b"\x00\x01")
    assert len(packet.data) == SENSOR_DATA_BYTES[19]
    # the rest of the stream is left untouched
    assert reader.source.read() == b"\x02\x03\x04"
