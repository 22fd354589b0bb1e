"""
oi_decode.py
============
RX helpers for the Create Open Interface (OI).

This module focuses ONLY on the receive path:
- Framing sensor packets: [packet id][payload], where the payload length comes
  from the sensor table in `oi_protocol.py` (there is no length on the wire).
- Framing sensor group replies to the Sensors command.

Design philosophy:
- Keep framing separate from TX (`oi_codec.py` / `oi_writer.py`).
- Packets hold raw bytes only; interpreting them is up to the caller.
- The reader is stateless between calls: nothing is buffered across reads.
  End of stream (or an I/O error) means "no packet", not failure.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from .oi_protocol import GROUP_PACKETS, group_field, group_length, group_schema, packet_length
from .oi_errors import UnknownPacketIdentifier
from ..l1_drivers.serial_port import ByteSource

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Packet:
    """
    Immutable sensor packet produced by the RX path.

    Fields:
      - id: sensor packet id (see `SensorId`)
      - data: raw payload bytes; always `packet_length(id)` long
    """
    id: int
    data: bytes


class OIReader:
    """
    Reads sensor packets from a byte source (anything with `read(size)` that
    returns b"" at end of stream or on timeout).
    """

    def __init__(self, source: ByteSource) -> None:
        self._source = source

    @property
    def source(self) -> ByteSource:
        return self._source

    def read_packet(self) -> Optional[Packet]:
        """
        Read one [id][payload] packet.

        Returns:
            Packet, or None if the stream ended (or failed) before the
            packet was complete.

        Raises:
            UnknownPacketIdentifier: If the id byte is not in the sensor table.
                The stream is then no longer aligned to packet boundaries.

        Example:
            >>> OIReader(io.BytesIO(b"\\x13\\x00\\x78")).read_packet()
            Packet(id=19, data=b'\\x00x')
        """
        head = self._read_exact(1)
        if head is None:
            log.debug("RX end of stream (no packet id)")
            return None

        packet_id = head[0]
        try:
            length = packet_length(packet_id)
        except UnknownPacketIdentifier:
            log.warning("RX unknown packet id %d; stream out of sync", packet_id)
            raise

        return self._read_payload(packet_id, length)

    def read_sensor(self, packet_id: int) -> Optional[Packet]:
        """
        Read the bare payload of `packet_id` (as sent in reply to a Sensors
        request, without a leading id byte).

        Returns None if the stream ends mid-payload.

        Raises:
            UnknownPacketIdentifier: If `packet_id` is not in the sensor table.
        """
        return self._read_payload(packet_id, packet_length(packet_id))

    def _read_payload(self, packet_id: int, length: int) -> Optional[Packet]:
        data = self._read_exact(length)
        if data is None:
            log.debug("RX short payload for packet %d (expected %d bytes)", packet_id, length)
            return None
        return Packet(packet_id, data)

    def read_group(self, group: int) -> Optional[list[Packet]]:
        """
        Read the reply to a Sensors request for group 0-6.

        Returns:
            One Packet per group member in wire order, or None if the stream
            ended before the whole group arrived.

        Raises:
            UnknownPacketIdentifier: If `group` is not a group id.
        """
        schema = group_schema(group)
        total = group_length(group)
        raw = self._read_exact(total)
        if raw is None:
            log.debug("RX short group %d reply (expected %d bytes)", group, total)
            return None
        parsed = schema.parse(raw)
        return [Packet(pid, parsed[group_field(pid)]) for pid in GROUP_PACKETS[group]]

    def packets(self) -> Iterator[Packet]:
        """Yield packets until the stream runs dry."""
        while True:
            packet = self.read_packet()
            if packet is None:
                return
            yield packet

    def _read_exact(self, size: int) -> Optional[bytes]:
        """Read exactly `size` bytes; None on end of stream or I/O error."""
        buf = bytearray()
        while len(buf) < size:
            try:
                chunk = self._source.read(size - len(buf))
            except OSError as e:
                log.warning("RX read failed: %s", e)
                return None
            if not chunk:
                return None
            buf.extend(chunk)
        return bytes(buf)
