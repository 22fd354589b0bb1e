"""
oi_writer.py
============
Command writer for the Create Open Interface (OI).

This class wraps:
- a byte sink (anything with `write(bytes)`: a `PySerialPort`, a
  `serial.Serial`, an `io.BytesIO`, ...).
- L2 codec (`oi_codec`) to validate and build outgoing command frames.

Design:
- One method per OI command: start(), enable_safe_mode(), drive(), ...
- Every call validates first and then writes the whole frame with a single
  `sink.write()` (the remainder is re-sent after a short write); a rejected
  call writes nothing.
- Sink failures, and sinks that stop accepting bytes, propagate as `OIWriteError`.
- No locking: callers sharing one sink across threads must serialize calls
  themselves (`PySerialPort` already does).

Usage:
    from create_oi.l2_oi.oi_writer import OIWriter

    writer = OIWriter(port)
    writer.start()
    writer.enable_safe_mode()
    writer.drive(200, 32768)   # straight ahead
"""

import logging
from typing import Iterable, Sequence

from . import oi_codec
from .oi_errors import OIWriteError
from ..l1_drivers.serial_port import ByteSink

log = logging.getLogger(__name__)


class OIWriter:
    """
    Encodes OI commands and writes them to a byte sink.
    """

    def __init__(self, sink: ByteSink) -> None:
        self._sink = sink

    @property
    def sink(self) -> ByteSink:
        return self._sink

    # -------------------------------------------------------------------------
    # Low-level primitive
    # -------------------------------------------------------------------------
    def send(self, opcode: int, *data: int) -> None:
        """
        Write `opcode` followed by each data byte, in order.

        Data bytes must already be masked to 0..255.

        Raises:
            ArgumentOutOfRange: If the opcode or any data byte is not 0..255.
            OIWriteError: If the sink fails.
        """
        self._write(oi_codec.encode_frame(opcode, *data))

    # -------------------------------------------------------------------------
    # Mode Commands
    # -------------------------------------------------------------------------
    def start(self) -> None:               self._write(oi_codec.encode_start())
    def enable_safe_mode(self) -> None:    self._write(oi_codec.encode_safe())
    def enable_full_mode(self) -> None:    self._write(oi_codec.encode_full())

    def set_baud_rate(self, code: int) -> None:
        """Change the baud rate; use one of the `BaudRate` codes."""
        self._write(oi_codec.encode_baud(code))

    # -------------------------------------------------------------------------
    # Demo Commands
    # -------------------------------------------------------------------------
    def start_demo(self, demo: int) -> None:
        """Run built-in demo 0-9, or abort the current one with 255."""
        self._write(oi_codec.encode_demo(demo))

    def start_cover(self) -> None:            self._write(oi_codec.encode_cover())
    def start_cover_and_dock(self) -> None:   self._write(oi_codec.encode_cover_and_dock())
    def start_spot_cover(self) -> None:       self._write(oi_codec.encode_spot())

    # -------------------------------------------------------------------------
    # Actuator Commands
    # -------------------------------------------------------------------------
    def drive(self, velocity: int, turn_radius: int) -> None:
        self._write(oi_codec.encode_drive(velocity, turn_radius))

    def drive_direct(self, velocity_right: int, velocity_left: int) -> None:
        self._write(oi_codec.encode_drive_direct(velocity_right, velocity_left))

    def set_low_side_drivers(self, driver_bits: int) -> None:
        self._write(oi_codec.encode_low_side_drivers(driver_bits))

    def pwm_low_side_drivers(self, driver2: int, driver1: int, driver0: int) -> None:
        """Set duty cycles (0..128) for low side drivers 2, 1 and 0."""
        self._write(oi_codec.encode_pwm_low_side_drivers(driver2, driver1, driver0))

    def set_leds(self, play: bool, advance: bool, power_color: int, power_intensity: int) -> None:
        self._write(oi_codec.encode_leds(play, advance, power_color, power_intensity))

    def set_digital_outputs(self, output_bits: int) -> None:
        self._write(oi_codec.encode_digital_outputs(output_bits))

    def send_ir(self, value: int) -> None:
        self._write(oi_codec.encode_send_ir(value))

    def define_song(self, song_number: int, notes: Sequence[tuple[int, int]]) -> None:
        self._write(oi_codec.encode_song(song_number, notes))

    def play_song(self, song_number: int) -> None:
        self._write(oi_codec.encode_play_song(song_number))

    # -------------------------------------------------------------------------
    # Sensor Requests
    # -------------------------------------------------------------------------
    def request_sensors(self, packet_id: int) -> None:
        """
        Ask for one packet (7-42) or group (0-6). Replies carry no id byte;
        read them with `OIReader.read_sensor` or `OIReader.read_group`.
        """
        self._write(oi_codec.encode_sensors(packet_id))

    def query_list(self, packet_ids: Iterable[int]) -> None:
        self._write(oi_codec.encode_query_list(packet_ids))

    def stream(self, packet_ids: Iterable[int]) -> None:
        self._write(oi_codec.encode_stream(packet_ids))

    def pause_resume_stream(self, resume: bool) -> None:
        self._write(oi_codec.encode_pause_resume_stream(resume))

    # -------------------------------------------------------------------------
    # Scripts
    # -------------------------------------------------------------------------
    def define_script(self, script: bytes) -> None:
        """Store `script` (already-encoded frames, 1-100 bytes) on the robot."""
        self._write(oi_codec.encode_script(script))

    def play_script(self) -> None:   self._write(oi_codec.encode_play_script())
    def show_script(self) -> None:   self._write(oi_codec.encode_show_script())

    def wait_time(self, tenths: int) -> None:
        self._write(oi_codec.encode_wait_time(tenths))

    def wait_distance(self, distance_mm: int) -> None:
        self._write(oi_codec.encode_wait_distance(distance_mm))

    def wait_angle(self, angle_deg: int) -> None:
        self._write(oi_codec.encode_wait_angle(angle_deg))

    def wait_event(self, event: int) -> None:
        self._write(oi_codec.encode_wait_event(event))

    # -------------------------------------------------------------------------
    # TX helper
    # -------------------------------------------------------------------------
    def _write(self, frame: bytes) -> None:
        """
        Write one encoded frame to the sink; wrap sink errors in OIWriteError.

        Sinks returning a byte count get the remainder re-sent after a short
        write; sinks returning None are taken to have written everything.
        """
        if log.isEnabledFor(logging.DEBUG):
            log.debug("TX %s", frame.hex(" "))
        sent = 0
        while sent < len(frame):
            try:
                written = self._sink.write(frame[sent:])
            except OSError as e:
                log.error("TX write failed (opcode=%d, len=%d): %s", frame[0], len(frame), e)
                raise OIWriteError(f"Failed to write opcode {frame[0]}: {e}") from e
            if written is None:
                return
            if written <= 0:
                log.error("TX stalled (opcode=%d, %d of %d bytes sent)", frame[0], sent, len(frame))
                raise OIWriteError(
                    f"Sink accepted no bytes for opcode {frame[0]} ({sent} of {len(frame)} sent)"
                )
            sent += written
