"""
oi_codec.py
===========
Encoders for Create Open Interface (OI) commands (TX path).

Design philosophy:
- This module ONLY builds outgoing command frames (bytes to send).
- Opcodes and argument layouts are defined centrally in `oi_protocol.py`.
- Writing frames to a byte sink is handled by `oi_writer.py`.
- Every encoder validates all of its arguments before building the frame and
  raises `ArgumentOutOfRange` on the first violation.

Usage:
    from create_oi.l2_oi.oi_codec import encode_drive, encode_sensors
    port.write(encode_drive(200, 0))       # Drive forward
    port.write(encode_sensors(7))          # Request bumps & wheel drops
"""

from typing import Iterable, Sequence

from .oi_errors import ArgumentOutOfRange
from .oi_protocol import BaudRate, Opcode, is_request_id

# Drive radius special cases
DRIVE_STRAIGHT = 32768
DRIVE_STRAIGHT_ALT = 32767
TURN_IN_PLACE_CW = 65535
TURN_IN_PLACE_CCW = 1
RADIUS_SENTINELS = frozenset({DRIVE_STRAIGHT, DRIVE_STRAIGHT_ALT, TURN_IN_PLACE_CW})

MAX_VELOCITY = 500
MAX_RADIUS = 2000

DEMO_ABORT = 255
MAX_SCRIPT_BYTES = 100
MAX_REQUEST_IDS = 43


def _check_range(name: str, value: int, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ArgumentOutOfRange(f"{name} must be an int, got {value!r}")
    if not low <= value <= high:
        raise ArgumentOutOfRange(f"{name} out of range ({low} to {high}): {value}")
    return value


def encode_frame(opcode: int, *data: int) -> bytes:
    """
    Build a raw command frame: [opcode][data 1]..[data N].

    Every value must already be an unsigned byte (0-255).

    Example:
        >>> encode_frame(Opcode.PLAY_SONG, 2)
        b'\\x8d\\x02'
    """
    _check_range("opcode", opcode, 0, 255)
    for i, value in enumerate(data):
        _check_range(f"data[{i}]", value, 0, 255)
    return bytes([int(opcode), *data])


# ============================================================
# Helper: 16-bit and signed 8-bit splitting
# ============================================================

def _split16(value: int) -> list[int]:
    """
    Split a 16-bit value into [high byte, low byte].

    Negative values come out in two's complement:
        >>> _split16(-200)
        [255, 56]
    """
    return [(value >> 8) & 0xFF, value & 0xFF]


def _s8(value: int) -> int:
    # signed 8-bit to 0..255 two's complement
    return value & 0xFF


# ============================================================
# Mode and demo commands
# ============================================================

def encode_start() -> bytes:            return encode_frame(Opcode.START)
def encode_safe() -> bytes:             return encode_frame(Opcode.SAFE)
def encode_full() -> bytes:             return encode_frame(Opcode.FULL)
def encode_spot() -> bytes:             return encode_frame(Opcode.SPOT)
def encode_cover() -> bytes:            return encode_frame(Opcode.COVER)
def encode_cover_and_dock() -> bytes:   return encode_frame(Opcode.COVER_AND_DOCK)
def encode_play_script() -> bytes:      return encode_frame(Opcode.PLAY_SCRIPT)
def encode_show_script() -> bytes:      return encode_frame(Opcode.SHOW_SCRIPT)


def encode_baud(baud_code: int) -> bytes:
    """
    Build a BAUD command frame (opcode 129).

    Args:
        baud_code (int): One of the `BaudRate` codes (0-11).

    Note:
        Wait 100ms after sending before talking at the new rate.

    Example:
        >>> encode_baud(BaudRate.BAUD_115200)
        b'\\x81\\x0b'
    """
    _check_range("baud_code", baud_code, min(BaudRate), max(BaudRate))
    return encode_frame(Opcode.BAUD, baud_code)


def encode_demo(demo: int) -> bytes:
    """
    Build a DEMO command frame (opcode 136).

    demo: 0-9 selects a built-in demo; 255 (or -1) aborts the running one.
    """
    if demo == -1:
        demo = DEMO_ABORT
    if demo != DEMO_ABORT:
        _check_range("demo", demo, 0, 9)
    return encode_frame(Opcode.DEMO, demo)


# ============================================================
# Movement Commands
# ============================================================

def encode_drive(velocity: int, turn_radius: int) -> bytes:
    """
    Build a DRIVE command frame (opcode 137).

    Frame Format
    ------------
        [137][Velocity hi][Velocity lo][Radius hi][Radius lo]

    Parameters
    ----------
    velocity : int
        Average wheel velocity in mm/s, **-500..+500** (negative = backward).
    turn_radius : int
        Turning radius in mm, **-2000..+2000**. Positive radii turn left,
        negative radii turn right. Special cases outside that range:
          • **Straight**: `32768` (0x8000) or `32767` (0x7FFF)
          • **Turn in place (CW)**: `65535` (0xFFFF)
        Turn in place counter-clockwise is plain `1`.

    Raises
    ------
    ArgumentOutOfRange
        If either value is outside its range.

    Examples
    --------
    Full speed straight ahead:
        >>> encode_drive(500, DRIVE_STRAIGHT)
        b'\\x89\\x01\\xf4\\x80\\x00'      # 89 01 F4 80 00

    Reverse @ -200 mm/s with radius 500 mm:
        >>> encode_drive(-200, 500)
        b'\\x89\\xff\\x38\\x01\\xf4'      # 89 FF 38 01 F4
    """
    _check_range("velocity", velocity, -MAX_VELOCITY, MAX_VELOCITY)
    if not (isinstance(turn_radius, int) and turn_radius in RADIUS_SENTINELS):
        _check_range("turn_radius", turn_radius, -MAX_RADIUS, MAX_RADIUS)
    return encode_frame(Opcode.DRIVE, *_split16(velocity), *_split16(turn_radius))


def encode_drive_direct(velocity_right: int, velocity_left: int) -> bytes:
    """
    Build a DRIVE_DIRECT command frame (opcode 145).

    Frame Format
    ------------
        [145][Right hi][Right lo][Left hi][Left lo]

    Both velocities are mm/s in **-500..+500**; note the right wheel comes first.

    Examples
    --------
    Spin in place to the right:
        >>> encode_drive_direct(500, -500)
        b'\\x91\\x01\\xf4\\xfe\\x0c'      # 91 01 F4 FE 0C
    """
    _check_range("velocity_right", velocity_right, -MAX_VELOCITY, MAX_VELOCITY)
    _check_range("velocity_left", velocity_left, -MAX_VELOCITY, MAX_VELOCITY)
    return encode_frame(
        Opcode.DRIVE_DIRECT, *_split16(velocity_right), *_split16(velocity_left)
    )


# ============================================================
# Outputs: low side drivers, LEDs, digital outputs, IR
# ============================================================

def encode_low_side_drivers(driver_bits: int) -> bytes:
    """
    LOW SIDE DRIVERS (opcode 138)
    Format: [138][bits]  bit0 = driver 0, bit1 = driver 1, bit2 = driver 2.
    """
    _check_range("driver_bits", driver_bits, 0, 7)
    return encode_frame(Opcode.LOW_SIDE_DRIVERS, driver_bits)


def encode_pwm_low_side_drivers(driver2: int, driver1: int, driver0: int) -> bytes:
    """
    PWM LOW SIDE DRIVERS (opcode 144)
    Format: [144][driver 2][driver 1][driver 0]
    Duty cycles are 0..128 (128 = 100%).
    """
    _check_range("driver2", driver2, 0, 128)
    _check_range("driver1", driver1, 0, 128)
    _check_range("driver0", driver0, 0, 128)
    return encode_frame(Opcode.PWM_LOW_SIDE_DRIVERS, driver2, driver1, driver0)


def encode_leds(play: bool, advance: bool, power_color: int, power_intensity: int) -> bytes:
    """
    Build a LED command frame (opcode 139).

    Format:
        [139][led_bits][power_color][power_intensity]

    Args:
        play, advance (bool): LED states (bit 1 and bit 3).
        power_color (int): 0..255 (0 = green, 255 = red).
        power_intensity (int): 0..255 (0 = off, 255 = full bright).

    Example:
        >>> encode_leds(True, True, 128, 255)
        b'\\x8b\\x0a\\x80\\xff'
    """
    _check_range("power_color", power_color, 0, 255)
    _check_range("power_intensity", power_intensity, 0, 255)
    bits = ((1 if play else 0) << 1) | ((1 if advance else 0) << 3)
    return encode_frame(Opcode.LED, bits, power_color, power_intensity)


def encode_digital_outputs(output_bits: int) -> bytes:
    """DIGITAL OUTPUTS (opcode 147): [147][bits], bits 0-2 = cargo bay outputs 0-2."""
    _check_range("output_bits", output_bits, 0, 7)
    return encode_frame(Opcode.DIGITAL_OUTPUTS, output_bits)


def encode_send_ir(value: int) -> bytes:
    """SEND IR (opcode 151): [151][byte] emitted through low side driver 1."""
    _check_range("value", value, 0, 255)
    return encode_frame(Opcode.SEND_IR, value)


# ============================================================
# Songs
# ============================================================

def encode_song(song_number: int, notes: Sequence[tuple[int, int]]) -> bytes:
    """
    Build a SONG definition frame (opcode 140).

    Args:
        song_number (int): Song ID (0–15).
        notes (list[tuple[int, int]]): 1–16 (note, duration) pairs.
            - note: MIDI note [31–127].
            - duration: 0–255 in 1/64ths of a second.

    Example:
        >>> encode_song(0, [(60, 64)])
        b'\\x8c\\x00\\x01\\x3c\\x40'
    """
    _check_range("song_number", song_number, 0, 15)
    if not 1 <= len(notes) <= 16:
        raise ArgumentOutOfRange(f"notes must contain 1–16 items, got {len(notes)}")

    body = []
    for note, duration in notes:
        _check_range("note", note, 31, 127)
        _check_range("duration", duration, 0, 255)
        body.extend([note, duration])
    return encode_frame(Opcode.SONG, song_number, len(notes), *body)


def encode_play_song(song_number: int) -> bytes:
    """PLAY SONG (opcode 141): [141][song 0-15]."""
    _check_range("song_number", song_number, 0, 15)
    return encode_frame(Opcode.PLAY_SONG, song_number)


# ============================================================
# Sensor Query Commands
# ============================================================

def _check_request_id(packet_id: int) -> int:
    _check_range("packet_id", packet_id, 0, 255)
    if not is_request_id(packet_id):
        raise ArgumentOutOfRange(f"packet_id {packet_id} is not a sensor packet or group")
    return packet_id


def _check_request_ids(packet_ids: Iterable[int]) -> list[int]:
    ids = [_check_request_id(pid) for pid in packet_ids]
    if not 1 <= len(ids) <= MAX_REQUEST_IDS:
        raise ArgumentOutOfRange(
            f"must request at least 1 and at most {MAX_REQUEST_IDS} packets, got {len(ids)}"
        )
    return ids


def encode_sensors(packet_id: int) -> bytes:
    """
    Build a SENSORS command frame (opcode 142).

    Format:
        [142][packet_id]

    Args:
        packet_id (int): 0–6 for a sensor group, 7–42 for a single packet
            (15 and 16 are unused and rejected).

    Example:
        >>> encode_sensors(7)
        b'\\x8e\\x07'
    """
    return encode_frame(Opcode.SENSORS, _check_request_id(packet_id))


def encode_query_list(packet_ids: Iterable[int]) -> bytes:
    """
    Build a QUERY_LIST command frame (opcode 149).

    Format:
        [149][N][id1][id2]...[idN]

    Example:
        >>> encode_query_list([7, 13])
        b'\\x95\\x02\\x07\\x0d'
    """
    ids = _check_request_ids(packet_ids)
    return encode_frame(Opcode.QUERY_LIST, len(ids), *ids)


def encode_stream(packet_ids: Iterable[int]) -> bytes:
    """
    Build a STREAM command frame (opcode 148).

    Format:
        [148][N][id1][id2]...[idN]

    Example:
        >>> encode_stream([7, 13])
        b'\\x94\\x02\\x07\\x0d'
    """
    ids = _check_request_ids(packet_ids)
    return encode_frame(Opcode.STREAM, len(ids), *ids)


def encode_pause_resume_stream(resume: bool) -> bytes:
    """
    PAUSE/RESUME STREAM (opcode 150).
    Format: [150][0] pauses, [150][1] resumes.
    """
    return encode_frame(Opcode.PAUSE_RESUME_STREAM, 1 if resume else 0)


# ============================================================
# Scripts
# ============================================================

def encode_script(script: bytes) -> bytes:
    """
    Build a SCRIPT definition frame (opcode 152).

    Format:
        [152][N][byte 1]..[byte N]

    `script` holds already-encoded command frames, 1-100 bytes in total.

    Example:
        >>> encode_script(encode_drive(100, 0) + encode_wait_time(10))
        b'\\x98\\x07\\x89\\x00\\x64\\x00\\x00\\x9b\\x0a'
    """
    body = bytes(script)
    if not 1 <= len(body) <= MAX_SCRIPT_BYTES:
        raise ArgumentOutOfRange(
            f"script must be 1–{MAX_SCRIPT_BYTES} bytes, got {len(body)}"
        )
    return encode_frame(Opcode.SCRIPT, len(body), *body)


def encode_wait_time(tenths: int) -> bytes:
    """WAIT TIME (opcode 155): [155][tenths of a second, 0-255]."""
    _check_range("tenths", tenths, 0, 255)
    return encode_frame(Opcode.WAIT_TIME, tenths)


def encode_wait_distance(distance_mm: int) -> bytes:
    """WAIT DISTANCE (opcode 156): [156][mm hi][mm lo], signed 16-bit."""
    _check_range("distance_mm", distance_mm, -32768, 32767)
    return encode_frame(Opcode.WAIT_DISTANCE, *_split16(distance_mm))


def encode_wait_angle(angle_deg: int) -> bytes:
    """WAIT ANGLE (opcode 157): [157][deg hi][deg lo], signed 16-bit."""
    _check_range("angle_deg", angle_deg, -32768, 32767)
    return encode_frame(Opcode.WAIT_ANGLE, *_split16(angle_deg))


def encode_wait_event(event: int) -> bytes:
    """
    WAIT EVENT (opcode 158)
    Format: [158][event]

    event: 1..20 waits for the event, -1..-20 for its inverse.
    Sent as a signed byte (two's complement).
    """
    _check_range("event", event, -20, 20)
    if event == 0:
        raise ArgumentOutOfRange("event must not be 0")
    return encode_frame(Opcode.WAIT_EVENT, _s8(event))
