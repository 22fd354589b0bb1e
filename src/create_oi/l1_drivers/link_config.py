from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json

import yaml

from ..l2_oi.oi_protocol import BaudRate


@dataclass(frozen=True, slots=True)
class LinkConfig:
    """
    Immutable serial link settings for talking to the robot.

    Fields
    ------
    device : str
        Serial device path, e.g. "/dev/ttyUSB0" or "COM3".
    baudrate : int
        Bits per second; must be a rate the OI supports (default 57600,
        the Create's power-up rate).
    timeout : float | None
        Read timeout in seconds. None blocks forever.
    write_timeout : float | None
        Write timeout in seconds. None blocks forever.
    """
    device: str
    baudrate: int = 57600
    timeout: float | None = 0.05
    write_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.device or not self.device.strip():
            raise ValueError("device must be a non-empty string")
        BaudRate.from_bps(self.baudrate)

    @property
    def baud_code(self) -> BaudRate:
        """The Baud command code matching `baudrate`."""
        return BaudRate.from_bps(self.baudrate)


def _opt_float(data: dict, key: str, default: float | None) -> float | None:
    if key not in data:
        return default
    value = data[key]
    return None if value is None else float(value)


def load_link_config(path: str | Path) -> LinkConfig:
    """
    Load link config from a YAML or JSON file.

    Supported shapes:
      YAML:
        device: /dev/ttyUSB0
        baudrate: 115200
        timeout: 0.1

      JSON:
        {"device": "/dev/ttyUSB0", "baudrate": 115200, "timeout": 0.1}

    Raises FileNotFoundError / ValueError on bad input.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    data: dict
    if p.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {p}: {e}") from e
    elif p.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config format: {p.suffix}")

    if not isinstance(data, dict):
        raise ValueError("Link config must be a mapping")
    if not data.get("device"):
        raise ValueError("Link config requires 'device'")

    return LinkConfig(
        device=str(data["device"]),
        baudrate=int(data.get("baudrate", 57600)),
        timeout=_opt_float(data, "timeout", 0.05),
        write_timeout=_opt_float(data, "write_timeout", None),
    )
