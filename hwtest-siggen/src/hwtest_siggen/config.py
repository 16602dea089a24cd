"""Configuration for signal generator connections.

Configuration values are immutable dataclasses passed explicitly into the
discovery and connection functions, so tests can substitute alternate
settings. A YAML file can override any subset of the defaults.

Example YAML configuration:
    device:
      vendor_id: 8137
      product_id: 131
      port: /dev/ttyUSB0     # optional, skips auto-detection

    serial:
      baudrate: 115200
      timeout: 10.0
      read_timeout: 0.05

    exchange:
      frame_timeout: 0.5
      multiline_timeout: 5.0
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

# USB identifiers of the ISC signal generator board
TARGET_VENDOR_ID = 8137
TARGET_PRODUCT_ID = 131

PARITIES = ("N", "E", "O", "M", "S")


@dataclass(frozen=True)
class SerialConfig:
    """Serial port settings.

    Attributes:
        baudrate: Baud rate.
        bytesize: Data bits (5-8).
        parity: Parity as a pyserial code (``"N"``, ``"E"``, ``"O"``, ``"M"``, ``"S"``).
        stopbits: Stop bits (1, 1.5 or 2).
        xonxoff: Software flow control.
        rtscts: RTS/CTS hardware flow control.
        dsrdtr: DSR/DTR hardware flow control.
        timeout: Connection timeout in seconds; bounds blocking writes.
        read_timeout: Maximum time a single read attempt blocks, in seconds.
            Kept short so the exchange engine can enforce its own deadline.
    """

    baudrate: int = 115200
    bytesize: int = 8
    parity: str = "N"
    stopbits: float = 1
    xonxoff: bool = False
    rtscts: bool = False
    dsrdtr: bool = False
    timeout: float = 10.0
    read_timeout: float = 0.05

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.baudrate <= 0:
            raise ValueError("baudrate must be positive")
        if self.bytesize not in (5, 6, 7, 8):
            raise ValueError("bytesize must be 5, 6, 7 or 8")
        if self.parity not in PARITIES:
            raise ValueError(f"parity must be one of {PARITIES}")
        if self.stopbits not in (1, 1.5, 2):
            raise ValueError("stopbits must be 1, 1.5 or 2")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.read_timeout <= 0:
            raise ValueError("read_timeout must be positive")


@dataclass(frozen=True)
class SiggenConfig:
    """Complete signal generator connection configuration.

    Attributes:
        vendor_id: USB vendor ID used to recognize the board.
        product_id: USB product ID used to recognize the board.
        port: Explicit serial device; when set, auto-detection is skipped.
        serial: Serial port settings.
        frame_timeout: Deadline in seconds for single-line responses.
        multiline_timeout: Deadline in seconds for ``OK``-terminated responses
            (verbose status, sweeps).
    """

    vendor_id: int = TARGET_VENDOR_ID
    product_id: int = TARGET_PRODUCT_ID
    port: str | None = None
    serial: SerialConfig = field(default_factory=SerialConfig)
    frame_timeout: float = 0.5
    multiline_timeout: float = 5.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("vendor_id", "product_id"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFF:
                raise ValueError(f"{name} must be in range 0-65535")
        if self.frame_timeout <= 0:
            raise ValueError("frame_timeout must be positive")
        if self.multiline_timeout <= 0:
            raise ValueError("multiline_timeout must be positive")

    def timeout_for(self, terminator: str) -> float:
        """Return the frame deadline to use for a response terminator.

        Args:
            terminator: The terminator the response is expected to end with.

        Returns:
            :attr:`frame_timeout` for plain line responses,
            :attr:`multiline_timeout` otherwise.
        """
        return self.frame_timeout if terminator == "\r\n" else self.multiline_timeout


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{name} must be a mapping")
    return section


def _check_keys(section: dict[str, Any], name: str, allowed: set[str]) -> None:
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown key(s) in {name}: {sorted(unknown)}")


def config_from_dict(data: dict[str, Any]) -> SiggenConfig:
    """Build a configuration from a parsed mapping.

    Args:
        data: Mapping with optional ``device``, ``serial`` and ``exchange``
            sections.

    Returns:
        Parsed configuration; missing values take their defaults.

    Raises:
        ValueError: If a section is malformed or a value is invalid.
    """
    device = _section(data, "device")
    _check_keys(device, "device", {"vendor_id", "product_id", "port"})

    serial_data = _section(data, "serial")
    _check_keys(serial_data, "serial", {f.name for f in fields(SerialConfig)})

    exchange_data = _section(data, "exchange")
    _check_keys(exchange_data, "exchange", {"frame_timeout", "multiline_timeout"})

    try:
        serial = SerialConfig(**serial_data)
        return SiggenConfig(serial=serial, **device, **exchange_data)
    except TypeError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def load_config(path: str | Path) -> SiggenConfig:
    """Load signal generator configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Parsed configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the config is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return SiggenConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must be a YAML mapping")

    return config_from_dict(data)
