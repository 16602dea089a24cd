"""Byte transport for the signal generator.

This module defines the :class:`SerialTransport` protocol consumed by the
exchange engine, and :class:`SerialResource`, its pyserial-backed
implementation. The ``serial`` package is imported lazily on
:meth:`SerialResource.open` so the command model, exchange engine and
emulator work without pyserial installed.

Read semantics follow pyserial: :meth:`SerialTransport.read` blocks for at
most the configured per-read timeout and returns whatever bytes arrived,
possibly none. Implementations may instead raise :class:`TimeoutError` when
no data is available; the exchange engine treats both the same way. Any
other :class:`OSError` is a genuine I/O fault.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from hwtest_siggen.config import SerialConfig
from hwtest_siggen.errors import OpenFailedError

logger = logging.getLogger(__name__)


class SerialTransport(Protocol):
    """Protocol for an opened, byte-oriented duplex channel.

    Any class that implements these methods with matching signatures is a
    valid transport (structural subtyping).
    """

    def write(self, data: bytes) -> None:
        """Write all of ``data`` or raise :class:`OSError`."""
        ...

    def flush(self) -> None:
        """Block until buffered output has been transmitted."""
        ...

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, returning ``b""`` if none arrived in time."""
        ...

    def discard_input(self) -> None:
        """Drop any bytes received but not yet read."""
        ...

    def close(self) -> None:
        """Close the transport and release resources."""
        ...


class SerialResource:
    """Serial port transport backed by pyserial.

    Implements the :class:`SerialTransport` protocol.

    Args:
        device: Serial device name (e.g. ``"/dev/ttyUSB0"`` or ``"COM3"``).
        config: Port settings. Defaults to :class:`SerialConfig` defaults.

    Example:
        >>> port = SerialResource("/dev/ttyUSB0")
        >>> port.open()
        >>> port.write(b"$IDN,0\\r\\n")
        >>> port.read(256)
        >>> port.close()
    """

    def __init__(self, device: str, config: SerialConfig | None = None) -> None:
        self._device = device
        self._config = config if config is not None else SerialConfig()
        self._serial: Any = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def device(self) -> str:
        """The serial device name."""
        return self._device

    @property
    def config(self) -> SerialConfig:
        """The port settings applied on open."""
        return self._config

    @property
    def is_open(self) -> bool:
        """Return True if the port is currently open."""
        return self._serial is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Open the serial port with the configured settings.

        Raises:
            OpenFailedError: If pyserial is missing or the port cannot be opened.
        """
        if self._serial is not None:
            return

        try:
            import serial  # type: ignore[import-untyped]  # pylint: disable=import-outside-toplevel
        except ImportError as exc:
            raise OpenFailedError(
                self._device, "pyserial library is not installed. Install with: pip install pyserial"
            ) from exc

        cfg = self._config
        try:
            self._serial = serial.Serial(
                port=self._device,
                baudrate=cfg.baudrate,
                bytesize=cfg.bytesize,
                parity=cfg.parity,
                stopbits=cfg.stopbits,
                xonxoff=cfg.xonxoff,
                rtscts=cfg.rtscts,
                dsrdtr=cfg.dsrdtr,
                timeout=cfg.read_timeout,
                write_timeout=cfg.timeout,
            )
        except (OSError, ValueError) as exc:
            self._serial = None
            raise OpenFailedError(self._device, str(exc)) from exc

        logger.info("Opened %s at %d baud", self._device, cfg.baudrate)

    def close(self) -> None:
        """Close the serial port.

        Safe to call multiple times.
        """
        if self._serial is None:
            return
        try:
            self._serial.close()
        except OSError as exc:
            logger.warning("Error closing %s: %s", self._device, exc)
        finally:
            self._serial = None
            logger.info("Closed %s", self._device)

    def __enter__(self) -> SerialResource:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport interface
    # -------------------------------------------------------------------------

    def write(self, data: bytes) -> None:
        """Write the whole buffer.

        Raises:
            OSError: If the port is closed, the write times out, or fewer
                bytes than requested were accepted.
        """
        port = self._require_open()
        written = port.write(data)
        if written is not None and written != len(data):
            raise OSError(f"Short write to {self._device}: {written} of {len(data)} bytes")

    def flush(self) -> None:
        """Wait until all written data has been transmitted."""
        self._require_open().flush()

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes within the per-read timeout."""
        data: bytes = self._require_open().read(size)
        return data

    def discard_input(self) -> None:
        """Drop any unread input bytes."""
        self._require_open().reset_input_buffer()

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    def _require_open(self) -> Any:
        if self._serial is None:
            raise OSError(f"Serial port {self._device} is not open")
        return self._serial
