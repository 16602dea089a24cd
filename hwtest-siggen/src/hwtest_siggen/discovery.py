"""Serial port discovery and connection for the signal generator.

The board enumerates as a USB serial device with a fixed vendor/product ID
pair. Discovery lists every serial endpoint via pyserial, keeps the ones
whose IDs match the configuration, and opens the first match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hwtest_siggen.config import SiggenConfig
from hwtest_siggen.errors import DiscoveryError, NoDeviceFoundError
from hwtest_siggen.generator import SignalGenerator
from hwtest_siggen.transport import SerialResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """A connectable serial endpoint.

    Attributes:
        device: Platform device name (e.g. ``/dev/ttyUSB0``, ``COM3``).
        vendor_id: USB vendor ID, or None for non-USB ports.
        product_id: USB product ID, or None for non-USB ports.
        description: Human-readable port description.
        serial_number: USB serial number string, if reported.
    """

    device: str
    vendor_id: int | None = None
    product_id: int | None = None
    description: str = ""
    serial_number: str | None = None

    def matches(self, vendor_id: int, product_id: int) -> bool:
        """Return True if this is a USB endpoint with the given IDs."""
        return self.vendor_id == vendor_id and self.product_id == product_id

    def __str__(self) -> str:
        if self.vendor_id is None or self.product_id is None:
            return f"{self.device} ({self.description or 'n/a'})"
        return (
            f"{self.device} [{self.vendor_id:04X}:{self.product_id:04X}] "
            f"{self.description or 'n/a'}"
        )


def list_endpoints() -> list[Endpoint]:
    """Enumerate the serial endpoints available on this machine.

    Returns:
        Endpoints sorted by device name.

    Raises:
        DiscoveryError: If pyserial is missing or enumeration fails.
    """
    try:
        from serial.tools import list_ports  # type: ignore[import-untyped]  # pylint: disable=import-outside-toplevel
    except ImportError as exc:
        raise DiscoveryError(
            "pyserial library is not installed. Install with: pip install pyserial"
        ) from exc

    try:
        ports = list_ports.comports()
    except OSError as exc:
        raise DiscoveryError(f"Failed to list serial ports: {exc}") from exc

    endpoints = [
        Endpoint(
            device=port.device,
            vendor_id=port.vid,
            product_id=port.pid,
            description=port.description or "",
            serial_number=port.serial_number,
        )
        for port in ports
    ]
    endpoints.sort(key=lambda e: e.device)
    logger.debug("Available ports: %s", [str(e) for e in endpoints])
    return endpoints


def find_signal_generators(
    config: SiggenConfig | None = None,
    endpoints: list[Endpoint] | None = None,
) -> list[Endpoint]:
    """Return the endpoints that look like a signal generator board.

    Args:
        config: Supplies the vendor/product IDs to match.
        endpoints: Candidates to filter. Defaults to :func:`list_endpoints`.

    Returns:
        Matching endpoints, in enumeration order.
    """
    config = config or SiggenConfig()
    if endpoints is None:
        endpoints = list_endpoints()

    matches = [e for e in endpoints if e.matches(config.vendor_id, config.product_id)]
    if len(matches) > 1:
        logger.warning(
            "Multiple signal generator boards found: %s", ", ".join(e.device for e in matches)
        )
    return matches


def connect(config: SiggenConfig | None = None, port: str | None = None) -> SerialResource:
    """Open a serial connection to a signal generator board.

    Args:
        config: Connection configuration.
        port: Explicit device to open. Overrides :attr:`SiggenConfig.port`;
            when neither is set the first auto-detected board is used.

    Returns:
        An open :class:`SerialResource`.

    Raises:
        DiscoveryError: If the serial ports cannot be enumerated.
        NoDeviceFoundError: If no board matches the configured IDs.
        OpenFailedError: If the selected port cannot be opened.
    """
    config = config or SiggenConfig()
    device = port or config.port

    if device is None:
        matches = find_signal_generators(config)
        if not matches:
            raise NoDeviceFoundError(
                f"No signal generator board detected "
                f"(vendor {config.vendor_id:#06x}, product {config.product_id:#06x})"
            )
        device = matches[0].device

    logger.info("Connecting to signal generator: %s", device)
    resource = SerialResource(device, config.serial)
    resource.open()
    logger.info("Successfully connected to %s", device)
    return resource


def open_signal_generator(
    config: SiggenConfig | None = None,
    port: str | None = None,
) -> SignalGenerator:
    """Create a signal generator driver connected to a board.

    Standard factory entry point for programmatic use.

    Args:
        config: Connection configuration.
        port: Explicit device to open instead of auto-detecting.

    Returns:
        Connected driver instance. Close it (or use it as a context manager)
        to release the port.
    """
    config = config or SiggenConfig()
    resource = connect(config, port)
    return SignalGenerator(resource, config, name=resource.device)
