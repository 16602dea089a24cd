"""Exception types for hwtest-siggen.

All exceptions inherit from :class:`SiggenError`, allowing callers to catch
every signal generator failure with a single except clause.

Exception hierarchy:
    SiggenError (base)
    +-- DiscoveryError: Serial port enumeration failed
    +-- NoDeviceFoundError: No port matched the vendor/product filter
    +-- OpenFailedError: A matching port could not be opened
    +-- ExchangeError: Failure during a single command/response exchange
        +-- WriteFailedError
        +-- FlushFailedError
        +-- ReadFailedError
        +-- ExchangeTimeoutError
"""

from __future__ import annotations


class SiggenError(Exception):
    """Base exception for all hwtest-siggen errors."""


class DiscoveryError(SiggenError):
    """Raised when the list of serial endpoints cannot be obtained."""


class NoDeviceFoundError(SiggenError):
    """Raised when no serial endpoint matches the configured vendor/product IDs."""


class OpenFailedError(SiggenError):
    """Raised when a serial endpoint cannot be opened with the required settings.

    Attributes:
        device: The device name that failed to open (e.g. ``/dev/ttyUSB0``).
    """

    def __init__(self, device: str, reason: str) -> None:
        self.device = device
        super().__init__(f"Failed to open {device}: {reason}")


class ExchangeError(SiggenError):
    """Base exception for failures of a single command/response exchange.

    Attributes:
        command: The wire command (without terminator) being exchanged.
    """

    def __init__(self, command: str, message: str) -> None:
        self.command = command
        super().__init__(f"{message} (command {command!r})")


class WriteFailedError(ExchangeError):
    """Raised when the transport rejects the outbound frame.

    No read is attempted after a write failure.
    """


class FlushFailedError(ExchangeError):
    """Raised when the transport cannot flush the outbound frame to the wire."""


class ReadFailedError(ExchangeError):
    """Raised on a non-timeout I/O fault while reading the response."""


class ExchangeTimeoutError(ExchangeError):
    """Raised when the frame terminator does not arrive before the deadline.

    The outbound write is known to have succeeded, so this is the only
    exchange error after which a caller may reasonably retry.

    Attributes:
        timeout: The frame deadline in seconds.
        partial: Response text accumulated before the deadline expired.
    """

    def __init__(self, command: str, timeout: float, partial: str = "") -> None:
        self.timeout = timeout
        self.partial = partial
        super().__init__(command, f"No complete response within {timeout:.3f} s")
