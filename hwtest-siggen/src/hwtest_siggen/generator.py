"""ISC signal generator driver.

Wraps an open ``SerialTransport`` with one typed method per instrument
command. Each method encodes its command, runs a single exchange and
returns the response text with the trailing terminator stripped.

The driver owns the transport for the length of the session; :meth:`close`
is the single release path and is safe to call more than once. Use the
driver as a context manager to guarantee release::

    with open_signal_generator() as sg:
        sg.set_frequency(2450)
        print(sg.get_frequency())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hwtest_siggen.commands import (
    ClearErrors,
    Command,
    ConfigureDll,
    DllDisable,
    DllEnable,
    GetFrequency,
    GetIdentity,
    GetPaPower,
    GetPowerSetpoint,
    GetStatus,
    GetVersion,
    RfDisable,
    RfEnable,
    SetFrequency,
    SetPower,
    SweepDbm,
)
from hwtest_siggen.config import SiggenConfig
from hwtest_siggen.exchange import exchange

if TYPE_CHECKING:
    from hwtest_siggen.transport import SerialTransport

logger = logging.getLogger(__name__)


class SignalGenerator:
    """High-level driver for the ISC signal generator board.

    Args:
        transport: An open transport to the board.
        config: Connection configuration supplying the frame deadlines.
        name: Label used in log messages (usually the serial device name).
    """

    def __init__(
        self,
        transport: SerialTransport,
        config: SiggenConfig | None = None,
        *,
        name: str = "signal generator",
    ) -> None:
        self._transport: SerialTransport | None = transport
        self._config = config or SiggenConfig()
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_open(self) -> bool:
        """Return True until :meth:`close` has been called."""
        return self._transport is not None

    # -------------------------------------------------------------------------
    # Core operation
    # -------------------------------------------------------------------------

    def send(self, command: Command) -> str:
        """Exchange a command and return the raw response.

        The frame deadline and terminator follow the command: ``OK``-terminated
        replies use :attr:`SiggenConfig.multiline_timeout`.

        Args:
            command: The command to send.

        Returns:
            The response text including its terminator.

        Raises:
            ExchangeError: If the exchange fails.
            OSError: If the session has been closed.
        """
        if self._transport is None:
            raise OSError(f"{self._name} is disconnected")
        terminator = command.response_terminator
        response = exchange(
            self._transport,
            command.encode(),
            self._config.timeout_for(terminator),
            terminator=terminator,
        )
        logger.info("%s: %s -> %s", self._name, command.encode(), response.strip())
        return response

    def query(self, command: Command) -> str:
        """Exchange a command and return the response with whitespace stripped."""
        return self.send(command).strip()

    # -------------------------------------------------------------------------
    # Identity / status
    # -------------------------------------------------------------------------

    def identify(self) -> str:
        """Query the board identification (``$IDN``)."""
        return self.query(GetIdentity())

    def get_version(self) -> str:
        """Query the firmware version (``$VER``)."""
        return self.query(GetVersion())

    def get_status(self, verbose: bool = False) -> str:
        """Query the board status (``$ST``).

        Args:
            verbose: Return the list of active errors instead of an error code.
                The reply spans several lines and ends with ``OK``.
        """
        return self.query(GetStatus(verbose=verbose))

    def clear_errors(self) -> str:
        """Clear the board error state (``$ERRC``)."""
        return self.query(ClearErrors())

    # -------------------------------------------------------------------------
    # Frequency
    # -------------------------------------------------------------------------

    def get_frequency(self) -> str:
        """Query the frequency setpoint (``$FCG``)."""
        return self.query(GetFrequency())

    def set_frequency(self, frequency: float) -> str:
        """Set the frequency setpoint (``$FCS``).

        Args:
            frequency: Frequency in MHz.
        """
        return self.query(SetFrequency(frequency))

    # -------------------------------------------------------------------------
    # Power
    # -------------------------------------------------------------------------

    def get_pa_power(self) -> str:
        """Query the measured PA forward and reflected power (``$PPG``)."""
        return self.query(GetPaPower())

    def get_power(self) -> str:
        """Query the power setpoint (``$PWRG``)."""
        return self.query(GetPowerSetpoint())

    def set_power(self, power: float) -> str:
        """Set the power setpoint (``$PWRS``).

        Args:
            power: Power in dBm.
        """
        return self.query(SetPower(power))

    # -------------------------------------------------------------------------
    # DLL
    # -------------------------------------------------------------------------

    def configure_dll(
        self,
        param1: float,
        param2: float,
        param3: float,
        param4: float,
        param5: float,
        param6: float,
    ) -> str:
        """Configure the DLL with its six parameters (``$DLES``)."""
        return self.query(ConfigureDll(param1, param2, param3, param4, param5, param6))

    def enable_dll(self) -> str:
        return self.query(DllEnable())

    def disable_dll(self) -> str:
        return self.query(DllDisable())

    # -------------------------------------------------------------------------
    # RF output
    # -------------------------------------------------------------------------

    def enable_rf(self) -> str:
        return self.query(RfEnable())

    def disable_rf(self) -> str:
        return self.query(RfDisable())

    # -------------------------------------------------------------------------
    # Sweep
    # -------------------------------------------------------------------------

    def sweep_dbm(self, start: float, stop: float, step: float, dwell: float) -> str:
        """Run a power sweep (``$SWPD``) and return the raw multi-line reply.

        Args:
            start: Start frequency in MHz.
            stop: Stop frequency in MHz.
            step: Frequency step in MHz.
            dwell: Fourth sweep field; the board applies it as the sweep
                power level in dBm.
        """
        return self.query(SweepDbm(start, stop, step, dwell))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Disconnect and release the transport. Safe to call multiple times."""
        if self._transport is None:
            return
        logger.info("Disconnecting from %s", self._name)
        transport, self._transport = self._transport, None
        transport.close()
        logger.info("Disconnected from %s", self._name)

    def __enter__(self) -> SignalGenerator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
