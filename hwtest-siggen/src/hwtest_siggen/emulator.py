"""ISC signal generator emulator.

Provides an in-process emulator implementing the ``SerialTransport``
protocol, so the exchange engine, driver and CLI can run without hardware.
Written bytes are split into ``\\r\\n``-terminated command lines; each
line's reply is queued and handed out by :meth:`SiggenEmulator.read`,
optionally in small chunks to exercise partial-read framing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

_OK = "OK"


@dataclass(frozen=True)
class SiggenEmulatorConfig:
    """Configuration for a signal generator emulator instance.

    Args:
        identity: Value returned by ``$IDN``.
        version: Firmware version returned by ``$VER``.
        read_chunk: Maximum bytes handed out per read, or None for no limit.
        reflection_db: Simulated return loss used for reflected power readings.
    """

    identity: str = "ISC,SG,EMU000001"
    version: str = "1.0.0"
    read_chunk: int | None = None
    reflection_db: float = 15.0

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("identity must be non-empty")
        if self.read_chunk is not None and self.read_chunk < 1:
            raise ValueError("read_chunk must be >= 1")
        if self.reflection_db < 0:
            raise ValueError("reflection_db must be >= 0")


class SiggenEmulator:
    """In-process signal generator emulator implementing ``SerialTransport``.

    Args:
        config: Emulator configuration. Defaults to :class:`SiggenEmulatorConfig`.
    """

    def __init__(self, config: SiggenEmulatorConfig | None = None) -> None:
        self._config = config or SiggenEmulatorConfig()
        self._rx_line = ""
        self._tx = bytearray()
        self.lines: list[str] = []
        self.closed = False

        self.frequency = 2450.0
        self.power = 0.0
        self.rf_enabled = False
        self.dll_enabled = False
        self.dll_params: tuple[float, ...] = (0.0,) * 6
        self.errors: list[str] = []

        self._handlers: dict[str, Callable[[list[str]], list[str]]] = {
            "$IDN": self._identity,
            "$VER": self._version,
            "$ST": self._status,
            "$ERRC": self._clear_errors,
            "$FCG": self._get_frequency,
            "$FCS": self._set_frequency,
            "$PPG": self._get_pa_power,
            "$PWRG": self._get_power,
            "$PWRS": self._set_power,
            "$DLES": self._dll,
            "$ECS": self._rf,
            "$SWPD": self._sweep,
        }

    # -------------------------------------------------------------------------
    # Transport interface
    # -------------------------------------------------------------------------

    def write(self, data: bytes) -> None:
        """Accept command bytes and queue replies for complete lines."""
        if self.closed:
            raise OSError("Emulator is closed")
        self._rx_line += data.decode("ascii", errors="replace")
        while "\r\n" in self._rx_line:
            line, self._rx_line = self._rx_line.split("\r\n", 1)
            if line:
                self._process(line)

    def flush(self) -> None:
        """No-op; writes are processed immediately."""

    def read(self, size: int) -> bytes:
        """Return up to ``size`` queued reply bytes (``b""`` when idle)."""
        if self.closed:
            raise OSError("Emulator is closed")
        limit = size if self._config.read_chunk is None else min(size, self._config.read_chunk)
        data = bytes(self._tx[:limit])
        del self._tx[:limit]
        return data

    def discard_input(self) -> None:
        """Drop any reply bytes not yet read."""
        self._tx.clear()

    def close(self) -> None:
        self.closed = True

    # -------------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------------

    def inject(self, data: bytes) -> None:
        """Queue raw bytes as if the board had sent them unsolicited."""
        self._tx += data

    @property
    def pending(self) -> int:
        """Number of reply bytes not yet read."""
        return len(self._tx)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _process(self, line: str) -> None:
        self.lines.append(line)
        parts = [p.strip() for p in line.split(",")]
        prefix = parts[0].upper()
        handler = self._handlers.get(prefix)
        if handler is None or len(parts) < 2 or parts[1] != "0":
            self._reply([self._error(f"unknown command {line}")])
            return
        try:
            replies = handler(parts[2:])
        except ValueError as exc:
            replies = [self._error(str(exc))]
        self._reply(replies)

    def _reply(self, lines: list[str]) -> None:
        for line in lines:
            self._tx += f"{line}\r\n".encode("ascii")

    def _error(self, message: str) -> str:
        self.errors.append(message)
        return f"$ERR,0,{message}"

    @staticmethod
    def _numbers(args: list[str], count: int) -> list[float]:
        if len(args) != count:
            raise ValueError(f"expected {count} argument(s), got {len(args)}")
        return [float(a) for a in args]

    @staticmethod
    def _flag(args: list[str]) -> bool:
        if args not in (["0"], ["1"]):
            raise ValueError(f"expected 0 or 1, got {','.join(args)}")
        return args == ["1"]

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _identity(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        return [f"$IDN,0,{self._config.identity}"]

    def _version(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        return [f"$VER,0,{self._config.version}"]

    def _status(self, args: list[str]) -> list[str]:
        if not args:
            return [f"$ST,0,{len(self.errors)}"]
        if args != ["1"]:
            raise ValueError(f"invalid status argument {','.join(args)}")
        lines = [f"$ST,0,{i},{msg}" for i, msg in enumerate(self.errors, start=1)]
        return [*lines, _OK]

    def _clear_errors(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        self.errors.clear()
        return [f"$ERRC,0,{_OK}"]

    def _get_frequency(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        return [f"$FCG,0,{self.frequency:.2f}"]

    def _set_frequency(self, args: list[str]) -> list[str]:
        (self.frequency,) = self._numbers(args, 1)
        return [f"$FCS,0,{_OK}"]

    def _get_pa_power(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        forward, reflected = self._pa_power()
        return [f"$PPG,0,{forward:.2f},{reflected:.2f}"]

    def _get_power(self, args: list[str]) -> list[str]:
        self._numbers(args, 0)
        return [f"$PWRG,0,{self.power:.2f}"]

    def _set_power(self, args: list[str]) -> list[str]:
        (self.power,) = self._numbers(args, 1)
        return [f"$PWRS,0,{_OK}"]

    def _dll(self, args: list[str]) -> list[str]:
        if len(args) == 6:
            self.dll_params = tuple(self._numbers(args, 6))
        else:
            self.dll_enabled = self._flag(args)
        return [f"$DLES,0,{_OK}"]

    def _rf(self, args: list[str]) -> list[str]:
        self.rf_enabled = self._flag(args)
        return [f"$ECS,0,{_OK}"]

    def _sweep(self, args: list[str]) -> list[str]:
        start, stop, step, forward, _mode = self._numbers(args, 5)
        if step <= 0 or stop < start:
            raise ValueError("invalid sweep range")
        reflected = forward - self._config.reflection_db
        lines = []
        freq = start
        while freq <= stop + 1e-9:
            lines.append(f"$SWPD,0,{freq:.2f},{forward:.2f},{reflected:.2f}")
            freq += step
        return [*lines, _OK]

    def _pa_power(self) -> tuple[float, float]:
        if not self.rf_enabled:
            return (0.0, 0.0)
        return (self.power, self.power - self._config.reflection_db)
