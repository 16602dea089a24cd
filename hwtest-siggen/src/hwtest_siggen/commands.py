"""Signal generator command model.

Each instrument operation is a frozen dataclass deriving from
:class:`Command`. Encoding is pure and deterministic: the wire string is the
command's prefix token, the fixed channel selector ``0``, and the command's
fields, joined with commas. Numeric fields are always rendered with exactly
two decimal places. The ``\\r\\n`` frame terminator is not part of the
encoded string; it is appended by :func:`hwtest_siggen.exchange.exchange`.

Example:
    >>> encode(SetFrequency(50))
    '$FCS,0,50.00'
    >>> encode(GetStatus(verbose=True))
    '$ST,0,1'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import ClassVar

CHANNEL = "0"

LINE_TERMINATOR = "\r\n"
OK_TERMINATOR = "OK\r\n"


def format_field(value: float) -> str:
    """Format a numeric field with exactly two decimal places.

    Rounding follows Python's ``.2f`` formatting: the exact binary value is
    rounded to the nearest representable string, ties to even
    (``1.005`` -> ``"1.00"``, ``0.125`` -> ``"0.12"``).
    """
    return f"{value:.2f}"


@dataclass(frozen=True)
class Command(ABC):
    """Base class for all signal generator commands.

    Subclasses set :attr:`prefix` and implement :meth:`_fields`.
    """

    prefix: ClassVar[str]
    response_terminator: ClassVar[str] = LINE_TERMINATOR

    @abstractmethod
    def _fields(self) -> tuple[str, ...]:
        """Return the already-formatted fields that follow the channel selector."""

    def encode(self) -> str:
        """Encode this command to its wire string (without terminator)."""
        return ",".join((self.prefix, CHANNEL, *self._fields()))


# ---------------------------------------------------------------------------
# Identity / status
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetIdentity(Command):
    prefix: ClassVar[str] = "$IDN"

    def _fields(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class GetVersion(Command):
    prefix: ClassVar[str] = "$VER"

    def _fields(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class GetStatus(Command):
    """Query the board status.

    With ``verbose=True`` the board answers with a list of active errors
    instead of an error code, terminated by an ``OK`` line.
    """

    prefix: ClassVar[str] = "$ST"

    verbose: bool = False

    @property
    def response_terminator(self) -> str:  # type: ignore[override]
        return OK_TERMINATOR if self.verbose else LINE_TERMINATOR

    def _fields(self) -> tuple[str, ...]:
        return ("1",) if self.verbose else ()


@dataclass(frozen=True)
class ClearErrors(Command):
    prefix: ClassVar[str] = "$ERRC"

    def _fields(self) -> tuple[str, ...]:
        return ()


# ---------------------------------------------------------------------------
# Frequency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetFrequency(Command):
    prefix: ClassVar[str] = "$FCG"

    def _fields(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class SetFrequency(Command):
    """Set the frequency setpoint (MHz)."""

    prefix: ClassVar[str] = "$FCS"

    frequency: float

    def _fields(self) -> tuple[str, ...]:
        return (format_field(self.frequency),)


# ---------------------------------------------------------------------------
# Power
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetPaPower(Command):
    """Query the measured PA forward/reflected power."""

    prefix: ClassVar[str] = "$PPG"

    def _fields(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class GetPowerSetpoint(Command):
    prefix: ClassVar[str] = "$PWRG"

    def _fields(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class SetPower(Command):
    """Set the power setpoint (dBm)."""

    prefix: ClassVar[str] = "$PWRS"

    power: float

    def _fields(self) -> tuple[str, ...]:
        return (format_field(self.power),)


# ---------------------------------------------------------------------------
# DLL
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfigureDll(Command):
    """Configure the DLL loop with its six parameters, in wire order."""

    prefix: ClassVar[str] = "$DLES"

    param1: float
    param2: float
    param3: float
    param4: float
    param5: float
    param6: float

    def _fields(self) -> tuple[str, ...]:
        return tuple(format_field(getattr(self, f.name)) for f in fields(self))


@dataclass(frozen=True)
class DllEnable(Command):
    prefix: ClassVar[str] = "$DLES"

    def _fields(self) -> tuple[str, ...]:
        return ("1",)


@dataclass(frozen=True)
class DllDisable(Command):
    prefix: ClassVar[str] = "$DLES"

    def _fields(self) -> tuple[str, ...]:
        return ("0",)


# ---------------------------------------------------------------------------
# RF output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RfEnable(Command):
    prefix: ClassVar[str] = "$ECS"

    def _fields(self) -> tuple[str, ...]:
        return ("1",)


@dataclass(frozen=True)
class RfDisable(Command):
    prefix: ClassVar[str] = "$ECS"

    def _fields(self) -> tuple[str, ...]:
        return ("0",)


# ---------------------------------------------------------------------------
# Sweep
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SweepDbm(Command):
    """Run a frequency sweep at a fixed power (dBm).

    The board answers with one ``$SWPD`` line per frequency step followed
    by an ``OK`` line.
    """

    prefix: ClassVar[str] = "$SWPD"
    response_terminator: ClassVar[str] = OK_TERMINATOR

    start: float
    stop: float
    step: float
    dwell: float

    def _fields(self) -> tuple[str, ...]:
        values = (self.start, self.stop, self.step, self.dwell)
        return (*(format_field(v) for v in values), "0")


def encode(command: Command) -> str:
    """Encode a command to its wire string (without terminator).

    Args:
        command: Any :class:`Command` instance.

    Returns:
        The ASCII command line, e.g. ``"$FCS,0,50.00"``.
    """
    return command.encode()


# CLI name -> command class
COMMAND_TYPES: dict[str, type[Command]] = {
    "get-identity": GetIdentity,
    "get-version": GetVersion,
    "get-status": GetStatus,
    "clear-errors": ClearErrors,
    "get-frequency": GetFrequency,
    "set-frequency": SetFrequency,
    "get-pa-power": GetPaPower,
    "get-power": GetPowerSetpoint,
    "set-power": SetPower,
    "configure-dll": ConfigureDll,
    "dll-enable": DllEnable,
    "dll-disable": DllDisable,
    "rf-enable": RfEnable,
    "rf-disable": RfDisable,
    "sweep-dbm": SweepDbm,
}


def build_command(name: str, *values: str) -> Command:
    """Build a command from its CLI name and string arguments.

    ``get-status`` accepts an optional ``verbose`` token (``1``, ``true``,
    ``yes``, ``verbose``). All other parameterized commands take one float
    per field.

    Args:
        name: A key of :data:`COMMAND_TYPES` (e.g. ``"set-frequency"``).
        *values: Parameter tokens.

    Returns:
        The constructed command.

    Raises:
        ValueError: If the name is unknown, the argument count is wrong, or a
            value is not a number.
    """
    cls = COMMAND_TYPES.get(name)
    if cls is None:
        raise ValueError(f"Unknown command '{name}'. Valid: {sorted(COMMAND_TYPES)}")

    if cls is GetStatus:
        if len(values) > 1:
            raise ValueError("get-status takes at most 1 argument")
        verbose = bool(values) and values[0].lower() in ("1", "true", "yes", "verbose")
        return GetStatus(verbose=verbose)

    names = [f.name for f in fields(cls)]
    if len(values) != len(names):
        raise ValueError(f"{name} takes {len(names)} argument(s), got {len(values)}")
    try:
        numbers = [float(v) for v in values]
    except ValueError as exc:
        raise ValueError(f"{name}: arguments must be numbers, got {list(values)}") from exc
    return cls(*numbers)
