"""ISC signal generator control for hwtest instrument automation.

This package drives an ISC signal generator board over a USB serial link
using its line-oriented ASCII protocol. It includes:

- A typed command model with deterministic encoding to the wire format
- A request/response exchange engine with terminator framing and deadlines
- pyserial-backed transport and vendor/product ID based discovery
- A high-level driver, an in-process emulator, and a command-line tool

Typical usage::

    from hwtest_siggen import open_signal_generator

    with open_signal_generator() as sg:
        sg.set_frequency(2450)
        print(sg.get_frequency())

Low-level usage::

    from hwtest_siggen import SetFrequency, connect, encode, exchange

    port = connect()
    try:
        response = exchange(port, encode(SetFrequency(2450)), 0.5)
    finally:
        port.close()
"""

from hwtest_siggen.commands import (
    COMMAND_TYPES,
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
    build_command,
    encode,
    format_field,
)
from hwtest_siggen.config import SerialConfig, SiggenConfig, config_from_dict, load_config
from hwtest_siggen.discovery import (
    Endpoint,
    connect,
    find_signal_generators,
    list_endpoints,
    open_signal_generator,
)
from hwtest_siggen.emulator import SiggenEmulator, SiggenEmulatorConfig
from hwtest_siggen.errors import (
    DiscoveryError,
    ExchangeError,
    ExchangeTimeoutError,
    FlushFailedError,
    NoDeviceFoundError,
    OpenFailedError,
    ReadFailedError,
    SiggenError,
    WriteFailedError,
)
from hwtest_siggen.exchange import exchange
from hwtest_siggen.generator import SignalGenerator
from hwtest_siggen.transport import SerialResource, SerialTransport
from hwtest_siggen.units import dbm_to_watt, watt_to_dbm

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Commands
    "COMMAND_TYPES",
    "ClearErrors",
    "Command",
    "ConfigureDll",
    "DllDisable",
    "DllEnable",
    "GetFrequency",
    "GetIdentity",
    "GetPaPower",
    "GetPowerSetpoint",
    "GetStatus",
    "GetVersion",
    "RfDisable",
    "RfEnable",
    "SetFrequency",
    "SetPower",
    "SweepDbm",
    "build_command",
    "encode",
    "format_field",
    # Configuration
    "SerialConfig",
    "SiggenConfig",
    "config_from_dict",
    "load_config",
    # Discovery
    "Endpoint",
    "connect",
    "find_signal_generators",
    "list_endpoints",
    "open_signal_generator",
    # Emulator
    "SiggenEmulator",
    "SiggenEmulatorConfig",
    # Errors
    "DiscoveryError",
    "ExchangeError",
    "ExchangeTimeoutError",
    "FlushFailedError",
    "NoDeviceFoundError",
    "OpenFailedError",
    "ReadFailedError",
    "SiggenError",
    "WriteFailedError",
    # Exchange
    "exchange",
    # Driver
    "SignalGenerator",
    # Transport
    "SerialResource",
    "SerialTransport",
    # Units
    "dbm_to_watt",
    "watt_to_dbm",
]
