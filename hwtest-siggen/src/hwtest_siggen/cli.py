"""Command-line interface for hwtest-siggen.

Usage:
    # Auto-detect the board and run the default command sequence
    hwtest-siggen

    # Same, against the in-process emulator
    hwtest-siggen --emulate run --hold 0

    # List serial ports, marking signal generator boards
    hwtest-siggen ports

    # Send a single command
    hwtest-siggen send set-frequency 2450
    hwtest-siggen --port /dev/ttyUSB0 send get-status verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from hwtest_siggen.commands import COMMAND_TYPES, GetFrequency, SetFrequency, SetPower, build_command
from hwtest_siggen.config import SiggenConfig, load_config
from hwtest_siggen.discovery import find_signal_generators, list_endpoints, open_signal_generator
from hwtest_siggen.emulator import SiggenEmulator
from hwtest_siggen.errors import ExchangeError, SiggenError
from hwtest_siggen.generator import SignalGenerator
from hwtest_siggen.units import dbm_to_watt

# Default sequence run when no command is given
DEFAULT_SEQUENCE = (SetFrequency(50.0), GetFrequency())
DEFAULT_HOLD = 20.0


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _open(args: argparse.Namespace, config: SiggenConfig) -> SignalGenerator | None:
    """Open the session selected by the global options, or report why not."""
    if args.emulate:
        return SignalGenerator(SiggenEmulator(), config, name="emulator")
    try:
        return open_signal_generator(config, port=args.port)
    except SiggenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print("Exiting program: No valid connection.", file=sys.stderr)
        return None


def cmd_run(args: argparse.Namespace, config: SiggenConfig) -> int:
    """Run the default command sequence, hold, then disconnect."""
    sg = _open(args, config)
    if sg is None:
        return 1

    try:
        for command in DEFAULT_SEQUENCE:
            try:
                print(f"Response: {sg.query(command)}")
            except ExchangeError as exc:
                print(f"Error: {exc}", file=sys.stderr)
        if args.hold > 0:
            time.sleep(args.hold)
    finally:
        sg.close()
    return 0


def cmd_ports(args: argparse.Namespace, config: SiggenConfig) -> int:
    """List serial endpoints and mark signal generator boards."""
    endpoints = list_endpoints()
    matches = {e.device for e in find_signal_generators(config, endpoints)}

    if not endpoints:
        print("No serial ports found.")
        return 0

    for endpoint in endpoints:
        marker = "*" if endpoint.device in matches else " "
        print(f"{marker} {endpoint}")

    print()
    print(f"Found {len(matches)} signal generator board(s).")
    return 0


def cmd_send(args: argparse.Namespace, config: SiggenConfig) -> int:
    """Send a single command and print the response."""
    try:
        command = build_command(args.name, *args.values)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if isinstance(command, SetPower):
        print(f"Power setpoint: {command.power:.2f} dBm ({dbm_to_watt(command.power):.4g} W)")

    sg = _open(args, config)
    if sg is None:
        return 1

    try:
        print(sg.query(command))
    except ExchangeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        sg.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hwtest-siggen",
        description="Control an ISC signal generator board over USB serial",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", "-c", help="YAML configuration file")
    parser.add_argument("--port", "-p", help="Serial device to use instead of auto-detection")
    parser.add_argument(
        "--emulate", action="store_true",
        help="Talk to the in-process emulator instead of hardware"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run (default: run)")

    run_parser = subparsers.add_parser("run", help="Run the default command sequence")
    run_parser.add_argument(
        "--hold", type=float, default=DEFAULT_HOLD,
        help=f"Seconds to hold the connection before disconnecting (default: {DEFAULT_HOLD:g})"
    )

    subparsers.add_parser("ports", help="List serial ports")

    send_parser = subparsers.add_parser("send", help="Send a single command")
    send_parser.add_argument("name", choices=sorted(COMMAND_TYPES), help="Command name")
    send_parser.add_argument("values", nargs="*", help="Command parameters")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "run"
        args.hold = DEFAULT_HOLD

    setup_logging(args.debug)

    try:
        config = load_config(args.config) if args.config else SiggenConfig()
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        if args.command == "run":
            return cmd_run(args, config)
        if args.command == "ports":
            return cmd_ports(args, config)
        if args.command == "send":
            return cmd_send(args, config)
    except SiggenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
