"""Tests for serial port discovery and connection."""

from __future__ import annotations

import logging
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from hwtest_siggen.config import SerialConfig, SiggenConfig
from hwtest_siggen.discovery import (
    Endpoint,
    connect,
    find_signal_generators,
    list_endpoints,
    open_signal_generator,
)
from hwtest_siggen.errors import DiscoveryError, NoDeviceFoundError, OpenFailedError
from hwtest_siggen.generator import SignalGenerator
from hwtest_siggen.transport import SerialResource


def _port_info(
    device: str,
    vid: int | None = None,
    pid: int | None = None,
    description: str = "n/a",
    serial_number: str | None = None,
) -> SimpleNamespace:
    """Mimic a pyserial ``ListPortInfo``."""
    return SimpleNamespace(
        device=device, vid=vid, pid=pid, description=description, serial_number=serial_number
    )


def _mock_pyserial(ports: list[SimpleNamespace]) -> dict[str, MagicMock]:
    """Build sys.modules entries for ``serial`` and ``serial.tools``."""
    mock_serial = MagicMock()
    mock_port = MagicMock()
    mock_port.write.side_effect = len
    mock_serial.Serial.return_value = mock_port
    mock_tools = MagicMock()
    mock_tools.list_ports.comports.return_value = ports
    mock_serial.tools = mock_tools
    return {"serial": mock_serial, "serial.tools": mock_tools}


BOARD = _port_info("/dev/ttyUSB1", 8137, 131, "ISC signal generator", "SG0001")
OTHER_USB = _port_info("/dev/ttyUSB0", 0x0403, 0x6001, "FT232R USB UART")
LEGACY = _port_info("/dev/ttyS0")


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


class TestEndpoint:
    """Tests for the Endpoint value."""

    def test_matches(self) -> None:
        endpoint = Endpoint("/dev/ttyUSB1", 8137, 131)
        assert endpoint.matches(8137, 131) is True
        assert endpoint.matches(8137, 132) is False

    def test_non_usb_never_matches(self) -> None:
        assert Endpoint("/dev/ttyS0").matches(8137, 131) is False

    def test_str_usb(self) -> None:
        endpoint = Endpoint("/dev/ttyUSB1", 8137, 131, "ISC signal generator")
        assert str(endpoint) == "/dev/ttyUSB1 [1FC9:0083] ISC signal generator"

    def test_str_non_usb(self) -> None:
        assert str(Endpoint("/dev/ttyS0")) == "/dev/ttyS0 (n/a)"
        assert str(Endpoint("COM1", description="Communications Port")) == (
            "COM1 (Communications Port)"
        )


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------


class TestListEndpoints:
    """Tests for list_endpoints."""

    def test_maps_and_sorts(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([BOARD, LEGACY, OTHER_USB])):
            endpoints = list_endpoints()

        assert [e.device for e in endpoints] == ["/dev/ttyS0", "/dev/ttyUSB0", "/dev/ttyUSB1"]
        board = endpoints[2]
        assert board == Endpoint(
            "/dev/ttyUSB1", 8137, 131, "ISC signal generator", "SG0001"
        )

    def test_no_ports(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([])):
            assert list_endpoints() == []

    def test_missing_description(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([_port_info("COM4", description=None)])):  # type: ignore[arg-type]
            assert list_endpoints()[0].description == ""

    def test_enumeration_failure(self) -> None:
        modules = _mock_pyserial([])
        modules["serial.tools"].list_ports.comports.side_effect = OSError("no sysfs")
        with patch.dict(sys.modules, modules):
            with pytest.raises(DiscoveryError, match="no sysfs"):
                list_endpoints()

    def test_pyserial_missing(self) -> None:
        with patch.dict(sys.modules, {"serial": None, "serial.tools": None}):
            with pytest.raises(DiscoveryError, match="pyserial"):
                list_endpoints()


class TestFindSignalGenerators:
    """Tests for find_signal_generators."""

    def test_filters_by_ids(self) -> None:
        endpoints = [Endpoint("/dev/ttyUSB0", 0x0403, 0x6001), Endpoint("/dev/ttyUSB1", 8137, 131)]
        matches = find_signal_generators(SiggenConfig(), endpoints)
        assert [e.device for e in matches] == ["/dev/ttyUSB1"]

    def test_custom_ids(self) -> None:
        endpoints = [Endpoint("/dev/ttyUSB0", 0x0403, 0x6001), Endpoint("/dev/ttyUSB1", 8137, 131)]
        config = SiggenConfig(vendor_id=0x0403, product_id=0x6001)
        assert [e.device for e in find_signal_generators(config, endpoints)] == ["/dev/ttyUSB0"]

    def test_enumerates_when_no_endpoints_given(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([OTHER_USB, BOARD])):
            matches = find_signal_generators()
        assert [e.device for e in matches] == ["/dev/ttyUSB1"]

    def test_multiple_boards_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        endpoints = [Endpoint("/dev/ttyUSB1", 8137, 131), Endpoint("/dev/ttyUSB2", 8137, 131)]
        with caplog.at_level(logging.WARNING, logger="hwtest_siggen.discovery"):
            matches = find_signal_generators(SiggenConfig(), endpoints)
        assert len(matches) == 2
        assert "Multiple signal generator boards found" in caplog.text
        assert "/dev/ttyUSB2" in caplog.text


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


class TestConnect:
    """Tests for connect and open_signal_generator."""

    def test_connects_first_match(self) -> None:
        second = _port_info("/dev/ttyUSB2", 8137, 131)
        modules = _mock_pyserial([second, OTHER_USB, BOARD])
        with patch.dict(sys.modules, modules):
            resource = connect()

        assert isinstance(resource, SerialResource)
        assert resource.device == "/dev/ttyUSB1"
        assert resource.is_open is True
        assert modules["serial"].Serial.call_args.kwargs["port"] == "/dev/ttyUSB1"

    def test_uses_serial_settings(self) -> None:
        modules = _mock_pyserial([BOARD])
        config = SiggenConfig(serial=SerialConfig(baudrate=9600, read_timeout=0.2))
        with patch.dict(sys.modules, modules):
            resource = connect(config)

        kwargs = modules["serial"].Serial.call_args.kwargs
        assert kwargs["baudrate"] == 9600
        assert kwargs["timeout"] == 0.2
        assert resource.config is config.serial

    def test_no_device(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([OTHER_USB, LEGACY])):
            with pytest.raises(NoDeviceFoundError, match="No signal generator board detected"):
                connect()

    def test_explicit_port_skips_enumeration(self) -> None:
        modules = _mock_pyserial([])
        with patch.dict(sys.modules, modules):
            resource = connect(port="/dev/ttyACM7")

        assert resource.device == "/dev/ttyACM7"
        modules["serial.tools"].list_ports.comports.assert_not_called()

    def test_configured_port(self) -> None:
        modules = _mock_pyserial([BOARD])
        with patch.dict(sys.modules, modules):
            resource = connect(SiggenConfig(port="COM5"))
        assert resource.device == "COM5"

    def test_argument_overrides_configured_port(self) -> None:
        with patch.dict(sys.modules, _mock_pyserial([])):
            resource = connect(SiggenConfig(port="COM5"), port="COM6")
        assert resource.device == "COM6"

    def test_open_failure(self) -> None:
        modules = _mock_pyserial([BOARD])
        modules["serial"].Serial.side_effect = OSError("Permission denied")
        with patch.dict(sys.modules, modules):
            with pytest.raises(OpenFailedError, match="Permission denied") as exc_info:
                connect()
        assert exc_info.value.device == "/dev/ttyUSB1"

    def test_open_signal_generator(self) -> None:
        modules = _mock_pyserial([BOARD])
        with patch.dict(sys.modules, modules):
            sg = open_signal_generator()

        assert isinstance(sg, SignalGenerator)
        assert sg.name == "/dev/ttyUSB1"
        assert sg.is_open is True
        sg.close()
        modules["serial"].Serial.return_value.close.assert_called_once()
