"""Fixtures for tests against a connected signal generator board.

Environment variables:
    SIGGEN_PORT: Serial device of the board (e.g. /dev/ttyUSB0), or "auto"
        to detect it by USB vendor/product ID. Tests are skipped when unset.
    SIGGEN_CONFIG: Optional YAML configuration file.
"""

from __future__ import annotations

import os
from typing import Generator

import pytest

from hwtest_siggen.config import SiggenConfig, load_config
from hwtest_siggen.discovery import open_signal_generator
from hwtest_siggen.generator import SignalGenerator


@pytest.fixture
def siggen_config() -> SiggenConfig:
    """Load the connection configuration from ``SIGGEN_CONFIG`` if set."""
    path = os.environ.get("SIGGEN_CONFIG")
    return load_config(path) if path else SiggenConfig()


@pytest.fixture
def siggen(siggen_config: SiggenConfig) -> Generator[SignalGenerator, None, None]:
    """Provide a connected signal generator, closed after the test.

    Yields:
        Connected driver.
    """
    port = os.environ.get("SIGGEN_PORT")
    if not port:
        pytest.skip("SIGGEN_PORT not set")

    sg = open_signal_generator(siggen_config, port=None if port == "auto" else port)
    try:
        yield sg
    finally:
        try:
            sg.disable_rf()
        finally:
            sg.close()
