"""Power unit conversions between dBm and watt."""

from __future__ import annotations

import math


def dbm_to_watt(dbm: float) -> float:
    """Convert a power level in dBm to watt (``0 dBm`` = 1 mW)."""
    return 0.001 * math.pow(10, 0.1 * dbm)


def watt_to_dbm(watt: float) -> float:
    """Convert a power in watt to dBm.

    Raises:
        ValueError: If ``watt`` is not positive.
    """
    if watt <= 0:
        raise ValueError(f"Power must be positive, got {watt} W")
    return 10 * math.log10(watt) + 30
