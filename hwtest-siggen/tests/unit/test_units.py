"""Tests for dBm/watt conversions."""

from __future__ import annotations

import pytest

from hwtest_siggen.units import dbm_to_watt, watt_to_dbm


class TestDbmToWatt:
    """Tests for dbm_to_watt."""

    @pytest.mark.parametrize(
        ("dbm", "watt"),
        [(0, 0.001), (30, 1.0), (40, 10.0), (50, 100.0), (-30, 1e-6)],
    )
    def test_known_values(self, dbm: float, watt: float) -> None:
        assert dbm_to_watt(dbm) == pytest.approx(watt)


class TestWattToDbm:
    """Tests for watt_to_dbm."""

    @pytest.mark.parametrize(
        ("watt", "dbm"),
        [(0.001, 0.0), (1.0, 30.0), (10.0, 40.0), (250.0, 53.979)],
    )
    def test_known_values(self, watt: float, dbm: float) -> None:
        assert watt_to_dbm(watt) == pytest.approx(dbm, abs=1e-3)

    @pytest.mark.parametrize("watt", [0, -1.0])
    def test_non_positive(self, watt: float) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            watt_to_dbm(watt)

    def test_inverse(self) -> None:
        assert dbm_to_watt(watt_to_dbm(42.0)) == pytest.approx(42.0)
