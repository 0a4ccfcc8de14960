"""Tests for the vectorised reference curves."""

import numpy as np
import pytest

from volta_lab.core.circuit import compute_reading, lithium_voltage
from volta_lab.core.curves import lithium_load_current, lithium_ocv_curve, voltaic_decay_curve
from volta_lab.core.source import VoltaicState


def test_lithium_curve_matches_scalar_model() -> None:
    """Every grid point must equal the scalar lithium formula."""
    charge, v = lithium_ocv_curve(points=201)
    assert charge[0] == 0.0
    assert charge[-1] == 100.0
    expected = np.array([lithium_voltage(c / 100.0) for c in charge])
    np.testing.assert_allclose(v, expected)


def test_lithium_curve_endpoints() -> None:
    """Empty reads 0 V and full reads 4.0 V."""
    _, v = lithium_ocv_curve()
    assert v[0] == 0.0
    assert v[-1] == pytest.approx(4.0)


def test_lithium_curve_needs_two_points() -> None:
    """A one-point grid is not a curve."""
    with pytest.raises(ValueError, match="points"):
        lithium_ocv_curve(points=1)


def test_voltaic_curve_matches_scalar_model() -> None:
    """Sweep values equal compute_reading at the same ticks."""
    t, v, i = voltaic_decay_curve(layer_count=7, ticks=300, load_resistance=25.0)
    pile = VoltaicState(layer_count=7)
    for tick in (0, 1, 150, 299):
        reading = compute_reading(pile, tick, 25.0)
        assert v[tick] == pytest.approx(reading.voltage)
        assert i[tick] == pytest.approx(reading.current)
    assert len(t) == 300


def test_voltaic_curve_validation() -> None:
    """Out-of-range sweep arguments raise."""
    with pytest.raises(ValueError, match="layer_count"):
        voltaic_decay_curve(0, 10, 10.0)
    with pytest.raises(ValueError, match="ticks"):
        voltaic_decay_curve(5, 0, 10.0)
    with pytest.raises(ValueError, match="load_resistance"):
        voltaic_decay_curve(5, 10, 0.5)


def test_lithium_load_current() -> None:
    """Current follows I = V / (R + 0.1)."""
    _, v = lithium_ocv_curve(points=11)
    i = lithium_load_current(v, 9.9)
    np.testing.assert_allclose(i, v / 10.0)
