"""Tests for the equivalent-circuit physics model."""

import math

import pytest

from volta_lab.core.circuit import (
    LITHIUM_INTERNAL_RESISTANCE,
    CircuitReading,
    clamp_resistance,
    compute_reading,
    discharge_rate,
    internal_resistance,
    lithium_voltage,
    open_circuit_voltage,
)
from volta_lab.core.source import LithiumState, VoltaicState

# ---------------------------------------------------------------------------
# Voltaic pile
# ---------------------------------------------------------------------------


def test_voltaic_idle_voltage_is_layers_times_076() -> None:
    """Idle open-circuit voltage must equal layer_count * 0.76 for every stack."""
    for layers in range(1, 21):
        reading = compute_reading(VoltaicState(layer_count=layers), 0, 10.0, under_load=False)
        assert reading.voltage == layers * 0.76
        assert reading.current == 0.0
        assert reading.power == 0.0


def test_voltaic_internal_resistance_scales_with_layers() -> None:
    """Each zinc-copper pair adds 0.5 ohm."""
    assert internal_resistance(VoltaicState(layer_count=1)) == 0.5
    assert internal_resistance(VoltaicState(layer_count=12)) == 6.0


def test_voltaic_loaded_never_exceeds_idle() -> None:
    """Polarization can only pull the loaded voltage below open circuit."""
    for layers in (1, 5, 20):
        pile = VoltaicState(layer_count=layers)
        idle = compute_reading(pile, 0, 10.0, under_load=False).voltage
        previous = idle
        for t in range(0, 1000, 7):
            v = compute_reading(pile, t, 10.0).voltage
            assert v <= idle
            assert v <= previous
            previous = v


def test_voltaic_decay_constant() -> None:
    """After 200 ticks the voltage has fallen to 1/e of its start."""
    pile = VoltaicState(layer_count=5)
    v0 = compute_reading(pile, 0, 10.0).voltage
    v200 = compute_reading(pile, 200, 10.0).voltage
    assert v200 == pytest.approx(v0 / math.e)


def test_default_first_tick_example() -> None:
    """5 layers into 10 ohm at t=0: 3.8 V, 2.5 ohm, 0.304 A, ~1.155 W."""
    reading = compute_reading(VoltaicState(layer_count=5), 0, 10.0)
    assert reading.internal_resistance == pytest.approx(2.5)
    assert reading.voltage == pytest.approx(3.8)
    assert reading.current == pytest.approx(0.304)
    assert reading.power == pytest.approx(1.1552)


def test_power_is_voltage_times_current() -> None:
    """Power must be V * I under load."""
    reading = compute_reading(VoltaicState(layer_count=9), 37, 42.0)
    assert reading.power == pytest.approx(reading.voltage * reading.current)


# ---------------------------------------------------------------------------
# Lithium cell
# ---------------------------------------------------------------------------


def test_lithium_full_cell_reads_four_volts() -> None:
    """soc = 1.0 sits above the knee: 3.2 + 0.5 + 0.3 = 4.0 V."""
    reading = compute_reading(LithiumState(charge_level=100.0), 0, 10.0, under_load=False)
    assert reading.voltage == pytest.approx(4.0)
    assert reading.current == 0.0
    assert reading.power == 0.0


def test_lithium_half_cell_reads_plateau() -> None:
    """soc = 0.5 sits on the plateau: 3.45 V."""
    cell = LithiumState(charge_level=50.0)
    assert open_circuit_voltage(cell) == pytest.approx(3.45)


def test_lithium_knee_only_above_ninety_percent() -> None:
    """The 0.3 V boost applies strictly above soc 0.9."""
    assert lithium_voltage(0.9) == pytest.approx(3.65)
    assert lithium_voltage(0.91) == pytest.approx(3.2 + 0.455 + 0.3)


def test_lithium_low_charge_taper() -> None:
    """Below soc 0.1 the voltage is scaled by soc * 10."""
    assert lithium_voltage(0.05) == pytest.approx((3.2 + 0.025) * 0.5)


def test_lithium_taper_breakpoint_at_ten_percent() -> None:
    """The taper applies strictly below soc 0.1, not at it."""
    assert lithium_voltage(0.1) == pytest.approx(3.25)
    assert lithium_voltage(0.099) == pytest.approx((3.2 + 0.0495) * 0.99)


def test_lithium_empty_reads_zero() -> None:
    """An empty cell delivers nothing."""
    reading = compute_reading(LithiumState(charge_level=0.0), 0, 10.0)
    assert reading.voltage == 0.0
    assert reading.current == 0.0
    assert reading.power == 0.0


def test_lithium_loaded_current_uses_low_internal_resistance() -> None:
    """I = V / (R_load + 0.1) and the EMF does not depend on elapsed ticks."""
    cell = LithiumState(charge_level=100.0)
    early = compute_reading(cell, 0, 10.0)
    late = compute_reading(cell, 5000, 10.0)
    assert early.internal_resistance == LITHIUM_INTERNAL_RESISTANCE
    assert early.current == pytest.approx(4.0 / 10.1)
    assert late == early


def test_discharge_rate_tracks_current() -> None:
    """Higher load current drains the cell faster."""
    cell = LithiumState(charge_level=80.0)
    heavy = compute_reading(cell, 0, 1.0)
    light = compute_reading(cell, 0, 100.0)
    assert discharge_rate(heavy) == pytest.approx(heavy.current * 0.05)
    assert discharge_rate(heavy) > discharge_rate(light)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_rejects_negative_ticks() -> None:
    """elapsed_ticks must be >= 0."""
    with pytest.raises(ValueError, match="elapsed_ticks"):
        compute_reading(VoltaicState(), -1, 10.0)


def test_rejects_load_below_one_ohm() -> None:
    """A load under 1 ohm is outside the model's domain."""
    with pytest.raises(ValueError, match="load_resistance"):
        compute_reading(VoltaicState(), 0, 0.5)


def test_unknown_source_variant_raises() -> None:
    """Dispatch must be exhaustive over the known variants."""
    with pytest.raises(TypeError, match="Unknown source state"):
        compute_reading(object(), 0, 10.0)  # type: ignore[arg-type]


def test_clamp_resistance() -> None:
    """Out-of-range loads clamp to [1, 100]."""
    assert clamp_resistance(0) == 1.0
    assert clamp_resistance(-20) == 1.0
    assert clamp_resistance(250) == 100.0
    assert clamp_resistance(33.3) == 33.3


def test_reading_is_immutable() -> None:
    """CircuitReading is a frozen value object."""
    reading = CircuitReading(voltage=1.0)
    with pytest.raises(AttributeError):
        reading.voltage = 2.0  # type: ignore[misc]
