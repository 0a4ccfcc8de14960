"""Equivalent-circuit physics for the Volta Lab simulation engine.

Every function here is pure: the same source state, elapsed ticks and load
give the same reading.  The source is modelled as an ideal EMF in series
with an internal resistance:

    current = emf / (load_resistance + internal_resistance)
    power   = emf * current

The EMF itself is empirical, not electrochemical:

    voltaic  emf = layers * 0.76 * exp(-ticks / 200)     (polarization)
    lithium  emf = 3.2 + 0.5 * soc + (0.3 if soc > 0.9)  (plateau + knee)
                   scaled by soc * 10 when soc < 0.1      (empty taper)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from volta_lab.core.source import LithiumState, SourceState, VoltaicState

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VOLTS_PER_LAYER: float = 0.76  # Zn/Cu couple
OHMS_PER_LAYER: float = 0.5
POLARIZATION_TICKS: float = 200.0

LITHIUM_INTERNAL_RESISTANCE: float = 0.1
LITHIUM_BASE_VOLTAGE: float = 3.2
LITHIUM_SOC_SLOPE: float = 0.5
LITHIUM_KNEE_SOC: float = 0.9
LITHIUM_KNEE_BOOST: float = 0.3
LITHIUM_TAPER_SOC: float = 0.1

DISCHARGE_SCALE: float = 0.05  # charge points drained per amp per tick

MIN_LOAD_RESISTANCE: float = 1.0
MAX_LOAD_RESISTANCE: float = 100.0


@dataclass(frozen=True)
class CircuitReading:
    """Instantaneous electrical state of the circuit.

    Attributes:
        voltage: Source voltage in volts.
        current: Loop current in amps.
        power: Delivered power in watts (voltage * current).
        internal_resistance: Source internal resistance in ohms.
    """

    voltage: float = 0.0
    current: float = 0.0
    power: float = 0.0
    internal_resistance: float = 0.0


ZERO_READING = CircuitReading()


def clamp_resistance(ohms: float) -> float:
    """Clamp a load resistance to [MIN_LOAD_RESISTANCE, MAX_LOAD_RESISTANCE]."""
    return max(MIN_LOAD_RESISTANCE, min(MAX_LOAD_RESISTANCE, float(ohms)))


def internal_resistance(source: SourceState) -> float:
    """Return the internal resistance of *source* in ohms."""
    if isinstance(source, VoltaicState):
        return source.layer_count * OHMS_PER_LAYER
    if isinstance(source, LithiumState):
        return LITHIUM_INTERNAL_RESISTANCE
    raise TypeError(f"Unknown source state: {type(source).__name__}")


def lithium_voltage(soc: float) -> float:
    """Lithium open-circuit voltage for a fractional state of charge.

    The taper applies strictly below ``LITHIUM_TAPER_SOC``; the breakpoint
    stays at exactly soc = 0.1 and the curve has a kink there.
    """
    v: float = LITHIUM_BASE_VOLTAGE + LITHIUM_SOC_SLOPE * soc
    if soc > LITHIUM_KNEE_SOC:
        v += LITHIUM_KNEE_BOOST
    if soc < LITHIUM_TAPER_SOC:
        v *= soc * 10.0
    return v


def open_circuit_voltage(source: SourceState) -> float:
    """Voltage reported with no load attached (no polarization)."""
    if isinstance(source, VoltaicState):
        return source.layer_count * VOLTS_PER_LAYER
    if isinstance(source, LithiumState):
        if source.is_empty:
            return 0.0
        return lithium_voltage(source.soc)
    raise TypeError(f"Unknown source state: {type(source).__name__}")


def loaded_voltage(source: SourceState, elapsed_ticks: int) -> float:
    """Source EMF after *elapsed_ticks* under load."""
    if isinstance(source, VoltaicState):
        decay: float = math.exp(-elapsed_ticks / POLARIZATION_TICKS)
        return open_circuit_voltage(source) * decay
    if isinstance(source, LithiumState):
        # Lithium EMF depends only on the charge left, not on time under load.
        return open_circuit_voltage(source)
    raise TypeError(f"Unknown source state: {type(source).__name__}")


def compute_reading(
    source: SourceState,
    elapsed_ticks: int,
    load_resistance: float,
    under_load: bool = True,
) -> CircuitReading:
    """Compute the circuit reading for a source and load.

    Args:
        source: Voltaic or lithium source state.
        elapsed_ticks: Ticks spent under load (>= 0).  Only the voltaic
            polarization term reads it.
        load_resistance: External load in ohms (>= 1).
        under_load: ``False`` reports open-circuit values with zero current
            and power.

    Returns:
        A :class:`CircuitReading`.

    Raises:
        ValueError: If elapsed_ticks < 0 or load_resistance < 1.
        TypeError: If *source* is not a known source variant.
    """
    if elapsed_ticks < 0:
        raise ValueError("elapsed_ticks must be >= 0.")
    if load_resistance < MIN_LOAD_RESISTANCE:
        raise ValueError(f"load_resistance must be >= {MIN_LOAD_RESISTANCE}.")

    r_int: float = internal_resistance(source)

    if not under_load:
        return CircuitReading(
            voltage=open_circuit_voltage(source),
            current=0.0,
            power=0.0,
            internal_resistance=r_int,
        )

    v: float = loaded_voltage(source, elapsed_ticks)
    total_resistance: float = load_resistance + r_int
    i: float = v / total_resistance
    return CircuitReading(voltage=v, current=i, power=v * i, internal_resistance=r_int)


def discharge_rate(reading: CircuitReading) -> float:
    """Charge points a lithium cell loses for one tick at *reading*.

    Higher load current drains the cell faster.
    """
    return reading.current * DISCHARGE_SCALE
