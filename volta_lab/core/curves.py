"""Vectorised reference curves of the circuit model for charting.

These sweep the same formulas as :mod:`volta_lab.core.circuit` over a grid
so the dashboard can draw what a source *would* do next to what the live
run is doing.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from volta_lab.core.circuit import (
    LITHIUM_BASE_VOLTAGE,
    LITHIUM_INTERNAL_RESISTANCE,
    LITHIUM_KNEE_BOOST,
    LITHIUM_KNEE_SOC,
    LITHIUM_SOC_SLOPE,
    LITHIUM_TAPER_SOC,
    OHMS_PER_LAYER,
    POLARIZATION_TICKS,
    VOLTS_PER_LAYER,
)


def lithium_ocv_curve(points: int = 101) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Open-circuit voltage of the lithium cell across state of charge.

    Args:
        points: Grid size over charge level 0-100 % (>= 2).

    Returns:
        ``(charge_level, voltage)`` arrays.

    Raises:
        ValueError: If points < 2.
    """
    if points < 2:
        raise ValueError("points must be >= 2.")
    charge = np.linspace(0.0, 100.0, points)
    soc = charge / 100.0
    v = LITHIUM_BASE_VOLTAGE + LITHIUM_SOC_SLOPE * soc
    v = v + np.where(soc > LITHIUM_KNEE_SOC, LITHIUM_KNEE_BOOST, 0.0)
    v = np.where(soc < LITHIUM_TAPER_SOC, v * soc * 10.0, v)
    return charge, v


def voltaic_decay_curve(
    layer_count: int,
    ticks: int,
    load_resistance: float,
) -> tuple[NDArray[np.int64], NDArray[np.float64], NDArray[np.float64]]:
    """Voltage and current of a loaded voltaic pile over *ticks* ticks.

    Args:
        layer_count: Number of zinc-copper pairs (>= 1).
        ticks: Number of ticks to sweep (>= 1).
        load_resistance: External load in ohms (>= 1).

    Returns:
        ``(tick, voltage, current)`` arrays.

    Raises:
        ValueError: If any argument is out of range.
    """
    if layer_count < 1:
        raise ValueError("layer_count must be >= 1.")
    if ticks < 1:
        raise ValueError("ticks must be >= 1.")
    if load_resistance < 1.0:
        raise ValueError("load_resistance must be >= 1.")
    t = np.arange(ticks, dtype=np.int64)
    v = layer_count * VOLTS_PER_LAYER * np.exp(-t / POLARIZATION_TICKS)
    i = v / (load_resistance + layer_count * OHMS_PER_LAYER)
    return t, v, i


def lithium_load_current(
    voltage: NDArray[np.float64],
    load_resistance: float,
) -> NDArray[np.float64]:
    """Current a lithium cell at each voltage drives through *load_resistance*."""
    return voltage / (load_resistance + LITHIUM_INTERNAL_RESISTANCE)
