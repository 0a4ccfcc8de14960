"""Core simulation modules for the Volta Lab engine."""

from volta_lab.core.circuit import (
    ZERO_READING,
    CircuitReading,
    clamp_resistance,
    compute_reading,
    discharge_rate,
    internal_resistance,
    lithium_voltage,
    open_circuit_voltage,
)
from volta_lab.core.clock import PeriodicTask, SimulationClock, VirtualClock, WallClock
from volta_lab.core.controller import RunPhase, SimulationController, SimulationSnapshot
from volta_lab.core.curves import (
    lithium_load_current,
    lithium_ocv_curve,
    voltaic_decay_curve,
)
from volta_lab.core.history import HistoryBuffer, HistorySample
from volta_lab.core.settings import SimulationSettings
from volta_lab.core.source import LithiumState, Mode, SourceState, VoltaicState

__all__ = [
    "CircuitReading",
    "HistoryBuffer",
    "HistorySample",
    "LithiumState",
    "Mode",
    "PeriodicTask",
    "RunPhase",
    "SimulationClock",
    "SimulationController",
    "SimulationSettings",
    "SimulationSnapshot",
    "SourceState",
    "VirtualClock",
    "VoltaicState",
    "WallClock",
    "ZERO_READING",
    "clamp_resistance",
    "compute_reading",
    "discharge_rate",
    "internal_resistance",
    "lithium_load_current",
    "lithium_ocv_curve",
    "lithium_voltage",
    "open_circuit_voltage",
    "voltaic_decay_curve",
]
