"""Cadence and default values of the simulation core."""

from __future__ import annotations

from dataclasses import dataclass

from volta_lab.core.circuit import MAX_LOAD_RESISTANCE, MIN_LOAD_RESISTANCE
from volta_lab.core.source import MAX_LAYERS, MIN_LAYERS


@dataclass(frozen=True)
class SimulationSettings:
    """Cadence and defaults of the simulation core.

    Attributes:
        tick_period_ms: Wall-clock period of one discharge tick.
        charge_period_ms: Wall-clock period of one charger step.
        charge_increment: Charge points added per charger step.
        history_capacity: Number of charted samples kept.
        default_layer_count: Voltaic layers after start-up or mode switch.
        default_electrolyte_quality: Voltaic electrolyte quality default.
        default_resistance: Load resistance at start-up, in ohms.
        max_catch_up_ms: Upper bound on wall time replayed per pump.
    """

    tick_period_ms: float = 100.0
    charge_period_ms: float = 50.0
    charge_increment: float = 0.5
    history_capacity: int = 50
    default_layer_count: int = 5
    default_electrolyte_quality: float = 1.0
    default_resistance: float = 10.0
    max_catch_up_ms: float = 1000.0

    def __post_init__(self) -> None:
        """Validate simulation settings."""
        if self.tick_period_ms <= 0.0:
            raise ValueError("tick_period_ms must be > 0.")
        if self.charge_period_ms <= 0.0:
            raise ValueError("charge_period_ms must be > 0.")
        if self.charge_increment < 0.0:
            raise ValueError("charge_increment must be >= 0.")
        if self.history_capacity < 1:
            raise ValueError("history_capacity must be >= 1.")
        if not MIN_LAYERS <= self.default_layer_count <= MAX_LAYERS:
            raise ValueError(
                f"default_layer_count must be between {MIN_LAYERS} and {MAX_LAYERS}."
            )
        if not 0.0 <= self.default_electrolyte_quality <= 1.0:
            raise ValueError("default_electrolyte_quality must be between 0.0 and 1.0.")
        if not MIN_LOAD_RESISTANCE <= self.default_resistance <= MAX_LOAD_RESISTANCE:
            raise ValueError(
                f"default_resistance must be between {MIN_LOAD_RESISTANCE} "
                f"and {MAX_LOAD_RESISTANCE}."
            )
        if self.max_catch_up_ms <= 0.0:
            raise ValueError("max_catch_up_ms must be > 0.")
