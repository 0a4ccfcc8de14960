"""Power-source state models for the Volta Lab simulation engine.

Two source variants share the "power source" capability set but carry
different fields.  ``VoltaicState`` and ``LithiumState`` together form the
``SourceState`` tagged union; :mod:`volta_lab.core.circuit` dispatches on
the variant.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

MIN_LAYERS: int = 1
MAX_LAYERS: int = 20
MIN_CHARGE: float = 0.0
MAX_CHARGE: float = 100.0


class Mode(str, Enum):
    """Which power source is on the bench."""

    VOLTAIC = "VOLTAIC"
    LITHIUM = "LITHIUM"

    @property
    def label(self) -> str:
        """Human-readable name used by the dashboard and the tutor prompt."""
        if self is Mode.VOLTAIC:
            return "Voltaic pile (1800)"
        return "Lithium-ion battery (modern)"


def clamp_layer_count(n: int) -> int:
    """Clamp a requested layer count to [MIN_LAYERS, MAX_LAYERS]."""
    return max(MIN_LAYERS, min(MAX_LAYERS, int(n)))


# ---------------------------------------------------------------------------
# Voltaic pile
# ---------------------------------------------------------------------------


class VoltaicState:
    """Zinc/copper disk stack.

    Attributes:
        layer_count: Number of zinc-copper pairs (1-20).
        electrolyte_quality: Brine quality in [0, 1].  Carried for a future
            internal-resistance modifier; the physics does not read it.
    """

    __slots__ = ("layer_count", "electrolyte_quality")

    mode: Mode = Mode.VOLTAIC

    def __init__(self, layer_count: int = 5, electrolyte_quality: float = 1.0):
        """Initialise the pile.

        Raises:
            ValueError: If layer_count or electrolyte_quality is out of range.
        """
        if not MIN_LAYERS <= layer_count <= MAX_LAYERS:
            raise ValueError(
                f"layer_count must be between {MIN_LAYERS} and {MAX_LAYERS}."
            )
        if not 0.0 <= electrolyte_quality <= 1.0:
            raise ValueError("electrolyte_quality must be between 0.0 and 1.0.")
        self.layer_count: int = layer_count
        self.electrolyte_quality: float = electrolyte_quality

    def set_layer_count(self, n: int) -> int:
        """Set the layer count, clamped to the valid range.

        Returns:
            The layer count actually applied.
        """
        self.layer_count = clamp_layer_count(n)
        return self.layer_count


# ---------------------------------------------------------------------------
# Lithium-ion cell
# ---------------------------------------------------------------------------


class LithiumState:
    """Lithium-ion cell state of charge.

    Drain and replenish operations are bounded to [0, 100] the same way a
    battery cannot give more than it holds or take more than its capacity.

    Attributes:
        charge_level: State of charge in percent (0-100).
        is_charging: Whether the charger is connected.
    """

    __slots__ = ("charge_level", "is_charging")

    mode: Mode = Mode.LITHIUM

    def __init__(self, charge_level: float = MAX_CHARGE, is_charging: bool = False):
        """Initialise the cell.

        Raises:
            ValueError: If charge_level is outside [0, 100].
        """
        if not MIN_CHARGE <= charge_level <= MAX_CHARGE:
            raise ValueError("charge_level must be between 0.0 and 100.0.")
        self.charge_level: float = float(charge_level)
        self.is_charging: bool = is_charging

    @property
    def soc(self) -> float:
        """Fractional state of charge."""
        return self.charge_level / MAX_CHARGE

    @property
    def is_empty(self) -> bool:
        return self.charge_level <= MIN_CHARGE

    def drain(self, amount: float) -> float:
        """Remove charge, floored at empty.

        Args:
            amount: Requested drain in percentage points (>= 0).

        Returns:
            Charge actually removed.

        Raises:
            ValueError: If amount is negative.
        """
        if amount < 0.0:
            raise ValueError("drain amount must be >= 0.")
        actual: float = min(amount, self.charge_level)
        self.charge_level = max(MIN_CHARGE, self.charge_level - actual)
        return actual

    def replenish(self, amount: float) -> float:
        """Add charge, capped at full.

        Args:
            amount: Requested charge in percentage points (>= 0).

        Returns:
            Charge actually added.

        Raises:
            ValueError: If amount is negative.
        """
        if amount < 0.0:
            raise ValueError("replenish amount must be >= 0.")
        headroom: float = MAX_CHARGE - self.charge_level
        actual: float = min(amount, headroom)
        self.charge_level += actual
        return actual


SourceState = Union[VoltaicState, LithiumState]
