"""Tabular views of simulation runs.

Turns snapshot history into :class:`pandas.DataFrame` objects for charting
and CSV export, and runs a controller headlessly on a virtual clock.
"""

from __future__ import annotations

import pandas as pd

from volta_lab.core.clock import VirtualClock
from volta_lab.core.controller import SimulationController, SimulationSnapshot
from volta_lab.core.source import Mode

HISTORY_COLUMNS: list[str] = ["time", "voltage", "current", "power"]


def history_frame(snapshot: SimulationSnapshot) -> pd.DataFrame:
    """Return the snapshot history as a DataFrame.

    Columns are ``time``, ``voltage``, ``current`` and the derived
    ``power``.  An empty history yields an empty frame with those columns.
    """
    rows = [
        {
            "time": s.time,
            "voltage": s.voltage,
            "current": s.current,
            "power": s.voltage * s.current,
        }
        for s in snapshot.history
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def run_headless(
    mode: Mode,
    ticks: int,
    resistance: float = 10.0,
    layer_count: int | None = None,
) -> tuple[SimulationController, pd.DataFrame]:
    """Run a discharge for *ticks* ticks on a virtual clock.

    Every tick's sample is collected, not just the rolling window the
    controller keeps, so long runs can be exported in full.  The run ends
    early if a lithium cell empties.

    Args:
        mode: Source to discharge.
        ticks: Number of ticks to run (>= 1).
        resistance: Load resistance in ohms (clamped to [1, 100]).
        layer_count: Voltaic layer count override (clamped to [1, 20]).

    Returns:
        ``(controller, frame)`` where *frame* has one row per tick.

    Raises:
        ValueError: If ticks < 1.
    """
    if ticks < 1:
        raise ValueError("ticks must be >= 1.")

    clock = VirtualClock()
    controller = SimulationController(scheduler=clock)
    controller.switch_mode(mode)
    controller.set_resistance(resistance)
    if layer_count is not None:
        controller.set_layer_count(layer_count)

    period = controller.settings.tick_period_ms
    rows: list[dict[str, float]] = []
    controller.start()
    for _ in range(ticks):
        if not controller.snapshot().is_running:
            break
        clock.advance(period)
        latest = controller.snapshot().history[-1]
        rows.append(
            {
                "time": latest.time,
                "voltage": latest.voltage,
                "current": latest.current,
                "power": latest.voltage * latest.current,
            }
        )
    controller.stop()

    return controller, pd.DataFrame(rows, columns=HISTORY_COLUMNS)
