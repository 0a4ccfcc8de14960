"""CLI entrypoint for the Volta Lab simulation engine."""

from __future__ import annotations

import logging
import sys

from volta_lab import __version__
from volta_lab.config import load_settings
from volta_lab.core.clock import VirtualClock
from volta_lab.core.controller import SimulationController
from volta_lab.core.source import Mode
from volta_lab.log import setup_logging


def _print_run(controller: SimulationController, clock: VirtualClock, ticks: int) -> None:
    """Run *ticks* ticks and print one table row per tick."""
    print(f"  {'Tick':>4}  {'Voltage (V)':>11}  {'Current (A)':>11}  {'Power (W)':>9}")
    print(f"  {'----':>4}  {'-----------':>11}  {'-----------':>11}  {'---------':>9}")

    controller.start()
    for _ in range(ticks):
        clock.advance(controller.settings.tick_period_ms)
        snap = controller.snapshot()
        sample = snap.history[-1]
        print(
            f"  {sample.time:4d}  {sample.voltage:11.4f}  "
            f"{sample.current:11.4f}  {sample.voltage * sample.current:9.4f}"
        )
        if not snap.is_running:
            break
    controller.stop()


def main() -> None:
    """Run a demonstration of both power sources on a virtual clock."""
    setup_logging(logging.WARNING)
    settings = load_settings()

    print(f"Volta Lab Simulation Engine v{__version__}")
    print("=" * 56)

    clock = VirtualClock()
    controller = SimulationController(scheduler=clock, settings=settings.simulation)

    # -- Voltaic pile ---------------------------------------------------------
    snap = controller.snapshot()
    print(f"\n{Mode.VOLTAIC.label}: {snap.layer_count} layers, {snap.resistance:.0f} ohm load")
    print(f"Open-circuit voltage: {snap.voltage:.2f} V\n")
    _print_run(controller, clock, ticks=10)

    # -- Lithium-ion cell -----------------------------------------------------
    controller.switch_mode(Mode.LITHIUM)
    snap = controller.snapshot()
    print(f"\n{Mode.LITHIUM.label}: {snap.charge_level:.0f}% charged")
    print(f"Open-circuit voltage: {snap.voltage:.2f} V\n")
    _print_run(controller, clock, ticks=10)

    snap = controller.snapshot()
    print(f"\nCharge left after run: {snap.charge_level:.2f}%")
    controller.shutdown()


if __name__ == "__main__":
    sys.exit(main() or 0)
