#!/usr/bin/env python
"""Headless discharge run with CSV export.

Runs one power source on a virtual clock for a fixed number of ticks and
writes every tick's sample to ``results/<mode>_discharge.csv``.

Usage
-----
::

    python scripts/run_discharge.py VOLTAIC --ticks 600 --resistance 10
    python scripts/run_discharge.py LITHIUM --ticks 6000 --resistance 1
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

# Ensure the project root is on the import path.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from volta_lab.core.source import Mode  # noqa: E402
from volta_lab.log import setup_logging  # noqa: E402
from volta_lab.reporting import run_headless  # noqa: E402

RESULTS_DIR: str = os.path.join(_project_root, "results")

logger = logging.getLogger("volta_lab.scripts.run_discharge")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("mode", type=str.upper, choices=[m.value for m in Mode])
    parser.add_argument("--ticks", type=int, default=600)
    parser.add_argument("--resistance", type=float, default=10.0)
    parser.add_argument("--layers", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    mode = Mode(args.mode)
    controller, frame = run_headless(
        mode,
        ticks=args.ticks,
        resistance=args.resistance,
        layer_count=args.layers,
    )

    os.makedirs(RESULTS_DIR, exist_ok=True)
    out_path = os.path.join(RESULTS_DIR, f"{mode.value.lower()}_discharge.csv")
    frame.to_csv(out_path, index=False)
    logger.info("Wrote %d samples to %s", len(frame), out_path)

    snap = controller.snapshot()
    print(f"\n{mode.label}")
    print("=" * 56)
    print(f"  Ticks run      : {len(frame)}")
    print(f"  Peak voltage   : {frame['voltage'].max():.4f} V")
    print(f"  Final voltage  : {frame['voltage'].iloc[-1]:.4f} V")
    print(f"  Mean power     : {frame['power'].mean():.4f} W")
    if mode is Mode.LITHIUM:
        print(f"  Charge left    : {snap.charge_level:.2f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
