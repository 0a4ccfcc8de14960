"""Simulation controller for the Volta Lab engine.

The controller is the single owner of mutable simulation state.  Hosts
issue commands and read immutable :class:`SimulationSnapshot` objects;
nothing outside this module mutates a source state or the run flags.

State machine (mode x run flags)::

    VOLTAIC_IDLE      --start-->          VOLTAIC_RUNNING
    VOLTAIC_RUNNING   --stop-->           VOLTAIC_IDLE
    LITHIUM_IDLE      --start-->          LITHIUM_DISCHARGING
    LITHIUM_IDLE      --toggle_charging-> LITHIUM_CHARGING
    LITHIUM_CHARGING  --toggle_charging-> LITHIUM_IDLE
    LITHIUM_CHARGING  --start-->          LITHIUM_DISCHARGING
    LITHIUM_DISCHARGING --stop / empty--> LITHIUM_IDLE
    LITHIUM_DISCHARGING --toggle_charging-> LITHIUM_CHARGING
    any --reset-->       {mode}_IDLE
    any --switch_mode(m)--> {m}_IDLE

Every command that changes the run flags re-arms the
:class:`~volta_lab.core.clock.SimulationClock`, which cancels the previous
task before arming a new one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from volta_lab.core.circuit import (
    ZERO_READING,
    CircuitReading,
    clamp_resistance,
    compute_reading,
    discharge_rate,
)
from volta_lab.core.clock import SimulationClock, VirtualClock
from volta_lab.core.history import HistoryBuffer, HistorySample
from volta_lab.core.settings import SimulationSettings
from volta_lab.core.source import LithiumState, Mode, SourceState, VoltaicState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------------


class RunPhase(str, Enum):
    """Composite state of the controller's state machine."""

    VOLTAIC_IDLE = "VOLTAIC_IDLE"
    VOLTAIC_RUNNING = "VOLTAIC_RUNNING"
    LITHIUM_IDLE = "LITHIUM_IDLE"
    LITHIUM_CHARGING = "LITHIUM_CHARGING"
    LITHIUM_DISCHARGING = "LITHIUM_DISCHARGING"


@dataclass(frozen=True)
class SimulationSnapshot:
    """Immutable view of the simulation between ticks.

    Attributes:
        mode: Active power source.
        phase: State-machine state.
        is_running: Whether the load is connected and ticks are firing.
        is_charging: Whether the lithium charger is connected.
        time: Tick counter.
        voltage: Source voltage in volts.
        current: Loop current in amps.
        power: Delivered power in watts.
        internal_resistance: Source internal resistance in ohms.
        resistance: Load resistance in ohms.
        charge_level: Lithium state of charge in percent.
        layer_count: Voltaic layer count.
        electrolyte_quality: Voltaic electrolyte quality (reserved).
        history: Most recent samples, oldest first.
    """

    mode: Mode
    phase: RunPhase
    is_running: bool
    is_charging: bool
    time: int
    voltage: float
    current: float
    power: float
    internal_resistance: float
    resistance: float
    charge_level: float
    layer_count: int
    electrolyte_quality: float
    history: tuple[HistorySample, ...]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class SimulationController:
    """Owns mode, run flags, load resistance, source states and history.

    Args:
        scheduler: Clock the tick and charge tasks are armed on.  Defaults
            to a fresh :class:`VirtualClock`, which only moves when the
            caller advances it.
        settings: Cadence and defaults.  Defaults to
            :class:`SimulationSettings`.
    """

    def __init__(
        self,
        scheduler: VirtualClock | None = None,
        settings: SimulationSettings | None = None,
    ) -> None:
        self.settings: SimulationSettings = settings or SimulationSettings()
        self._clock = SimulationClock(
            scheduler if scheduler is not None else VirtualClock(),
            tick_period_ms=self.settings.tick_period_ms,
            charge_period_ms=self.settings.charge_period_ms,
        )
        self._mode: Mode = Mode.VOLTAIC
        self._is_running: bool = False
        self._time: int = 0
        self._resistance: float = self.settings.default_resistance
        self._voltaic: VoltaicState = self._default_voltaic()
        self._lithium: LithiumState = LithiumState()
        self._history = HistoryBuffer(self.settings.history_capacity)
        self._reading: CircuitReading = ZERO_READING
        self._refresh_idle_reading()

    # -- Read interface -------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def clock(self) -> SimulationClock:
        return self._clock

    @property
    def phase(self) -> RunPhase:
        if self._mode is Mode.VOLTAIC:
            return RunPhase.VOLTAIC_RUNNING if self._is_running else RunPhase.VOLTAIC_IDLE
        if self._is_running:
            return RunPhase.LITHIUM_DISCHARGING
        if self._lithium.is_charging:
            return RunPhase.LITHIUM_CHARGING
        return RunPhase.LITHIUM_IDLE

    def snapshot(self) -> SimulationSnapshot:
        """Return an immutable view of the current state."""
        reading = self._reading
        return SimulationSnapshot(
            mode=self._mode,
            phase=self.phase,
            is_running=self._is_running,
            is_charging=self._lithium.is_charging,
            time=self._time,
            voltage=reading.voltage,
            current=reading.current,
            power=reading.power,
            internal_resistance=reading.internal_resistance,
            resistance=self._resistance,
            charge_level=self._lithium.charge_level,
            layer_count=self._voltaic.layer_count,
            electrolyte_quality=self._voltaic.electrolyte_quality,
            history=self._history.samples(),
        )

    # -- Commands -------------------------------------------------------------

    def start(self) -> None:
        """Connect the load.  Disconnects the charger in the same step."""
        if self._is_running:
            return
        self._lithium.is_charging = False
        self._is_running = True
        logger.info("Started %s discharge at t=%d", self._mode.value, self._time)
        self._sync_clock()

    def stop(self) -> None:
        """Disconnect the load.  The tick counter keeps its value."""
        if not self._is_running:
            return
        self._is_running = False
        logger.info("Stopped %s at t=%d", self._mode.value, self._time)
        self._sync_clock()
        self._refresh_idle_reading()

    def toggle_run(self) -> None:
        if self._is_running:
            self.stop()
        else:
            self.start()

    def toggle_charging(self) -> None:
        """Connect or disconnect the lithium charger.

        Connecting the charger stops any discharge in the same step.  The
        command is ignored in voltaic mode.
        """
        if self._mode is not Mode.LITHIUM:
            logger.warning("toggle_charging ignored in %s mode", self._mode.value)
            return
        if self._lithium.is_charging:
            self._lithium.is_charging = False
            logger.info("Charger disconnected at %.1f%%", self._lithium.charge_level)
        else:
            self._is_running = False
            self._lithium.is_charging = True
            # Charger steps never recompute the circuit, so show the
            # open-circuit value once on connect.
            self._reading = compute_reading(
                self._lithium, self._time, self._resistance, under_load=False
            )
            logger.info("Charger connected at %.1f%%", self._lithium.charge_level)
        self._sync_clock()
        self._refresh_idle_reading()

    def set_resistance(self, ohms: float) -> float:
        """Set the load resistance, clamped to [1, 100] ohms.

        Returns:
            The resistance actually applied.
        """
        applied = clamp_resistance(ohms)
        if applied != ohms:
            logger.debug("Clamped resistance %s -> %s", ohms, applied)
        self._resistance = applied
        self._refresh_idle_reading()
        return applied

    def set_layer_count(self, n: int) -> int:
        """Set the voltaic layer count, clamped to [1, 20].

        Ignored outside voltaic mode.

        Returns:
            The voltaic layer count after the command.
        """
        if self._mode is not Mode.VOLTAIC:
            logger.warning("set_layer_count ignored in %s mode", self._mode.value)
            return self._voltaic.layer_count
        applied = self._voltaic.set_layer_count(n)
        if applied != n:
            logger.debug("Clamped layer count %s -> %s", n, applied)
        self._refresh_idle_reading()
        return applied

    def add_layer(self) -> int:
        return self.set_layer_count(self._voltaic.layer_count + 1)

    def remove_layer(self) -> int:
        return self.set_layer_count(self._voltaic.layer_count - 1)

    def reset(self) -> None:
        """Return to idle with t=0, empty history and a full lithium cell.

        Layer count and load resistance are user settings and survive.
        Calling it twice is the same as calling it once.
        """
        self._is_running = False
        self._lithium = LithiumState()
        self._time = 0
        self._history.clear()
        self._sync_clock()
        self._refresh_idle_reading()
        logger.debug("Reset %s simulation", self._mode.value)

    def switch_mode(self, mode: Mode) -> None:
        """Put a different source on the bench.

        Nothing carries over from the previous mode except the load
        resistance: both source states go back to their defaults.
        """
        mode = Mode(mode)
        logger.info("Switching mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode
        self._voltaic = self._default_voltaic()
        self.reset()

    def shutdown(self) -> None:
        """Cancel any armed task.  Call when the host goes away."""
        self._clock.disarm()

    # -- Scheduled steps ------------------------------------------------------

    def _tick(self) -> None:
        """One discharge tick.

        Order: advance the counter, compute the reading for this tick's
        index, append the sample, then feed the lithium drain back into
        the source state.  No snapshot can observe a half-applied tick.
        """
        elapsed: int = self._time
        self._time += 1

        source: SourceState = self._active_source()
        # An empty cell reads 0 V, so this tick delivers nothing and the
        # drain check below stops the run.
        reading = compute_reading(source, elapsed, self._resistance)

        self._reading = reading
        self._history.append(
            HistorySample(time=elapsed, voltage=reading.voltage, current=reading.current)
        )

        # Discharge feedback: the cell drains in proportion to the current
        # it just delivered.
        if isinstance(source, LithiumState):
            source.drain(discharge_rate(reading))
            if source.is_empty:
                logger.info("Lithium cell empty at t=%d; stopping", self._time)
                self._is_running = False
                self._sync_clock()
                self._refresh_idle_reading()

    def _charge_step(self) -> None:
        self._lithium.replenish(self.settings.charge_increment)

    # -- Internals ------------------------------------------------------------

    def _default_voltaic(self) -> VoltaicState:
        return VoltaicState(
            layer_count=self.settings.default_layer_count,
            electrolyte_quality=self.settings.default_electrolyte_quality,
        )

    def _active_source(self) -> SourceState:
        if self._mode is Mode.VOLTAIC:
            return self._voltaic
        if self._mode is Mode.LITHIUM:
            return self._lithium
        raise TypeError(f"Unknown mode: {self._mode!r}")

    def _sync_clock(self) -> None:
        """Arm exactly the task the current run flags call for."""
        if self._is_running:
            self._clock.run_ticks(self._tick)
        elif self._mode is Mode.LITHIUM and self._lithium.is_charging:
            self._clock.run_charging(self._charge_step)
        else:
            self._clock.disarm()

    def _refresh_idle_reading(self) -> None:
        """Recompute open-circuit values while idle.

        While charging the reading is left as it was: charger steps do
        not recompute the circuit.
        """
        if self._is_running:
            return
        if self._mode is Mode.LITHIUM and self._lithium.is_charging:
            return
        self._reading = compute_reading(
            self._active_source(), self._time, self._resistance, under_load=False
        )
