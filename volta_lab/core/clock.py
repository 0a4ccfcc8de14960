"""Cancellable periodic scheduling for the Volta Lab simulation engine.

Time is virtual: a :class:`VirtualClock` only moves when :meth:`advance`
is called, so tick cadence, cancellation and ordering can be tested
without sleeping.  :class:`WallClock` pumps the same machinery from the
monotonic wall clock for interactive hosts.

All callbacks run synchronously on the thread that advances the clock.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], None]

# ---------------------------------------------------------------------------
# Periodic task handle
# ---------------------------------------------------------------------------


class PeriodicTask:
    """Handle for a callback armed with :meth:`VirtualClock.call_every`.

    Attributes:
        period_ms: Firing period in milliseconds.
        next_due_ms: Virtual time of the next firing.
    """

    __slots__ = ("period_ms", "next_due_ms", "_callback", "_clock", "_seq", "_cancelled")

    def __init__(
        self,
        clock: VirtualClock,
        period_ms: float,
        callback: Callback,
        seq: int,
    ) -> None:
        self.period_ms: float = period_ms
        self.next_due_ms: float = clock.now_ms + period_ms
        self._callback: Callback = callback
        self._clock: VirtualClock = clock
        self._seq: int = seq
        self._cancelled: bool = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop the task.  A cancelled task never fires again."""
        if self._cancelled:
            return
        self._cancelled = True
        self._clock._discard(self)

    def _fire(self) -> None:
        self.next_due_ms += self.period_ms
        self._callback()


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------


class VirtualClock:
    """Manually advanced millisecond clock.

    Firings are delivered in due-time order; tasks due at the same instant
    fire in the order they were armed.  Callbacks may cancel or arm tasks,
    and the change takes effect before the next firing is chosen.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms: float = start_ms
        self._tasks: list[PeriodicTask] = []
        self._seq: int = 0

    @property
    def now_ms(self) -> float:
        return self._now_ms

    @property
    def pending(self) -> int:
        """Number of armed (not cancelled) tasks."""
        return len(self._tasks)

    def call_every(self, period_ms: float, callback: Callback) -> PeriodicTask:
        """Arm *callback* to fire every *period_ms*, first after one period.

        Raises:
            ValueError: If period_ms <= 0.
        """
        if period_ms <= 0:
            raise ValueError("period_ms must be > 0.")
        task = PeriodicTask(self, period_ms, callback, self._seq)
        self._seq += 1
        self._tasks.append(task)
        return task

    def advance(self, ms: float) -> int:
        """Move virtual time forward by *ms*, firing every task that falls due.

        Returns:
            Number of callbacks fired.

        Raises:
            ValueError: If ms is negative.
        """
        if ms < 0:
            raise ValueError("cannot advance a clock backwards.")
        target: float = self._now_ms + ms
        fired: int = 0
        while True:
            task = self._next_due(target)
            if task is None:
                break
            self._now_ms = task.next_due_ms
            task._fire()
            fired += 1
        self._now_ms = target
        return fired

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    def _next_due(self, target: float) -> PeriodicTask | None:
        due = [t for t in self._tasks if t.next_due_ms <= target]
        if not due:
            return None
        return min(due, key=lambda t: (t.next_due_ms, t._seq))

    def _discard(self, task: PeriodicTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)


class WallClock(VirtualClock):
    """Virtual clock that catches up with real elapsed time on :meth:`pump`.

    Catch-up is bounded by ``max_catch_up_ms`` so a host that was suspended
    (a backgrounded browser tab, a laptop lid) does not replay minutes of
    ticks in one burst.
    """

    def __init__(
        self,
        max_catch_up_ms: float = 1000.0,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        if max_catch_up_ms <= 0:
            raise ValueError("max_catch_up_ms must be > 0.")
        self.max_catch_up_ms: float = max_catch_up_ms
        self._time_source = time_source
        self._last_wall: float = time_source()

    def pump(self) -> int:
        """Advance by the wall time elapsed since the previous pump."""
        now: float = self._time_source()
        elapsed_ms: float = max(0.0, (now - self._last_wall) * 1000.0)
        self._last_wall = now
        if elapsed_ms > self.max_catch_up_ms:
            logger.debug(
                "Dropping %.0f ms of wall time beyond catch-up limit",
                elapsed_ms - self.max_catch_up_ms,
            )
            elapsed_ms = self.max_catch_up_ms
        return self.advance(elapsed_ms)


# ---------------------------------------------------------------------------
# Simulation clock
# ---------------------------------------------------------------------------

TICK: str = "tick"
CHARGE: str = "charge"


class SimulationClock:
    """Owns the discharge-tick and charge-step tasks of one simulation.

    At most one of the two is armed at any time: arming either one first
    cancels whatever was armed before.
    """

    def __init__(
        self,
        scheduler: VirtualClock,
        tick_period_ms: float = 100.0,
        charge_period_ms: float = 50.0,
    ) -> None:
        self.scheduler: VirtualClock = scheduler
        self.tick_period_ms: float = tick_period_ms
        self.charge_period_ms: float = charge_period_ms
        self._task: PeriodicTask | None = None
        self._kind: str | None = None

    @property
    def active(self) -> str | None:
        """``"tick"``, ``"charge"`` or ``None``."""
        return self._kind

    def run_ticks(self, callback: Callback) -> None:
        self._arm(TICK, self.tick_period_ms, callback)

    def run_charging(self, callback: Callback) -> None:
        self._arm(CHARGE, self.charge_period_ms, callback)

    def disarm(self) -> None:
        if self._task is not None:
            self._task.cancel()
            logger.debug("Cancelled %s task", self._kind)
        self._task = None
        self._kind = None

    def _arm(self, kind: str, period_ms: float, callback: Callback) -> None:
        self.disarm()
        self._task = self.scheduler.call_every(period_ms, callback)
        self._kind = kind
        logger.debug("Armed %s task every %.0f ms", kind, period_ms)
