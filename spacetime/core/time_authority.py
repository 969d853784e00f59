# spacetime/core/time_authority.py
# -----------------------------------------------------------------------------
# Time Authority: the single owner of simulation time
#
# • set_time / set_time_speed validate against TimeContinuityConstraints and
#   leave state untouched on failure
# • tick() advances by elapsed wall seconds × speed, clamped to ±max jump;
#   steps that would leave the Julian date bounds are dropped
# • subscribers get the current JD on subscribe and after every commit;
#   a raising subscriber is logged and never blocks the others
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Dict, List, Optional

from .constants import SECONDS_PER_DAY, TIME_CONTINUITY_CONSTRAINTS
from .errors import DisposedError, ErrorCode, Result, fail, ok
from .julian import julian_date_now
from .types import TimeContinuityConstraints, TimeState
from ..utils.metrics import SpaceTimeMetrics

log = logging.getLogger(__name__)

TimeCallback = Callable[[float], Any]


class Subscription:
    """Handle returned by ``subscribe``; calling it unsubscribes (idempotent)."""
    __slots__ = ("callback", "active", "_owner")

    def __init__(self, owner: "TimeAuthority", callback: TimeCallback) -> None:
        self.callback = callback
        self.active = True
        self._owner = owner

    def __call__(self) -> None:
        if self.active:
            self.active = False
            self._owner._remove(self)


class TimeAuthority:
    def __init__(
        self,
        initial_julian_date: Optional[float] = None,
        *,
        constraints: TimeContinuityConstraints = TIME_CONTINUITY_CONSTRAINTS,
        metrics: Optional[SpaceTimeMetrics] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        jd = julian_date_now() if initial_julian_date is None else float(initial_julian_date)
        if not constraints.contains(jd):
            raise ValueError(
                f"initial Julian date {jd} outside [{constraints.min_julian_date}, {constraints.max_julian_date}]"
            )
        self._constraints = constraints
        self._jd = jd
        self._speed = 1.0
        self._state = TimeState.STOPPED
        self._subs: List[Subscription] = []
        self._metrics = metrics
        self._clock = clock
        self._last_clock: Optional[float] = None
        self._disposed = False
        self._gauge()

    # ───────────────────────── reads ─────────────────────────
    def get_current_julian_date(self) -> float:
        self._guard()
        return self._jd

    def get_speed_multiplier(self) -> float:
        self._guard()
        return self._speed

    def get_constraints(self) -> TimeContinuityConstraints:
        return self._constraints

    def get_state(self) -> TimeState:
        return self._state

    def is_running(self) -> bool:
        return self._state is TimeState.RUNNING

    def get_subscriber_count(self) -> int:
        return len(self._subs)

    # ───────────────────────── commands ─────────────────────────
    def set_time(self, julian_date: float) -> Result:
        self._guard()
        c = self._constraints
        if not isinstance(julian_date, (int, float)) or not math.isfinite(julian_date):
            return fail(ErrorCode.INVALID_TIME_RANGE, f"Julian date must be finite: {julian_date!r}")
        if not c.contains(julian_date):
            return fail(
                ErrorCode.INVALID_TIME_RANGE,
                f"Julian date {julian_date} outside [{c.min_julian_date}, {c.max_julian_date}]",
                julian_date=julian_date,
            )
        jump = abs(julian_date - self._jd)
        if jump > c.max_time_jump_days:
            return fail(
                ErrorCode.TIME_DISCONTINUITY,
                f"time jump of {jump} days exceeds {c.max_time_jump_days}",
                julian_date=julian_date, current_julian_date=self._jd,
            )
        self._commit(float(julian_date), "set_time")
        return ok()

    def set_time_speed(self, multiplier: float) -> Result:
        self._guard()
        limit = self._constraints.max_speed_multiplier
        if not isinstance(multiplier, (int, float)) or not math.isfinite(multiplier):
            return fail(ErrorCode.INVALID_SPEED_MULTIPLIER, f"speed multiplier must be finite: {multiplier!r}")
        if multiplier < 0:
            return fail(ErrorCode.INVALID_SPEED_MULTIPLIER, f"speed multiplier must be non-negative: {multiplier}")
        if multiplier > limit:
            return fail(ErrorCode.INVALID_SPEED_MULTIPLIER, f"speed multiplier {multiplier} exceeds {limit}",
                        max_speed_multiplier=limit)
        self._speed = float(multiplier)
        return ok()

    def start(self) -> None:
        self._guard()
        if self._state is TimeState.RUNNING:
            return
        self._state = TimeState.RUNNING
        self._last_clock = self._clock()
        log.debug("time authority started at JD %.6f (x%g)", self._jd, self._speed)

    def stop(self) -> None:
        self._guard()
        if self._state is TimeState.STOPPED:
            return
        self._state = TimeState.STOPPED
        self._last_clock = None
        log.debug("time authority stopped at JD %.6f", self._jd)

    def tick(self, elapsed_seconds: Optional[float] = None) -> bool:
        """
        Advance simulation time by one clock tick. Returns True when a new
        Julian date was committed.

        ``elapsed_seconds`` is wall time since the previous tick; when omitted
        it is read from the injected monotonic clock.
        """
        self._guard()
        if self._state is not TimeState.RUNNING:
            return False
        now = self._clock()
        if elapsed_seconds is None:
            elapsed_seconds = now - (self._last_clock if self._last_clock is not None else now)
        self._last_clock = now
        if not math.isfinite(elapsed_seconds) or elapsed_seconds < 0:
            log.debug("tick ignored: elapsed=%r", elapsed_seconds)
            return False

        c = self._constraints
        delta = (elapsed_seconds / SECONDS_PER_DAY) * self._speed
        delta = max(-c.max_time_jump_days, min(c.max_time_jump_days, delta))
        candidate = self._jd + delta
        if not c.contains(candidate):
            log.debug("tick dropped: JD %.6f outside bounds", candidate)
            if self._metrics is not None:
                self._metrics.dropped_ticks.inc()
            return False
        if delta == 0.0:
            return False
        self._commit(candidate, "tick")
        return True

    def validate_time_progression(self, from_jd: float, to_jd: float, speed: float) -> Result:
        """Check a proposed progression against the continuity policy without applying it."""
        c = self._constraints
        if not (math.isfinite(from_jd) and math.isfinite(to_jd) and math.isfinite(speed)):
            return fail(ErrorCode.INVALID_TIME_RANGE, "progression values must be finite")
        if not c.contains(from_jd) or not c.contains(to_jd):
            return fail(ErrorCode.INVALID_TIME_RANGE, "progression leaves the Julian date bounds",
                        from_jd=from_jd, to_jd=to_jd)
        if speed < 0 or speed > c.max_speed_multiplier:
            return fail(ErrorCode.INVALID_SPEED_MULTIPLIER,
                        f"speed {speed} outside [0, {c.max_speed_multiplier}]", speed=speed)
        jump = abs(to_jd - from_jd)
        if jump > c.max_time_jump_days:
            return fail(ErrorCode.TIME_DISCONTINUITY,
                        f"time jump {jump} days exceeds {c.max_time_jump_days}",
                        from_jd=from_jd, to_jd=to_jd)
        return ok()

    # ───────────────────────── subscriptions ─────────────────────────
    def subscribe(self, callback: TimeCallback) -> Subscription:
        self._guard()
        sub = Subscription(self, callback)
        self._subs.append(sub)
        self._deliver(sub, self._jd)
        return sub

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subs.remove(sub)
        except ValueError:
            pass

    def _deliver(self, sub: Subscription, jd: float) -> None:
        try:
            sub.callback(jd)
        except Exception:
            log.exception("time subscriber raised at JD %.6f", jd)
            if self._metrics is not None:
                self._metrics.subscriber_errors.inc()

    def _commit(self, jd: float, source: str) -> None:
        self._jd = jd
        if self._metrics is not None:
            self._metrics.time_commits.labels(source=source).inc()
        self._gauge()
        for sub in list(self._subs):
            if sub.active:
                self._deliver(sub, jd)

    # ───────────────────────── lifecycle ─────────────────────────
    def dispose(self) -> None:
        if self._disposed:
            return
        self._state = TimeState.STOPPED
        for sub in self._subs:
            sub.active = False
        self._subs.clear()
        self._disposed = True

    def is_disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> Dict[str, Any]:
        return {
            "julian_date": self._jd,
            "speed": self._speed,
            "state": self._state.value,
            "subscribers": len(self._subs),
        }

    def _guard(self) -> None:
        if self._disposed:
            raise DisposedError("time authority has been disposed")

    def _gauge(self) -> None:
        if self._metrics is not None:
            self._metrics.current_julian_date.set(self._jd)


__all__ = ["TimeAuthority", "Subscription", "TimeCallback"]
