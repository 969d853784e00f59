# spacetime/core/provider.py
# -----------------------------------------------------------------------------
# Ephemeris provider contract
#
# EphemerisProvider is the interface every source of state vectors implements.
# BaseEphemerisProvider carries the argument checks, error mapping and the
# sequential bulk query so concrete providers only compute (position, velocity).
#
# Check order for get_state:
#   INVALID_BODY_ID → INVALID_JULIAN_DATE → BODY_NOT_SUPPORTED →
#   TIME_OUT_OF_RANGE → CALCULATION_FAILED
# -----------------------------------------------------------------------------
from __future__ import annotations

import abc
import logging
import math
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .constants import BODY_RADII_KM, PRIMARY_FRAME_ID, SECONDS_PER_DAY
from .errors import ErrorCode, Result, fail, ok
from .types import StateMetadata, StateVector, TimeRange, Vector3, ZERO_VECTOR

log = logging.getLogger(__name__)

# Central-difference half step for velocities (days)
VELOCITY_STEP_DAYS = 1.0 / 24.0


class EphemerisProvider(abc.ABC):
    """Read-only source of heliocentric state vectors in the authoritative frame."""

    @abc.abstractmethod
    def get_provider_id(self) -> str: ...

    @abc.abstractmethod
    def get_supported_bodies(self) -> FrozenSet[str]: ...

    @abc.abstractmethod
    def get_time_range(self) -> TimeRange: ...

    @abc.abstractmethod
    def get_state(self, body_id: str, julian_date: float) -> Result: ...

    @abc.abstractmethod
    def get_states(self, body_id: str, julian_dates: Sequence[float]) -> Result: ...

    @abc.abstractmethod
    def supports_velocity(self) -> bool: ...

    @abc.abstractmethod
    def get_accuracy(self, body_id: str) -> float: ...

    def is_time_valid(self, julian_date: float) -> bool:
        return math.isfinite(julian_date) and TimeRange(*self.get_time_range()).contains(julian_date)

    def get_provider_info(self) -> Dict[str, Any]:
        rng = TimeRange(*self.get_time_range())
        return {
            "id": self.get_provider_id(),
            "bodies": sorted(self.get_supported_bodies()),
            "time_range": {"start_jd": rng.start_jd, "end_jd": rng.end_jd},
            "supports_velocity": self.supports_velocity(),
        }


def central_difference_velocity(position_km: Callable[[float], Vector3], julian_date: float,
                                step_days: float = VELOCITY_STEP_DAYS) -> Vector3:
    """
    Velocity (km/s) from positions (km) at jd ± step. Any numeric failure
    degrades to the zero vector with a warning; position queries are unaffected.
    """
    try:
        ahead = position_km(julian_date + step_days)
        behind = position_km(julian_date - step_days)
        v = (ahead - behind).scaled(1.0 / (2.0 * step_days * SECONDS_PER_DAY))
    except (ArithmeticError, ValueError) as e:
        log.warning("velocity fallback to zero at JD %.6f: %s", julian_date, e)
        return ZERO_VECTOR
    if not v.is_finite():
        log.warning("velocity fallback to zero at JD %.6f: non-finite difference", julian_date)
        return ZERO_VECTOR
    return v


class BaseEphemerisProvider(EphemerisProvider):
    def __init__(
        self,
        provider_id: str,
        bodies: Iterable[str],
        time_range: Tuple[float, float],
        *,
        accuracy_km: Optional[Mapping[str, float]] = None,
        default_accuracy_km: float = 1000.0,
        radii_km: Optional[Mapping[str, float]] = None,
        reference_frame_id: str = PRIMARY_FRAME_ID,
    ) -> None:
        self._id = provider_id
        self._bodies = frozenset(bodies)
        self._range = TimeRange(float(time_range[0]), float(time_range[1]))
        self._accuracy = dict(accuracy_km or {})
        self._default_accuracy = float(default_accuracy_km)
        self._radii = dict(radii_km if radii_km is not None else BODY_RADII_KM)
        self._frame_id = reference_frame_id

    # ───────────────────────── contract ─────────────────────────
    def get_provider_id(self) -> str:
        return self._id

    def get_supported_bodies(self) -> FrozenSet[str]:
        return self._bodies

    def get_time_range(self) -> TimeRange:
        return self._range

    def get_accuracy(self, body_id: str) -> float:
        return self._accuracy.get(body_id, self._default_accuracy)

    def get_state(self, body_id: str, julian_date: float) -> Result:
        if not isinstance(body_id, str) or not body_id:
            return fail(ErrorCode.INVALID_BODY_ID, "body id must be a non-empty string",
                        provider_id=self._id)
        if not isinstance(julian_date, (int, float)) or not math.isfinite(julian_date):
            return fail(ErrorCode.INVALID_JULIAN_DATE, f"Julian date must be finite: {julian_date!r}",
                        provider_id=self._id, body_id=body_id)
        if body_id not in self._bodies:
            return fail(ErrorCode.BODY_NOT_SUPPORTED, f"{self._id} does not support '{body_id}'",
                        provider_id=self._id, body_id=body_id)
        if not self._range.contains(julian_date):
            return fail(ErrorCode.TIME_OUT_OF_RANGE,
                        f"JD {julian_date} outside [{self._range.start_jd}, {self._range.end_jd}]",
                        provider_id=self._id, body_id=body_id, julian_date=julian_date)
        try:
            position, velocity = self._compute(body_id, float(julian_date))
            radius = self._radius(body_id)
        except Exception as e:
            log.warning("%s failed for %s at JD %s: %s", self._id, body_id, julian_date, e)
            return fail(ErrorCode.CALCULATION_FAILED, f"{self._id} calculation failed: {e}",
                        provider_id=self._id, body_id=body_id, julian_date=julian_date)
        if not (position.is_finite() and velocity.is_finite() and math.isfinite(radius) and radius > 0):
            return fail(ErrorCode.CALCULATION_FAILED, f"{self._id} produced a non-finite state",
                        provider_id=self._id, body_id=body_id, julian_date=julian_date)

        return ok(StateVector(
            position=position,
            velocity=velocity,
            radius=radius,
            metadata=StateMetadata(
                julian_date=float(julian_date),
                reference_frame=self._frame_id,
                provider=self._id,
                accuracy=self.get_accuracy(body_id),
            ),
        ))

    def get_states(self, body_id: str, julian_dates: Sequence[float]) -> Result:
        if not julian_dates:
            return fail(ErrorCode.INVALID_JULIAN_DATE, "Julian date list is empty",
                        provider_id=self._id, body_id=body_id)
        states: List[StateVector] = []
        for jd in julian_dates:
            res = self.get_state(body_id, jd)
            if not res.success:
                return res
            states.append(res.data)
        return ok(states)

    # ───────────────────────── hooks ─────────────────────────
    def _radius(self, body_id: str) -> float:
        return self._radii[body_id]

    @abc.abstractmethod
    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        """Heliocentric (position km, velocity km/s) in the authoritative frame."""


__all__ = [
    "VELOCITY_STEP_DAYS",
    "EphemerisProvider",
    "BaseEphemerisProvider",
    "central_difference_velocity",
]
