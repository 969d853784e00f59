# spacetime/core/validator.py
# -----------------------------------------------------------------------------
# Architectural validator
#
# Instance-scoped checks of the foundation's invariants: time policy, the
# single authoritative frame, the layer boundary, provider contract
# conformance, state-vector purity and feature scope. Every check returns a
# ValidationReport; violations also go to a bounded log. Overflowing the log
# marks the validator's integrity as compromised, nothing is raised.
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Deque, Dict, Iterable, List, Optional

from .boundary import LayerAccessValidator
from .constants import J2000_JD, PRIMARY_FRAME_ID, TIME_CONTINUITY_CONSTRAINTS
from .errors import ErrorCode
from .provider import EphemerisProvider
from .reference_frame import ReferenceFrameManager
from .time_authority import TimeAuthority
from .types import FrameType, StateVector, TimeContinuityConstraints, TimeRange

if TYPE_CHECKING:
    from .space_time_core import SpaceTimeCore

log = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"

MAX_POSITION_KM = 1e12
MAX_VELOCITY_KM_S = 1000.0
MAX_RADIUS_KM = 1e6

POSITION_TOLERANCE_KM = 1e-6
VELOCITY_TOLERANCE_KM_S = 1e-9

EXCLUDED_FEATURES = (
    "relativistic",
    "attitude",
    "propulsion",
    "non-inertial",
    "spacecraft-dynamics",
    "orbital-maneuvers",
    "perturbations",
    "tidal-forces",
)

_UNSUPPORTED_BODY = "__unsupported_body__"


@dataclass(frozen=True)
class Violation:
    component: str
    severity: str
    message: str


@dataclass
class ValidationReport:
    component: str
    violations: List[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(v.severity == ERROR for v in self.violations)

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == ERROR]

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == WARNING]

    @property
    def summary(self) -> str:
        state = "valid" if self.is_valid else "invalid"
        return f"{self.component}: {state} ({len(self.errors)} errors, {len(self.warnings)} warnings)"

    def error(self, message: str) -> None:
        self.violations.append(Violation(self.component, ERROR, message))

    def warn(self, message: str) -> None:
        self.violations.append(Violation(self.component, WARNING, message))

    def merge(self, other: "ValidationReport") -> None:
        self.violations.extend(other.violations)


class ArchitecturalValidator:
    def __init__(
        self,
        *,
        primary_frame_id: str = PRIMARY_FRAME_ID,
        constraints: TimeContinuityConstraints = TIME_CONTINUITY_CONSTRAINTS,
        log_capacity: int = 50,
    ) -> None:
        self.primary_frame_id = primary_frame_id
        self.constraints = constraints
        self._log: Deque[Violation] = deque(maxlen=log_capacity)
        self._total = 0
        self.integrity_compromised = False

    # ───────────────────────── time ─────────────────────────
    def validate_time_authority(self, authority: TimeAuthority) -> ValidationReport:
        report = ValidationReport("time_authority")
        c = authority.get_constraints()
        if c != self.constraints:
            report.error("time authority runs under different continuity constraints")
        jd = authority.get_current_julian_date()
        if not c.contains(jd):
            report.error(f"current JD {jd} outside [{c.min_julian_date}, {c.max_julian_date}]")
        speed = authority.get_speed_multiplier()
        if not math.isfinite(speed) or speed < 0 or speed > c.max_speed_multiplier:
            report.error(f"speed multiplier {speed} outside [0, {c.max_speed_multiplier}]")
        if c.min_time_precision <= 0 or c.min_time_precision > 1e-6:
            report.warn(f"time precision {c.min_time_precision} days is coarser than sub-millisecond")
        if c.max_time_jump_days <= 0:
            report.error("max time jump must be positive")
        return self._finish(report)

    # ───────────────────────── frames ─────────────────────────
    def validate_reference_frame(self, frames: ReferenceFrameManager) -> ValidationReport:
        report = ValidationReport("reference_frame")
        res = frames.validate_phase1_constraints()
        if not res.success:
            report.error(res.error.message)
        frame = frames.get_authoritative_frame()
        if frame.frame_id != self.primary_frame_id:
            report.error(f"authoritative frame '{frame.frame_id}' is not '{self.primary_frame_id}'")
        if frame.type is not FrameType.AUTHORITATIVE:
            report.error("authoritative frame has the wrong type")
        units = frame.units
        if (units.position, units.velocity, units.time) != ("km", "km/s", "JD"):
            report.error(f"authoritative units must be km, km/s, JD (got {units.position}, "
                         f"{units.velocity}, {units.time})")
        if frames.get_authoritative_frame_count() != 1:
            report.error("more than one authoritative frame registered")
        return self._finish(report)

    # ───────────────────────── layer boundary ─────────────────────────
    def validate_layer_boundary(self, operations: Iterable[str]) -> ValidationReport:
        """Static check of the operations a presentation component intends to call."""
        report = ValidationReport("layer_boundary")
        for operation in operations:
            res = LayerAccessValidator.validate_operation(operation)
            if not res.success:
                report.error(res.error.message)
        return self._finish(report)

    # ───────────────────────── providers ─────────────────────────
    def validate_ephemeris_provider(self, provider: EphemerisProvider,
                                    sample_julian_date: Optional[float] = None) -> ValidationReport:
        report = ValidationReport("ephemeris_provider")
        try:
            pid = provider.get_provider_id()
            bodies = provider.get_supported_bodies()
            raw_range = provider.get_time_range()
            velocity = provider.supports_velocity()
        except Exception as e:
            report.error(f"provider introspection raised: {e}")
            return self._finish(report)

        if not isinstance(pid, str) or not pid or pid != pid.strip():
            report.error(f"provider id must be a non-empty trimmed string: {pid!r}")
        if not isinstance(bodies, (set, frozenset)) or not bodies:
            report.error("supported bodies must be a non-empty set")
            return self._finish(report)
        try:
            rng = TimeRange(float(raw_range[0]), float(raw_range[1]))
        except (TypeError, ValueError, IndexError):
            report.error(f"time range is not a (start, end) pair: {raw_range!r}")
            return self._finish(report)
        if not (math.isfinite(rng.start_jd) and math.isfinite(rng.end_jd)) or rng.start_jd >= rng.end_jd:
            report.error(f"malformed time range [{rng.start_jd}, {rng.end_jd}]")
            return self._finish(report)
        if not isinstance(velocity, bool):
            report.error("supports_velocity must return a bool")
        try:
            self._sample_provider(report, provider, sorted(bodies), rng, sample_julian_date)
        except Exception as e:
            report.error(f"provider raised: {e}")
        return self._finish(report)

    def _sample_provider(self, report: ValidationReport, provider: EphemerisProvider,
                         bodies: List[str], rng: TimeRange, sample_julian_date: Optional[float]) -> None:
        for body_id in bodies:
            acc = provider.get_accuracy(body_id)
            if not isinstance(acc, (int, float)) or not math.isfinite(acc) or acc <= 0:
                report.error(f"accuracy for {body_id} must be positive and finite: {acc!r}")

        jd = sample_julian_date
        if jd is None:
            jd = J2000_JD if rng.contains(J2000_JD) else (rng.start_jd + rng.end_jd) / 2.0
        jd_next = jd + 1.0 if rng.contains(jd + 1.0) else jd - 1.0

        for body_id in bodies:
            single = provider.get_state(body_id, jd)
            if not single.success:
                report.error(f"get_state({body_id}, {jd}) failed: {single.error.code.value}")
                continue
            report.merge(self.validate_state_vector_purity(single.data, expected_julian_date=jd,
                                                           log_violations=False))
            bulk = provider.get_states(body_id, [jd, jd_next])
            if not bulk.success or len(bulk.data) != 2:
                report.error(f"get_states({body_id}) failed where get_state succeeds")
                continue
            for when, state in zip((jd, jd_next), bulk.data):
                ref = provider.get_state(body_id, when)
                if not ref.success or not _equivalent(ref.data, state):
                    report.error(f"get_states({body_id}) differs from get_state at JD {when}")

        unsupported = provider.get_state(_UNSUPPORTED_BODY, jd)
        if unsupported.success or unsupported.error.code is not ErrorCode.BODY_NOT_SUPPORTED:
            report.error("unsupported body must fail BODY_NOT_SUPPORTED")
        outside = provider.get_state(bodies[0], rng.end_jd + 1.0)
        if outside.success or outside.error.code is not ErrorCode.TIME_OUT_OF_RANGE:
            report.error("JD outside the declared range must fail TIME_OUT_OF_RANGE")

    # ───────────────────────── state vectors ─────────────────────────
    def validate_state_vector_purity(self, state: StateVector, *,
                                     expected_julian_date: Optional[float] = None,
                                     log_violations: bool = True) -> ValidationReport:
        report = ValidationReport("state_vector")
        if not state.position.is_finite() or not state.velocity.is_finite():
            report.error("position and velocity must be finite")
        else:
            if state.position.magnitude() > MAX_POSITION_KM:
                report.warn(f"position magnitude {state.position.magnitude():.3e} km is implausible")
            if state.velocity.magnitude() > MAX_VELOCITY_KM_S:
                report.warn(f"velocity magnitude {state.velocity.magnitude():.3e} km/s is implausible")
        if not math.isfinite(state.radius) or state.radius <= 0:
            report.error(f"radius must be positive: {state.radius}")
        elif state.radius > MAX_RADIUS_KM:
            report.warn(f"radius {state.radius} km looks display-scaled")
        meta = state.metadata
        if meta.reference_frame != self.primary_frame_id:
            report.error(f"state is in frame '{meta.reference_frame}', not '{self.primary_frame_id}'")
        if not meta.provider:
            report.error("state metadata lacks a provider id")
        if not math.isfinite(meta.julian_date):
            report.error("state metadata Julian date is not finite")
        elif expected_julian_date is not None and meta.julian_date != expected_julian_date:
            report.error(f"metadata JD {meta.julian_date} does not echo query JD {expected_julian_date}")
        if meta.accuracy is not None and (not math.isfinite(meta.accuracy) or meta.accuracy <= 0):
            report.error(f"metadata accuracy must be positive: {meta.accuracy}")
        return self._finish(report) if log_violations else report

    # ───────────────────────── scope ─────────────────────────
    def validate_scope(self, features: Iterable[str]) -> ValidationReport:
        report = ValidationReport("scope")
        for feature in features:
            name = feature.strip().lower()
            hit = next((x for x in EXCLUDED_FEATURES if x in name), None)
            if hit is not None:
                report.error(f"feature '{feature}' is outside the foundation's scope ({hit})")
        return self._finish(report)

    # ───────────────────────── system ─────────────────────────
    def validate_system(self, core: "SpaceTimeCore", authority: TimeAuthority,
                        frames: ReferenceFrameManager) -> ValidationReport:
        own = ValidationReport("system")
        if not core.is_ready():
            own.error("space-time core is not initialized")
            return self._finish(own)
        report = ValidationReport("system")
        report.merge(self.validate_time_authority(authority))
        report.merge(self.validate_reference_frame(frames))
        if core.get_reference_frame_info() != frames.get_authoritative_frame():
            own.error("core and frame manager disagree on the authoritative frame")
        if core.get_current_time() != authority.get_current_julian_date():
            own.error("core does not read time from the given time authority")
        providers = core.get_providers()
        if not providers:
            own.warn("no ephemeris providers registered")
        for provider in providers:
            report.merge(self.validate_ephemeris_provider(provider))
        report.merge(self._finish(own))
        return report

    # ───────────────────────── violation log ─────────────────────────
    def _finish(self, report: ValidationReport) -> ValidationReport:
        for v in report.violations:
            if len(self._log) == self._log.maxlen and not self.integrity_compromised:
                self.integrity_compromised = True
                log.error("validator violation log overflowed (%d entries)", self._log.maxlen)
            self._log.append(v)
            self._total += 1
            if v.severity == ERROR:
                log.warning("%s: %s", v.component, v.message)
        return report

    def get_violations(self) -> List[Violation]:
        return list(self._log)

    def get_statistics(self) -> Dict[str, Any]:
        by_component: Dict[str, int] = {}
        for v in self._log:
            by_component[v.component] = by_component.get(v.component, 0) + 1
        return {
            "total": self._total,
            "retained": len(self._log),
            "errors": sum(1 for v in self._log if v.severity == ERROR),
            "warnings": sum(1 for v in self._log if v.severity == WARNING),
            "by_component": by_component,
            "integrity_compromised": self.integrity_compromised,
        }

    def clear(self) -> None:
        self._log.clear()
        self._total = 0
        self.integrity_compromised = False


def _equivalent(a: StateVector, b: StateVector) -> bool:
    dp = (a.position - b.position).magnitude()
    dv = (a.velocity - b.velocity).magnitude()
    return (dp <= POSITION_TOLERANCE_KM and dv <= VELOCITY_TOLERANCE_KM_S
            and a.metadata.julian_date == b.metadata.julian_date)


__all__ = [
    "ERROR",
    "WARNING",
    "EXCLUDED_FEATURES",
    "Violation",
    "ValidationReport",
    "ArchitecturalValidator",
]
