# spacetime/core/boundary.py
# -----------------------------------------------------------------------------
# Layer boundary between physical truth and presentation code
#
# • ReadOnlySpaceTime: the narrow interface presentation code is typed against
# • PresentationView: the runtime object implementing it over a core; write
#   operations fail UNAUTHORIZED_ACCESS and attribute writes raise
# • LayerAccessValidator: the same allow/deny decision as a pure function
# • ViolationReporter: bounded channel of violations for the host to act on;
#   it counts and records, it never raises or terminates
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Deque, FrozenSet, List, Optional, Protocol, Sequence

from .errors import ErrorCode, Result, UnauthorizedAccessError, fail, ok
from ..utils.metrics import SpaceTimeMetrics

if TYPE_CHECKING:
    from .space_time_core import SpaceTimeCore
    from .time_authority import Subscription, TimeCallback
    from .types import ReferenceFrameInfo

log = logging.getLogger(__name__)

READ_OPERATIONS: FrozenSet[str] = frozenset({
    "get_body_state",
    "get_bodies_state",
    "get_body_hierarchy",
    "get_reference_frame_info",
    "get_available_bodies",
    "get_current_time",
    "subscribe_to_time",
})

ADMIN_OPERATIONS: FrozenSet[str] = frozenset({
    "register_ephemeris_provider",
    "set_provider_priority",
    "initialize",
    "set_time",
    "set_time_speed",
    "start",
    "stop",
})

PHYSICAL_LAYER = "physical"
RENDER_LAYER = "render"

DEFAULT_VIOLATION_BUDGET = 10
DEFAULT_VIOLATION_CAPACITY = 100


# ─────────────────────────────────────────────────────────────────────────────
# Pure allow/deny decision
# ─────────────────────────────────────────────────────────────────────────────
class LayerAccessValidator:
    """Stateless: decides whether presentation code may call an operation."""

    @staticmethod
    def validate_operation(operation: str) -> Result:
        if operation in READ_OPERATIONS:
            return ok()
        if operation in ADMIN_OPERATIONS:
            return fail(ErrorCode.UNAUTHORIZED_ACCESS,
                        f"operation '{operation}' is forbidden from the presentation layer",
                        operation=operation)
        return fail(ErrorCode.UNAUTHORIZED_ACCESS, f"unknown operation '{operation}' is not permitted",
                    operation=operation)

    @staticmethod
    def is_allowed(operation: str) -> bool:
        return operation in READ_OPERATIONS

    @staticmethod
    def get_allowed_operations() -> FrozenSet[str]:
        return READ_OPERATIONS

    @staticmethod
    def get_forbidden_operations() -> FrozenSet[str]:
        return ADMIN_OPERATIONS


# ─────────────────────────────────────────────────────────────────────────────
# Violation reporting
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ViolationRecord:
    operation: str
    layer: str
    message: str
    timestamp: float


class ViolationReporter:
    def __init__(
        self,
        max_violations: int = DEFAULT_VIOLATION_BUDGET,
        capacity: int = DEFAULT_VIOLATION_CAPACITY,
        metrics: Optional[SpaceTimeMetrics] = None,
    ) -> None:
        if max_violations < 1 or capacity < 1:
            raise ValueError("violation budget and capacity must be positive")
        self.max_violations = max_violations
        self._records: Deque[ViolationRecord] = deque(maxlen=capacity)
        self._count = 0
        self._metrics = metrics

    def record(self, operation: str, message: str, layer: str = RENDER_LAYER) -> ViolationRecord:
        rec = ViolationRecord(operation=operation, layer=layer, message=message, timestamp=time.time())
        self._records.append(rec)
        self._count += 1
        if self._metrics is not None:
            self._metrics.boundary_violations.labels(operation=operation).inc()
        log.error("layer boundary violation #%d (%s): %s", self._count, layer, message)
        if self._count == self.max_violations:
            log.error("violation budget of %d exhausted", self.max_violations)
        return rec

    @property
    def violation_count(self) -> int:
        return self._count

    @property
    def budget_exhausted(self) -> bool:
        return self._count >= self.max_violations

    def recent(self) -> List[ViolationRecord]:
        return list(self._records)

    def drain(self) -> List[ViolationRecord]:
        """Hand queued records to the host; the running count is kept."""
        out = list(self._records)
        self._records.clear()
        return out

    def reset(self) -> None:
        self._records.clear()
        self._count = 0


class LayerBoundaryEnforcer:
    def __init__(self, reporter: ViolationReporter) -> None:
        self.reporter = reporter

    def validate_layer_separation(self, source_layer: str, target_layer: str, operation: str) -> Result:
        """Render → Physical calls must be read operations; every other direction is allowed."""
        if source_layer == RENDER_LAYER and target_layer == PHYSICAL_LAYER:
            res = LayerAccessValidator.validate_operation(operation)
            if not res.success:
                self.reporter.record(operation, f"render layer attempted forbidden operation: {operation}")
            return res
        return ok()


# ─────────────────────────────────────────────────────────────────────────────
# Narrow interface + runtime view
# ─────────────────────────────────────────────────────────────────────────────
class ReadOnlySpaceTime(Protocol):
    def get_body_state(self, body_id: str, julian_date: Optional[float] = None) -> Result: ...
    def get_bodies_state(self, body_ids: Sequence[str], julian_date: Optional[float] = None) -> Result: ...
    def get_body_hierarchy(self, body_id: str) -> Result: ...
    def get_reference_frame_info(self) -> "ReferenceFrameInfo": ...
    def get_available_bodies(self) -> List[str]: ...
    def get_current_time(self) -> float: ...
    def subscribe_to_time(self, callback: "TimeCallback") -> "Subscription": ...


class PresentationView:
    """Read-only face of a SpaceTimeCore handed to presentation code."""
    __slots__ = ("_core", "_reporter")

    def __init__(self, core: "SpaceTimeCore", reporter: ViolationReporter) -> None:
        object.__setattr__(self, "_core", core)
        object.__setattr__(self, "_reporter", reporter)

    # reads; body-state queries default to the current epoch
    def get_body_state(self, body_id: str, julian_date: Optional[float] = None) -> Result:
        jd = self._core.get_current_time() if julian_date is None else julian_date
        return self._core.get_body_state(body_id, jd)

    def get_bodies_state(self, body_ids: Sequence[str], julian_date: Optional[float] = None) -> Result:
        jd = self._core.get_current_time() if julian_date is None else julian_date
        return self._core.get_bodies_state(body_ids, jd)

    def get_body_hierarchy(self, body_id: str) -> Result:
        return self._core.get_body_hierarchy(body_id)

    def get_reference_frame_info(self) -> "ReferenceFrameInfo":
        return self._core.get_reference_frame_info()

    def get_available_bodies(self) -> List[str]:
        return self._core.get_available_bodies()

    def get_current_time(self) -> float:
        return self._core.get_current_time()

    def subscribe_to_time(self, callback: "TimeCallback") -> "Subscription":
        return self._core.subscribe_to_time(callback)

    @property
    def reporter(self) -> ViolationReporter:
        return self._reporter

    # administrative operations are denied
    def _deny(self, operation: str) -> Result:
        res = LayerAccessValidator.validate_operation(operation)
        self._reporter.record(operation, res.error.message)
        return res

    def register_ephemeris_provider(self, *_: Any, **__: Any) -> Result:
        return self._deny("register_ephemeris_provider")

    def set_provider_priority(self, *_: Any, **__: Any) -> Result:
        return self._deny("set_provider_priority")

    def initialize(self, *_: Any, **__: Any) -> Result:
        return self._deny("initialize")

    def set_time(self, *_: Any, **__: Any) -> Result:
        return self._deny("set_time")

    def set_time_speed(self, *_: Any, **__: Any) -> Result:
        return self._deny("set_time_speed")

    def start(self, *_: Any, **__: Any) -> Result:
        return self._deny("start")

    def stop(self, *_: Any, **__: Any) -> Result:
        return self._deny("stop")

    def __setattr__(self, name: str, value: Any) -> None:
        self._reporter.record("setattr", f"attempted to set '{name}' on the presentation view")
        raise UnauthorizedAccessError(f"presentation view is read-only (attribute '{name}')", attribute=name)

    def __delattr__(self, name: str) -> None:
        self._reporter.record("delattr", f"attempted to delete '{name}' on the presentation view")
        raise UnauthorizedAccessError(f"presentation view is read-only (attribute '{name}')", attribute=name)

    def __repr__(self) -> str:
        return f"PresentationView(violations={self._reporter.violation_count})"


__all__ = [
    "READ_OPERATIONS",
    "ADMIN_OPERATIONS",
    "PHYSICAL_LAYER",
    "RENDER_LAYER",
    "LayerAccessValidator",
    "ViolationRecord",
    "ViolationReporter",
    "LayerBoundaryEnforcer",
    "ReadOnlySpaceTime",
    "PresentationView",
]
