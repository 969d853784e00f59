# spacetime/core/space_time_core.py
# -----------------------------------------------------------------------------
# Space-Time Core: composition root
#
# Wires the host-owned Time Authority and the authoritative frame to an
# Ephemeris Router and a body-hierarchy cache. Query operations return
# Results; administrative operations are reachable only from the physical
# layer (presentation code receives a PresentationView instead).
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .boundary import PresentationView, ViolationReporter
from .constants import BODY_HIERARCHY_DEFINITIONS, LEVEL_STAR, PRIMARY_FRAME_ID
from .errors import DisposedError, ErrorCode, NotInitializedError, Result, fail, ok
from .provider import EphemerisProvider
from .router import EphemerisRouter
from .time_authority import Subscription, TimeAuthority, TimeCallback
from .types import BodyHierarchy, FrameType, ReferenceFrameInfo, StateVector
from ..utils.metrics import SpaceTimeMetrics

log = logging.getLogger(__name__)

HierarchyDefinitions = Mapping[str, Tuple[Optional[str], int]]


def check_hierarchy_definitions(definitions: HierarchyDefinitions) -> None:
    """Raise ValueError unless every parent is defined and sits on a lower level."""
    for body_id, (parent_id, level) in definitions.items():
        if parent_id is None:
            continue
        if parent_id not in definitions:
            raise ValueError(f"{body_id}: parent '{parent_id}' is not defined")
        parent_level = definitions[parent_id][1]
        if parent_level >= level:
            raise ValueError(f"{body_id}: parent level {parent_level} is not below child level {level}")


class SpaceTimeCore:
    def __init__(
        self,
        *,
        primary_frame_id: str = PRIMARY_FRAME_ID,
        hierarchy_definitions: HierarchyDefinitions = BODY_HIERARCHY_DEFINITIONS,
        metrics: Optional[SpaceTimeMetrics] = None,
        router: Optional[EphemerisRouter] = None,
    ) -> None:
        check_hierarchy_definitions(hierarchy_definitions)
        self._primary_frame_id = primary_frame_id
        self._definitions = dict(hierarchy_definitions)
        self.metrics = metrics if metrics is not None else SpaceTimeMetrics()
        self._router = router if router is not None else EphemerisRouter(metrics=self.metrics)
        self._time: Optional[TimeAuthority] = None
        self._frame: Optional[ReferenceFrameInfo] = None
        self._hierarchy: Dict[str, BodyHierarchy] = {}
        self._initialized = False
        self._disposed = False

    # ───────────────────────── lifecycle ─────────────────────────
    def initialize(self, time_authority: TimeAuthority, reference_frame: ReferenceFrameInfo) -> Result:
        self._guard_disposed()
        if self._initialized:
            return fail(ErrorCode.INVALID_CONFIGURATION, "Space-Time Core already initialized")
        if time_authority is None or reference_frame is None:
            return fail(ErrorCode.INVALID_CONFIGURATION, "time authority and reference frame are required")
        if reference_frame.type is not FrameType.AUTHORITATIVE:
            return fail(ErrorCode.INVALID_CONFIGURATION,
                        f"frame '{reference_frame.frame_id}' is not AUTHORITATIVE",
                        frame_id=reference_frame.frame_id)
        if reference_frame.frame_id != self._primary_frame_id:
            return fail(ErrorCode.INVALID_CONFIGURATION,
                        f"frame '{reference_frame.frame_id}' does not match primary '{self._primary_frame_id}'",
                        frame_id=reference_frame.frame_id, expected=self._primary_frame_id)

        self._time = time_authority
        self._frame = reference_frame
        self._initialized = True
        self._rebuild_hierarchy()
        log.info("space-time core initialized (frame=%s, JD=%.6f)",
                 reference_frame.frame_id, time_authority.get_current_julian_date())
        return ok()

    def is_ready(self) -> bool:
        return self._initialized and not self._disposed

    def dispose(self) -> None:
        """Release references; the host still owns and disposes the Time Authority."""
        self._disposed = True
        self._router.strategy.clear()
        self._hierarchy.clear()
        self._time = None

    # ───────────────────────── administration ─────────────────────────
    def register_ephemeris_provider(self, provider: EphemerisProvider) -> Result:
        problem = self._not_ready()
        if problem is not None:
            return problem
        res = self._router.register_provider(provider)
        if res.success:
            self._rebuild_hierarchy()
        return res

    def set_provider_priority(self, body_id: str, provider_ids: Sequence[str]) -> Result:
        problem = self._not_ready()
        if problem is not None:
            return problem
        return self._router.set_provider_priority(body_id, provider_ids)

    # ───────────────────────── queries ─────────────────────────
    def get_body_state(self, body_id: str, julian_date: float) -> Result:
        problem = self._not_ready()
        if problem is not None:
            return problem
        return self._checked(self._router.get_state(body_id, julian_date))

    def get_bodies_state(self, body_ids: Sequence[str], julian_date: float) -> Result:
        problem = self._not_ready()
        if problem is not None:
            return problem
        if not body_ids:
            return fail(ErrorCode.INVALID_BODY_ID, "body id list is empty")
        states: Dict[str, StateVector] = {}
        for body_id in body_ids:
            if body_id in states:
                continue
            res = self.get_body_state(body_id, julian_date)
            if not res.success:
                return res
            states[body_id] = res.data
        return ok(states)

    def get_body_states(self, body_id: str, julian_dates: Sequence[float]) -> Result:
        """One body at many epochs (bulk provider query)."""
        problem = self._not_ready()
        if problem is not None:
            return problem
        res = self._router.get_states(body_id, julian_dates)
        if not res.success:
            return res
        for state in res.data:
            if state.metadata.reference_frame != self._frame.frame_id:
                return self._frame_mismatch(state)
        return res

    def get_body_hierarchy(self, body_id: str) -> Result:
        problem = self._not_ready()
        if problem is not None:
            return problem
        entry = self._hierarchy.get(body_id)
        if entry is None:
            return fail(ErrorCode.BODY_NOT_SUPPORTED, f"no hierarchy entry for '{body_id}'", body_id=body_id)
        return ok(entry)

    def get_reference_frame_info(self) -> ReferenceFrameInfo:
        self._require_ready()
        return self._frame  # type: ignore[return-value]

    def get_available_bodies(self) -> List[str]:
        self._require_ready()
        return sorted(self._provider_bodies())

    def get_current_time(self) -> float:
        self._require_ready()
        return self._time.get_current_julian_date()  # type: ignore[union-attr]

    def subscribe_to_time(self, callback: TimeCallback) -> Subscription:
        self._require_ready()
        return self._time.subscribe(callback)  # type: ignore[union-attr]

    def get_providers(self) -> List[EphemerisProvider]:
        strategy = self._router.strategy
        return [strategy.get_provider(pid) for pid in strategy.get_registered_providers()]

    def get_provider_count(self) -> int:
        return len(self._router.strategy.get_registered_providers())

    def get_hierarchy_cache_size(self) -> int:
        return len(self._hierarchy)

    def presentation_view(self, reporter: Optional[ViolationReporter] = None) -> PresentationView:
        self._require_ready()
        return PresentationView(self, reporter if reporter is not None else ViolationReporter(metrics=self.metrics))

    def get_system_info(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "disposed": self._disposed,
            "reference_frame": self._frame.frame_id if self._frame is not None else None,
            "providers": self._router.strategy.get_registered_providers(),
            "hierarchy_entries": len(self._hierarchy),
        }

    # ───────────────────────── internals ─────────────────────────
    def _provider_bodies(self) -> set:
        bodies: set = set()
        for provider in self.get_providers():
            bodies.update(provider.get_supported_bodies())
        return bodies

    def _rebuild_hierarchy(self) -> None:
        links: Dict[str, Tuple[Optional[str], int]] = dict(self._definitions)
        for body_id in sorted(self._provider_bodies()):
            links.setdefault(body_id, (None, LEVEL_STAR))
        children: Dict[str, List[str]] = {body_id: [] for body_id in links}
        for body_id, (parent_id, _) in links.items():
            if parent_id is not None:
                children[parent_id].append(body_id)
        self._hierarchy = {
            body_id: BodyHierarchy(body_id, parent_id, tuple(children[body_id]), level)
            for body_id, (parent_id, level) in links.items()
        }
        log.debug("hierarchy cache rebuilt: %d bodies", len(self._hierarchy))

    def _checked(self, res: Result) -> Result:
        if res.success and res.data.metadata.reference_frame != self._frame.frame_id:
            return self._frame_mismatch(res.data)
        return res

    def _frame_mismatch(self, state: StateVector) -> Result:
        return fail(ErrorCode.CALCULATION_FAILED,
                    f"provider {state.metadata.provider} answered in frame '{state.metadata.reference_frame}'",
                    provider_id=state.metadata.provider, expected=self._frame.frame_id)

    def _not_ready(self) -> Optional[Result]:
        self._guard_disposed()
        if not self._initialized:
            return fail(ErrorCode.NOT_INITIALIZED, "Space-Time Core not initialized")
        return None

    def _require_ready(self) -> None:
        self._guard_disposed()
        if not self._initialized:
            raise NotInitializedError()

    def _guard_disposed(self) -> None:
        if self._disposed:
            raise DisposedError("space-time core has been disposed")


__all__ = ["SpaceTimeCore", "check_hierarchy_definitions"]
