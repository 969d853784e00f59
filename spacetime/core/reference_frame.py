# spacetime/core/reference_frame.py
# -----------------------------------------------------------------------------
# Reference Frame Manager
#
# Exactly one AUTHORITATIVE frame, fixed at construction and never replaced.
# Derived display frames live in a separate table that presentation code may
# add to and remove from; they are never used for physical computation.
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .constants import PRIMARY_REFERENCE_FRAME
from .errors import ErrorCode, Result, fail, ok
from .types import FrameType, ReferenceFrameInfo

log = logging.getLogger(__name__)


def frame_problem(frame: Any) -> Optional[str]:
    """First structural problem with a frame definition, or None."""
    if not isinstance(frame, ReferenceFrameInfo):
        return f"not a ReferenceFrameInfo: {type(frame).__name__}"
    for field in ("frame_id", "name", "origin", "axes"):
        value = getattr(frame, field)
        if not isinstance(value, str) or not value.strip():
            return f"{field} must be a non-empty string"
    if not isinstance(frame.type, FrameType):
        return f"unknown frame type: {frame.type!r}"
    units = frame.units
    for field in ("position", "velocity", "time"):
        value = getattr(units, field, None)
        if not isinstance(value, str) or not value.strip():
            return f"units.{field} must be a non-empty string"
    return None


class ReferenceFrameManager:
    def __init__(self, primary_frame: ReferenceFrameInfo = PRIMARY_REFERENCE_FRAME,
                 *, primary_frame_id: Optional[str] = None) -> None:
        problem = frame_problem(primary_frame)
        if problem is not None:
            raise ValueError(f"invalid authoritative frame: {problem}")
        if primary_frame.type is not FrameType.AUTHORITATIVE:
            raise ValueError(f"frame {primary_frame.frame_id} is not AUTHORITATIVE")
        self._authoritative = primary_frame
        self._primary_id = primary_frame_id or primary_frame.frame_id
        self._derived: Dict[str, ReferenceFrameInfo] = {}

    # ───────────────────────── authoritative ─────────────────────────
    def get_authoritative_frame(self) -> ReferenceFrameInfo:
        return self._authoritative

    def get_primary_frame_id(self) -> str:
        return self._primary_id

    def validate_authoritative_frame(self, frame_id: str) -> Result:
        if frame_id != self._authoritative.frame_id:
            return fail(ErrorCode.UNAUTHORIZED_ACCESS,
                        f"'{frame_id}' is not the authoritative frame",
                        frame_id=frame_id, authoritative=self._authoritative.frame_id)
        return ok(self._authoritative)

    def validate_phase1_constraints(self) -> Result:
        frames = self.get_all_frames()
        authoritative = [f for f in frames if f.type is FrameType.AUTHORITATIVE]
        if len(authoritative) != 1:
            return fail(ErrorCode.MULTIPLE_AUTHORITATIVE_FRAMES,
                        f"expected exactly one authoritative frame, found {len(authoritative)}",
                        frame_ids=[f.frame_id for f in authoritative])
        if authoritative[0].frame_id != self._primary_id:
            return fail(ErrorCode.INVALID_CONFIGURATION,
                        f"authoritative frame '{authoritative[0].frame_id}' is not the configured primary",
                        expected=self._primary_id)
        return ok()

    # ───────────────────────── derived display frames ─────────────────────────
    def add_derived_frame(self, frame: ReferenceFrameInfo) -> Result:
        if isinstance(frame, ReferenceFrameInfo) and frame.type is FrameType.AUTHORITATIVE:
            return fail(ErrorCode.MULTIPLE_AUTHORITATIVE_FRAMES,
                        "derived frames cannot be AUTHORITATIVE", frame_id=frame.frame_id)
        problem = frame_problem(frame)
        if problem is not None:
            return fail(ErrorCode.INVALID_CONFIGURATION, problem)
        if self.has_frame(frame.frame_id):
            return fail(ErrorCode.INVALID_CONFIGURATION, f"frame id already in use: {frame.frame_id}",
                        frame_id=frame.frame_id)
        self._derived[frame.frame_id] = frame
        log.debug("derived frame added: %s", frame.frame_id)
        return ok()

    def remove_derived_frame(self, frame_id: str) -> Result:
        if frame_id == self._authoritative.frame_id:
            return fail(ErrorCode.UNAUTHORIZED_ACCESS, "the authoritative frame cannot be removed",
                        frame_id=frame_id)
        if frame_id not in self._derived:
            return fail(ErrorCode.INVALID_CONFIGURATION, f"unknown derived frame: {frame_id}", frame_id=frame_id)
        del self._derived[frame_id]
        log.debug("derived frame removed: %s", frame_id)
        return ok()

    # ───────────────────────── lookups ─────────────────────────
    def has_frame(self, frame_id: str) -> bool:
        return frame_id == self._authoritative.frame_id or frame_id in self._derived

    def get_frame_by_id(self, frame_id: str) -> Result:
        if frame_id == self._authoritative.frame_id:
            return ok(self._authoritative)
        frame = self._derived.get(frame_id)
        if frame is None:
            return fail(ErrorCode.INVALID_CONFIGURATION, f"unknown frame: {frame_id}", frame_id=frame_id)
        return ok(frame)

    def get_frame_type(self, frame_id: str) -> Result:
        res = self.get_frame_by_id(frame_id)
        return ok(res.data.type) if res.success else res

    def get_all_frames(self) -> List[ReferenceFrameInfo]:
        return [self._authoritative, *self._derived.values()]

    def get_authoritative_frame_count(self) -> int:
        return sum(1 for f in self.get_all_frames() if f.type is FrameType.AUTHORITATIVE)

    def get_derived_frame_count(self) -> int:
        return len(self._derived)

    def get_system_info(self) -> Dict[str, Any]:
        return {
            "authoritative_frame": self._authoritative.frame_id,
            "primary_frame_id": self._primary_id,
            "derived_frames": sorted(self._derived),
            "total_frames": 1 + len(self._derived),
        }

    def reset(self) -> None:
        """Drop every derived frame; the authoritative frame is untouched."""
        self._derived.clear()


__all__ = ["frame_problem", "ReferenceFrameManager"]
