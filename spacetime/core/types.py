# spacetime/core/types.py
# -----------------------------------------------------------------------------
# Immutable value types shared by every layer of the foundation:
# vectors, state vectors, reference frames, hierarchy entries and the
# time continuity policy.
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, k: float) -> "Vector3":
        return Vector3(self.x * k, self.y * k, self.z * k)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


ZERO_VECTOR = Vector3(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class StateMetadata:
    julian_date: float
    reference_frame: str
    provider: str
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class StateVector:
    """Heliocentric position (km) and velocity (km/s) of one body at one instant."""
    position: Vector3
    velocity: Vector3
    radius: float
    metadata: StateMetadata

    def is_finite(self) -> bool:
        return self.position.is_finite() and self.velocity.is_finite() and math.isfinite(self.radius)


class FrameType(str, Enum):
    AUTHORITATIVE = "AUTHORITATIVE"
    DERIVED_DISPLAY = "DERIVED_DISPLAY"


@dataclass(frozen=True)
class FrameUnits:
    position: str = "km"
    velocity: str = "km/s"
    time: str = "JD"


@dataclass(frozen=True)
class ReferenceFrameInfo:
    frame_id: str
    name: str
    origin: str
    axes: str
    type: FrameType
    units: FrameUnits = FrameUnits()


@dataclass(frozen=True)
class BodyHierarchy:
    body_id: str
    parent_id: Optional[str]
    children: Tuple[str, ...]
    hierarchy_level: int


@dataclass(frozen=True)
class TimeContinuityConstraints:
    max_time_jump_days: float
    max_speed_multiplier: float
    min_time_precision: float
    min_julian_date: float
    max_julian_date: float

    def contains(self, jd: float) -> bool:
        return math.isfinite(jd) and self.min_julian_date <= jd <= self.max_julian_date


class TimeRange(NamedTuple):
    start_jd: float
    end_jd: float

    def contains(self, jd: float) -> bool:
        return self.start_jd <= jd <= self.end_jd


class TimeState(str, Enum):
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"


__all__ = [
    "Vector3",
    "ZERO_VECTOR",
    "StateMetadata",
    "StateVector",
    "FrameType",
    "FrameUnits",
    "ReferenceFrameInfo",
    "BodyHierarchy",
    "TimeContinuityConstraints",
    "TimeRange",
    "TimeState",
]
