from __future__ import annotations

"""
Pytest configuration for the space-time foundation suite.

- Registers Hypothesis profiles for local dev and CI.
- Provides a minimal in-memory provider for routing/contract tests.
- Builds fresh, independent instances per test (no shared registries).
"""

import os
from typing import Iterable, Sequence, Tuple

import pytest
from hypothesis import settings, HealthCheck

from spacetime.core.constants import J2000_JD, PRIMARY_FRAME_ID, PRIMARY_REFERENCE_FRAME
from spacetime.core.errors import Result
from spacetime.core.provider import BaseEphemerisProvider
from spacetime.core.reference_frame import ReferenceFrameManager
from spacetime.core.space_time_core import SpaceTimeCore
from spacetime.core.time_authority import TimeAuthority
from spacetime.core.types import Vector3
from spacetime.core.vsop87 import VSOP87Provider
from spacetime.core.lunar import SimplifiedProvider
from spacetime.utils.metrics import SpaceTimeMetrics


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,
        max_examples=60,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=120,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Test providers
# ──────────────────────────────────────────────────────────────────────────────
class LinearProvider(BaseEphemerisProvider):
    """Bodies moving on straight lines: position = origin + velocity·Δt."""

    def __init__(self, provider_id: str, bodies: Iterable[str],
                 time_range: Tuple[float, float] = (J2000_JD - 36525.0, J2000_JD + 36525.0),
                 reference_frame_id: str = PRIMARY_FRAME_ID) -> None:
        bodies = tuple(bodies)
        super().__init__(provider_id, bodies, time_range,
                         default_accuracy_km=10.0,
                         radii_km={b: 1000.0 for b in bodies},
                         reference_frame_id=reference_frame_id)
        self.calls = 0

    def supports_velocity(self) -> bool:
        return True

    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        self.calls += 1
        dt = (julian_date - J2000_JD) * 86400.0
        v = Vector3(10.0, -5.0, 1.0)
        return Vector3(1.0e8, 0.0, 0.0) + v.scaled(dt), v


class RaisingProvider(LinearProvider):
    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        raise ArithmeticError("solver blew up")


class RaisingGetState(LinearProvider):
    def get_state(self, body_id: str, julian_date: float) -> Result:
        raise RuntimeError("provider crashed")


class TupleRangeProvider(LinearProvider):
    """Declares its range as a plain (start, end) tuple."""

    def get_time_range(self):
        rng = super().get_time_range()
        return (rng.start_jd, rng.end_jd)


class NoBulkProvider(LinearProvider):
    def get_states(self, body_id: str, julian_dates: Sequence[float]) -> Result:
        raise NotImplementedError


class ExplodingBulkProvider(LinearProvider):
    def get_states(self, body_id: str, julian_dates: Sequence[float]) -> Result:
        raise RuntimeError("bulk path exploded")


# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def metrics() -> SpaceTimeMetrics:
    return SpaceTimeMetrics()


@pytest.fixture
def authority(metrics) -> TimeAuthority:
    return TimeAuthority(J2000_JD, metrics=metrics)


@pytest.fixture
def frames() -> ReferenceFrameManager:
    return ReferenceFrameManager(PRIMARY_REFERENCE_FRAME)


@pytest.fixture
def core(authority, metrics) -> SpaceTimeCore:
    c = SpaceTimeCore(metrics=metrics)
    assert c.initialize(authority, PRIMARY_REFERENCE_FRAME).success
    return c


@pytest.fixture
def planetary_core(core) -> SpaceTimeCore:
    assert core.register_ephemeris_provider(VSOP87Provider()).success
    assert core.register_ephemeris_provider(SimplifiedProvider()).success
    return core
