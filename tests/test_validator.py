# tests/test_validator.py
from __future__ import annotations

import pytest

from conftest import LinearProvider, RaisingGetState, RaisingProvider, TupleRangeProvider
from spacetime.core.constants import J2000_JD
from spacetime.core.errors import ok
from spacetime.core.lunar import SimplifiedProvider
from spacetime.core.settings import SpaceTimeSettings
from spacetime.core.types import StateMetadata, StateVector, Vector3
from spacetime.core.validator import ERROR, WARNING, ArchitecturalValidator
from spacetime.core.vsop87 import VSOP87Provider
from spacetime.system import build_space_time_system


@pytest.fixture
def validator() -> ArchitecturalValidator:
    return ArchitecturalValidator()


def _state(**overrides) -> StateVector:
    fields = dict(
        position=Vector3(1.5e8, 0.0, 0.0),
        velocity=Vector3(0.0, 29.8, 0.0),
        radius=6371.0,
        metadata=StateMetadata(J2000_JD, "ICRF_J2000_HELIOCENTRIC", "vsop87", 100.0),
    )
    fields.update(overrides)
    return StateVector(**fields)


# ─────────────────────────────────────────────────────────────────────────────
# Provider contract
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("provider", [VSOP87Provider(), SimplifiedProvider(), LinearProvider("line", ["probe"])],
                         ids=["vsop87", "simplified", "linear"])
def test_shipped_providers_satisfy_contract(validator, provider) -> None:
    report = validator.validate_ephemeris_provider(provider)
    assert report.is_valid, [v.message for v in report.errors]


def test_failing_provider_is_flagged(validator) -> None:
    report = validator.validate_ephemeris_provider(RaisingProvider("broken", ["earth"]))
    assert not report.is_valid
    assert any("get_state(earth" in v.message for v in report.errors)


def test_crashing_provider_yields_invalid_report(validator) -> None:
    report = validator.validate_ephemeris_provider(RaisingGetState("bad", ["earth"]))
    assert not report.is_valid
    assert any("provider crashed" in v.message for v in report.errors)
    assert validator.get_statistics()["errors"] >= 1


def test_crashing_provider_does_not_abort_system_validation() -> None:
    system = build_space_time_system(SpaceTimeSettings(initial_julian_date=J2000_JD))
    assert system.core.register_ephemeris_provider(RaisingGetState("bad", ["halley"])).success
    report = system.validate()
    assert any("provider crashed" in v.message for v in report.errors)
    system.shutdown()


def test_tuple_time_range_is_accepted(validator) -> None:
    provider = TupleRangeProvider("tuple", ["earth"], time_range=(J2000_JD - 10.0, J2000_JD + 10.0))
    report = validator.validate_ephemeris_provider(provider)
    assert report.is_valid, [v.message for v in report.errors]


def test_foreign_frame_provider_is_flagged(validator) -> None:
    report = validator.validate_ephemeris_provider(LinearProvider("rogue", ["earth"], reference_frame_id="ECLIPTIC"))
    assert any("ECLIPTIC" in v.message for v in report.errors)


def test_inconsistent_bulk_path_is_flagged(validator) -> None:
    class Drifting(LinearProvider):
        def get_states(self, body_id, julian_dates):
            states = [self.get_state(body_id, jd).data for jd in julian_dates]
            return ok([StateVector(s.position + Vector3(1.0, 0.0, 0.0), s.velocity, s.radius, s.metadata)
                       for s in states])

    report = validator.validate_ephemeris_provider(Drifting("drift", ["earth"]))
    assert any("differs from get_state" in v.message for v in report.errors)


# ─────────────────────────────────────────────────────────────────────────────
# State vector purity
# ─────────────────────────────────────────────────────────────────────────────

def test_clean_state_passes(validator) -> None:
    assert validator.validate_state_vector_purity(_state(), expected_julian_date=J2000_JD).violations == []


def test_impure_states(validator) -> None:
    assert not validator.validate_state_vector_purity(_state(position=Vector3(float("nan"), 0, 0))).is_valid
    assert not validator.validate_state_vector_purity(_state(radius=0.0)).is_valid
    bad_frame = _state(metadata=StateMetadata(J2000_JD, "SCREEN", "vsop87"))
    assert not validator.validate_state_vector_purity(bad_frame).is_valid
    echo = validator.validate_state_vector_purity(_state(), expected_julian_date=J2000_JD + 1)
    assert any("does not echo" in v.message for v in echo.errors)


def test_implausible_magnitudes_only_warn(validator) -> None:
    report = validator.validate_state_vector_purity(_state(velocity=Vector3(5000.0, 0, 0), radius=5e6))
    assert report.is_valid
    assert {v.severity for v in report.violations} == {WARNING}
    assert len(report.warnings) == 2


# ─────────────────────────────────────────────────────────────────────────────
# Scope, boundary, frames, time
# ─────────────────────────────────────────────────────────────────────────────

def test_scope_rejects_excluded_features(validator) -> None:
    report = validator.validate_scope(["Keplerian orbits", "Relativistic corrections", "spacecraft attitude"])
    assert len(report.errors) == 2
    assert validator.validate_scope(["ephemeris routing"]).is_valid


def test_layer_boundary_report(validator) -> None:
    assert validator.validate_layer_boundary(["get_body_state", "get_current_time"]).is_valid
    report = validator.validate_layer_boundary(["get_body_state", "set_time", "reboot"])
    assert len(report.errors) == 2


def test_frames_and_time(validator, frames, authority) -> None:
    assert validator.validate_reference_frame(frames).is_valid
    assert validator.validate_time_authority(authority).is_valid
    assert not ArchitecturalValidator(primary_frame_id="OTHER").validate_reference_frame(frames).is_valid


# ─────────────────────────────────────────────────────────────────────────────
# Whole system + violation log
# ─────────────────────────────────────────────────────────────────────────────

def test_bootstrapped_system_validates() -> None:
    system = build_space_time_system(SpaceTimeSettings(initial_julian_date=J2000_JD))
    report = system.validate()
    assert report.is_valid, [v.message for v in report.errors]
    system.shutdown()


def test_system_with_stray_time_authority_is_invalid(authority) -> None:
    system = build_space_time_system(SpaceTimeSettings(initial_julian_date=J2000_JD + 10))
    report = system.validator.validate_system(system.core, authority, system.frames)
    assert any("time authority" in v.message for v in report.errors)


def test_log_overflow_marks_integrity_compromised() -> None:
    v = ArchitecturalValidator(log_capacity=2)
    v.validate_scope(["relativistic", "attitude"])
    assert not v.integrity_compromised
    v.validate_scope(["propulsion"])
    stats = v.get_statistics()
    assert v.integrity_compromised and stats["integrity_compromised"]
    assert stats["total"] == 3 and stats["retained"] == 2
    assert all(x.severity == ERROR for x in v.get_violations())
    v.clear()
    assert not v.integrity_compromised and v.get_violations() == []

