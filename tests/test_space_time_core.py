# tests/test_space_time_core.py
from __future__ import annotations

from dataclasses import replace

import pytest

from spacetime.core.constants import J2000_JD, PLANETS, PRIMARY_REFERENCE_FRAME
from spacetime.core.errors import DisposedError, ErrorCode, NotInitializedError
from spacetime.core.space_time_core import SpaceTimeCore, check_hierarchy_definitions
from spacetime.core.time_authority import TimeAuthority
from spacetime.core.types import FrameType

from conftest import LinearProvider

# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────

def test_operations_before_initialize_fail() -> None:
    core = SpaceTimeCore()
    assert core.get_body_state("earth", J2000_JD).error.code is ErrorCode.NOT_INITIALIZED
    assert core.get_bodies_state(["earth"], J2000_JD).error.code is ErrorCode.NOT_INITIALIZED
    assert core.get_body_hierarchy("earth").error.code is ErrorCode.NOT_INITIALIZED
    assert core.register_ephemeris_provider(LinearProvider("a", ["x"])).error.code is ErrorCode.NOT_INITIALIZED
    assert core.set_provider_priority("x", ["a"]).error.code is ErrorCode.NOT_INITIALIZED
    for accessor in (core.get_reference_frame_info, core.get_available_bodies, core.get_current_time):
        with pytest.raises(NotInitializedError):
            accessor()
    assert not core.is_ready()


def test_initialize_is_one_shot(core, authority) -> None:
    res = core.initialize(authority, PRIMARY_REFERENCE_FRAME)
    assert res.error.code is ErrorCode.INVALID_CONFIGURATION


def test_initialize_rejects_derived_frame(authority) -> None:
    frame = replace(PRIMARY_REFERENCE_FRAME, type=FrameType.DERIVED_DISPLAY)
    assert SpaceTimeCore().initialize(authority, frame).error.code is ErrorCode.INVALID_CONFIGURATION


def test_initialize_rejects_mismatched_primary(authority) -> None:
    frame = replace(PRIMARY_REFERENCE_FRAME, frame_id="GALACTIC")
    assert SpaceTimeCore().initialize(authority, frame).error.code is ErrorCode.INVALID_CONFIGURATION


def test_initialize_rejects_missing_arguments(authority) -> None:
    assert SpaceTimeCore().initialize(None, PRIMARY_REFERENCE_FRAME).error.code is ErrorCode.INVALID_CONFIGURATION
    assert SpaceTimeCore().initialize(authority, None).error.code is ErrorCode.INVALID_CONFIGURATION


def test_dispose(core) -> None:
    core.dispose()
    assert not core.is_ready()
    with pytest.raises(DisposedError):
        core.get_body_state("earth", J2000_JD)


# ─────────────────────────────────────────────────────────────────────────────
# Queries
# ─────────────────────────────────────────────────────────────────────────────

def test_get_body_state_earth(planetary_core) -> None:
    res = planetary_core.get_body_state("earth", J2000_JD)
    assert res.success
    assert 1.47e8 <= res.data.position.magnitude() <= 1.52e8
    assert res.data.metadata.reference_frame == PRIMARY_REFERENCE_FRAME.frame_id


def test_get_bodies_state_returns_all_or_nothing(planetary_core) -> None:
    res = planetary_core.get_bodies_state(["sun", "earth", "moon"], J2000_JD)
    assert res.success
    assert set(res.data) == {"sun", "earth", "moon"}
    bad = planetary_core.get_bodies_state(["earth", "titan", "mars"], J2000_JD)
    assert not bad.success
    assert bad.data is None
    assert bad.error.code is ErrorCode.PROVIDER_UNAVAILABLE


def test_get_bodies_state_empty_list(planetary_core) -> None:
    assert planetary_core.get_bodies_state([], J2000_JD).error.code is ErrorCode.INVALID_BODY_ID


def test_get_bodies_state_computes_repeated_body_once(core) -> None:
    provider = LinearProvider("lin", ["probe"])
    core.register_ephemeris_provider(provider)
    res = core.get_bodies_state(["probe", "probe", "probe"], J2000_JD)
    assert res.success and list(res.data) == ["probe"]
    assert provider.calls == 1


def test_get_body_states_many_epochs(planetary_core) -> None:
    jds = [J2000_JD, J2000_JD + 10.0]
    res = planetary_core.get_body_states("mars", jds)
    assert res.success
    assert [s.metadata.julian_date for s in res.data] == jds


def test_state_in_foreign_frame_is_rejected(core) -> None:
    core.register_ephemeris_provider(LinearProvider("rogue", ["probe"], reference_frame_id="ECLIPTIC_DISPLAY"))
    res = core.get_body_state("probe", J2000_JD)
    assert res.error.code is ErrorCode.CALCULATION_FAILED
    assert res.error.details["provider_id"] == "rogue"


def test_available_bodies_is_sorted_union(planetary_core) -> None:
    assert planetary_core.get_available_bodies() == sorted(set(PLANETS) | {"sun", "moon"})
    assert planetary_core.get_provider_count() == 2


def test_core_reads_time_by_reference(core, authority) -> None:
    authority.set_time(J2000_JD + 0.75)
    assert core.get_current_time() == J2000_JD + 0.75


def test_subscribe_to_time_through_core(core, authority) -> None:
    seen = []
    core.subscribe_to_time(seen.append)
    authority.set_time(J2000_JD + 0.5)
    assert seen == [J2000_JD, J2000_JD + 0.5]


def test_priorities_through_core(core) -> None:
    a = LinearProvider("A", ["probe"])
    b = LinearProvider("B", ["probe"])
    core.register_ephemeris_provider(a)
    core.register_ephemeris_provider(b)
    assert core.get_body_state("probe", J2000_JD).data.metadata.provider == "A"
    assert core.set_provider_priority("probe", ["B"]).success
    assert core.get_body_state("probe", J2000_JD).data.metadata.provider == "B"
    assert core.set_provider_priority("probe", ["C"]).error.code is ErrorCode.PROVIDER_UNAVAILABLE


# ─────────────────────────────────────────────────────────────────────────────
# Hierarchy
# ─────────────────────────────────────────────────────────────────────────────

def test_static_hierarchy(planetary_core) -> None:
    earth = planetary_core.get_body_hierarchy("earth").data
    assert earth.parent_id == "sun"
    assert earth.children == ("moon",)
    assert earth.hierarchy_level == 1
    sun = planetary_core.get_body_hierarchy("sun").data
    assert sun.parent_id is None and sun.hierarchy_level == 0
    assert sun.children == PLANETS
    jupiter = planetary_core.get_body_hierarchy("jupiter").data
    assert jupiter.children == ("io", "europa", "ganymede", "callisto")


def test_discovered_body_becomes_root(core) -> None:
    core.register_ephemeris_provider(LinearProvider("comets", ["halley"]))
    halley = core.get_body_hierarchy("halley").data
    assert halley.parent_id is None
    assert halley.children == ()
    assert halley.hierarchy_level == 0


def test_unknown_hierarchy_entry(core) -> None:
    assert core.get_body_hierarchy("vulcan").error.code is ErrorCode.BODY_NOT_SUPPORTED


def test_hierarchy_links_are_consistent(planetary_core) -> None:
    bodies = [b for b in planetary_core.get_available_bodies()] + ["io", "triton"]
    entries = {b: planetary_core.get_body_hierarchy(b).data for b in bodies}
    for body_id, entry in entries.items():
        if entry.parent_id is not None:
            parent = planetary_core.get_body_hierarchy(entry.parent_id).data
            assert body_id in parent.children
            assert parent.hierarchy_level < entry.hierarchy_level
        for child in entry.children:
            assert planetary_core.get_body_hierarchy(child).data.parent_id == body_id


def test_registration_rebuilds_hierarchy(core) -> None:
    before = core.get_hierarchy_cache_size()
    core.register_ephemeris_provider(LinearProvider("extra", ["halley", "earth"]))
    assert core.get_hierarchy_cache_size() == before + 1


def test_bad_hierarchy_definitions_raise() -> None:
    with pytest.raises(ValueError):
        check_hierarchy_definitions({"moon": ("earth", 2)})
    with pytest.raises(ValueError):
        check_hierarchy_definitions({"sun": (None, 1), "earth": ("sun", 1)})
    check_hierarchy_definitions({"sun": (None, 0), "earth": ("sun", 1)})


def test_independent_cores_share_nothing() -> None:
    ta = TimeAuthority(J2000_JD)
    one, two = SpaceTimeCore(), SpaceTimeCore()
    one.initialize(ta, PRIMARY_REFERENCE_FRAME)
    two.initialize(ta, PRIMARY_REFERENCE_FRAME)
    one.register_ephemeris_provider(LinearProvider("A", ["probe"]))
    assert two.get_provider_count() == 0
    assert two.register_ephemeris_provider(LinearProvider("A", ["probe"])).success
