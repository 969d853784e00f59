# tests/test_config.py
from __future__ import annotations

import logging

import pytest

from spacetime.core.constants import J2000_JD, PRIMARY_FRAME_ID
from spacetime.core.errors import ErrorCode, SpaceTimeException
from spacetime.core.settings import settings_from_config
from spacetime.system import build_space_time_system
from spacetime.utils.config import load_config
from spacetime.utils.log import configure_logging


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("STF_CONFIG", "STF_JPL_KERNEL", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


def test_packaged_defaults() -> None:
    cfg = load_config()
    assert cfg.reference_frame.primary.frame_id == PRIMARY_FRAME_ID
    assert cfg.providers.jpl.enabled is False
    s = settings_from_config(cfg)
    assert s.enabled_providers == ("vsop87", "simplified")
    assert s.constraints.max_speed_multiplier == 1e6
    assert s.initial_julian_date is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("STF_JPL_KERNEL", "/data/de421.bsp")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    s = settings_from_config(load_config())
    assert s.enabled_providers == ("vsop87", "simplified", "jpl")
    assert s.jpl_kernel_path == "/data/de421.bsp"
    assert s.log_level == "DEBUG"


def test_config_file_from_environment(monkeypatch, tmp_path) -> None:
    path = tmp_path / "stf.yaml"
    path.write_text(
        "time:\n  initial_julian_date: 2451545.0\n  max_time_jump_days: 7\n"
        "providers:\n  simplified:\n    enabled: false\n"
        "priorities:\n  earth: [vsop87]\n"
        "reference_frame:\n  derived:\n    - {frame_id: ECLIPTIC_DISPLAY, name: Ecliptic, origin: Sun, axes: Ecliptic}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("STF_CONFIG", str(path))
    system = build_space_time_system()
    assert system.time_authority.get_current_julian_date() == J2000_JD
    assert system.time_authority.get_constraints().max_time_jump_days == 7.0
    assert [p.get_provider_id() for p in system.core.get_providers()] == ["vsop87"]
    assert system.frames.get_derived_frame_count() == 1
    assert system.core.get_body_state("earth", J2000_JD).data.metadata.provider == "vsop87"


@pytest.mark.parametrize("cfg", [
    {"providers": {"hubble": {"enabled": True}}},
    {"time": {"max_speed_multiplier": "fast"}},
    {"time": {"min_julian_date": 10, "max_julian_date": 5}},
    {"priorities": {"earth": []}},
    {"boundary": {"violation_budget": 0}},
    {"time": "soon"},
    {"reference_frame": {"derived": ["ECLIPTIC"]}},
    {"reference_frame": {"derived": "ECLIPTIC"}},
    {"reference_frame": {"primary": {"units": "km"}}},
    {"providers": {"vsop87": True}},
    {"providers": {"jpl": False}},
])
def test_malformed_config_is_rejected(cfg) -> None:
    with pytest.raises(SpaceTimeException) as exc:
        settings_from_config(cfg)
    assert exc.value.code is ErrorCode.INVALID_CONFIGURATION


def test_non_mapping_config_file(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_jpl_kernel_is_skipped(tmp_path) -> None:
    cfg = {"time": {"initial_julian_date": J2000_JD},
           "providers": {"jpl": {"enabled": True, "kernel_path": str(tmp_path / "absent.bsp")}}}
    system = build_space_time_system(cfg)
    assert {p.get_provider_id() for p in system.core.get_providers()} == {"vsop87", "simplified"}
    assert system.view.get_body_state("moon").success


def test_explicit_initial_julian_date_wins() -> None:
    system = build_space_time_system({"time": {"initial_julian_date": J2000_JD}}, initial_julian_date=J2000_JD + 3)
    assert system.view.get_current_time() == J2000_JD + 3


def test_logging_is_configured_on_request(monkeypatch) -> None:
    seen = []
    monkeypatch.setattr("spacetime.system.configure_logging", seen.append)
    build_space_time_system({"logging": {"configure": True, "level": "warning"},
                             "time": {"initial_julian_date": J2000_JD}})
    assert seen == ["warning"]


def test_configure_logging_levels(monkeypatch) -> None:
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)
    assert configure_logging("debug") == logging.DEBUG
    assert logging.getLogger("spacetime").level == logging.DEBUG
    assert configure_logging("nonsense") == logging.INFO
