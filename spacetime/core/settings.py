# spacetime/core/settings.py
# -----------------------------------------------------------------------------
# Typed settings built once from the YAML configuration (AttrDict).
# Missing keys fall back to the built-in constants; malformed values raise
# SpaceTimeException(INVALID_CONFIGURATION).
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import DEFAULT_PROVIDER_PRIORITIES, PRIMARY_REFERENCE_FRAME, TIME_CONTINUITY_CONSTRAINTS
from .errors import ErrorCode, SpaceTimeException
from .types import FrameType, FrameUnits, ReferenceFrameInfo, TimeContinuityConstraints

KNOWN_PROVIDERS = ("vsop87", "simplified", "jpl")


@dataclass(frozen=True)
class SpaceTimeSettings:
    primary_frame: ReferenceFrameInfo = PRIMARY_REFERENCE_FRAME
    derived_frames: Tuple[ReferenceFrameInfo, ...] = ()
    constraints: TimeContinuityConstraints = TIME_CONTINUITY_CONSTRAINTS
    initial_julian_date: Optional[float] = None
    enabled_providers: Tuple[str, ...] = ("vsop87", "simplified")
    jpl_kernel_path: Optional[str] = None
    priorities: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_PROVIDER_PRIORITIES))
    violation_budget: int = 10
    violation_capacity: int = 100
    validator_log_capacity: int = 50
    configure_logging: bool = False
    log_level: str = "INFO"


def _bad(message: str, **context: Any) -> SpaceTimeException:
    return SpaceTimeException(ErrorCode.INVALID_CONFIGURATION, message, **context)


def _section(cfg: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _bad(f"'{key}' must be a mapping")
    return value


def _float(section: Mapping[str, Any], key: str, default: float) -> float:
    raw = section.get(key, default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise _bad(f"'{key}' must be a number: {raw!r}", key=key)
    if not math.isfinite(value):
        raise _bad(f"'{key}' must be finite", key=key)
    return value


def _count(section: Mapping[str, Any], key: str, default: int) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise _bad(f"'{key}' must be an integer: {raw!r}", key=key)
    if value < 1:
        raise _bad(f"'{key}' must be positive", key=key)
    return value


def _frame(raw: Mapping[str, Any], frame_type: FrameType, fallback: Optional[ReferenceFrameInfo] = None) -> ReferenceFrameInfo:
    if not isinstance(raw, Mapping):
        raise _bad(f"frame definition must be a mapping: {raw!r}")
    units = raw.get("units") or {}
    if not isinstance(units, Mapping):
        raise _bad(f"frame units must be a mapping: {units!r}")
    base = fallback.units if fallback is not None else FrameUnits()
    return ReferenceFrameInfo(
        frame_id=str(raw.get("frame_id", fallback.frame_id if fallback else "")),
        name=str(raw.get("name", fallback.name if fallback else "")),
        origin=str(raw.get("origin", fallback.origin if fallback else "")),
        axes=str(raw.get("axes", fallback.axes if fallback else "")),
        type=frame_type,
        units=FrameUnits(
            position=str(units.get("position", base.position)),
            velocity=str(units.get("velocity", base.velocity)),
            time=str(units.get("time", base.time)),
        ),
    )


def _constraints(section: Mapping[str, Any]) -> TimeContinuityConstraints:
    d = TIME_CONTINUITY_CONSTRAINTS
    c = TimeContinuityConstraints(
        max_time_jump_days=_float(section, "max_time_jump_days", d.max_time_jump_days),
        max_speed_multiplier=_float(section, "max_speed_multiplier", d.max_speed_multiplier),
        min_time_precision=_float(section, "min_time_precision", d.min_time_precision),
        min_julian_date=_float(section, "min_julian_date", d.min_julian_date),
        max_julian_date=_float(section, "max_julian_date", d.max_julian_date),
    )
    if c.min_julian_date >= c.max_julian_date:
        raise _bad("min_julian_date must be below max_julian_date")
    if c.max_time_jump_days <= 0 or c.max_speed_multiplier <= 0 or c.min_time_precision <= 0:
        raise _bad("time limits must be positive")
    return c


def settings_from_config(cfg: Mapping[str, Any]) -> SpaceTimeSettings:
    frames = _section(cfg, "reference_frame")
    primary = _frame(frames.get("primary") or {}, FrameType.AUTHORITATIVE, PRIMARY_REFERENCE_FRAME)
    derived_cfg = frames.get("derived") or []
    if not isinstance(derived_cfg, (list, tuple)):
        raise _bad("'reference_frame.derived' must be a list")
    derived = tuple(_frame(raw, FrameType.DERIVED_DISPLAY) for raw in derived_cfg)

    time_cfg = _section(cfg, "time")
    constraints = _constraints(time_cfg)
    initial = time_cfg.get("initial_julian_date")
    if initial is not None:
        initial = _float(time_cfg, "initial_julian_date", 0.0)

    providers_cfg = _section(cfg, "providers")
    enabled = []
    for pid in KNOWN_PROVIDERS:
        entry = _section(providers_cfg, pid)
        if entry.get("enabled", pid != "jpl"):
            enabled.append(pid)
    unknown = sorted(set(providers_cfg) - set(KNOWN_PROVIDERS))
    if unknown:
        raise _bad(f"unknown providers in config: {', '.join(unknown)}", providers=unknown)
    kernel = _section(providers_cfg, "jpl").get("kernel_path")

    priorities = dict(DEFAULT_PROVIDER_PRIORITIES)
    for body_id, ids in (_section(cfg, "priorities")).items():
        if not isinstance(ids, (list, tuple)) or not ids:
            raise _bad(f"priority for '{body_id}' must be a non-empty list", body_id=body_id)
        priorities[str(body_id)] = tuple(str(x) for x in ids)

    boundary = _section(cfg, "boundary")
    validator = _section(cfg, "validator")
    logging_cfg = _section(cfg, "logging")

    return SpaceTimeSettings(
        primary_frame=primary,
        derived_frames=derived,
        constraints=constraints,
        initial_julian_date=initial,
        enabled_providers=tuple(enabled),
        jpl_kernel_path=str(kernel) if kernel else None,
        priorities=priorities,
        violation_budget=_count(boundary, "violation_budget", 10),
        violation_capacity=_count(boundary, "violation_capacity", 100),
        validator_log_capacity=_count(validator, "log_capacity", 50),
        configure_logging=bool(logging_cfg.get("configure", False)),
        log_level=str(logging_cfg.get("level", "INFO")),
    )


__all__ = ["KNOWN_PROVIDERS", "SpaceTimeSettings", "settings_from_config"]
