# spacetime/core/constants.py
# -----------------------------------------------------------------------------
# Physical constants, the authoritative frame definition, the time continuity
# policy and the standard body catalogue.
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Dict, Optional, Tuple

from .types import FrameType, FrameUnits, ReferenceFrameInfo, TimeContinuityConstraints

# ─────────────────────────────────────────────────────────────────────────────
# Physical / time constants
# ─────────────────────────────────────────────────────────────────────────────
J2000_JD = 2451545.0
AU_KM = 149597870.7
DAYS_PER_CENTURY = 36525.0
SECONDS_PER_DAY = 86400.0

# ─────────────────────────────────────────────────────────────────────────────
# Authoritative frame and time policy
# ─────────────────────────────────────────────────────────────────────────────
PRIMARY_FRAME_ID = "ICRF_J2000_HELIOCENTRIC"

PRIMARY_REFERENCE_FRAME = ReferenceFrameInfo(
    frame_id=PRIMARY_FRAME_ID,
    name="Heliocentric Inertial ICRF/J2000",
    origin="Sun Center",
    axes="ICRF J2000.0",
    type=FrameType.AUTHORITATIVE,
    units=FrameUnits(position="km", velocity="km/s", time="JD"),
)

TIME_CONTINUITY_CONSTRAINTS = TimeContinuityConstraints(
    max_time_jump_days=1.0,
    max_speed_multiplier=1e6,
    min_time_precision=1e-10,
    min_julian_date=1721425.5,   # 0001-01-01
    max_julian_date=5373484.5,   # 9999-12-31
)

# ─────────────────────────────────────────────────────────────────────────────
# Body catalogue
# ─────────────────────────────────────────────────────────────────────────────
PLANETS: Tuple[str, ...] = (
    "mercury", "venus", "earth", "mars", "jupiter", "saturn", "uranus", "neptune",
)

SATELLITES: Tuple[str, ...] = (
    "moon",
    "io", "europa", "ganymede", "callisto",
    "titan", "enceladus",
    "miranda", "ariel", "umbriel", "titania",
    "triton",
)

STANDARD_BODY_IDS: Tuple[str, ...] = ("sun",) + PLANETS + SATELLITES

LEVEL_STAR = 0
LEVEL_PLANET = 1
LEVEL_SATELLITE = 2
LEVEL_SPACECRAFT = 3

# body -> (parent, level); children are derived from the parent links
BODY_HIERARCHY_DEFINITIONS: Dict[str, Tuple[Optional[str], int]] = {
    "sun": (None, LEVEL_STAR),
    **{p: ("sun", LEVEL_PLANET) for p in PLANETS},
    "moon": ("earth", LEVEL_SATELLITE),
    **{s: ("jupiter", LEVEL_SATELLITE) for s in ("io", "europa", "ganymede", "callisto")},
    **{s: ("saturn", LEVEL_SATELLITE) for s in ("titan", "enceladus")},
    **{s: ("uranus", LEVEL_SATELLITE) for s in ("miranda", "ariel", "umbriel", "titania")},
    "triton": ("neptune", LEVEL_SATELLITE),
}

DEFAULT_PROVIDER_PRIORITIES: Dict[str, Tuple[str, ...]] = {
    "sun": ("simplified", "jpl"),
    **{p: ("vsop87", "jpl", "simplified") for p in PLANETS},
    **{s: ("jpl", "simplified") for s in SATELLITES},
}

# Mean radii, km (IAU WGCCRE)
BODY_RADII_KM: Dict[str, float] = {
    "sun": 695700.0,
    "mercury": 2439.7,
    "venus": 6051.8,
    "earth": 6371.0,
    "mars": 3389.5,
    "jupiter": 69911.0,
    "saturn": 58232.0,
    "uranus": 25362.0,
    "neptune": 24622.0,
    "moon": 1737.4,
    "io": 1821.6,
    "europa": 1560.8,
    "ganymede": 2631.2,
    "callisto": 2410.3,
    "titan": 2574.7,
    "enceladus": 252.1,
    "miranda": 235.8,
    "ariel": 578.9,
    "umbriel": 584.7,
    "titania": 788.9,
    "triton": 1353.4,
}

__all__ = [
    "J2000_JD",
    "AU_KM",
    "DAYS_PER_CENTURY",
    "SECONDS_PER_DAY",
    "PRIMARY_FRAME_ID",
    "PRIMARY_REFERENCE_FRAME",
    "TIME_CONTINUITY_CONSTRAINTS",
    "PLANETS",
    "SATELLITES",
    "STANDARD_BODY_IDS",
    "LEVEL_STAR",
    "LEVEL_PLANET",
    "LEVEL_SATELLITE",
    "LEVEL_SPACECRAFT",
    "BODY_HIERARCHY_DEFINITIONS",
    "DEFAULT_PROVIDER_PRIORITIES",
    "BODY_RADII_KM",
]
