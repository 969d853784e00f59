# spacetime/core/lunar.py
# -----------------------------------------------------------------------------
# Simplified provider ("simplified"): the Sun and the Moon
#
# The Sun sits at the origin of the heliocentric frame. The Moon uses a
# truncated ELP2000 series (principal terms in longitude, latitude and
# distance) about the Earth, added to the Earth's Keplerian position.
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from typing import Dict, Tuple

from .constants import AU_KM, J2000_JD, PRIMARY_FRAME_ID
from .orbit import centuries_since_j2000, ecliptic_to_icrf, heliocentric_ecliptic_au
from .provider import BaseEphemerisProvider, central_difference_velocity
from .types import Vector3, ZERO_VECTOR

PROVIDER_ID = "simplified"
TIME_RANGE = (J2000_JD - 365250.0, J2000_JD + 365250.0)

MOON_MEAN_DISTANCE_KM = 384400.0
MOON_ECCENTRICITY = 0.0549

ACCURACY_KM: Dict[str, float] = {
    "sun": 1.0,
    "moon": 5000.0,
}


def moon_geocentric_ecliptic_au(julian_date: float) -> Vector3:
    T = centuries_since_j2000(julian_date)
    L = math.radians(218.3164477 + 481267.88123421 * T)   # mean longitude
    M = math.radians(134.9633964 + 477198.8675055 * T)    # mean anomaly
    F = math.radians(93.2721 + 483202.0175 * T)           # argument of latitude

    lon = L + math.radians(6.2887) * math.sin(M)
    lat = math.radians(5.128) * math.sin(F)
    r = (MOON_MEAN_DISTANCE_KM / AU_KM) * (1.0 - MOON_ECCENTRICITY * math.cos(M))

    return Vector3(
        r * math.cos(lat) * math.cos(lon),
        r * math.cos(lat) * math.sin(lon),
        r * math.sin(lat),
    )


def moon_heliocentric_icrf_km(julian_date: float) -> Vector3:
    ecl = heliocentric_ecliptic_au("earth", julian_date) + moon_geocentric_ecliptic_au(julian_date)
    return ecliptic_to_icrf(ecl).scaled(AU_KM)


class SimplifiedProvider(BaseEphemerisProvider):
    def __init__(self, reference_frame_id: str = PRIMARY_FRAME_ID) -> None:
        super().__init__(
            PROVIDER_ID,
            ("sun", "moon"),
            TIME_RANGE,
            accuracy_km=ACCURACY_KM,
            default_accuracy_km=5000.0,
            reference_frame_id=reference_frame_id,
        )

    def supports_velocity(self) -> bool:
        return True

    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        if body_id == "sun":
            return ZERO_VECTOR, ZERO_VECTOR
        position = moon_heliocentric_icrf_km(julian_date)
        velocity = central_difference_velocity(moon_heliocentric_icrf_km, julian_date)
        return position, velocity


__all__ = [
    "PROVIDER_ID",
    "TIME_RANGE",
    "moon_geocentric_ecliptic_au",
    "moon_heliocentric_icrf_km",
    "SimplifiedProvider",
]
