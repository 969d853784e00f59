# spacetime/core/vsop87.py
# -----------------------------------------------------------------------------
# Keplerian planetary provider ("vsop87")
#
# Mean elements with secular rates, solved per query; positions rotated into
# the ICRF axes, velocities by central difference (±1 h).
# Valid for J2000 ± 1000 years.
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .constants import J2000_JD, PLANETS, PRIMARY_FRAME_ID
from .orbit import ORBITAL_ELEMENTS, OrbitalElements, heliocentric_icrf_km
from .provider import BaseEphemerisProvider, central_difference_velocity
from .types import Vector3

PROVIDER_ID = "vsop87"
TIME_RANGE = (J2000_JD - 365250.0, J2000_JD + 365250.0)

# Position accuracy (km) of the mean-element model near J2000
ACCURACY_KM: Dict[str, float] = {
    "mercury": 1.0,
    "venus": 2.0,
    "earth": 1.0,
    "mars": 5.0,
    "jupiter": 50.0,
    "saturn": 100.0,
    "uranus": 200.0,
    "neptune": 500.0,
}


class VSOP87Provider(BaseEphemerisProvider):
    def __init__(self, reference_frame_id: str = PRIMARY_FRAME_ID) -> None:
        super().__init__(
            PROVIDER_ID,
            PLANETS,
            TIME_RANGE,
            accuracy_km=ACCURACY_KM,
            default_accuracy_km=1000.0,
            reference_frame_id=reference_frame_id,
        )

    def supports_velocity(self) -> bool:
        return True

    def get_orbital_elements(self, body_id: str) -> Optional[OrbitalElements]:
        return ORBITAL_ELEMENTS.get(body_id)

    def get_provider_info(self) -> Dict[str, Any]:
        info = super().get_provider_info()
        info["model"] = "Keplerian mean elements (J2000 + secular rates)"
        return info

    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        position = heliocentric_icrf_km(body_id, julian_date)
        velocity = central_difference_velocity(
            lambda jd: heliocentric_icrf_km(body_id, jd), julian_date,
        )
        return position, velocity


__all__ = ["PROVIDER_ID", "TIME_RANGE", "ACCURACY_KM", "VSOP87Provider"]
