# spacetime/core/jpl.py
# -----------------------------------------------------------------------------
# JPL development-ephemeris provider ("jpl") backed by Skyfield
#
# • Kernel injected, or loaded from a local .bsp path (no downloads)
# • Heliocentric = body − Sun, both barycentric ICRF from the kernel
# • Velocities are the kernel's own (analytic Chebyshev derivatives)
# • Julian dates are passed to the kernel as TT
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

from .constants import PRIMARY_FRAME_ID
from .errors import ErrorCode, SpaceTimeException
from .provider import BaseEphemerisProvider
from .types import Vector3

log = logging.getLogger(__name__)

PROVIDER_ID = "jpl"

DE421_JD_MIN = 2414992.5  # 1899-07-29
DE421_JD_MAX = 2469807.5  # 2053-10-09

# Catalogue id -> kernel segment name
_KERNEL_KEYS: Dict[str, str] = {
    "sun": "sun",
    "mercury": "mercury",
    "venus": "venus",
    "earth": "earth",
    "moon": "moon",
    "mars": "mars barycenter",
    "jupiter": "jupiter barycenter",
    "saturn": "saturn barycenter",
    "uranus": "uranus barycenter",
    "neptune": "neptune barycenter",
}

ACCURACY_KM: Dict[str, float] = {
    "sun": 1.0,
    "mercury": 1.0,
    "venus": 1.0,
    "earth": 1.0,
    "moon": 1.0,
    "mars": 10.0,
    "jupiter": 1000.0,
    "saturn": 1000.0,
    "uranus": 1000.0,
    "neptune": 1000.0,
}


def load_kernel(path: str):
    """Open a local SPK kernel with Skyfield."""
    if not path or not os.path.isfile(path):
        raise SpaceTimeException(ErrorCode.PROVIDER_UNAVAILABLE, f"JPL kernel not found: {path}", path=path)
    from skyfield.api import load
    try:
        return load(path)
    except Exception as e:
        raise SpaceTimeException(
            ErrorCode.PROVIDER_UNAVAILABLE, f"Skyfield failed to load kernel: {path}", path=path, error=str(e),
        ) from e


def _timescale():
    from skyfield.api import load
    return load.timescale()


class JPLProvider(BaseEphemerisProvider):
    def __init__(
        self,
        kernel: Any = None,
        *,
        kernel_path: Optional[str] = None,
        timescale: Any = None,
        time_range: Tuple[float, float] = (DE421_JD_MIN, DE421_JD_MAX),
        reference_frame_id: str = PRIMARY_FRAME_ID,
    ) -> None:
        if kernel is None:
            if kernel_path is None:
                raise SpaceTimeException(ErrorCode.INVALID_CONFIGURATION, "JPL provider needs a kernel or kernel_path")
            kernel = load_kernel(kernel_path)
            log.info("JPL kernel loaded: %s", os.path.basename(kernel_path))
        self._kernel = kernel
        self._ts = timescale if timescale is not None else _timescale()
        self._kernel_path = kernel_path
        super().__init__(
            PROVIDER_ID,
            _KERNEL_KEYS.keys(),
            time_range,
            accuracy_km=ACCURACY_KM,
            default_accuracy_km=1000.0,
            reference_frame_id=reference_frame_id,
        )

    def supports_velocity(self) -> bool:
        return True

    def get_provider_info(self) -> Dict[str, Any]:
        info = super().get_provider_info()
        info["kernel"] = os.path.basename(self._kernel_path) if self._kernel_path else "injected"
        return info

    def _compute(self, body_id: str, julian_date: float) -> Tuple[Vector3, Vector3]:
        t = self._ts.tt_jd(julian_date)
        body = self._kernel[_KERNEL_KEYS[body_id]].at(t)
        sun = self._kernel["sun"].at(t)
        p_b, p_s = body.position.km, sun.position.km
        v_b, v_s = body.velocity.km_per_s, sun.velocity.km_per_s
        position = Vector3(float(p_b[0] - p_s[0]), float(p_b[1] - p_s[1]), float(p_b[2] - p_s[2]))
        velocity = Vector3(float(v_b[0] - v_s[0]), float(v_b[1] - v_s[1]), float(v_b[2] - v_s[2]))
        return position, velocity


__all__ = ["PROVIDER_ID", "DE421_JD_MIN", "DE421_JD_MAX", "load_kernel", "JPLProvider"]
