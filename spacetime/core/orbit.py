# spacetime/core/orbit.py
# -----------------------------------------------------------------------------
# Keplerian orbit propagation (JPL "approximate positions of the planets",
# J2000 mean elements + linear rates per Julian century)
#
# • solve_kepler: Newton-Raphson on M = E − e·sin E (bounded, never raises)
# • calculate_position: corrected elements → true anomaly → 3-1-3 rotation,
#   heliocentric ecliptic J2000 in AU
# • ecliptic_to_icrf: rotation about x by the J2000 mean obliquity (ERFA)
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, NamedTuple

import erfa

from .constants import AU_KM, DAYS_PER_CENTURY, J2000_JD
from .types import Vector3

log = logging.getLogger(__name__)

KEPLER_TOLERANCE = 1e-8
KEPLER_MAX_ITERATIONS = 50

# IAU 2006 mean obliquity at J2000.0, radians
OBLIQUITY_J2000 = float(erfa.obl06(J2000_JD, 0.0))


@dataclass(frozen=True)
class OrbitalElements:
    """Mean elements at a reference epoch (AU, degrees) with rates per Julian century."""
    a: float
    e: float
    i: float
    L: float
    w_bar: float
    node: float
    a_dot: float
    e_dot: float
    i_dot: float
    L_dot: float
    w_bar_dot: float
    node_dot: float
    epoch_jd: float = J2000_JD


class CorrectedElements(NamedTuple):
    a: float
    e: float
    i: float
    L: float
    w_bar: float
    node: float


class OrbitPosition(NamedTuple):
    x: float
    y: float
    z: float
    r: float


ORBITAL_ELEMENTS: Dict[str, OrbitalElements] = {
    "mercury": OrbitalElements(
        0.38709927, 0.20563593, 7.00497902, 252.25032350, 77.45779628, 48.33076593,
        0.00000037, 0.00001906, -0.00594749, 149472.67411175, 0.16047689, -0.12534081,
    ),
    "venus": OrbitalElements(
        0.72333566, 0.00677672, 3.39467605, 181.97909950, 131.60246718, 76.67984255,
        0.00000390, -0.00004107, -0.00078890, 58517.81538729, 0.00268329, -0.27769418,
    ),
    "earth": OrbitalElements(
        1.00000261, 0.01671123, -0.00001531, 100.46457166, 102.93768193, 0.0,
        0.00000562, -0.00004392, -0.01294668, 35999.37244981, 0.32327364, 0.0,
    ),
    "mars": OrbitalElements(
        1.52371034, 0.09339410, 1.84969142, -4.55343205, -23.94362959, 49.55953891,
        0.00001847, 0.00007882, -0.00813131, 19140.30268499, 0.44441088, -0.29257343,
    ),
    "jupiter": OrbitalElements(
        5.20288700, 0.04838624, 1.30439695, 34.39644051, 14.72847983, 100.47390909,
        -0.00011607, -0.00013253, -0.00183714, 3034.74612775, 0.21252668, 0.20469106,
    ),
    "saturn": OrbitalElements(
        9.53667594, 0.05386179, 2.48599187, 49.95424423, 92.59887831, 113.66242448,
        -0.00125060, -0.00050991, 0.00193609, 1222.49362201, -0.41897216, -0.28867794,
    ),
    "uranus": OrbitalElements(
        19.18916464, 0.04725744, 0.77263783, 313.23810451, 170.95427630, 74.01692503,
        -0.00196176, -0.00004397, -0.00242939, 428.48202785, 0.40805281, 0.04240589,
    ),
    "neptune": OrbitalElements(
        30.06992276, 0.00859048, 1.77004347, -55.12002969, 44.96476227, 131.78422574,
        0.00026291, 0.00005105, 0.00035372, 218.45945325, -0.32241464, -0.00508664,
    ),
}


def centuries_since_j2000(jd: float, epoch_jd: float = J2000_JD) -> float:
    return (jd - epoch_jd) / DAYS_PER_CENTURY


def compute_elements_at_time(elements: OrbitalElements, t_centuries: float) -> CorrectedElements:
    """Linear secular correction base + rate·T for every element (degrees kept)."""
    return CorrectedElements(
        elements.a + elements.a_dot * t_centuries,
        elements.e + elements.e_dot * t_centuries,
        elements.i + elements.i_dot * t_centuries,
        elements.L + elements.L_dot * t_centuries,
        elements.w_bar + elements.w_bar_dot * t_centuries,
        elements.node + elements.node_dot * t_centuries,
    )


def solve_kepler(mean_anomaly: float, eccentricity: float,
                 tolerance: float = KEPLER_TOLERANCE,
                 max_iterations: int = KEPLER_MAX_ITERATIONS) -> float:
    """
    Eccentric anomaly E (radians) for mean anomaly M and eccentricity e < 1.
    Stops at |ΔE| <= tolerance or after max_iterations; on non-convergence the
    last iterate is returned and a warning is logged.
    """
    E = mean_anomaly
    delta = 1.0
    iterations = 0
    while abs(delta) > tolerance and iterations < max_iterations:
        delta = (E - eccentricity * math.sin(E) - mean_anomaly) / (1.0 - eccentricity * math.cos(E))
        E -= delta
        iterations += 1
    if abs(delta) > tolerance:
        log.warning(
            "Kepler solver did not converge (M=%.12g, e=%.12g, |dE|=%.3e after %d iterations)",
            mean_anomaly, eccentricity, abs(delta), iterations,
        )
    return E


def calculate_position(elements: OrbitalElements, julian_date: float) -> OrbitPosition:
    """Heliocentric ecliptic position (AU) and distance r for the given elements."""
    a, e, i, L, w_bar, node = compute_elements_at_time(
        elements, centuries_since_j2000(julian_date, elements.epoch_jd),
    )
    i, L, w_bar, node = (math.radians(v) for v in (i, L, w_bar, node))

    w = w_bar - node
    M = (L - w_bar) % (2.0 * math.pi)
    E = solve_kepler(M, e)

    nu = 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(E / 2.0), math.sqrt(1.0 - e) * math.cos(E / 2.0))
    r = a * (1.0 - e * math.cos(E))

    # 3-1-3 rotation (node, inclination, argument of perihelion)
    u = w + nu
    cu, su = math.cos(u), math.sin(u)
    cO, sO = math.cos(node), math.sin(node)
    ci, si = math.cos(i), math.sin(i)
    x = r * (cO * cu - sO * su * ci)
    y = r * (sO * cu + cO * su * ci)
    z = r * (su * si)
    return OrbitPosition(x, y, z, r)


def heliocentric_ecliptic_au(body_id: str, julian_date: float) -> Vector3:
    p = calculate_position(ORBITAL_ELEMENTS[body_id], julian_date)
    return Vector3(p.x, p.y, p.z)


def ecliptic_to_icrf(v: Vector3) -> Vector3:
    """Rotate a J2000 ecliptic vector into the ICRF (equatorial) axes."""
    ce, se = math.cos(OBLIQUITY_J2000), math.sin(OBLIQUITY_J2000)
    return Vector3(v.x, v.y * ce - v.z * se, v.y * se + v.z * ce)


def heliocentric_icrf_km(body_id: str, jd: float) -> Vector3:
    return ecliptic_to_icrf(heliocentric_ecliptic_au(body_id, jd)).scaled(AU_KM)


__all__ = [
    "KEPLER_TOLERANCE",
    "KEPLER_MAX_ITERATIONS",
    "OBLIQUITY_J2000",
    "OrbitalElements",
    "CorrectedElements",
    "OrbitPosition",
    "ORBITAL_ELEMENTS",
    "centuries_since_j2000",
    "compute_elements_at_time",
    "solve_kepler",
    "calculate_position",
    "heliocentric_ecliptic_au",
    "ecliptic_to_icrf",
    "heliocentric_icrf_km",
]
