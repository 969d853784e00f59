# spacetime/core/julian.py
# -----------------------------------------------------------------------------
# Calendar ↔ Julian date conversion (ERFA cal2jd / jd2cal)
#
# Julian dates here are a continuous day count on the proleptic Gregorian
# calendar: no leap seconds, no time-scale corrections. Naive datetimes are
# taken as UTC.
# -----------------------------------------------------------------------------
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Tuple

import erfa

from .constants import SECONDS_PER_DAY


def _split_jd(jd: float) -> Tuple[float, float]:
    d1 = math.floor(jd)
    return float(d1), float(jd - d1)


def julian_date_from_datetime(dt: datetime) -> float:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    djm0, djm = erfa.cal2jd(dt.year, dt.month, dt.day)
    seconds = dt.hour * 3600 + dt.minute * 60 + dt.second + dt.microsecond / 1e6
    return math.fsum((float(djm0), float(djm), seconds / SECONDS_PER_DAY))


def datetime_from_julian_date(jd: float) -> datetime:
    """Timezone-aware UTC datetime for a Julian date in the datetime range."""
    d1, d2 = _split_jd(jd)
    iy, im, iday, fd = erfa.jd2cal(d1, d2)
    base = datetime(int(iy), int(im), int(iday), tzinfo=timezone.utc)
    return base + timedelta(days=float(fd))


def julian_date_now() -> float:
    return julian_date_from_datetime(datetime.now(timezone.utc))


__all__ = ["julian_date_from_datetime", "datetime_from_julian_date", "julian_date_now"]
