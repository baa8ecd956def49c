"""Approximate sun direction for day/night shading.

The model is a single-harmonic declination curve plus a 24-hour revolution
about the prime meridian. It is good enough to place the terminator
plausibly on the globe; it is not an ephemeris.
"""

import math
from datetime import datetime

import numpy as np

from globeclock.clock import to_instant
from globeclock.models import UnitVector3

MAX_DECLINATION_DEG = 23.44
NIGHT_FLOOR = -0.05


def day_of_year(instant: datetime) -> int:
    """Whole days from day 0 of the year to the instant's UTC date (Jan 1 -> 1)."""
    day = to_instant(instant).date()
    return day.toordinal() - day.replace(month=1, day=1).toordinal() + 1


def solar_declination_deg(instant: datetime) -> float:
    return MAX_DECLINATION_DEG * math.cos(
        math.radians((360 / 365) * (day_of_year(instant) + 10))
    )


def sun_direction(instant: datetime) -> UnitVector3:
    """Unit vector pointing toward the sun at the given UTC instant.

    Args:
        instant: UTC instant (naive datetimes are read as UTC).

    Returns:
        UnitVector3 whose y component follows the date's declination and whose
        x/z components complete one revolution per 24 UTC hours.
    """
    instant = to_instant(instant)
    earth_tilt = math.radians(solar_declination_deg(instant))
    utc_hours = instant.hour + instant.minute / 60 + instant.second / 3600
    sun_angle = (utc_hours / 24) * 2 * math.pi

    return UnitVector3.normalized(
        math.cos(sun_angle), math.sin(earth_tilt), math.sin(sun_angle)
    )


def shading_intensity(
    normal: tuple[float, float, float], sun: UnitVector3
) -> float:
    """Day/night blend factor for a surface normal, as the globe shader computes it.

    1.0 is full day texture; values at or below zero blend into the night texture.
    """
    n = np.asarray(normal, dtype=float)
    n = n / np.linalg.norm(n)
    intensity = float(np.dot(n, -np.asarray(sun.as_tuple())))
    return min(max(intensity, NIGHT_FLOOR), 1.0)
