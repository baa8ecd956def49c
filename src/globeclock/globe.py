"""Render-loop state for the spinning globe, advanced by explicit ticks."""

import math
from datetime import datetime

from globeclock.clock import Clock, system_clock, to_instant
from globeclock.models import GlobeState, UnitVector3
from globeclock.sun import sun_direction

EARTH_RADIUS = 5.0
AXIAL_TILT_RAD = 0.41
ATMOSPHERE_SCALE = 1.016
SIDEREAL_DAY_SECONDS = 86164
ROTATION_RATE = 2 * math.pi / SIDEREAL_DAY_SECONDS  # rad/s


def atmosphere_radius(earth_radius: float = EARTH_RADIUS) -> float:
    return earth_radius * ATMOSPHERE_SCALE


def start(now: datetime) -> GlobeState:
    return GlobeState(rotation_rad=0.0, last_tick=to_instant(now))


def advance(state: GlobeState, now: datetime) -> GlobeState:
    """Spin the globe by the time elapsed since the last tick.

    Rotation is kept in [0, 2π). A clock that steps backwards spins the globe back.
    """
    now = to_instant(now)
    elapsed = (now - state.last_tick).total_seconds()
    rotation = (state.rotation_rad + ROTATION_RATE * elapsed) % (2 * math.pi)
    return GlobeState(rotation_rad=rotation, last_tick=now)


def set_date_time(state: GlobeState, instant: datetime) -> GlobeState:
    """Re-anchor the tick clock without spinning the globe."""
    return GlobeState(rotation_rad=state.rotation_rad, last_tick=to_instant(instant))


def tick(state: GlobeState, clock: Clock = system_clock) -> tuple[GlobeState, UnitVector3]:
    """One frame: the advanced state and the light direction for it."""
    now = clock()
    return advance(state, now), sun_direction(now)
