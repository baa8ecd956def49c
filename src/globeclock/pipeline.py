"""Click resolution: hit point to coordinate to timezone to local time."""

import logging
import queue
from datetime import datetime

from globeclock.clock import Clock, system_clock
from globeclock.localtime import resolve_local_time
from globeclock.models import ClickResult
from globeclock.projection import project_to_geo
from globeclock.timezones import FALLBACK_LABEL, FALLBACK_OFFSET, TimezoneIndex, zone_label

logger = logging.getLogger(__name__)


def resolve_click(
    hit_point: tuple[float, float, float] | None,
    sphere_radius: float,
    axial_tilt_rad: float,
    index: TimezoneIndex | None,
    now_utc: datetime,
) -> ClickResult | None:
    """Resolve a globe hit point into its coordinate and local time.

    Args:
        hit_point: Surface point from the renderer's hit test, or None on a miss.
        sphere_radius: Globe radius in scene units.
        axial_tilt_rad: Static tilt of the rendered globe.
        index: Loaded timezone index, or None if the dataset failed to load.
        now_utc: UTC instant to read the local time at.

    Returns:
        ClickResult, or None when there was no hit. Points outside every
        timezone polygon (and every point when ``index`` is None) resolve
        as "GMT" at offset 0.
    """
    if hit_point is None:
        return None

    coord = project_to_geo(hit_point, sphere_radius, axial_tilt_rad)
    feature = index.find_containing(coord) if index is not None else None

    if feature is None:
        logger.debug("No timezone polygon at %s, using %s", coord, FALLBACK_LABEL)
        local = resolve_local_time(now_utc, FALLBACK_OFFSET, coord, FALLBACK_LABEL)
    else:
        offset = feature.utc_offset_hours
        local = resolve_local_time(now_utc, offset, coord, zone_label(offset))

    return ClickResult(coordinate=coord, local=local)


def dispatch_click(
    hit_point: tuple[float, float, float] | None,
    sphere_radius: float,
    axial_tilt_rad: float,
    index: TimezoneIndex | None,
    outbox: queue.Queue,
    clock: Clock = system_clock,
) -> bool:
    """Resolve a click against the clock's current instant and post the payload.

    Returns:
        True when a payload was put on ``outbox``; False on a miss.
    """
    result = resolve_click(hit_point, sphere_radius, axial_tilt_rad, index, clock())
    if result is None:
        return False
    outbox.put(result.as_payload())
    return True
