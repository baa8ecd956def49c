"""Conversion between points on the tilted globe surface and latitude/longitude."""

import logging
import math

import numpy as np

from globeclock.models import GeoCoordinate

logger = logging.getLogger(__name__)

# Hit points from a ray/mesh intersection sit on the tessellated surface, not the ideal sphere
_SURFACE_TOLERANCE = 1e-6


def _rotation_z(angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def project_to_geo(
    point: tuple[float, float, float],
    sphere_radius: float,
    axial_tilt_rad: float,
) -> GeoCoordinate:
    """Convert a 3D point on the globe surface into latitude/longitude.

    The globe is drawn tilted around the Z axis; the tilt is undone first so
    the point is read in the sphere's own frame. Longitude is negated because
    the texture's U coordinate runs westward.

    Args:
        point: (x, y, z) surface point, e.g. a click hit point.
        sphere_radius: Globe radius in scene units.
        axial_tilt_rad: Static tilt applied to the rendered globe.

    Returns:
        GeoCoordinate with latitude in [-90, 90] and longitude in (-180, 180].
    """
    x, y, z = _rotation_z(-axial_tilt_rad) @ np.asarray(point, dtype=float)

    ratio = y / sphere_radius
    if abs(ratio) > 1.0:
        if abs(ratio) - 1.0 > _SURFACE_TOLERANCE:
            logger.debug("Hit point %s lies off the sphere (y/r=%.9f), clamping", point, ratio)
        ratio = max(-1.0, min(1.0, ratio))

    lat = math.degrees(math.asin(ratio))
    lon = -math.degrees(math.atan2(z, x))
    if lon <= -180.0:
        lon += 360.0

    return GeoCoordinate(latitude=lat, longitude=lon)


def geo_to_point(
    coord: GeoCoordinate,
    sphere_radius: float,
    axial_tilt_rad: float,
) -> tuple[float, float, float]:
    """Surface point for a coordinate on the tilted globe. Inverse of ``project_to_geo``."""
    lat = math.radians(coord.latitude)
    lon = math.radians(-coord.longitude)
    untilted = np.array(
        [
            sphere_radius * math.cos(lat) * math.cos(lon),
            sphere_radius * math.sin(lat),
            sphere_radius * math.cos(lat) * math.sin(lon),
        ]
    )
    x, y, z = _rotation_z(axial_tilt_rad) @ untilted
    return (float(x), float(y), float(z))
