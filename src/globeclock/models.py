"""Value types passed between the projection, timezone lookup, and local time layers."""

import math
from dataclasses import dataclass
from datetime import datetime

from shapely.geometry.base import BaseGeometry


@dataclass(frozen=True)
class UnitVector3:
    """A 3D direction. Always built through ``normalized`` so that |v| == 1."""

    x: float
    y: float
    z: float

    @classmethod
    def normalized(cls, x: float, y: float, z: float) -> "UnitVector3":
        length = math.sqrt(x * x + y * y + z * z)
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return cls(x / length, y / length, z / length)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class GeoCoordinate:
    """Geographic position on the globe."""

    latitude: float  # Degrees in [-90, 90]
    longitude: float  # Degrees in (-180, 180], east positive


@dataclass(frozen=True)
class TimezoneFeature:
    """A single timezone polygon from the dataset. Read-only after load."""

    geometry: BaseGeometry  # Polygon or MultiPolygon in (lon, lat) plane
    utc_offset_hours: float  # Signed, integer or half-integer
    position: int  # Declaration order in the source dataset


@dataclass(frozen=True)
class LocalTimeResult:
    """Local wall-clock reading for a coordinate. Recomputed on every query."""

    timezone_label: str  # "GMT+2", "GMT-5", "GMT"
    local_time: str  # "HH:MM:SS", 24-hour
    local_weekday: str  # "Monday"
    local_calendar_date: str  # "January 9, 2024"


@dataclass(frozen=True)
class ClickResult:
    """Where a click landed and what time it is there."""

    coordinate: GeoCoordinate
    local: LocalTimeResult

    def as_payload(self) -> dict[str, float | str]:
        """Flatten into the dict handed to click handlers."""
        return {
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "timezone": self.local.timezone_label,
            "localTime": self.local.local_time,
            "localDay": self.local.local_weekday,
            "localDate": self.local.local_calendar_date,
        }


@dataclass(frozen=True)
class GlobeState:
    """Render-loop state, passed explicitly into each tick."""

    rotation_rad: float  # Accumulated spin around the polar axis
    last_tick: datetime  # UTC instant of the previous tick
