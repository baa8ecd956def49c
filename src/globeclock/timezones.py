"""Timezone polygon dataset loading and point lookup."""

import json
import logging
import math
import os
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import IO, Any

import httpx
import numpy as np
from shapely.errors import ShapelyError
from shapely.geometry import Point, shape
from shapely.strtree import STRtree

from globeclock.models import GeoCoordinate, TimezoneFeature

logger = logging.getLogger(__name__)

DEFAULT_ZONE_PROPERTY = "ZONE"
FALLBACK_OFFSET = 0
FALLBACK_LABEL = "GMT"

_POLYGON_TYPES = ("Polygon", "MultiPolygon")
# Widest civil offsets in use are UTC-12 and UTC+14
_MAX_OFFSET_HOURS = 14

DatasetSource = bytes | bytearray | str | os.PathLike | Mapping[str, Any] | IO


class DatasetError(Exception):
    """Timezone dataset unreachable or not a polygon feature collection."""


class TimezoneIndex:
    """Immutable, ordered collection of timezone polygons.

    Lookups return the first feature in dataset order whose polygon covers the
    point. An STR-tree narrows the candidates; candidates are still checked in
    declaration order so overlapping polygons resolve the same way a linear
    scan would. Safe to query from several threads once built.
    """

    def __init__(self, features: Sequence[TimezoneFeature]):
        self._features = tuple(features)
        self._tree = STRtree([f.geometry for f in self._features]) if self._features else None

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[TimezoneFeature]:
        return iter(self._features)

    @property
    def features(self) -> tuple[TimezoneFeature, ...]:
        return self._features

    def find_containing(self, coord: GeoCoordinate) -> TimezoneFeature | None:
        """Return the first feature containing the coordinate, or None.

        Vertices are treated as a flat (longitude, latitude) plane. Points on a
        polygon boundary count as inside.
        """
        if self._tree is None:
            return None
        point = Point(coord.longitude, coord.latitude)
        for i in np.sort(self._tree.query(point)):
            feature = self._features[i]
            if feature.geometry.covers(point):
                return feature
        return None


def zone_label(offset_hours: float) -> str:
    """Format a UTC offset as "GMT+2", "GMT-5", "GMT+5.5"."""
    number = int(offset_hours) if float(offset_hours).is_integer() else offset_hours
    sign = "+" if offset_hours >= 0 else ""
    return f"GMT{sign}{number}"


def _fetch(url: str, timeout: float, client: httpx.Client | None) -> Any:
    get = client.get if client is not None else httpx.get
    try:
        resp = get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPError as e:
        raise DatasetError(f"Could not fetch timezone dataset from {url}: {e}") from e
    except ValueError as e:
        raise DatasetError(f"Timezone dataset at {url} is not valid JSON: {e}") from e


def _describe(source: DatasetSource) -> str:
    if isinstance(source, os.PathLike) or (isinstance(source, str) and not source.lstrip().startswith("{")):
        return str(source)
    return f"<{type(source).__name__}>"


def _read_source(source: DatasetSource, timeout: float, client: httpx.Client | None) -> Any:
    """Turn any supported source into the decoded GeoJSON document."""
    if isinstance(source, Mapping):
        return source
    try:
        if isinstance(source, (bytes, bytearray)):
            return json.loads(source)
        if isinstance(source, str):
            if source.startswith(("http://", "https://")):
                return _fetch(source, timeout, client)
            if source.lstrip().startswith("{"):
                return json.loads(source)
            source = Path(source)
        if isinstance(source, os.PathLike):
            with open(source, "rb") as f:
                return json.load(f)
        if hasattr(source, "read"):
            return json.load(source)
    except OSError as e:
        raise DatasetError(f"Could not read timezone dataset {source}: {e}") from e
    except (ValueError, UnicodeDecodeError) as e:
        raise DatasetError(f"Timezone dataset {source} is not valid JSON: {e}") from e
    raise DatasetError(f"Unsupported timezone dataset source: {type(source).__name__}")


def _parse_offset(value: Any, position: int, zone_property: str) -> float:
    if isinstance(value, bool):
        raise DatasetError(f"Feature {position}: {zone_property!r} must be a number")
    try:
        offset = float(value)
    except (TypeError, ValueError) as e:
        raise DatasetError(
            f"Feature {position}: {zone_property!r} must be a number, got {value!r}"
        ) from e
    if not math.isfinite(offset) or abs(offset) > _MAX_OFFSET_HOURS:
        raise DatasetError(
            f"Feature {position}: {zone_property!r} must be within ±{_MAX_OFFSET_HOURS} hours, got {value!r}"
        )
    return offset


def parse_features(document: Any, zone_property: str = DEFAULT_ZONE_PROPERTY) -> list[TimezoneFeature]:
    """Build TimezoneFeatures from a decoded GeoJSON FeatureCollection.

    Raises:
        DatasetError: When the document is not a feature collection of
            Polygon/MultiPolygon features with a numeric offset property.
    """
    if not isinstance(document, Mapping) or not isinstance(document.get("features"), list):
        raise DatasetError("Timezone dataset is not a GeoJSON FeatureCollection")

    features: list[TimezoneFeature] = []
    skipped = 0
    for position, raw in enumerate(document["features"]):
        if not isinstance(raw, Mapping):
            raise DatasetError(f"Feature {position} is not an object")
        geometry = raw.get("geometry")
        if geometry is None:
            skipped += 1
            continue
        if not isinstance(geometry, Mapping) or geometry.get("type") not in _POLYGON_TYPES:
            raise DatasetError(f"Feature {position} geometry must be Polygon or MultiPolygon")
        properties = raw.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise DatasetError(f"Feature {position} properties must be an object")
        if zone_property not in properties:
            raise DatasetError(f"Feature {position} has no {zone_property!r} property")
        offset = _parse_offset(properties[zone_property], position, zone_property)
        try:
            geom = shape(geometry)
        except (ShapelyError, KeyError, TypeError, ValueError, IndexError) as e:
            raise DatasetError(f"Feature {position} has malformed coordinates: {e}") from e
        features.append(TimezoneFeature(geometry=geom, utc_offset_hours=offset, position=position))

    if skipped:
        logger.warning("Skipped %d timezone features without geometry", skipped)
    return features


def load_timezone_index(
    source: DatasetSource,
    zone_property: str = DEFAULT_ZONE_PROPERTY,
    timeout: float = 10.0,
    client: httpx.Client | None = None,
) -> TimezoneIndex:
    """Load a timezone polygon dataset into an immutable index.

    Args:
        source: GeoJSON as bytes/str, a decoded mapping, a file path, an open
            file handle, or an http(s) URL.
        zone_property: Feature property holding the UTC offset in hours.
        timeout: HTTP timeout in seconds for URL sources.
        client: Optional httpx client used for URL sources.

    Returns:
        TimezoneIndex preserving the dataset's feature order.

    Raises:
        DatasetError: When the source cannot be read or parsed.
    """
    logger.info("Loading timezone dataset from %s", _describe(source))
    document = _read_source(source, timeout, client)
    index = TimezoneIndex(parse_features(document, zone_property))
    logger.info("Loaded %d timezone features", len(index))
    return index
