import io
import json
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from globeclock.models import GeoCoordinate
from globeclock.timezones import (
    DatasetError,
    TimezoneIndex,
    load_timezone_index,
    parse_features,
    zone_label,
)

from helpers import band, collection


def _offset_at(index: TimezoneIndex, lat: float, lon: float):
    feature = index.find_containing(GeoCoordinate(lat, lon))
    return None if feature is None else feature.utc_offset_hours


def test_bands_resolve_to_their_offsets(band_collection):
    index = load_timezone_index(band_collection)
    assert len(index) == 4
    assert _offset_at(index, 40.7, -74.0) == -5
    assert _offset_at(index, 51.5, -0.1) == 0
    assert _offset_at(index, -1.3, 36.8) == 3
    assert _offset_at(index, 1.35, 103.8) == 8


def test_gap_has_no_match(band_collection):
    index = load_timezone_index(band_collection)
    assert index.find_containing(GeoCoordinate(10.0, 20.0)) is None
    assert index.find_containing(GeoCoordinate(75.0, 0.0)) is None


def test_boundary_point_counts_as_inside(band_collection):
    index = load_timezone_index(band_collection)
    assert _offset_at(index, 0.0, -15.0) == 0
    assert _offset_at(index, 60.0, 45.0) == 3


def test_first_declared_feature_wins_on_overlap():
    wide = band(-30, 30, 1)
    narrow = band(-5, 5, 2)

    index = load_timezone_index(collection(wide, narrow))
    assert _offset_at(index, 0.0, 0.0) == 1
    assert index.find_containing(GeoCoordinate(0.0, 0.0)).position == 0

    index = load_timezone_index(collection(narrow, wide))
    assert _offset_at(index, 0.0, 0.0) == 2
    assert _offset_at(index, 0.0, 20.0) == 1


def test_multipolygon_features():
    doc = collection(
        {
            "type": "Feature",
            "properties": {"ZONE": 12},
            "geometry": {
                "type": "MultiPolygon",
                "coordinates": [
                    [[[170, -50], [180, -50], [180, -30], [170, -30], [170, -50]]],
                    [[[-180, -50], [-175, -50], [-175, -30], [-180, -30], [-180, -50]]],
                ],
            },
        }
    )
    index = load_timezone_index(doc)
    assert _offset_at(index, -40.0, 175.0) == 12
    assert _offset_at(index, -40.0, -177.0) == 12
    assert _offset_at(index, -40.0, 0.0) is None


def test_polygon_holes_are_excluded():
    outer = [[-20, -20], [20, -20], [20, 20], [-20, 20], [-20, -20]]
    hole = [[-5, -5], [5, -5], [5, 5], [-5, 5], [-5, -5]]
    doc = collection(
        {
            "type": "Feature",
            "properties": {"ZONE": 1},
            "geometry": {"type": "Polygon", "coordinates": [outer, hole]},
        }
    )
    index = load_timezone_index(doc)
    assert _offset_at(index, 10.0, 10.0) == 1
    assert _offset_at(index, 0.0, 0.0) is None


def test_empty_collection_never_matches():
    index = load_timezone_index(collection())
    assert len(index) == 0
    assert index.find_containing(GeoCoordinate(0.0, 0.0)) is None


def test_load_from_bytes_text_path_and_handle(band_collection, band_file):
    raw = json.dumps(band_collection)
    sources = [
        raw.encode("utf-8"),
        raw,
        band_file,
        str(band_file),
        io.BytesIO(raw.encode("utf-8")),
        io.StringIO(raw),
    ]
    for source in sources:
        index = load_timezone_index(source)
        assert [f.utc_offset_hours for f in index] == [-5, 0, 3, 8]


def test_load_from_url(band_collection):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/timezones.geojson"
        return httpx.Response(200, json=band_collection)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        index = load_timezone_index("https://example.test/timezones.geojson", client=client)
    assert len(index) == 4


def test_url_errors_become_dataset_errors():
    def not_found(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    def garbage(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    for handler in (not_found, garbage, unreachable):
        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(DatasetError):
                load_timezone_index("https://example.test/tz.geojson", client=client)


def test_missing_file_is_a_dataset_error(tmp_path):
    with pytest.raises(DatasetError, match="Could not read"):
        load_timezone_index(tmp_path / "nope.geojson")


def test_invalid_json_is_a_dataset_error(tmp_path):
    path = tmp_path / "broken.geojson"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(DatasetError, match="not valid JSON"):
        load_timezone_index(path)
    with pytest.raises(DatasetError):
        load_timezone_index(b"\xff\xfe\x00")


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"type": "FeatureCollection"},
        {"features": "nope"},
        collection("not a feature"),
        collection({"type": "Feature", "properties": {"ZONE": 1}, "geometry": {"type": "Point", "coordinates": [0, 0]}}),
        collection({"type": "Feature", "properties": {}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": "east"}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": True}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": "NaN"}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": float("nan")}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": "-inf"}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": 25}, "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": "ZONE", "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": ["ZONE"], "geometry": band(0, 1, 0)["geometry"]}),
        collection({"type": "Feature", "properties": {"ZONE": 1}, "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 1]]]}}),
    ],
)
def test_malformed_documents(document):
    with pytest.raises(DatasetError):
        parse_features(document)


def test_bare_nan_token_fails_at_load_time():
    raw = json.dumps(collection(band(0, 10, 0))).replace('"ZONE": 0', '"ZONE": NaN')
    assert "NaN" in raw
    with pytest.raises(DatasetError, match="within"):
        load_timezone_index(raw)


def test_widest_real_offsets_load():
    index = load_timezone_index(collection(band(-180, -170, -12), band(170, 180, 14)))
    assert [f.utc_offset_hours for f in index] == [-12, 14]


def test_unsupported_source_type():
    with pytest.raises(DatasetError, match="Unsupported"):
        load_timezone_index(42)


def test_features_without_geometry_are_skipped(band_collection):
    band_collection["features"].insert(1, {"type": "Feature", "properties": {"ZONE": 9}, "geometry": None})
    index = load_timezone_index(band_collection)
    assert len(index) == 4
    assert [f.position for f in index] == [0, 2, 3, 4]


def test_custom_offset_property_and_numeric_strings():
    feature = band(0, 10, 0)
    feature["properties"] = {"zone": "5.5"}
    index = load_timezone_index(collection(feature), zone_property="zone")
    assert _offset_at(index, 0.0, 5.0) == 5.5


def test_concurrent_lookups_agree(band_collection):
    index = load_timezone_index(band_collection)
    points = [(40.7, -74.0), (51.5, -0.1), (10.0, 20.0), (1.35, 103.8)] * 50
    with ThreadPoolExecutor(max_workers=8) as pool:
        offsets = list(pool.map(lambda p: _offset_at(index, *p), points))
    assert offsets == [-5, 0, None, 8] * 50


@pytest.mark.parametrize(
    "offset, label",
    [(2, "GMT+2"), (-5, "GMT-5"), (0, "GMT+0"), (3.0, "GMT+3"), (5.5, "GMT+5.5"), (-3.5, "GMT-3.5")],
)
def test_zone_label(offset, label):
    assert zone_label(offset) == label


def test_bundled_nautical_dataset_loads():
    from globeclock.config import DEFAULT_TIMEZONES_PATH

    index = load_timezone_index(DEFAULT_TIMEZONES_PATH)
    assert len(index) == 25
    assert _offset_at(index, 35.7, 139.7) == 9
    assert _offset_at(index, 40.7, -74.0) == -5
