"""GeoJSON builders shared by the tests."""


def band(lon_min: float, lon_max: float, zone: float, lat_min: float = -60, lat_max: float = 60) -> dict:
    ring = [
        [lon_min, lat_min],
        [lon_max, lat_min],
        [lon_max, lat_max],
        [lon_min, lat_max],
        [lon_min, lat_min],
    ]
    return {
        "type": "Feature",
        "properties": {"ZONE": zone},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def collection(*features: dict) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}
