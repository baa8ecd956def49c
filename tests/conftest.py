import json

import pytest

from helpers import band, collection


@pytest.fixture
def band_collection() -> dict:
    """Four disjoint longitude bands; lon 15..30 and anything past |lat| 60 is a gap."""
    return collection(
        band(-90, -60, -5),
        band(-15, 15, 0),
        band(30, 60, 3),
        band(100, 130, 8),
    )


@pytest.fixture
def band_file(tmp_path, band_collection):
    path = tmp_path / "bands.geojson"
    path.write_text(json.dumps(band_collection), encoding="utf-8")
    return path
