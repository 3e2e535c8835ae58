import json
import math

from proxitour.catalog.loader import LandmarkCatalog, load_landmarks
from proxitour.domain.models import Landmark


def test_load_landmarks_from_json(tmp_path):
    path = tmp_path / "landmarks.json"
    path.write_text(
        json.dumps(
            [
                {"id": "zocalo", "name": "Zócalo", "coordinates": [-99.1328, 19.4326], "rating": 4.6},
                {"place_id": "ChIJ123", "name": "Templo Mayor", "coordinates": [-99.1308, 19.4353]},
            ]
        ),
        encoding="utf-8",
    )
    landmarks = load_landmarks(path)
    assert landmarks[0].longitude == -99.1328
    assert landmarks[0].latitude == 19.4326
    assert landmarks[1].description == ""


def test_replace_drops_unusable_rows_and_fills_ids():
    catalog = LandmarkCatalog()
    kept = catalog.replace(
        [
            Landmark(place_id="ChIJ123", name="Templo Mayor", coordinates=(-99.1308, 19.4353)),
            Landmark(name="  ", coordinates=(-99.0, 19.0)),
            Landmark(name="Broken", coordinates=(math.nan, 19.0)),
        ]
    )
    assert kept == 1
    assert len(catalog) == 1
    assert catalog.get("ChIJ123").name == "Templo Mayor"


def test_replace_swaps_the_whole_tour():
    catalog = LandmarkCatalog([Landmark(id="a", name="A", coordinates=(1.0, 1.0))])
    catalog.replace([Landmark(id="b", name="B", coordinates=(2.0, 2.0))])
    assert [lm.id for lm in catalog.all()] == ["b"]
    catalog.clear()
    assert catalog.all() == []
    assert catalog.get("b") is None


def test_bundled_catalog_loads():
    catalog = LandmarkCatalog.from_file("data/catalogs/landmarks.json")
    assert catalog.get("zocalo") is not None
