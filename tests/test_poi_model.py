"""
POI data model tests — validation, category metadata, parsing, sharing.
"""
import math

import pytest

from poimap.geo.poi import (
    CATEGORY_STYLE,
    Category,
    Coordinate,
    PointOfInterest,
    is_valid_latlng,
)


class TestCoordinate:

    @pytest.mark.parametrize("lat,lng", [
        (91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (0.0, -181.0),
        (math.nan, 0.0), (0.0, math.inf),
    ])
    def test_rejects_invalid(self, lat, lng):
        with pytest.raises(ValueError):
            Coordinate(lat, lng)

    def test_numeric_strings_coerced_to_float(self):
        c = Coordinate("52.3", "4.9")
        assert (c.lat, c.lng) == (52.3, 4.9)
        assert isinstance(c.lat, float) and isinstance(c.lng, float)

    def test_accepts_bounds(self):
        Coordinate(90.0, 180.0)
        Coordinate(-90.0, -180.0)

    def test_is_valid_latlng_rejects_non_numbers(self):
        assert not is_valid_latlng("north", 4.0)
        assert not is_valid_latlng(None, 4.0)


class TestCategoryStyle:

    def test_every_category_has_style(self):
        assert set(CATEGORY_STYLE) == set(Category)

    def test_labels(self):
        assert CATEGORY_STYLE[Category.ACCOMMODATION].label == "Hotels"
        assert CATEGORY_STYLE[Category.PARK].color == "#16a34a"


class TestPointOfInterest:

    def test_rating_out_of_range(self):
        with pytest.raises(ValueError):
            PointOfInterest(1, "x", Category.PARK, Coordinate(0, 0), rating=5.5)

    def test_string_category_coerced(self):
        poi = PointOfInterest(1, "x", "restaurant", Coordinate(0, 0))
        assert poi.category is Category.RESTAURANT

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            PointOfInterest(1, "x", "casino", Coordinate(0, 0))

    def test_frozen(self):
        poi = PointOfInterest(1, "x", Category.PARK, Coordinate(0, 0))
        with pytest.raises(Exception):
            poi.favorite = True

    def test_from_dict_nested_position(self):
        poi = PointOfInterest.from_dict({
            "id": 2, "name": "Vondelpark", "category": "park",
            "position": {"lat": 52.3579, "lng": 4.8686},
            "rating": 4.6, "visited": True,
        })
        assert poi.coordinate == Coordinate(52.3579, 4.8686)
        assert poi.visited is True
        assert poi.favorite is False

    def test_from_dict_flat(self):
        poi = PointOfInterest.from_dict({
            "id": "x", "name": "Stop", "category": "transport", "lat": 1.0, "lng": 2.0,
        })
        assert poi.category is Category.TRANSPORT

    def test_share(self):
        poi = PointOfInterest(7, "Vondelpark", Category.PARK, Coordinate(0, 0),
                              description="City park")
        assert poi.share_text() == "Vondelpark - City park"
        assert poi.share_link("https://maps.example/") == "https://maps.example?poi=7"
