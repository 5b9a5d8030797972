"""
Unit tests for the Domain Record Mapper.
"""

import pytest

from retailvoice.agents.mapping import (
    map_review,
    map_reviews,
    map_station,
    parse_decimal,
    parse_leading_int,
)
from retailvoice.models.review import UNRATED


def fixed_clock():
    return 1_700_000_000_000


def test_map_station_parses_comma_decimals():
    station = map_station({
        "id": "gs_01",
        "name": "OMV Tsarigradsko Shose",
        "latitude": "42,662",
        "longitude": 23.376,
        "address": "Sofia"
    })
    
    assert station.id == "gs_01"
    assert station.location.latitude == pytest.approx(42.662)
    assert station.location.longitude == pytest.approx(23.376)
    assert station.address == "Sofia"


def test_map_station_defaults_bad_coordinates():
    station = map_station({"id": "gs_09", "latitude": "north", "longitude": None})
    
    assert station.location.latitude == 0.0
    assert station.location.longitude == 0.0
    assert station.name == ""
    assert station.address == ""


def test_map_review_coerces_fields():
    review = map_review({
        "id": "r_01",
        "stationId": "gs_01",
        "rating": "4",
        "reviewText": "Clean facilities",
        "timestamp": 1.7e12
    }, now_ms=fixed_clock)
    
    assert review.rating == 4
    assert review.timestamp == 1_700_000_000_000
    assert review.station_id == "gs_01"
    assert review.review_text == "Clean facilities"


@pytest.mark.parametrize("raw", [None, "", "great", 0, 6, -1, "10"])
def test_map_review_invalid_rating_is_unrated(raw):
    review = map_review({"id": "r", "rating": raw, "timestamp": 1}, now_ms=fixed_clock)
    
    assert review.rating == UNRATED
    assert not review.is_rated


def test_map_review_float_rating_is_truncated():
    assert map_review({"rating": 4.0, "timestamp": 1}).rating == 4
    assert map_review({"rating": "3.9", "timestamp": 1}).rating == 3


@pytest.mark.parametrize("raw", [None, "", "yesterday", 0])
def test_map_review_missing_timestamp_uses_clock(raw):
    review = map_review({"id": "r", "rating": 5, "timestamp": raw}, now_ms=fixed_clock)
    
    assert review.timestamp == fixed_clock()


def test_mapping_is_total_for_empty_record():
    review = map_review({}, now_ms=fixed_clock)
    station = map_station({})
    
    assert review.id == "" and review.rating == UNRATED
    assert station.id == "" and station.location.latitude == 0.0


def test_map_reviews_preserves_order():
    reviews = map_reviews(
        [{"id": "a", "rating": 1}, {"id": "b", "rating": 2}],
        now_ms=fixed_clock
    )
    
    assert [r.id for r in reviews] == ["a", "b"]


@pytest.mark.parametrize("value,expected", [
    ("12abc", 12),
    ("  7", 7),
    ("-3", -3),
    (5.8, 5),
    ("abc", None),
    (True, None),
    (float("nan"), None),
])
def test_parse_leading_int(value, expected):
    assert parse_leading_int(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("42,5", 42.5),
    ("23.376abc", 23.376),
    (".5", 0.5),
    ("1,5,7", 1.5),
    ("abc", None),
])
def test_parse_decimal(value, expected):
    assert parse_decimal(value) == expected


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
