"""
Unit tests for the Data Store.
"""

import pytest

from retailvoice.models.review import Review
from retailvoice.models.station import Location, Station
from retailvoice.store.data_store import DataStore, normalize_version


def make_station(station_id, name="Station"):
    return Station(id=station_id, name=name, location=Location(0.0, 0.0), address="")


def make_review(review_id, rating=5):
    return Review(id=review_id, station_id="gs_01", rating=rating, review_text="", timestamp=1)


def test_initialize_installs_snapshot():
    store = DataStore()
    
    snapshot = store.initialize([make_station("gs_01")], [make_review("r1")], version=2.0)
    
    assert store.is_ready
    assert snapshot.version == 2
    assert store.stations == (make_station("gs_01"),)
    assert len(store.reviews) == 1


def test_initialize_drops_invalid_station_ids():
    store = DataStore()
    
    store.initialize(
        [make_station("gs_01", "first"), make_station(""), make_station("gs_01", "duplicate")],
        []
    )
    
    assert [s.name for s in store.stations] == ["first"]


def test_replace_reviews_swaps_whole_snapshot():
    store = DataStore()
    store.initialize([make_station("gs_01")], [make_review("r1")], version=1)
    before = store.snapshot
    
    after = store.replace_reviews([make_review("r2"), make_review("r3")], version=2)
    
    assert [r.id for r in after.reviews] == ["r2", "r3"]
    assert after.version == 2
    assert after.stations == before.stations
    # Previous snapshot is untouched
    assert [r.id for r in before.reviews] == ["r1"]
    assert before.version == 1


def test_is_current_version_normalizes_markers():
    store = DataStore()
    store.initialize([], [], version=2)
    
    assert store.is_current_version(2.0)
    assert store.is_current_version("2")
    assert not store.is_current_version(3)


def test_no_version_is_never_current():
    store = DataStore()
    store.initialize([], [])
    
    assert store.version is None
    assert not store.is_current_version(1)


def test_closed_store_rejects_updates():
    store = DataStore()
    store.initialize([], [], version=1)
    store.close()
    
    assert not store.is_ready
    with pytest.raises(RuntimeError):
        store.replace_reviews([], version=2)


@pytest.mark.parametrize("marker,expected", [
    (3.0, 3),
    ("4", 4),
    (" 5 ", 5),
    ("2.5", 2.5),
    ("v1", "v1"),
    (7, 7),
])
def test_normalize_version(marker, expected):
    assert normalize_version(marker) == expected


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
