"""
Unit tests for report export.
"""

import json
import os
import tempfile

import pandas as pd

from retailvoice.agents import aggregation
from retailvoice.models.analytics import DashboardView, HighlightedStation, ReviewAnalysis, StationDetail
from retailvoice.models.review import Review
from retailvoice.models.station import Location, Station
from retailvoice.utils.storage import StorageManager

STATION = Station(id="gs_01", name="OMV Suhodol", location=Location(42.707, 23.21), address="Lyulin")
REVIEWS = [
    Review(id="r1", station_id="gs_01", rating=5, review_text="Great coffee", timestamp=1_700_000_000_000),
    Review(id="r2", station_id="gs_01", rating=2, review_text="Слаб сервиз", timestamp=1_700_100_000_000),
]


def test_storage_creates_output_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        output_root = os.path.join(tmpdir, "reports")
        
        StorageManager(output_root)
        
        assert os.path.isdir(output_root)


def test_save_dashboard():
    stats = aggregation.dashboard_stats([STATION], REVIEWS)
    best, worst = aggregation.best_and_worst([STATION], REVIEWS)
    
    dashboard = DashboardView(
        stats=stats,
        highest=HighlightedStation(rating=best, summary=["Great coffee"]),
        lowest=HighlightedStation(rating=worst),
        markers=aggregation.map_markers([STATION], REVIEWS)
    )
    
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        path = storage.save_dashboard(dashboard, stamp="20240601T120000")
        
        assert path.endswith("dashboard_20240601T120000.json")
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    
    assert data["stats"]["total_reviews"] == 2
    assert data["stats"]["distribution"]["5"] == 1
    assert data["highest_rated"]["station"]["id"] == "gs_01"
    assert data["highest_rated"]["summary"] == ["Great coffee"]
    assert data["markers"][0]["band"] == "average"
    assert data["summary_error"] is None
    assert "generated_at" in data


def test_save_station_table():
    df = aggregation.build_station_table([STATION], REVIEWS)
    
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        path = storage.save_station_table(df, stamp="20240601T120000")
        restored = pd.read_csv(path)
    
    assert list(restored["Station ID"]) == ["gs_01"]
    assert restored.iloc[0]["Average Rating"] == 3.5


def test_save_station_detail():
    detail = StationDetail(
        station=STATION,
        average_rating=aggregation.average_rating(REVIEWS),
        sentiment=aggregation.sentiment_counts(REVIEWS),
        history=aggregation.rolling_average_series(REVIEWS),
        reviews=aggregation.sort_reviews(REVIEWS),
        analysis=ReviewAnalysis(summary_good="Coffee", summary_bad="Service")
    )
    
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        path = storage.save_station_detail(detail, stamp="x")
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    
    assert os.path.basename(path) == "station_gs_01_x.json"
    assert data["sentiment"] == {"positive": 1, "neutral": 0, "negative": 1}
    assert [p["rating"] for p in data["history"]] == [5.0, 3.5]
    assert data["reviews"][0]["review_text"] == "Слаб сервиз"
    assert data["analysis"]["summaryGood"] == "Coffee"


def test_save_station_detail_keeps_file_inside_output_root():
    station = Station(id="../../etc/gs_01", name="OMV", location=Location(42.0, 23.0), address="")
    detail = StationDetail(
        station=station,
        average_rating=None,
        sentiment=aggregation.sentiment_counts([]),
        history=[],
        reviews=[]
    )
    
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        path = storage.save_station_detail(detail, stamp="x")
        
        assert os.path.dirname(path) == tmpdir
        assert os.path.isfile(path)
        assert "/" not in os.path.basename(path)
