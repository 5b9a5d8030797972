"""
Unit tests for the Ingestion Agent.

The sheets client is replaced by a fake serving canned gviz payloads.
"""

import json

import pytest

from retailvoice.agents.ingestion import SheetIngestionAgent
from retailvoice.errors import FetchError, ParseError


def gviz(cols, rows):
    table = {
        "cols": [{"label": label} for label in cols],
        "rows": [{"c": [{"v": v} for v in row]} for row in rows]
    }
    return f"setResponse({json.dumps({'table': table})});"


class FakeSheetsClient:
    def __init__(self, sheets, ranges=None):
        self.sheets = sheets
        self.ranges = ranges or {}
    
    def fetch_sheet(self, sheet_name):
        value = self.sheets[sheet_name]
        if isinstance(value, Exception):
            raise value
        return value
    
    def fetch_range(self, sheet_name, cell_range):
        return self.ranges[cell_range]
    
    def close(self):
        pass


@pytest.fixture
def agent():
    client = FakeSheetsClient(
        sheets={
            "gasStations": gviz(
                ["id", "name", "latitude", "longitude", "address"],
                [["gs_01", "OMV Suhodol", "42,707", "23,210", "Lyulin MW"]]
            ),
            "reviews": gviz(
                ["id", "stationId", "rating", "reviewText", "timestamp"],
                [
                    ["r1", "gs_01", 5, "Great coffee", 1_700_000_000_000],
                    ["r2", "gs_01", "bad", "Rude cashier", None],
                ]
            ),
        },
        ranges={"reviews!F2": gviz(["version"], [[3]])}
    )
    return SheetIngestionAgent(client=client, now_ms=lambda: 42)


def test_fetch_stations(agent):
    stations = agent.fetch_stations()
    
    assert len(stations) == 1
    assert stations[0].location.latitude == pytest.approx(42.707)


def test_fetch_reviews_applies_defaults(agent):
    reviews = agent.fetch_reviews()
    
    assert [r.rating for r in reviews] == [5, 0]
    assert reviews[1].timestamp == 42


def test_fetch_version_marker(agent):
    assert agent.fetch_version_marker() == 3


def test_fetch_errors_propagate():
    agent = SheetIngestionAgent(client=FakeSheetsClient({
        "gasStations": FetchError("HTTP status 500"),
        "reviews": "<html>not a table</html>",
    }))
    
    with pytest.raises(FetchError):
        agent.fetch_stations()
    with pytest.raises(ParseError):
        agent.fetch_reviews()


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
