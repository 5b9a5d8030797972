"""
Unit tests for the Google Sheets gviz client.
"""

import pytest
import requests

from retailvoice.errors import FetchError
from retailvoice.utils.sheets_client import SheetsClient, TimeoutConfig


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False
    
    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response
    
    def close(self):
        self.closed = True


def test_fetch_sheet_builds_gviz_request():
    session = FakeSession(FakeResponse(200, "payload"))
    client = SheetsClient("sheet-id", timeout=TimeoutConfig(connect=1, read=2), session=session)
    
    assert client.fetch_sheet("gasStations") == "payload"
    
    url, kwargs = session.calls[0]
    assert url == "https://docs.google.com/spreadsheets/d/sheet-id/gviz/tq"
    assert kwargs["params"] == {"tqx": "out:json", "sheet": "gasStations"}
    assert kwargs["timeout"] == (1, 2)


def test_fetch_range_adds_query_and_range():
    session = FakeSession(FakeResponse(200, "payload"))
    client = SheetsClient("sheet-id", session=session)
    
    client.fetch_range("reviews", "reviews!F2")
    
    params = session.calls[0][1]["params"]
    assert params["tq"] == "select *"
    assert params["range"] == "reviews!F2"
    assert params["sheet"] == "reviews"


def test_http_error_status_raises_fetch_error():
    client = SheetsClient("sheet-id", session=FakeSession(FakeResponse(404)))
    
    with pytest.raises(FetchError):
        client.fetch_sheet("reviews")


def test_transport_error_raises_fetch_error():
    session = FakeSession(error=requests.ConnectionError("offline"))
    client = SheetsClient("sheet-id", session=session)
    
    with pytest.raises(FetchError, match="offline"):
        client.fetch_sheet("reviews")


def test_context_manager_closes_session():
    session = FakeSession(FakeResponse(200))
    
    with SheetsClient("sheet-id", session=session):
        pass
    
    assert session.closed


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
