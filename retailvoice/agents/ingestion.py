"""
Ingestion Agent.

Fetches stations, reviews and the reviews version marker from the
spreadsheet source, running each payload through the parser and mapper.
"""

import logging
from typing import Any, Callable, List, Optional

from retailvoice.agents.mapping import map_reviews, map_stations
from retailvoice.agents.parsing import extract_cell_value, parse_table
from retailvoice.models.review import Review
from retailvoice.models.station import Station
from retailvoice.utils.sheets_client import SheetsClient

logger = logging.getLogger(__name__)


class SheetIngestionAgent:
    """
    Reads the gasStations and reviews sheets.
    
    Every method raises FetchError on transport failures and ParseError on
    malformed payloads; the caller decides whether that is fatal.
    """
    
    def __init__(
        self,
        client: SheetsClient,
        stations_sheet: str = "gasStations",
        reviews_sheet: str = "reviews",
        version_cell_range: str = "reviews!F2",
        now_ms: Optional[Callable[[], int]] = None
    ):
        """
        Initialize ingestion agent.
        
        Args:
            client: Sheets client used for HTTP access
            stations_sheet: Name of the stations sheet
            reviews_sheet: Name of the reviews sheet
            version_cell_range: Cell holding the reviews version marker
            now_ms: Clock for reviews without a timestamp (defaults to wall clock)
        """
        self.client = client
        self.stations_sheet = stations_sheet
        self.reviews_sheet = reviews_sheet
        self.version_cell_range = version_cell_range
        self.now_ms = now_ms
        
        logger.info(
            f"Initialized SheetIngestionAgent for sheets "
            f"{stations_sheet!r}/{reviews_sheet!r}, version cell {version_cell_range!r}"
        )
    
    def fetch_stations(self) -> List[Station]:
        text = self.client.fetch_sheet(self.stations_sheet)
        stations = map_stations(parse_table(text))
        logger.info(f"Fetched {len(stations)} stations")
        return stations
    
    def fetch_reviews(self) -> List[Review]:
        text = self.client.fetch_sheet(self.reviews_sheet)
        records = parse_table(text)
        if self.now_ms is not None:
            reviews = map_reviews(records, now_ms=self.now_ms)
        else:
            reviews = map_reviews(records)
        logger.info(f"Fetched {len(reviews)} reviews")
        return reviews
    
    def fetch_version_marker(self) -> Any:
        """Read the scalar version marker of the reviews sheet."""
        text = self.client.fetch_range(self.reviews_sheet, self.version_cell_range)
        return extract_cell_value(text)
