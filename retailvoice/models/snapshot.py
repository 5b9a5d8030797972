"""
Dataset snapshot model.

Groups the station and review collections held in memory at a point in time.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional, Tuple

from retailvoice.models.review import Review
from retailvoice.models.station import Station


@dataclass(frozen=True)
class DatasetSnapshot:
    """
    The complete Station/Review collection at one version.
    Always replaced wholesale, never patched.
    """
    stations: Tuple[Station, ...] = field(default_factory=tuple)
    reviews: Tuple[Review, ...] = field(default_factory=tuple)
    version: Optional[Any] = None  # Last committed version marker, None before the first commit
    
    def with_reviews(self, reviews, version) -> "DatasetSnapshot":
        """Return a new snapshot with the review collection and version swapped."""
        return replace(self, reviews=tuple(reviews), version=version)
    
    def find_station(self, station_id: str) -> Optional[Station]:
        for station in self.stations:
            if station.id == station_id:
                return station
        return None
