"""
Review data model.

Represents a customer review row from the reviews sheet.
"""

from dataclasses import dataclass

MIN_RATING = 1
MAX_RATING = 5
UNRATED = 0  # Sentinel for unparsable or out-of-range ratings


@dataclass(frozen=True)
class Review:
    """
    A single station review.
    Treated as immutable; a newer polled snapshot replaces the whole collection.
    """
    id: str
    station_id: str  # Foreign key into Station.id
    rating: int  # 1-5 stars, or UNRATED
    review_text: str
    timestamp: int  # Epoch milliseconds
    
    @property
    def is_rated(self) -> bool:
        return MIN_RATING <= self.rating <= MAX_RATING
    
    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "station_id": self.station_id,
            "rating": self.rating,
            "review_text": self.review_text,
            "timestamp": self.timestamp
        }
