"""
Derived analytics models.

Ephemeral aggregates recomputed from the current snapshot, plus the
structured results returned by the summarization gateway.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from retailvoice.models.station import Station

SENTIMENT_LABELS = ("Positive", "Negative", "Mixed", "Neutral")
ANALYSIS_CATEGORIES = (
    "hygiene",
    "foodAndDrinks",
    "gasQuality",
    "cashierService",
    "gasRefillService",
)


@dataclass(frozen=True)
class StationRating:
    """Average rating of a station with at least one rated review."""
    station: Station
    average_rating: float
    review_count: int


@dataclass(frozen=True)
class RatingsHistoryPoint:
    """One point of a station's rolling average series."""
    date: str  # YYYY-MM-DD, local calendar date
    rating: float  # Cumulative mean up to and including this review


@dataclass
class SentimentCounts:
    positive: int = 0
    neutral: int = 0
    negative: int = 0
    
    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative
    
    def to_dict(self) -> dict:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative
        }


@dataclass(frozen=True)
class CategorySentiment:
    """Sentiment of one review category as judged by the model."""
    sentiment: str  # "Positive", "Negative", "Mixed", or "Neutral"
    count: int
    
    def __post_init__(self):
        if self.sentiment not in SENTIMENT_LABELS:
            raise ValueError(
                f"Invalid sentiment: {self.sentiment}. Must be one of {', '.join(SENTIMENT_LABELS)}"
            )


@dataclass
class ReviewAnalysis:
    """
    Full analysis of a batch of reviews.
    Output of SummarizationGateway.analyze_reviews.
    """
    summary_good: str
    summary_bad: str
    category_ratings: Dict[str, CategorySentiment] = field(default_factory=dict)
    
    @classmethod
    def from_dict(cls, data: dict) -> "ReviewAnalysis":
        """
        Create ReviewAnalysis from the model's JSON object.
        
        Raises:
            KeyError, TypeError, ValueError: If the object does not match the schema
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected JSON object, got {type(data).__name__}")
        
        summary_good = data["summaryGood"]
        summary_bad = data["summaryBad"]
        if not isinstance(summary_good, str) or not isinstance(summary_bad, str):
            raise TypeError("summaryGood and summaryBad must be strings")
        
        raw_ratings = data.get("categoryRatings") or {}
        if not isinstance(raw_ratings, dict):
            raise TypeError("categoryRatings must be an object")
        
        category_ratings = {}
        for category, rating in raw_ratings.items():
            if category not in ANALYSIS_CATEGORIES:
                continue
            category_ratings[category] = CategorySentiment(
                sentiment=rating["sentiment"],
                count=int(rating["count"])
            )
        
        return cls(
            summary_good=summary_good,
            summary_bad=summary_bad,
            category_ratings=category_ratings
        )
    
    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "summaryGood": self.summary_good,
            "summaryBad": self.summary_bad,
            "categoryRatings": {
                category: {"sentiment": rating.sentiment, "count": rating.count}
                for category, rating in self.category_ratings.items()
            }
        }


@dataclass(frozen=True)
class MapMarker:
    """Map pin for a station."""
    station: Station
    average_rating: Optional[float]
    band: str  # "good", "average", "poor", or "none"
    label: str


@dataclass
class DashboardStats:
    total_stations: int
    total_reviews: int
    overall_average: Optional[float]
    distribution: Dict[int, int]
    
    def to_dict(self) -> dict:
        return {
            "total_stations": self.total_stations,
            "total_reviews": self.total_reviews,
            "overall_average": self.overall_average,
            "distribution": {str(stars): count for stars, count in self.distribution.items()}
        }


@dataclass
class HighlightedStation:
    """Best or worst rated station, with optional AI highlight points."""
    rating: StationRating
    summary: Optional[List[str]] = None


@dataclass
class StationDetail:
    """
    Everything the per-station detail view shows.
    `error` holds a user-visible message when the analysis request failed.
    """
    station: Station
    average_rating: Optional[float]
    sentiment: SentimentCounts
    history: List[RatingsHistoryPoint]
    reviews: list
    analysis: Optional[ReviewAnalysis] = None
    error: Optional[str] = None


@dataclass
class DashboardView:
    """
    Everything the dashboard shows.
    `summary_error` is set when the highlight summaries could not be loaded.
    """
    stats: DashboardStats
    highest: Optional[HighlightedStation] = None
    lowest: Optional[HighlightedStation] = None
    markers: List[MapMarker] = field(default_factory=list)
    summary_error: Optional[str] = None
