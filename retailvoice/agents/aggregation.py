"""
Aggregation Engine.

Pure functions over the current station and review collections. Nothing here
keeps state, so every aggregate is consistent with the snapshot it was
computed from and can be recomputed at any rate.

Unrated reviews (rating 0) are excluded from every rating-based aggregate.
"""

import logging
from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from retailvoice.models.analytics import (
    DashboardStats,
    MapMarker,
    RatingsHistoryPoint,
    SentimentCounts,
    StationRating,
)
from retailvoice.models.review import Review, MIN_RATING, MAX_RATING
from retailvoice.models.station import Station

logger = logging.getLogger(__name__)

POSITIVE = "positive"
NEUTRAL = "neutral"
NEGATIVE = "negative"

MIN_TREND_POINTS = 2


class ReviewSortOrder(Enum):
    NEWEST_FIRST = "date-desc"
    OLDEST_FIRST = "date-asc"
    RATING_DESC = "rating-desc"
    RATING_ASC = "rating-asc"


def _for_station(reviews: Iterable[Review], station_id: Optional[str]) -> List[Review]:
    if station_id is None:
        return list(reviews)
    return [r for r in reviews if r.station_id == station_id]


def _rated(reviews: Iterable[Review]) -> List[Review]:
    return [r for r in reviews if r.is_rated]


def average_rating(reviews: Iterable[Review]) -> Optional[float]:
    """
    Arithmetic mean of rated reviews.
    
    Returns:
        Mean rating, or None when there are no rated reviews
    """
    rated = _rated(reviews)
    if not rated:
        return None
    return sum(r.rating for r in rated) / len(rated)


def station_ratings(
    stations: Sequence[Station],
    reviews: Sequence[Review]
) -> List[StationRating]:
    """
    Average rating per station, in station order.
    
    Stations without rated reviews are left out rather than reported as zero.
    """
    by_station: Dict[str, List[int]] = {}
    for review in _rated(reviews):
        by_station.setdefault(review.station_id, []).append(review.rating)
    
    ratings = []
    for station in stations:
        values = by_station.get(station.id)
        if not values:
            continue
        ratings.append(StationRating(
            station=station,
            average_rating=sum(values) / len(values),
            review_count=len(values)
        ))
    return ratings


def rating_distribution(
    reviews: Iterable[Review],
    station_id: Optional[str] = None
) -> Dict[int, int]:
    """
    Count reviews per star rating.
    
    Returns:
        {1: n1, 2: n2, 3: n3, 4: n4, 5: n5}; ratings outside 1-5 are ignored
    """
    counts = Counter(r.rating for r in _rated(_for_station(reviews, station_id)))
    return {stars: counts.get(stars, 0) for stars in range(MIN_RATING, MAX_RATING + 1)}


def classify_sentiment(rating: int) -> Optional[str]:
    """
    Bucket a rating: above 3 positive, below 3 negative, exactly 3 neutral.
    
    Returns:
        Sentiment bucket, or None for an unrated review
    """
    if not MIN_RATING <= rating <= MAX_RATING:
        return None
    if rating > 3:
        return POSITIVE
    if rating < 3:
        return NEGATIVE
    return NEUTRAL


def sentiment_counts(
    reviews: Iterable[Review],
    station_id: Optional[str] = None
) -> SentimentCounts:
    counts = Counter(classify_sentiment(r.rating) for r in _for_station(reviews, station_id))
    return SentimentCounts(
        positive=counts.get(POSITIVE, 0),
        neutral=counts.get(NEUTRAL, 0),
        negative=counts.get(NEGATIVE, 0)
    )


def best_and_worst(
    stations: Sequence[Station],
    reviews: Sequence[Review]
) -> Tuple[Optional[StationRating], Optional[StationRating]]:
    """
    Highest and lowest rated stations.
    
    Stations are stable-sorted descending by average, so ties keep their
    original order; best is the first entry and worst the last.
    
    Returns:
        (best, worst), or (None, None) when no station has rated reviews
    """
    ranked = sorted(station_ratings(stations, reviews), key=lambda s: s.average_rating, reverse=True)
    if not ranked:
        return None, None
    return ranked[0], ranked[-1]


INVALID_DATE = "Invalid Date"


def _local_date(timestamp_ms: int) -> str:
    try:
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d")
    except (ValueError, OverflowError, OSError):
        logger.warning(f"Timestamp out of range: {timestamp_ms}")
        return INVALID_DATE


def rolling_average_series(
    reviews: Iterable[Review],
    station_id: Optional[str] = None
) -> List[RatingsHistoryPoint]:
    """
    Cumulative mean rating in timestamp order.
    
    One point per rated review: the mean of all ratings seen so far
    (including this one), rounded to 2 decimals, with the review's local date.
    """
    rated = _rated(_for_station(reviews, station_id))
    if not rated:
        return []
    
    df = pd.DataFrame({
        "timestamp": [r.timestamp for r in rated],
        "rating": [r.rating for r in rated]
    })
    df = df.sort_values("timestamp", kind="mergesort")
    df["average"] = df["rating"].expanding().mean().round(2)
    
    return [
        RatingsHistoryPoint(date=_local_date(int(ts)), rating=float(avg))
        for ts, avg in zip(df["timestamp"], df["average"])
    ]


def has_trend(series: Sequence[RatingsHistoryPoint]) -> bool:
    """A series needs at least two points to show a trend."""
    return len(series) >= MIN_TREND_POINTS


def sort_reviews(
    reviews: Iterable[Review],
    order: ReviewSortOrder = ReviewSortOrder.NEWEST_FIRST
) -> List[Review]:
    """Stable sort of reviews by date or rating."""
    if order == ReviewSortOrder.RATING_DESC:
        return sorted(reviews, key=lambda r: r.rating, reverse=True)
    if order == ReviewSortOrder.RATING_ASC:
        return sorted(reviews, key=lambda r: r.rating)
    if order == ReviewSortOrder.OLDEST_FIRST:
        return sorted(reviews, key=lambda r: r.timestamp)
    return sorted(reviews, key=lambda r: r.timestamp, reverse=True)


def latest_review_texts(reviews: Iterable[Review], limit: int) -> List[str]:
    """Texts of the `limit` newest reviews, newest first."""
    newest = sort_reviews(reviews, ReviewSortOrder.NEWEST_FIRST)[:limit]
    return [r.review_text for r in newest]


def dashboard_stats(stations: Sequence[Station], reviews: Sequence[Review]) -> DashboardStats:
    overall = average_rating(reviews)
    return DashboardStats(
        total_stations=len(stations),
        total_reviews=len(reviews),
        overall_average=round(overall, 2) if overall is not None else None,
        distribution=rating_distribution(reviews)
    )


def rating_band(average: Optional[float]) -> str:
    """Map marker band: good (>= 4), average (>= 3), poor (< 3), none."""
    if average is None:
        return "none"
    if average >= 4:
        return "good"
    if average >= 3:
        return "average"
    return "poor"


def map_markers(stations: Sequence[Station], reviews: Sequence[Review]) -> List[MapMarker]:
    averages = {s.station.id: s.average_rating for s in station_ratings(stations, reviews)}
    
    markers = []
    for station in stations:
        average = averages.get(station.id)
        label = f"Avg. Rating: {average:.1f} / 5" if average is not None else "No reviews yet"
        markers.append(MapMarker(
            station=station,
            average_rating=average,
            band=rating_band(average),
            label=label
        ))
    return markers


def build_station_table(stations: Sequence[Station], reviews: Sequence[Review]) -> pd.DataFrame:
    """
    Per-station ratings table, sorted by average rating (descending).
    
    Stations without rated reviews are kept with an empty average.
    """
    ratings = {s.station.id: s for s in station_ratings(stations, reviews)}
    
    rows = []
    for station in stations:
        rating = ratings.get(station.id)
        average = round(rating.average_rating, 2) if rating else None
        rows.append({
            "Station ID": station.id,
            "Station": station.name,
            "Average Rating": average,
            "Reviews": rating.review_count if rating else 0,
            "Band": rating_band(rating.average_rating if rating else None)
        })
    
    columns = ["Station ID", "Station", "Average Rating", "Reviews", "Band"]
    df = pd.DataFrame(rows, columns=columns)
    if df.empty:
        logger.warning("No stations found, creating empty station table")
        return df
    
    return df.sort_values("Average Rating", ascending=False, kind="mergesort", na_position="last")
