"""
Domain Record Mapper.

Maps raw sheet records into Station and Review entities.
Ingestion is best-effort: a malformed field degrades to its default,
the record itself is never rejected.
"""

import logging
import math
import re
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from retailvoice.models.review import Review, MIN_RATING, MAX_RATING, UNRATED
from retailvoice.models.station import Location, Station

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _as_text(value: Any) -> str:
    """Stringify a cell value; None becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_leading_int(value: Any) -> Optional[int]:
    """
    Parse the leading integer of a value.
    
    Numbers are truncated toward zero; strings are read up to the first
    non-digit ("12abc" -> 12, "4.5" -> 4). Returns None when nothing parses.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def parse_decimal(value: Any) -> Optional[float]:
    """
    Parse a coordinate that may use a comma decimal separator.
    
    The value is stringified, the first "," becomes ".", and the longest
    leading float prefix is read. Returns None when nothing parses.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).replace(",", ".", 1)
    match = _LEADING_FLOAT.match(text)
    if not match:
        return None
    result = float(match.group(1))
    return result if math.isfinite(result) else None


def map_station(record: Dict[str, Any]) -> Station:
    """
    Map a gasStations record to a Station.
    
    Args:
        record: Raw record from the parser
    
    Returns:
        Station with unparsable coordinates defaulted to 0.0
    """
    latitude = parse_decimal(record.get("latitude") or "0")
    longitude = parse_decimal(record.get("longitude") or "0")
    
    if latitude is None or longitude is None:
        logger.warning(f"Unparsable coordinates for station {record.get('id')!r}, defaulting to 0.0")
    
    return Station(
        id=_as_text(record.get("id")),
        name=_as_text(record.get("name")),
        location=Location(
            latitude=latitude if latitude is not None else 0.0,
            longitude=longitude if longitude is not None else 0.0
        ),
        address=_as_text(record.get("address"))
    )


def map_review(
    record: Dict[str, Any],
    now_ms: Callable[[], int] = _wall_clock_ms
) -> Review:
    """
    Map a reviews record to a Review.
    
    Args:
        record: Raw record from the parser
        now_ms: Clock used when the timestamp is missing or unparsable
    
    Returns:
        Review with rating UNRATED when it is unparsable or outside 1-5
    """
    rating = parse_leading_int(record.get("rating"))
    if rating is None or not (MIN_RATING <= rating <= MAX_RATING):
        logger.debug(f"Review {record.get('id')!r} has invalid rating {record.get('rating')!r}")
        rating = UNRATED
    
    timestamp = parse_leading_int(record.get("timestamp"))
    if not timestamp:
        timestamp = now_ms()
    
    return Review(
        id=_as_text(record.get("id")),
        station_id=_as_text(record.get("stationId")),
        rating=rating,
        review_text=_as_text(record.get("reviewText")),
        timestamp=timestamp
    )


def map_stations(records: Iterable[Dict[str, Any]]) -> List[Station]:
    return [map_station(record) for record in records]


def map_reviews(
    records: Iterable[Dict[str, Any]],
    now_ms: Callable[[], int] = _wall_clock_ms
) -> List[Review]:
    return [map_review(record, now_ms=now_ms) for record in records]
