"""
Data Store - Single source of truth for stations and reviews.

Holds the current DatasetSnapshot and the last committed version marker.
Updates swap whole immutable snapshots, so readers never observe a
partially updated collection.
"""

import logging
import threading
from typing import Any, Iterable, List

from retailvoice.models.review import Review
from retailvoice.models.snapshot import DatasetSnapshot
from retailvoice.models.station import Station

logger = logging.getLogger(__name__)


def normalize_version(marker: Any) -> Any:
    """
    Normalize a version marker for comparison.
    
    Sheet cells come back as floats ("2.0") or strings ("2"); both compare
    equal to the integer 2. Anything else is compared as-is.
    """
    if isinstance(marker, bool):
        return marker
    if isinstance(marker, float) and marker.is_integer():
        return int(marker)
    if isinstance(marker, str):
        text = marker.strip()
        try:
            return normalize_version(float(text)) if "." in text else int(text)
        except ValueError:
            return text
    return marker


class DataStore:
    """
    Process-wide state container, passed explicitly to every component
    that needs it.
    
    Lifecycle: initialize() -> replace_reviews()* -> close()
    """
    
    def __init__(self):
        self._snapshot = DatasetSnapshot()
        self._initialized = False
        self._closed = False
        self._lock = threading.Lock()
    
    @property
    def snapshot(self) -> DatasetSnapshot:
        return self._snapshot
    
    @property
    def stations(self):
        return self._snapshot.stations
    
    @property
    def reviews(self):
        return self._snapshot.reviews
    
    @property
    def version(self) -> Any:
        return self._snapshot.version
    
    @property
    def is_ready(self) -> bool:
        return self._initialized and not self._closed
    
    def initialize(
        self,
        stations: Iterable[Station],
        reviews: Iterable[Review],
        version: Any = None
    ) -> DatasetSnapshot:
        """
        Install the first full snapshot.
        
        Args:
            stations: Mapped stations
            reviews: Mapped reviews
            version: Version marker read alongside the load, if any
        
        Returns:
            The installed snapshot
        """
        snapshot = DatasetSnapshot(
            stations=tuple(self._validate_stations(stations)),
            reviews=tuple(reviews),
            version=normalize_version(version) if version is not None else None
        )
        with self._lock:
            self._snapshot = snapshot
            self._initialized = True
            self._closed = False
        
        logger.info(
            f"Data store initialized: {len(snapshot.stations)} stations, "
            f"{len(snapshot.reviews)} reviews, version={snapshot.version}"
        )
        return snapshot
    
    def is_current_version(self, marker: Any) -> bool:
        """True if `marker` equals the last committed version."""
        current = self._snapshot.version
        return current is not None and normalize_version(marker) == current
    
    def replace_reviews(self, reviews: Iterable[Review], version: Any) -> DatasetSnapshot:
        """
        Atomically replace the review collection and commit `version`.
        
        Raises:
            RuntimeError: If the store has been closed
        """
        new_reviews = tuple(reviews)
        with self._lock:
            if self._closed:
                raise RuntimeError("Data store is closed")
            previous = self._snapshot.version
            self._snapshot = self._snapshot.with_reviews(new_reviews, normalize_version(version))
            snapshot = self._snapshot
        
        logger.info(
            f"Reviews replaced: {len(new_reviews)} reviews, version {previous} -> {snapshot.version}"
        )
        return snapshot
    
    def close(self) -> None:
        with self._lock:
            self._closed = True
        logger.debug("Data store closed")
    
    def _validate_stations(self, stations: Iterable[Station]) -> List[Station]:
        """Drop stations with an empty id and keep the first of any duplicate id."""
        seen = set()
        valid = []
        for station in stations:
            if not station.id:
                logger.warning(f"Dropping station without id: {station.name!r}")
                continue
            if station.id in seen:
                logger.warning(f"Dropping duplicate station id: {station.id!r}")
                continue
            seen.add(station.id)
            valid.append(station)
        return valid
