"""
Versioned Poller.

Periodically reads the reviews version marker and refetches the full review
set only when the marker differs from the last committed version.

States per tick: IDLE -> CHECKING -> (UNCHANGED | FETCHING) -> IDLE
"""

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from retailvoice.agents.ingestion import SheetIngestionAgent
from retailvoice.errors import RetailVoiceError
from retailvoice.models.snapshot import DatasetSnapshot
from retailvoice.store.data_store import DataStore

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5.0


class PollState(Enum):
    IDLE = "idle"
    CHECKING = "checking"
    FETCHING = "fetching"


class PollOutcome(Enum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    CHECK_FAILED = "check_failed"
    FETCH_FAILED = "fetch_failed"


class VersionedPoller:
    """
    Cancellable polling task over the reviews sheet.
    
    Failures are logged and swallowed: the store keeps the last good snapshot
    and the next tick tries again.
    """
    
    def __init__(
        self,
        store: DataStore,
        ingestion_agent: SheetIngestionAgent,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        wait: Optional[Callable[[float], bool]] = None
    ):
        """
        Initialize poller.
        
        Args:
            store: Data store receiving refreshed reviews
            ingestion_agent: Source of version markers and reviews
            interval_seconds: Delay between ticks
            wait: Blocks for the given seconds and returns True once the poller
                should stop. Defaults to the poller's own stop event, so tests
                can drive ticks without real time passing.
        """
        if interval_seconds <= 0:
            raise ValueError(f"Invalid poll interval: {interval_seconds}. Must be positive")
        
        self.store = store
        self.ingestion_agent = ingestion_agent
        self.interval_seconds = interval_seconds
        self.state = PollState.IDLE
        
        self._stop_event = threading.Event()
        self._wait = wait or self._stop_event.wait
        self._thread: Optional[threading.Thread] = None
        self._listeners: List[Callable[[DatasetSnapshot], None]] = []
        
        logger.info(f"Initialized VersionedPoller with interval={interval_seconds}s")
    
    def on_update(self, listener: Callable[[DatasetSnapshot], None]) -> None:
        """Register a callback invoked with the new snapshot after each refresh."""
        self._listeners.append(listener)
    
    def tick(self) -> PollOutcome:
        """
        Run one poll cycle.
        
        Returns:
            What happened during this cycle
        """
        self.state = PollState.CHECKING
        try:
            try:
                remote_version = self.ingestion_agent.fetch_version_marker()
            except RetailVoiceError as e:
                logger.error(f"Version check failed: {e}")
                return PollOutcome.CHECK_FAILED
            
            if remote_version is None:
                logger.warning("Version cell is empty, skipping this tick")
                return PollOutcome.CHECK_FAILED
            
            if self.store.is_current_version(remote_version):
                logger.debug(f"Version {self.store.version} is current. No update needed.")
                return PollOutcome.UNCHANGED
            
            logger.info(
                f"New version detected: {remote_version} (was {self.store.version}). "
                f"Starting full review fetch."
            )
            self.state = PollState.FETCHING
            try:
                reviews = self.ingestion_agent.fetch_reviews()
            except RetailVoiceError as e:
                logger.error(f"Review refresh failed, keeping version {self.store.version}: {e}")
                return PollOutcome.FETCH_FAILED
            
            snapshot = self.store.replace_reviews(reviews, remote_version)
            self._notify(snapshot)
            return PollOutcome.UPDATED
        finally:
            self.state = PollState.IDLE
    
    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Poll until stopped (or until `max_ticks` cycles have run).
        
        The first tick happens after one interval, as the startup load has
        just fetched everything.
        
        Returns:
            Number of ticks performed
        """
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if self._wait(self.interval_seconds) or self._stop_event.is_set():
                break
            self.tick()
            ticks += 1
        logger.info(f"Poller stopped after {ticks} ticks")
        return ticks
    
    def start(self) -> None:
        """Run the polling loop on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="reviews-poller", daemon=True)
        self._thread.start()
    
    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval_seconds)
        self._thread = None
    
    def __enter__(self) -> "VersionedPoller":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
    
    def _notify(self, snapshot: DatasetSnapshot) -> None:
        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}", exc_info=True)
