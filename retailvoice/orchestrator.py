"""
Dashboard Orchestrator.

Wires the ingestion agent, data store, poller, aggregation engine and
summarization gateway together, and builds the view models consumed by
the dashboard, map and station detail views.
"""

import logging
from typing import Callable, List, Optional

from retailvoice.agents import aggregation
from retailvoice.agents.aggregation import ReviewSortOrder
from retailvoice.agents.ingestion import SheetIngestionAgent
from retailvoice.agents.polling import VersionedPoller
from retailvoice.agents.summarization import SummarizationGateway, SummaryGenerations
from retailvoice.errors import DataLoadError, RetailVoiceError
from retailvoice.models.analytics import (
    DashboardView,
    HighlightedStation,
    StationDetail,
)
from retailvoice.models.snapshot import DatasetSnapshot
from retailvoice.store.data_store import DataStore
from retailvoice.utils.sheets_client import SheetsClient, TimeoutConfig
import config.settings as settings

logger = logging.getLogger(__name__)

HIGHLIGHTS_WIDGET = "dashboard-highlights"
DETAIL_WIDGET = "station-detail"


class DashboardOrchestrator:
    """
    Owns the application lifecycle: initialize -> (poll / build views)* -> close.
    
    Coordinates:
    1. Startup load (fatal on failure) → 2. Periodic polling (failures swallowed)
    → 3. Aggregation on demand → 4. Summaries (failures scoped to one view)
    """
    
    def __init__(
        self,
        store: DataStore,
        ingestion_agent: SheetIngestionAgent,
        gateway: Optional[SummarizationGateway] = None,
        poll_interval_seconds: float = settings.POLL_INTERVAL_SECONDS,
        analysis_batch_limit: int = settings.ANALYSIS_BATCH_LIMIT,
        wait: Optional[Callable[[float], bool]] = None
    ):
        """
        Initialize orchestrator.
        
        Args:
            store: State container shared by every component
            ingestion_agent: Source of stations, reviews and version markers
            gateway: Summarization gateway; None disables AI summaries
            poll_interval_seconds: Delay between version checks
            analysis_batch_limit: Newest reviews sent for a station analysis
            wait: Injected wait for the poller (see VersionedPoller)
        """
        self.store = store
        self.ingestion_agent = ingestion_agent
        self.gateway = gateway
        self.analysis_batch_limit = analysis_batch_limit
        self.generations = SummaryGenerations()
        
        self.poller = VersionedPoller(
            store=store,
            ingestion_agent=ingestion_agent,
            interval_seconds=poll_interval_seconds,
            wait=wait
        )
    
    @classmethod
    def from_settings(cls, enable_summaries: bool = True, **kwargs) -> "DashboardOrchestrator":
        """Build the full component graph from config.settings."""
        client = SheetsClient(
            spreadsheet_id=settings.SPREADSHEET_ID,
            timeout=TimeoutConfig(
                connect=settings.HTTP_CONNECT_TIMEOUT_SECONDS,
                read=settings.HTTP_READ_TIMEOUT_SECONDS
            )
        )
        ingestion_agent = SheetIngestionAgent(
            client=client,
            stations_sheet=settings.GAS_STATIONS_SHEET_NAME,
            reviews_sheet=settings.REVIEWS_SHEET_NAME,
            version_cell_range=settings.REVIEWS_VERSION_CELL_RANGE
        )
        gateway = None
        if enable_summaries:
            gateway = SummarizationGateway(
                api_key=settings.GOOGLE_API_KEY,
                model_name=settings.SUMMARY_MODEL,
                temperature=settings.SUMMARY_TEMPERATURE,
                highlight_batch_limit=settings.HIGHLIGHT_BATCH_LIMIT,
                analysis_batch_limit=settings.ANALYSIS_BATCH_LIMIT
            )
        return cls(store=DataStore(), ingestion_agent=ingestion_agent, gateway=gateway, **kwargs)
    
    def initialize(self) -> DatasetSnapshot:
        """
        Unconditional full load of stations and reviews.
        
        The version marker is read best-effort and before the reviews, so a
        sheet edit during the load is picked up by the next poll tick. If it
        cannot be read, the first poll tick performs a full refresh.
        
        Raises:
            DataLoadError: If stations or reviews cannot be loaded
        """
        logger.info("Loading initial data from the spreadsheet...")
        version = None
        try:
            version = self.ingestion_agent.fetch_version_marker()
        except RetailVoiceError as e:
            logger.warning(f"Could not read initial version marker: {e}")
        
        try:
            stations = self.ingestion_agent.fetch_stations()
            reviews = self.ingestion_agent.fetch_reviews()
        except RetailVoiceError as e:
            logger.error(f"Error initializing data: {e}")
            raise DataLoadError(f"Failed to fetch initial data from Google Sheets: {e}") from e
        
        return self.store.initialize(stations, reviews, version)
    
    def on_update(self, listener: Callable[[DatasetSnapshot], None]) -> None:
        self.poller.on_update(listener)
    
    def start_polling(self) -> None:
        self.poller.start()
    
    def run_polling(self, max_ticks: Optional[int] = None) -> int:
        """Poll on the calling thread until stopped."""
        return self.poller.run(max_ticks=max_ticks)
    
    def close(self) -> None:
        self.poller.stop()
        self.store.close()
        self.ingestion_agent.client.close()
        logger.info("Dashboard orchestrator closed")
    
    def __enter__(self) -> "DashboardOrchestrator":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    def build_dashboard(self, include_summaries: bool = True) -> DashboardView:
        """
        Build the dashboard view from the current snapshot.
        
        Summary failures are reported in `summary_error`; the stats, ranking
        and markers are always returned.
        """
        snapshot = self.store.snapshot
        stations, reviews = snapshot.stations, snapshot.reviews
        
        best, worst = aggregation.best_and_worst(stations, reviews)
        view = DashboardView(
            stats=aggregation.dashboard_stats(stations, reviews),
            highest=HighlightedStation(rating=best) if best else None,
            lowest=HighlightedStation(rating=worst) if worst else None,
            markers=aggregation.map_markers(stations, reviews)
        )
        
        if include_summaries and self.gateway is not None and best is not None:
            self._attach_highlights(view, reviews)
        
        return view
    
    def _attach_highlights(self, view: DashboardView, reviews) -> None:
        token = self.generations.issue(HIGHLIGHTS_WIDGET)
        highest_texts = self._station_texts(reviews, view.highest.rating.station.id)
        lowest_texts = self._station_texts(reviews, view.lowest.rating.station.id)
        
        try:
            highest_summary = self.gateway.summarize_highlights(highest_texts, "positive")
            lowest_summary = self.gateway.summarize_highlights(lowest_texts, "negative")
        except RetailVoiceError as e:
            logger.error(f"Failed to load station summaries: {e}")
            if self.generations.is_latest(HIGHLIGHTS_WIDGET, token):
                view.summary_error = str(e)
            return
        
        if not self.generations.is_latest(HIGHLIGHTS_WIDGET, token):
            logger.debug("Discarding stale highlight summaries")
            return
        view.highest.summary = highest_summary
        view.lowest.summary = lowest_summary
    
    def station_detail(
        self,
        station_id: str,
        sort_order: ReviewSortOrder = ReviewSortOrder.NEWEST_FIRST,
        include_analysis: bool = True
    ) -> Optional[StationDetail]:
        """
        Build the detail view of one station.
        
        Returns:
            StationDetail, or None if the station does not exist
        """
        snapshot = self.store.snapshot
        station = snapshot.find_station(station_id)
        if station is None:
            logger.warning(f"Gas station not found: {station_id}")
            return None
        
        station_reviews = [r for r in snapshot.reviews if r.station_id == station_id]
        detail = StationDetail(
            station=station,
            average_rating=aggregation.average_rating(station_reviews),
            sentiment=aggregation.sentiment_counts(station_reviews),
            history=aggregation.rolling_average_series(station_reviews),
            reviews=aggregation.sort_reviews(station_reviews, sort_order)
        )
        
        if include_analysis and self.gateway is not None and station_reviews:
            self._attach_analysis(detail, station_reviews)
        
        return detail
    
    def _attach_analysis(self, detail: StationDetail, station_reviews) -> None:
        token = self.generations.issue(DETAIL_WIDGET)
        texts = aggregation.latest_review_texts(station_reviews, self.analysis_batch_limit)
        
        try:
            analysis = self.gateway.analyze_reviews(texts)
        except RetailVoiceError as e:
            logger.error(f"Error analyzing reviews for {detail.station.id}: {e}")
            if self.generations.is_latest(DETAIL_WIDGET, token):
                detail.error = str(e)
            return
        
        if not self.generations.is_latest(DETAIL_WIDGET, token):
            logger.debug(f"Discarding stale analysis for {detail.station.id}")
            return
        detail.analysis = analysis
    
    def _station_texts(self, reviews, station_id: str) -> List[str]:
        return [r.review_text for r in reviews if r.station_id == station_id]
