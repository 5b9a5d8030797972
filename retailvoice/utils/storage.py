"""
Storage utility.

File I/O helpers for exported dashboard reports.
Nothing is ever written back to the source spreadsheet.
"""

import json
import re
import os
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import pandas as pd

from retailvoice.models.analytics import DashboardView, HighlightedStation, StationDetail

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]")


def _highlight_to_dict(highlight: Optional[HighlightedStation]) -> Optional[Dict]:
    if highlight is None:
        return None
    return {
        "station": highlight.rating.station.to_dict(),
        "average_rating": round(highlight.rating.average_rating, 2),
        "review_count": highlight.rating.review_count,
        "summary": highlight.summary
    }


def dashboard_to_dict(view: DashboardView) -> Dict:
    """Convert a dashboard view to a JSON-serializable dict."""
    return {
        "stats": view.stats.to_dict(),
        "highest_rated": _highlight_to_dict(view.highest),
        "lowest_rated": _highlight_to_dict(view.lowest),
        "markers": [
            {
                "station_id": marker.station.id,
                "latitude": marker.station.location.latitude,
                "longitude": marker.station.location.longitude,
                "band": marker.band,
                "label": marker.label
            }
            for marker in view.markers
        ],
        "summary_error": view.summary_error
    }


def station_detail_to_dict(detail: StationDetail) -> Dict:
    """Convert a station detail view to a JSON-serializable dict."""
    return {
        "station": detail.station.to_dict(),
        "average_rating": detail.average_rating,
        "sentiment": detail.sentiment.to_dict(),
        "history": [{"date": p.date, "rating": p.rating} for p in detail.history],
        "reviews": [r.to_dict() for r in detail.reviews],
        "analysis": detail.analysis.to_dict() if detail.analysis else None,
        "error": detail.error
    }


class StorageManager:
    """
    Manages file output for exported reports.
    
    Handles:
    - Dashboard reports (output/dashboard_YYYYMMDDTHHMMSS.json)
    - Station ratings tables (output/station_ratings_YYYYMMDDTHHMMSS.csv)
    - Station detail reports (output/station_<id>_YYYYMMDDTHHMMSS.json)
    """
    
    def __init__(self, output_root: str):
        """
        Initialize storage manager.
        
        Args:
            output_root: Directory receiving exported files
        """
        self.output_root = output_root
        os.makedirs(self.output_root, exist_ok=True)
        
        logger.info(f"Initialized StorageManager with output_root={output_root}")
    
    def _stamp(self) -> str:
        return datetime.now().strftime("%Y%m%dT%H%M%S")
    
    def _write_json(self, data: Dict, filepath: str) -> str:
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write {filepath}: {e}")
            raise
        logger.info(f"Saved report to {filepath}")
        return filepath
    
    def save_dashboard(self, view: DashboardView, stamp: Optional[str] = None) -> str:
        """
        Save a dashboard report.
        
        Returns:
            Path of the written JSON file
        """
        data = dashboard_to_dict(view)
        data["generated_at"] = datetime.now(timezone.utc).isoformat()
        filepath = os.path.join(self.output_root, f"dashboard_{stamp or self._stamp()}.json")
        return self._write_json(data, filepath)
    
    def save_station_table(self, df: pd.DataFrame, stamp: Optional[str] = None) -> str:
        """
        Save the per-station ratings table as CSV.
        
        Returns:
            Path of the written CSV file
        """
        filepath = os.path.join(self.output_root, f"station_ratings_{stamp or self._stamp()}.csv")
        df.to_csv(filepath, index=False)
        logger.info(f"Station table saved to {filepath} ({len(df)} stations)")
        return filepath
    
    def save_station_detail(self, detail: StationDetail, stamp: Optional[str] = None) -> str:
        # Station ids come from the sheet; keep them inside output_root
        safe_id = _UNSAFE_FILENAME_CHARS.sub("_", detail.station.id)
        filepath = os.path.join(
            self.output_root,
            f"station_{safe_id}_{stamp or self._stamp()}.json"
        )
        return self._write_json(station_detail_to_dict(detail), filepath)
