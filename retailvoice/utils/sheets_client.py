"""
Google Sheets gviz client.

Thin HTTP layer over requests for the published spreadsheet endpoints.
No retries: polling itself is the retry mechanism.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from retailvoice.errors import FetchError

logger = logging.getLogger(__name__)

GVIZ_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq"
USER_AGENT = "retailvoice/0.1"


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 30.0


class SheetsClient:
    """
    Fetches raw gviz payloads for sheets and single-cell ranges.
    """
    
    def __init__(
        self,
        spreadsheet_id: str,
        timeout: Optional[TimeoutConfig] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize sheets client.
        
        Args:
            spreadsheet_id: ID of the published Google spreadsheet
            timeout: Connect/read timeouts in seconds
            session: Optional pre-built session (tests inject fakes here)
        """
        self.spreadsheet_id = spreadsheet_id
        self.timeout = timeout or TimeoutConfig()
        self.session = session or requests.Session()
        self.base_url = GVIZ_URL_TEMPLATE.format(spreadsheet_id=spreadsheet_id)
    
    def close(self) -> None:
        self.session.close()
    
    def __enter__(self) -> "SheetsClient":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    def sheet_params(self, sheet_name: str, cell_range: Optional[str] = None) -> Dict[str, str]:
        params = {"tqx": "out:json", "sheet": sheet_name}
        if cell_range:
            params["tq"] = "select *"
            params["range"] = cell_range
        return params
    
    def fetch_sheet(self, sheet_name: str) -> str:
        """Fetch the full gviz payload of one sheet."""
        return self._get_text(self.sheet_params(sheet_name))
    
    def fetch_range(self, sheet_name: str, cell_range: str) -> str:
        """Fetch the gviz payload of a cell range (e.g. "reviews!F2")."""
        return self._get_text(self.sheet_params(sheet_name, cell_range))
    
    def _get_text(self, params: Dict[str, str]) -> str:
        try:
            response = self.session.get(
                self.base_url,
                params=params,
                headers={"User-Agent": USER_AGENT},
                timeout=(self.timeout.connect, self.timeout.read)
            )
        except requests.RequestException as e:
            raise FetchError(f"Request for sheet {params.get('sheet')!r} failed: {e}") from e
        
        if response.status_code >= 400:
            raise FetchError(
                f"HTTP status {response.status_code} for sheet {params.get('sheet')!r}"
            )
        
        logger.debug(f"Fetched sheet {params.get('sheet')!r} ({len(response.text)} chars)")
        return response.text
