"""
Configuration settings for RetailVoice.

Centralized configuration for the ingestion pipeline, poller and summarization.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_ROOT = PROJECT_ROOT / "output"

# API Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY", "")

# Spreadsheet source
SPREADSHEET_ID = os.getenv(
    "RETAILVOICE_SPREADSHEET_ID",
    "130Kmw8zDvEvs_0ikiNnGwme11iPY-bYaQWJCocgNoWg"
)
GAS_STATIONS_SHEET_NAME = "gasStations"
REVIEWS_SHEET_NAME = "reviews"
REVIEWS_VERSION_CELL_RANGE = "reviews!F2"

# HTTP
HTTP_CONNECT_TIMEOUT_SECONDS = 10.0
HTTP_READ_TIMEOUT_SECONDS = 30.0

# Poller
POLL_INTERVAL_SECONDS = float(os.getenv("RETAILVOICE_POLL_INTERVAL", "5"))

# Summarization
SUMMARY_MODEL = "gemini-2.5-flash"
SUMMARY_TEMPERATURE = 0.2
HIGHLIGHT_BATCH_LIMIT = 20  # Review texts per highlight request
ANALYSIS_BATCH_LIMIT = 15  # Newest review texts per station analysis

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FILE = "retailvoice.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
