"""
Summarization Gateway.

Sends batches of review texts to Gemini with a declared JSON response schema
and unwraps the structured result. No retries: callers may simply re-invoke.
"""

import json
import logging
import threading
from typing import Dict, Hashable, List, Optional, Sequence

import google.generativeai as genai

from retailvoice.errors import ConfigurationError, UpstreamError, UpstreamFormatError
from retailvoice.models.analytics import ANALYSIS_CATEGORIES, ReviewAnalysis

logger = logging.getLogger(__name__)

HIGHLIGHT_BATCH_LIMIT = 20
ANALYSIS_BATCH_LIMIT = 15
HIGHLIGHT_SENTIMENTS = ("positive", "negative")


HIGHLIGHTS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "STRING",
        "description": "A brief summary point about the station."
    }
}

_CATEGORY_SENTIMENT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "sentiment": {
            "type": "STRING",
            "description": "One of 'Positive', 'Negative', 'Mixed', or 'Neutral'."
        },
        "count": {
            "type": "NUMBER",
            "description": "The number of reviews relevant to this category."
        }
    },
    "required": ["sentiment", "count"]
}

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summaryGood": {
            "type": "STRING",
            "description": "A one or two sentence summary of common positive feedback."
        },
        "summaryBad": {
            "type": "STRING",
            "description": "A one or two sentence summary of common negative feedback."
        },
        "categoryRatings": {
            "type": "OBJECT",
            "properties": {category: _CATEGORY_SENTIMENT_SCHEMA for category in ANALYSIS_CATEGORIES}
        }
    },
    "required": ["summaryGood", "summaryBad"]
}


def _construct_highlights_prompt(texts: Sequence[str], sentiment: str) -> str:
    """Construct highlight prompt for the most common praise or issues."""
    action = "praise" if sentiment == "positive" else "issues"
    example = (
        "Example: ['Clean facilities', 'Great coffee']"
        if sentiment == "positive"
        else "Example: ['Slow service', 'High prices']"
    )
    return f"""Analyze these user reviews for a gas station.
Provide a JSON array of 2-3 very brief, summarized bullet points highlighting the most common {action}.
Each bullet point should be a short string, ideally 2-4 words.
Reviews:
{json.dumps(list(texts), ensure_ascii=False)}
{example}
Provide the output in this exact JSON format: an array of strings."""


def _construct_analysis_prompt(texts: Sequence[str]) -> str:
    """Construct full-analysis prompt (two summaries plus per-category sentiment)."""
    return f"""You are a review analyst. Analyze the following {len(texts)} user reviews for a gas station.
- In one or two sentences, summarize the most common good things (praise) mentioned.
- In one or two sentences, summarize the most common bad things (issues) mentioned.
- For each of the following 5 categories, give a 'sentiment' that is exactly one of
  'Positive', 'Negative', 'Mixed' or 'Neutral' ('Neutral' if the category is not mentioned),
  and a 'count' of how many reviews were relevant to that category.
- Categories:
    - hygiene (cleanliness of the station, toilets, etc.)
    - foodAndDrinks (quality and variety of snacks, coffee, etc.)
    - gasQuality (perceived quality of the fuel)
    - cashierService (friendliness and efficiency of the staff at the counter)
    - gasRefillService (helpfulness and attitude of the staff at the pumps)

Ignore comments about price and do not include it in the two summaries.
Reviews:
{json.dumps(list(texts), ensure_ascii=False)}
Provide the output in this exact JSON format, with no other text."""


class SummarizationGateway:
    """
    Gateway to Gemini for review summaries.
    
    Uses Gemini to:
    1. Summarize the most common praise or issues of a station as short bullet points
    2. Produce a full analysis (good/bad summaries plus category sentiment)
    """
    
    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        highlight_batch_limit: int = HIGHLIGHT_BATCH_LIMIT,
        analysis_batch_limit: int = ANALYSIS_BATCH_LIMIT
    ):
        """
        Initialize summarization gateway.
        
        Args:
            api_key: Gemini API key; a missing key fails at first use
            model_name: Gemini model to use
            temperature: LLM temperature
            highlight_batch_limit: Maximum review texts per highlight request
            analysis_batch_limit: Maximum review texts per analysis request
        """
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self.highlight_batch_limit = highlight_batch_limit
        self.analysis_batch_limit = analysis_batch_limit
        self._configured = False
        
        logger.info(f"Initialized SummarizationGateway with model={model_name}, temp={temperature}")
    
    def summarize_highlights(self, texts: Sequence[str], sentiment: str) -> List[str]:
        """
        Summarize the most common praise ("positive") or issues ("negative").
        
        Args:
            texts: Review texts; only the first `highlight_batch_limit` are sent
            sentiment: "positive" or "negative"
        
        Returns:
            A few short bullet points
        
        Raises:
            ValueError: If sentiment is not "positive" or "negative"
            ConfigurationError: If no API key is configured
            UpstreamFormatError: If the response is not an array of strings
            UpstreamError: For any other service failure
        """
        if sentiment not in HIGHLIGHT_SENTIMENTS:
            raise ValueError(f"Invalid sentiment: {sentiment}. Must be 'positive' or 'negative'")
        
        batch = list(texts)[:self.highlight_batch_limit]
        data = self._generate(_construct_highlights_prompt(batch, sentiment), HIGHLIGHTS_SCHEMA)
        
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise UpstreamFormatError(
                "The AI returned an invalid data format for highlights. Please try again."
            )
        
        logger.debug(f"Summarized {len(batch)} reviews into {len(data)} {sentiment} highlights")
        return data
    
    def analyze_reviews(self, texts: Sequence[str]) -> ReviewAnalysis:
        """
        Produce a full analysis of a batch of reviews.
        
        Args:
            texts: Review texts; only the first `analysis_batch_limit` are sent
        
        Returns:
            ReviewAnalysis
        
        Raises:
            ConfigurationError: If no API key is configured
            UpstreamFormatError: If the response does not match the schema
            UpstreamError: For any other service failure
        """
        batch = list(texts)[:self.analysis_batch_limit]
        data = self._generate(_construct_analysis_prompt(batch), ANALYSIS_SCHEMA)
        
        try:
            analysis = ReviewAnalysis.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as e:
            logger.error(f"Analysis response does not match schema: {e}")
            raise UpstreamFormatError(
                "The AI returned an invalid data format. Please try again."
            ) from e
        
        logger.debug(f"Analyzed {len(batch)} reviews")
        return analysis
    
    def _ensure_configured(self) -> None:
        if not self.api_key:
            raise ConfigurationError(
                "API key is not configured. Please set GOOGLE_API_KEY in your environment."
            )
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True
    
    def _generate(self, prompt: str, schema: dict):
        """Call Gemini and decode its JSON text."""
        self._ensure_configured()
        
        model = genai.GenerativeModel(
            model_name=self.model_name,
            generation_config={
                "temperature": self.temperature,
                "response_mime_type": "application/json",
                "response_schema": schema
            }
        )
        
        try:
            response = model.generate_content(prompt)
            response_text = response.text
        except Exception as e:
            logger.error(f"Gemini API error: {e}")
            raise UpstreamError(f"Failed to summarize reviews: {e}") from e
        
        try:
            return json.loads(response_text.strip())
        except (json.JSONDecodeError, AttributeError) as e:
            logger.error(f"Failed to parse Gemini JSON response: {e}")
            raise UpstreamFormatError(
                "The AI returned an invalid data format. Please try again."
            ) from e


class SummaryGenerations:
    """
    Generation tokens for summary requests, one counter per widget key.
    
    Each request takes a new token; a response is applied only if its token
    is still the latest for that key, so a slow stale response never
    overwrites a newer one.
    """
    
    def __init__(self):
        self._latest: Dict[Hashable, int] = {}
        self._lock = threading.Lock()
    
    def issue(self, key: Hashable) -> int:
        with self._lock:
            token = self._latest.get(key, 0) + 1
            self._latest[key] = token
            return token
    
    def is_latest(self, key: Hashable, token: int) -> bool:
        with self._lock:
            return self._latest.get(key) == token
