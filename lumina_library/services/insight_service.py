import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from lumina_library.config import settings
from lumina_library.services.http_client import get_http_client

logger = logging.getLogger(__name__)


FALLBACK_INSIGHT = "Could not generate insights at this time."
FALLBACK_CATEGORY = "General"

INSIGHT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "insight": {"type": "STRING"},
        "category": {"type": "STRING"},
    },
    "required": ["insight", "category"],
}


@dataclass
class BookInsight:
    """AI-derived details for one book"""
    insight: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insight": self.insight,
            "category": self.category
        }


FALLBACK = BookInsight(insight=FALLBACK_INSIGHT, category=FALLBACK_CATEGORY)


class InsightServiceError(Exception):
    """Raised when the text-generation service cannot produce a usable answer"""
    pass


class MalformedResponse(InsightServiceError):
    """Response did not have the expected shape"""
    pass


def build_prompt(title: str, author: str) -> str:
    return (
        f'Provide a very short, one-sentence insightful summary or interesting fact about the book '
        f'"{title}" by {author}. Also provide a single-word or short category (e.g., Sci-Fi, '
        f'Self-Help, Mystery). Respond with a JSON object containing exactly two string fields: '
        f'"insight" and "category".'
    )


def parse_insight(payload: Any) -> BookInsight:
    """Extract a BookInsight from a generateContent response body.

    Raises MalformedResponse for anything other than a JSON object with string
    ``insight`` and ``category`` fields in the first candidate.
    """
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponse(f"Unexpected response envelope: {e!r}") from e

    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"Response text is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse("Response JSON is not an object")
    insight = data.get("insight")
    category = data.get("category")
    if not isinstance(insight, str) or not isinstance(category, str):
        raise MalformedResponse("Response is missing 'insight' or 'category'")
    if not insight.strip() or not category.strip():
        raise MalformedResponse("Response has empty 'insight' or 'category'")
    return BookInsight(insight=insight.strip(), category=category.strip())


class InsightService:
    """Fetches a one-sentence insight and a category label from Gemini"""

    def __init__(self, api_key: Optional[str] = None, client: Any = None,
                 model: Optional[str] = None, base_url: Optional[str] = None,
                 enabled: Optional[bool] = None):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = settings.insight_timeout
        self.enabled = settings.enable_ai_features if enabled is None else enabled
        # Anything with an async ``post``; defaults to the shared pooled client
        self._client = client

    def is_available(self) -> bool:
        """Check whether a real request can be made"""
        return bool(self.api_key) and self.enabled

    async def _make_api_request(self, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key or "",
            "Content-Type": "application/json"
        }
        client = self._client or await get_http_client()

        start_time = time.time()
        response = await client.post(url, json=payload, headers=headers)
        response_time_ms = int((time.time() - start_time) * 1000)

        if response.status_code != 200:
            raise InsightServiceError(f"API request failed: {response.status_code} - {response.text[:200]}")
        logger.debug(f"Gemini responded in {response_time_ms}ms")
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Response body is not JSON: {e}") from e

    async def fetch_insight(self, title: str, author: str) -> BookInsight:
        """
        Ask the model for an insight and category.

        Args:
            title: Book title
            author: Book author

        Returns:
            The parsed BookInsight, or the fixed fallback on any failure.
        """
        if not self.is_available():
            logger.warning("Insight service not configured; using fallback")
            return FALLBACK

        payload = {
            "contents": [{"parts": [{"text": build_prompt(title, author)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": INSIGHT_SCHEMA,
            },
        }

        try:
            response = await self._make_api_request(payload)
            result = parse_insight(response)
            logger.info(f"Insight generated for '{title}': category={result.category}")
            return result
        except httpx.TimeoutException:
            logger.error(f"Insight request timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            logger.error(f"Insight request failed: {e}")
        except InsightServiceError as e:
            logger.error(f"Insight generation failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error while generating insight: {e}")
        return FALLBACK
