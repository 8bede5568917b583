"""
Dailymotion video search client.

Looks up video ids matching a search term and turns them into embeddable
player URLs. Payloads are schema-checked: anything other than
{"list": [{"id": "..."}, ...]} raises MalformedResponseError.
"""

import logging
from typing import Any, List

import requests

from constants import (
    DAILYMOTION_API_BASE,
    DAILYMOTION_COUNTRY,
    DAILYMOTION_EMBED_BASE,
    VIDEO_API_HEADERS,
)
from errors import MalformedResponseError, NetworkError
from http_client import ImdbSession, SessionAwareComponent
from metrics import metrics

logger = logging.getLogger(__name__)


def parse_video_ids(payload: Any) -> List[str]:
    """
    Validate a /videos response and return its ids.

    Args:
        payload: Decoded JSON body

    Returns:
        Video ids in response order

    Raises:
        MalformedResponseError: Payload does not match the expected shape
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    items = payload.get("list")
    if not isinstance(items, list):
        raise MalformedResponseError("Response has no 'list' array")

    ids = []
    for index, item in enumerate(items):
        video_id = item.get("id") if isinstance(item, dict) else None
        if not isinstance(video_id, str) or not video_id:
            raise MalformedResponseError(f"Entry {index} has no string 'id'")
        ids.append(video_id)
    return ids


class DailymotionClient(SessionAwareComponent):
    """Client for the Dailymotion /videos search endpoint."""

    def __init__(self, session: ImdbSession = None):
        """
        Initialize Dailymotion client.

        Args:
            session: Optional shared session for connection pooling.
        """
        self.init_session(session)

    def search_ids(self, query: str) -> List[str]:
        """
        Search videos by an already URL-encoded query.

        Raises:
            NetworkError: Request failed or returned a non-success status
            MalformedResponseError: Body is not the expected JSON
        """
        url = (
            f"{DAILYMOTION_API_BASE}/videos"
            f"?search={query}&fields=id&country={DAILYMOTION_COUNTRY}"
        )

        try:
            with metrics.timer("video_search_duration_ms"):
                response = self.session.get(url, headers=VIDEO_API_HEADERS)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            raise NetworkError(url, str(e), status_code=status_code) from e
        except requests.RequestException as e:
            raise NetworkError(url, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from {url} is not JSON: {e}") from e

        ids = parse_video_ids(payload)
        logger.debug(f"Dailymotion returned {len(ids)} videos for '{query}'")
        return ids

    def embed_urls(self, query: str) -> List[str]:
        """Embeddable player URLs for videos matching `query`."""
        return [DAILYMOTION_EMBED_BASE + video_id for video_id in self.search_ids(query)]
