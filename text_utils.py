"""
Text utilities for query normalization, identifier parsing, and cleanup.

Handles search-term encoding, IMDb identifier extraction from links, and
whitespace/entity cleanup of scraped text.
"""

import html
import re
from typing import Optional
from urllib.parse import quote_plus, unquote_plus

from constants import FILM_ID_PREFIX


# =============================================================================
# Query Normalization
# =============================================================================

def normalize_search_term(term: str) -> str:
    """
    Encode a search term as a canonical URL query value.

    The term is decoded first, so an already encoded term is not encoded
    twice: "the matrix", "the+matrix" and "the%20matrix" all give
    "the+matrix".

    Args:
        term: Raw or percent-encoded search term

    Returns:
        URL-safe query string
    """
    return quote_plus(unquote_plus(term or ""))


# =============================================================================
# Sanitization
# =============================================================================

def clean_text(text: Optional[str]) -> str:
    """
    Clean scraped text for display.

    - Decode HTML entities
    - Remove control characters
    - Collapse whitespace

    Args:
        text: Raw text (may be None)

    Returns:
        Cleaned text, empty string for None
    """
    if not text:
        return ""

    text = html.unescape(text)
    text = re.sub(r'[\x00-\x1f\x7f]', ' ', text)
    return ' '.join(text.split())


def format_duration(duration: Optional[str]) -> str:
    """
    Render an ISO-8601 duration the way IMDb displays runtimes.

    Args:
        duration: Duration like "PT2H16M" or "PT58M"

    Returns:
        Runtime like "2h 16m", or empty string if unparseable
    """
    if not duration or not duration.startswith("P"):
        return ""

    match = re.fullmatch(r'P(?:\d+D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:\d+S)?', duration)
    if not match:
        return ""

    hours, minutes = match.groups()
    parts = []
    if hours and int(hours):
        parts.append(f"{int(hours)}h")
    if minutes and int(minutes):
        parts.append(f"{int(minutes)}m")
    return " ".join(parts)


# =============================================================================
# Identifiers
# =============================================================================

def is_film_id(value: str) -> bool:
    """Check whether a lookup value is already a film identifier."""
    return value[:2] == FILM_ID_PREFIX


def validate_imdb_id(imdb_id: str, prefix: str = FILM_ID_PREFIX) -> bool:
    """
    Validate IMDb ID format.

    Used wherever an identifier ends up in a file name or a URL path.

    Args:
        imdb_id: IMDb ID to validate (e.g., "tt1234567")
        prefix: Expected two-letter prefix (tt, nm, co)

    Returns:
        True if valid IMDb ID format
    """
    if not imdb_id:
        return False

    return bool(re.fullmatch(rf'{prefix}\d{{7,8}}', imdb_id))


def extract_imdb_id(text: Optional[str], prefix: str = FILM_ID_PREFIX) -> str:
    """
    Extract an IMDb ID from a link or other text.

    Args:
        text: Text that may contain an ID (e.g. "/title/tt0133093/?ref_=fn_al_tt_1")
        prefix: Two-letter prefix to look for (tt, nm, co)

    Returns:
        Extracted ID or empty string
    """
    if not text:
        return ""

    match = re.search(rf'(?<![a-z])({prefix}\d{{7,8}})(?![0-9])', text)
    return match.group(1) if match else ""


def extract_video_id(text: Optional[str]) -> str:
    """Extract an IMDb video ID (vi…) from a trailer URL."""
    if not text:
        return ""

    match = re.search(r'(?<![a-z])(vi\d+)', text)
    return match.group(1) if match else ""
