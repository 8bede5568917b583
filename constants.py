"""
Shared constants, enums, and defaults for the IMDb lookup.

This module centralizes all URLs and magic numbers and provides type-safe
enums for extractable fields and search categories.
"""

from enum import Enum
from typing import Final, Tuple


# =============================================================================
# Enums
# =============================================================================

class Field(str, Enum):
    """
    Fields that can be extracted from a fetched IMDb page.

    Inherits from str so members compare equal to their record keys.
    """
    TITLE = "title"
    YEAR = "year"
    LENGTH = "length"
    PLOT = "plot"
    RATING = "rating"
    RATING_VOTES = "rating_votes"
    POSTER = "poster"
    TRAILER = "trailer"
    CAST = "cast"
    TECHNICAL_SPECS = "technical_specs"
    TITLES = "titles"
    NAMES = "names"
    COMPANIES = "companies"


class SearchCategory(str, Enum):
    """IMDb find-page categories (the `s=` query parameter)."""
    ALL = "all"
    TITLE = "tt"
    NAME = "nm"
    COMPANY = "co"
    KEYWORD = "kw"


# Fields read from the main title page, in record order
FILM_PAGE_FIELDS: Final = (
    Field.TITLE,
    Field.YEAR,
    Field.LENGTH,
    Field.PLOT,
    Field.RATING,
    Field.RATING_VOTES,
    Field.POSTER,
    Field.TRAILER,
    Field.CAST,
)

SEARCH_PAGE_FIELDS: Final = (Field.TITLES, Field.NAMES, Field.COMPANIES)


# =============================================================================
# Provider Configuration
# =============================================================================

PROVIDER_NAME: Final = "IMDb Streaming Movies"
PROVIDER_VERSION: Final = "1.0.0"


# =============================================================================
# Option Defaults
# =============================================================================

DEFAULT_CACHE: Final = True
DEFAULT_CATEGORY: Final = SearchCategory.ALL.value
DEFAULT_REQUEST_HEADERS: Final[Tuple[str, ...]] = ("Accept-Language: en-US,en;q=0.5",)
DEFAULT_TECH_SPECS: Final = True

FILM_ID_PREFIX: Final = "tt"


# =============================================================================
# Cache Settings
# =============================================================================

MAX_CACHE_ENTRIES: Final = 1000  # LRU capacity
DEFAULT_CACHE_TTL: Final = 7 * 24 * 60 * 60  # 7 days


# =============================================================================
# HTTP Settings
# =============================================================================

REQUEST_TIMEOUT: Final = 30.0
MAX_REDIRECTS: Final = 10
POOL_CONNECTIONS: Final = 10
POOL_MAXSIZE: Final = 20

BROWSER_USER_AGENT: Final = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Dailymotion answers 403 to requests without a browser user agent
VIDEO_API_HEADERS: Final = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_10_1) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/39.0.2171.95 Safari/53"
    ),
}


# =============================================================================
# External URLs
# =============================================================================

IMDB_BASE_URL: Final = "https://www.imdb.com"
DAILYMOTION_API_BASE: Final = "https://api.dailymotion.com"
DAILYMOTION_EMBED_BASE: Final = "https://www.dailymotion.com/embed/video/"
DAILYMOTION_COUNTRY: Final = "us"
