"""
Field extraction from IMDb pages.

Every extractable field is a member of constants.Field and maps to one
extraction function. Title-page fields come from the page's JSON-LD block;
cast, technical specs and find results come from data-testid markup.

Missing markup yields the field's empty value instead of raising, so a
layout change degrades a record rather than failing the lookup.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Union

from bs4 import BeautifulSoup

from constants import IMDB_BASE_URL, Field
from text_utils import (
    clean_text,
    extract_imdb_id,
    extract_video_id,
    format_duration,
)

logger = logging.getLogger(__name__)

LD_JSON_TYPES = {"Movie", "TVSeries", "TVMiniSeries", "TVEpisode", "VideoGame", "Short"}


def empty_trailer() -> Dict[str, str]:
    return {"id": "", "link": ""}


# =============================================================================
# Helpers
# =============================================================================

def _ld_json(document: BeautifulSoup) -> Dict[str, Any]:
    """Return the page's JSON-LD object describing the title, or {}."""
    for tag in document.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(tag.string or "")
        except ValueError as e:
            logger.debug(f"Skipping unparseable JSON-LD block: {e}")
            continue

        candidates = data if isinstance(data, list) else [data]
        for candidate in candidates:
            if isinstance(candidate, dict) and candidate.get("@type") in LD_JSON_TYPES:
                return candidate
    return {}


def _ld_value(value: Any) -> str:
    """
    Reduce a schema.org property to a string.

    Lists yield their first usable element, objects (ImageObject and the
    like) their url; anything else is empty.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, list):
        for item in value:
            text = _ld_value(item)
            if text:
                return text
        return ""
    if isinstance(value, dict):
        for key in ("url", "contentUrl", "@value"):
            if isinstance(value.get(key), str):
                return value[key]
    return ""


def _ld_text(document: BeautifulSoup, key: str) -> str:
    return clean_text(_ld_value(_ld_json(document).get(key)))


def _aggregate_rating(document: BeautifulSoup, key: str) -> str:
    rating = _ld_json(document).get("aggregateRating")
    if not isinstance(rating, dict) or rating.get(key) is None:
        return ""
    return str(rating[key])


def _image_src(tag) -> str:
    img = tag.select_one("img") if tag else None
    return img.get("src", "") if img else ""


def _full_size_image(src: str) -> str:
    """Strip IMDb's resize suffix ("._V1_QL75_UX140_.jpg" -> ".jpg")."""
    if not src:
        return ""
    return re.sub(r'\._V1_[^/]*?(\.[a-zA-Z]+)$', r'\1', src)


def _find_results(document: BeautifulSoup, section: str) -> List:
    container = document.select_one(f'section[data-testid="find-results-section-{section}"]')
    if not container:
        return []
    return container.select("li.find-result-item")


def _result_link(item):
    return item.select_one("a.ipc-metadata-list-summary-item__t") or item.select_one("a[href]")


# =============================================================================
# Title page
# =============================================================================

def extract_title(document: BeautifulSoup) -> str:
    return _ld_text(document, "name")


def extract_year(document: BeautifulSoup) -> str:
    published = _ld_text(document, "datePublished")
    return published[:4] if re.match(r'\d{4}', published) else ""


def extract_length(document: BeautifulSoup) -> str:
    return format_duration(_ld_text(document, "duration"))


def extract_plot(document: BeautifulSoup) -> str:
    return _ld_text(document, "description")


def extract_rating(document: BeautifulSoup) -> str:
    return _aggregate_rating(document, "ratingValue")


def extract_rating_votes(document: BeautifulSoup) -> str:
    return _aggregate_rating(document, "ratingCount")


def extract_poster(document: BeautifulSoup) -> str:
    return _ld_text(document, "image")


def extract_trailer(document: BeautifulSoup) -> Dict[str, str]:
    trailer = _ld_json(document).get("trailer")
    if not isinstance(trailer, dict):
        return empty_trailer()

    video_id = extract_video_id(trailer.get("embedUrl") or trailer.get("url"))
    if not video_id:
        return empty_trailer()
    return {"id": video_id, "link": f"{IMDB_BASE_URL}/video/{video_id}"}


def extract_cast(document: BeautifulSoup) -> List[Dict[str, str]]:
    """
    Extract the top-billed cast.

    Returns:
        List of {actor, actor_id, character, avatar, avatar_hq}
    """
    cast = []
    for item in document.select('[data-testid="title-cast-item"]'):
        actor_link = item.select_one('[data-testid="title-cast-item__actor"]')
        if not actor_link:
            continue

        character = (
            item.select_one('[data-testid="cast-item-characters-link"]')
            or item.select_one('[data-testid="cast-item-characters-list"]')
        )
        avatar = _image_src(item)

        cast.append({
            "actor": clean_text(actor_link.get_text()),
            "actor_id": extract_imdb_id(actor_link.get("href"), prefix="nm"),
            "character": clean_text(character.get_text(" ")) if character else "",
            "avatar": avatar,
            "avatar_hq": _full_size_image(avatar),
        })
    return cast


# =============================================================================
# Technical specs page
# =============================================================================

def extract_technical_specs(document: BeautifulSoup) -> List[List[str]]:
    """
    Extract technical specifications as [label, value] pairs.

    Multi-valued specs (e.g. several sound mixes) are joined with " | ".
    """
    specs = []
    for item in document.select('li[data-testid^="title-techspec_"]'):
        label = item.select_one(".ipc-metadata-list-item__label")
        if not label:
            continue

        content = item.select_one(".ipc-metadata-list-item__content-container")
        values = []
        if content:
            values = [clean_text(li.get_text(" ")) for li in content.select("li")]
            if not values:
                values = [clean_text(content.get_text(" "))]

        specs.append([clean_text(label.get_text()), " | ".join(v for v in values if v)])
    return specs


# =============================================================================
# Find page
# =============================================================================

def extract_titles(document: BeautifulSoup) -> List[Dict[str, str]]:
    titles = []
    for item in _find_results(document, "title"):
        link = _result_link(item)
        title_id = extract_imdb_id(link.get("href") if link else None, prefix="tt")
        if not title_id:
            continue
        titles.append({
            "id": title_id,
            "title": clean_text(link.get_text()),
            "image": _image_src(item),
        })
    return titles


def extract_names(document: BeautifulSoup) -> List[Dict[str, str]]:
    names = []
    for item in _find_results(document, "name"):
        link = _result_link(item)
        name_id = extract_imdb_id(link.get("href") if link else None, prefix="nm")
        if not name_id:
            continue
        names.append({
            "id": name_id,
            "name": clean_text(link.get_text()),
            "image": _image_src(item),
        })
    return names


def extract_companies(document: BeautifulSoup) -> List[Dict[str, str]]:
    companies = []
    for item in _find_results(document, "company"):
        link = _result_link(item)
        company_id = extract_imdb_id(link.get("href") if link else None, prefix="co")
        if not company_id:
            continue
        companies.append({
            "id": company_id,
            "name": clean_text(link.get_text()),
        })
    return companies


_EXTRACTORS: Dict[Field, Callable[[BeautifulSoup], Any]] = {
    Field.TITLE: extract_title,
    Field.YEAR: extract_year,
    Field.LENGTH: extract_length,
    Field.PLOT: extract_plot,
    Field.RATING: extract_rating,
    Field.RATING_VOTES: extract_rating_votes,
    Field.POSTER: extract_poster,
    Field.TRAILER: extract_trailer,
    Field.CAST: extract_cast,
    Field.TECHNICAL_SPECS: extract_technical_specs,
    Field.TITLES: extract_titles,
    Field.NAMES: extract_names,
    Field.COMPANIES: extract_companies,
}


class FieldExtractor:
    """Looks up named fields in fetched IMDb documents."""

    def get(self, document: BeautifulSoup, field: Union[Field, str]) -> Any:
        """
        Extract a field from a document.

        Args:
            document: Parsed page
            field: Field member, or its string value

        Returns:
            The field's value; an empty value when the markup is absent

        Raises:
            ValueError: Unknown field name
        """
        return _EXTRACTORS[Field(field)](document)

    @staticmethod
    def count(value: Any) -> int:
        """Number of entries in a list-shaped value, else 0."""
        return len(value) if isinstance(value, list) else 0
