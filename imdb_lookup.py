#!/usr/bin/env python3
"""
IMDb Lookup Orchestrator

Main entry point for fetching film data from IMDb and searching IMDb
titles, people and companies, with matching Dailymotion videos.

Film Lookup:
    1. Free-text input is resolved to a film id via a title search
       (first result wins)
    2. Cache hit short-circuits all fetching
    3. Title page, then (optionally) the technical specs page
    4. Result is cached when caching is enabled

Search:
    1. IMDb find page for titles, names and companies
    2. Dailymotion video search for embeddable links
       (a failure here degrades to an empty list)

Usage:
    from imdb_lookup import film, search

    matrix = film("tt0133093")
    print(matrix["title"], matrix["year"])

    results = search("the matrix", {"category": "tt"})
"""

import json
import logging
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional, Union

from cache import FilmCache
from constants import (
    FILM_PAGE_FIELDS,
    IMDB_BASE_URL,
    SEARCH_PAGE_FIELDS,
    Field,
    SearchCategory,
)
from dailymotion_client import DailymotionClient
from errors import MalformedResponseError, NetworkError
from html_pieces import FieldExtractor
from http_client import ImdbSession, PageFetcher, SessionAwareComponent
from metrics import metrics
from models import Options, resolve_options
from response_builder import ResponseBuilder
from text_utils import is_film_id, normalize_search_term

logger = logging.getLogger(__name__)

OptionsArg = Optional[Union[Mapping[str, Any], Options]]


class Imdb(SessionAwareComponent):
    """
    Film and search lookups against IMDb.

    Collaborators are injectable; by default one pooled session is shared
    by the page fetcher and the Dailymotion client.
    """

    def __init__(
        self,
        cache: FilmCache = None,
        session: ImdbSession = None,
        fetcher: PageFetcher = None,
        extractor: FieldExtractor = None,
        video_client: DailymotionClient = None,
    ):
        self.init_session(session)
        self.cache = cache if cache is not None else FilmCache()
        self.fetcher = fetcher or PageFetcher(session=self.session)
        self.extractor = extractor or FieldExtractor()
        self.video_client = video_client or DailymotionClient(session=self.session)

    def __enter__(self) -> "Imdb":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def film(self, film_id: str, options: OptionsArg = None) -> Dict[str, Any]:
        """
        Get film data from IMDb.

        A value not starting with "tt" is treated as a title and resolved
        through search() in the "tt" category; the first title result is
        used. That search also queries Dailymotion, whose links are discarded.

        Args:
            film_id: IMDb title id (e.g. "tt0133093") or free-text title
            options: Option overrides (cache, techSpecs, requestHeaders, ...)

        Returns:
            Film record; the empty "film" default if a title search found nothing

        Raises:
            NetworkError: An IMDb page could not be fetched
        """
        opts = resolve_options(options)

        if not is_film_id(film_id):
            logger.info(f"'{film_id}' is not a film id - searching titles")
            found = self.search(film_id, {"category": SearchCategory.TITLE.value})
            titles = found["titles"]
            if self.extractor.count(titles) == 0:
                logger.info(f"No titles found for '{film_id}'")
                metrics.inc("film_lookups", labels={"result": "not_found"})
                return ResponseBuilder.default("film")
            film_id = titles[0]["id"]
            logger.info(f"Resolved to {film_id} ({titles[0].get('title', '')})")

        if opts.cache:
            entry = self.cache.read(film_id)
            if entry is not None:
                logger.debug(f"Cache hit: {film_id}", extra={"film_id": film_id, "cache_hit": True})
                metrics.inc("cache_hits")
                metrics.inc("film_lookups", labels={"result": "cached"})
                return entry.film
            metrics.inc("cache_misses")

        response = ResponseBuilder()

        page = self.fetcher.fetch(f"{IMDB_BASE_URL}/title/{film_id}", opts)
        response.add("id", film_id)
        for field in FILM_PAGE_FIELDS:
            response.add(field.value, self.extractor.get(page, field))

        if opts.include_tech_specs:
            specs_page = self.fetcher.fetch(f"{IMDB_BASE_URL}/title/{film_id}/technical", opts)
            response.add(
                Field.TECHNICAL_SPECS.value,
                self.extractor.get(specs_page, Field.TECHNICAL_SPECS),
            )
        else:
            response.add(Field.TECHNICAL_SPECS.value, [])

        record = response.result()
        logger.info(f"Fetched {film_id}: {record['title']} ({record['year']})")
        metrics.inc("film_lookups", labels={"result": "found"})

        if opts.cache:
            self.cache.add(film_id, record)

        return record

    def search(self, term: str, options: OptionsArg = None) -> Dict[str, Any]:
        """
        Search IMDb for films, people and companies.

        Args:
            term: Search text (raw or already URL-encoded)
            options: Option overrides (category, requestHeaders, ...)

        Returns:
            Search record with movies, titles, names and companies

        Raises:
            NetworkError: The IMDb find page could not be fetched
        """
        opts = resolve_options(options)
        query = normalize_search_term(term)
        metrics.inc("searches")

        response = ResponseBuilder()

        page = self.fetcher.fetch(
            f"{IMDB_BASE_URL}/find?q={query}&s={normalize_search_term(opts.category)}",
            opts,
        )

        response.add("movies", self._video_links(query))
        for field in SEARCH_PAGE_FIELDS:
            response.add(field.value, self.extractor.get(page, field))

        record = response.result()
        logger.info(
            f"Search '{term}' [{opts.category}]: {len(record['titles'])} titles, "
            f"{len(record['names'])} names, {len(record['companies'])} companies, "
            f"{len(record['movies'])} videos"
        )
        return record

    def _video_links(self, query: str) -> List[str]:
        """Dailymotion embed links, or [] if the video search fails."""
        try:
            return self.video_client.embed_urls(query)
        except (NetworkError, MalformedResponseError) as e:
            logger.warning(f"Video search failed for '{query}': {e}")
            metrics.inc("video_search_failures")
            return []


# =============================================================================
# Module-level convenience
# =============================================================================

_default_client: Optional[Imdb] = None
_default_lock = threading.Lock()


def get_default_client() -> Imdb:
    """Process-wide Imdb instance; its cache lives as long as the process."""
    global _default_client
    if _default_client is None:
        with _default_lock:
            if _default_client is None:
                _default_client = Imdb()
    return _default_client


def film(film_id: str, options: OptionsArg = None) -> Dict[str, Any]:
    """Get film data using the shared client. See Imdb.film."""
    return get_default_client().film(film_id, options)


def search(term: str, options: OptionsArg = None) -> Dict[str, Any]:
    """Search IMDb using the shared client. See Imdb.search."""
    return get_default_client().search(term, options)


# =============================================================================
# CLI
# =============================================================================

def main(argv: List[str] = None) -> int:
    """Command-line interface for testing."""
    import argparse
    from constants import PROVIDER_VERSION
    from logging_config import configure_logging

    parser = argparse.ArgumentParser(
        description="Fetch IMDb film data or search IMDb",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s film tt0133093
  %(prog)s film "The Matrix" --no-tech-specs
  %(prog)s search "the matrix" --category tt
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {PROVIDER_VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    film_parser = subparsers.add_parser("film", help="Fetch a film by id or title")
    film_parser.add_argument("film_id", help="IMDb id (tt…) or title")
    film_parser.add_argument("--no-cache", action="store_true", help="Bypass the cache")
    film_parser.add_argument(
        "--no-tech-specs",
        action="store_true",
        help="Skip the technical specs page",
    )

    search_parser = subparsers.add_parser("search", help="Search titles, names and companies")
    search_parser.add_argument("term", help="Search text")
    search_parser.add_argument(
        "--category", "-c",
        choices=[c.value for c in SearchCategory],
        default=SearchCategory.ALL.value,
        help="IMDb search category (default: all)",
    )

    args = parser.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING")

    with Imdb() as imdb:
        try:
            if args.command == "film":
                record = imdb.film(args.film_id, {
                    "cache": not args.no_cache,
                    "techSpecs": not args.no_tech_specs,
                })
                found = bool(record["id"])
            else:
                record = imdb.search(args.term, {"category": args.category})
                found = any(record[key] for key in ("titles", "names", "companies"))
        except NetworkError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

    print(json.dumps(record, indent=2, ensure_ascii=False))
    return 0 if found else 1


if __name__ == "__main__":
    sys.exit(main())
