#!/usr/bin/env python3
"""
IMDb Streaming Movies API

JSON API over the IMDb lookup for streaming front ends.

Endpoints:
    GET  /film/<film_id>     Film record by IMDb id or title
                             (?cache=0 bypasses the cache, ?techSpecs=0 skips tech specs)
    GET  /search?q=...       Titles, names, companies and Dailymotion videos
                             (&category=tt|nm|co|kw|all)
    GET  /cache              Cache stats and keys (?key=tt... for one entry)
    POST /cache/clear        Drop all cached films
    POST /cache/delete       Drop one film (?key=tt...)
    GET  /health, /health/live, /metrics

Environment Variables:
    PORT: Server port (default: 5100)
    LOG_LEVEL: Logging level (default: INFO)
    CACHE_DIR: Persist cached films here (default: memory only)
    CACHE_MAX_ENTRIES: Cache capacity (default: 1000)
    CACHE_TTL_SECONDS: Cache entry lifetime (default: 7 days)
    STRUCTURED_LOGGING: JSON log lines when "true"
"""

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from cache import FilmCache
from constants import (
    DEFAULT_CACHE_TTL,
    MAX_CACHE_ENTRIES,
    PROVIDER_NAME,
    PROVIDER_VERSION,
    SearchCategory,
)
from errors import NetworkError
from imdb_lookup import Imdb
from logging_config import configure_logging, setup_flask_request_id
from metrics import metrics
from text_utils import validate_imdb_id

# =============================================================================
# Configuration
# =============================================================================

PORT = int(os.environ.get("PORT", 5100))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
CACHE_DIR = os.environ.get("CACHE_DIR") or None
CACHE_MAX_ENTRIES = int(os.environ.get("CACHE_MAX_ENTRIES", MAX_CACHE_ENTRIES))
CACHE_TTL_SECONDS = float(os.environ.get("CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL))
STRUCTURED_LOGGING = os.environ.get("STRUCTURED_LOGGING", "").lower() == "true"

configure_logging(level=LOG_LEVEL, structured=STRUCTURED_LOGGING)
logger = logging.getLogger(__name__)

cache = FilmCache(CACHE_DIR, max_entries=CACHE_MAX_ENTRIES, ttl=CACHE_TTL_SECONDS)
imdb = Imdb(cache=cache)

app = Flask(__name__)
app.json.sort_keys = False  # records are ordered
setup_flask_request_id(app)


# =============================================================================
# Request Helpers
# =============================================================================

def _bool_arg(name: str) -> Optional[bool]:
    """Parse a boolean query argument; None if absent."""
    value = request.args.get(name)
    if value is None:
        return None
    return value.lower() not in ('0', 'false', 'no', 'off')


def _options_from_request() -> Dict[str, Any]:
    """Build lookup option overrides from query args and headers."""
    options: Dict[str, Any] = {}

    use_cache = _bool_arg('cache')
    if use_cache is not None:
        options["cache"] = use_cache

    tech_specs = _bool_arg('techSpecs')
    if tech_specs is not None:
        options["techSpecs"] = tech_specs

    category = request.args.get('category')
    if category:
        options["category"] = category

    accept_language = request.headers.get('Accept-Language')
    if accept_language:
        options["requestHeaders"] = [f"Accept-Language: {accept_language}"]

    return options


# =============================================================================
# Lookup Endpoints
# =============================================================================

@app.route('/film/<path:film_id>', methods=['GET'])
def get_film(film_id: str):
    """Film record by IMDb id or free-text title."""
    options = _options_from_request()
    options.pop("category", None)

    try:
        record = imdb.film(film_id, options)
    except NetworkError as e:
        logger.error(f"Film lookup failed for '{film_id}': {e}", extra={"film_id": film_id})
        return jsonify({"error": str(e), "film_id": film_id}), 502

    if not record["id"]:
        return jsonify({"found": False, "query": film_id, "film": record}), 404

    return jsonify(record)


@app.route('/search', methods=['GET'])
def search_titles():
    """
    Search IMDb and Dailymotion.

    Usage:
        /search?q=the+matrix
        /search?q=keanu&category=nm
    """
    term = request.args.get('q', '')
    if not term:
        return jsonify({
            "error": "Missing 'q' parameter",
            "usage": "/search?q=the+matrix&category=tt",
            "categories": [c.value for c in SearchCategory],
        }), 400

    try:
        record = imdb.search(term, _options_from_request())
    except NetworkError as e:
        logger.error(f"Search failed for '{term}': {e}", extra={"term": term})
        return jsonify({"error": str(e), "q": term}), 502

    return jsonify(record)


# =============================================================================
# Cache Endpoints
# =============================================================================

@app.route('/cache', methods=['GET'])
def cache_status():
    """
    View cache statistics and entries.

    Usage:
        /cache               - stats and cached film ids
        /cache?key=tt0133093 - view one cached film
    """
    key = request.args.get('key', '')

    if key:
        entry = cache.read(key)
        if entry:
            return jsonify({"key": key, "cached": True, "entry": entry.to_dict()})
        return jsonify({"key": key, "cached": False}), 404

    return jsonify({
        "stats": cache.stats(),
        "keys": cache.keys()[-100:],  # most recently used
    })


@app.route('/cache/clear', methods=['POST'])
def cache_clear():
    """Clear all cache entries."""
    return jsonify({"cleared": cache.clear()})


@app.route('/cache/delete', methods=['POST'])
def cache_delete():
    """
    Delete one cached film.

    Usage:
        POST /cache/delete?key=tt0133093
    """
    key = request.args.get('key', '')

    if not validate_imdb_id(key):
        return jsonify({
            "error": "Missing or invalid 'key' parameter",
            "usage": "POST /cache/delete?key=tt0133093",
        }), 400

    deleted = cache.delete(key)
    return jsonify({"key": key, "deleted": deleted}), (200 if deleted else 404)


# =============================================================================
# Health Check Endpoints
# =============================================================================

@app.route('/health', methods=['GET'])
def health_check():
    """Shallow health check with cache stats."""
    return jsonify({
        "status": "healthy",
        "name": PROVIDER_NAME,
        "version": PROVIDER_VERSION,
        "cache": cache.stats(),
    })


@app.route('/health/live', methods=['GET'])
def liveness_check():
    """Liveness probe - checks app isn't deadlocked."""
    return jsonify({"status": "alive"}), 200


@app.route('/metrics', methods=['GET'])
def metrics_endpoint():
    """Return application metrics."""
    return jsonify(metrics.get_stats())


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    logger.info(f"Starting {PROVIDER_NAME} v{PROVIDER_VERSION} on port {PORT}")
    logger.info(f"Cache: {CACHE_DIR or 'memory only'} (max {CACHE_MAX_ENTRIES} entries)")
    app.run(host="0.0.0.0", port=PORT, debug=False)
