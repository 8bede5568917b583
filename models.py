"""
Shared data models for IMDb lookups.

Options are resolved per call into an immutable value; record layouts are
fixed tuples of keys so every builder produces the same ordering.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from constants import (
    DEFAULT_CACHE,
    DEFAULT_CATEGORY,
    DEFAULT_REQUEST_HEADERS,
    DEFAULT_TECH_SPECS,
)

logger = logging.getLogger(__name__)


FILM_FIELDS: Tuple[str, ...] = (
    "id",
    "title",
    "year",
    "length",
    "plot",
    "rating",
    "rating_votes",
    "poster",
    "trailer",
    "cast",
    "technical_specs",
)

SEARCH_FIELDS: Tuple[str, ...] = ("movies", "titles", "names", "companies")


@dataclass(frozen=True)
class Options:
    """
    Immutable per-call lookup options.

    Keys that are not recognized are kept verbatim in `extra` so callers
    can pass data through without it leaking into the typed fields.
    """
    cache: bool = DEFAULT_CACHE
    category: str = DEFAULT_CATEGORY
    request_headers: Tuple[str, ...] = DEFAULT_REQUEST_HEADERS
    include_tech_specs: bool = DEFAULT_TECH_SPECS
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'cache': self.cache,
            'category': self.category,
            'request_headers': list(self.request_headers),
            'include_tech_specs': self.include_tech_specs,
            'extra': dict(self.extra),
        }


# Override key -> Options attribute
_OPTION_ALIASES: Dict[str, str] = {
    "cache": "cache",
    "category": "category",
    "curlHeaders": "request_headers",
    "requestHeaders": "request_headers",
    "request_headers": "request_headers",
    "techSpecs": "include_tech_specs",
    "includeTechSpecs": "include_tech_specs",
    "include_tech_specs": "include_tech_specs",
}


def _header_lines(headers: Any) -> Tuple[str, ...]:
    """
    Coerce a request_headers override to a tuple of "Name: value" lines.

    Accepts a single line, an iterable of lines, or a {name: value} mapping.
    Anything else falls back to the default headers.
    """
    if isinstance(headers, str):
        return (headers,)
    if isinstance(headers, Mapping):
        return tuple(f"{name}: {value}" for name, value in headers.items())
    try:
        return tuple(str(line) for line in headers)
    except TypeError:
        logger.warning(f"Ignoring request headers of type {type(headers).__name__}")
        return DEFAULT_REQUEST_HEADERS


def resolve_options(
    overrides: Optional[Union[Mapping[str, Any], Options]] = None,
) -> Options:
    """
    Merge call-site overrides onto the default options.

    Args:
        overrides: Mapping of option keys (camelCase or snake_case), or an
            already resolved Options which is returned unchanged.

    Returns:
        Resolved Options; a None value keeps that option's default
    """
    if isinstance(overrides, Options):
        return overrides

    values: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}

    for key, value in (overrides or {}).items():
        name = _OPTION_ALIASES.get(key)
        if name is None:
            logger.debug(f"Passing through unrecognized option '{key}'")
            extra[key] = value
            continue
        if value is None:
            continue
        values[name] = value

    if "request_headers" in values:
        values["request_headers"] = _header_lines(values["request_headers"])

    return Options(**values, extra=MappingProxyType(extra))
