"""
Exception hierarchy for IMDb lookups.

Extraction misses are not errors (they yield empty values); these cover
the cases a caller has to handle.
"""

from typing import Optional


class ImdbError(Exception):
    """Base error for IMDb lookups."""
    pass


class NetworkError(ImdbError):
    """A request failed: transport error, timeout, or non-success status."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"Request to {url} failed{status}: {reason}")


class NotFoundError(ImdbError):
    """Cache lookup for a key that is not stored."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No cache entry for '{key}'")


class MalformedResponseError(ImdbError):
    """A JSON API answered with a payload of unexpected shape."""
    pass
