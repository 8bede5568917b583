"""
HTTP client with connection pooling and page fetching.

Provides:
- A pooled requests session with browser-like default headers
- A page fetcher that returns parsed documents and raises NetworkError
  on any failed request

Requests are not retried: a failed fetch aborts the enclosing lookup.
"""

import logging
from typing import Dict, Iterable

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter

from constants import (
    BROWSER_USER_AGENT,
    MAX_REDIRECTS,
    POOL_CONNECTIONS,
    POOL_MAXSIZE,
    REQUEST_TIMEOUT,
)
from errors import NetworkError
from metrics import metrics
from models import Options

logger = logging.getLogger(__name__)


class ImdbSession:
    """
    Requests session wrapper with pooling and a default timeout.

    Usage:
        with ImdbSession() as session:
            response = session.get("https://www.imdb.com/title/tt0133093")
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = None,
    ):
        """
        Initialize session.

        Args:
            timeout: Default request timeout in seconds
            user_agent: Custom user agent string
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.max_redirects = MAX_REDIRECTS

        adapter = HTTPAdapter(
            max_retries=0,
            pool_connections=POOL_CONNECTIONS,
            pool_maxsize=POOL_MAXSIZE,
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            "User-Agent": user_agent or BROWSER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
        })

    def get(self, url: str, **kwargs) -> requests.Response:
        """
        Make a GET request.

        Args:
            url: URL to request
            **kwargs: Additional arguments passed to requests.get

        Returns:
            Response object
        """
        kwargs.setdefault("timeout", self.timeout)
        return self.session.get(url, **kwargs)

    def close(self) -> None:
        """Close the session and release resources."""
        self.session.close()

    def __enter__(self) -> "ImdbSession":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def create_session(
    timeout: float = REQUEST_TIMEOUT,
    user_agent: str = None,
) -> ImdbSession:
    """Create a configured session with default settings."""
    return ImdbSession(timeout=timeout, user_agent=user_agent)


class SessionAwareComponent:
    """
    Mixin for components that optionally manage HTTP sessions.

    Usage:
        class MyClient(SessionAwareComponent):
            def __init__(self, session=None):
                self.init_session(session, timeout=15.0)
    """

    session: ImdbSession
    _owns_session: bool

    def init_session(
        self,
        session: ImdbSession = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        """
        Initialize session with ownership tracking.

        Args:
            session: Optional existing session to use
            timeout: Timeout for new session if created
        """
        self.session = session or create_session(timeout=timeout)
        self._owns_session = session is None

    def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session:
            self.session.close()


def parse_header_lines(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parse raw "Name: value" header lines into a headers dict.

    Lines without a colon are skipped; later lines win on duplicate names.
    """
    headers: Dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            logger.debug(f"Ignoring malformed header line: {line!r}")
            continue
        headers[name.strip()] = value.strip()
    return headers


class PageFetcher(SessionAwareComponent):
    """Fetches IMDb pages and parses them into documents."""

    def __init__(self, session: ImdbSession = None):
        self.init_session(session)

    def fetch(self, url: str, options: Options) -> BeautifulSoup:
        """
        Fetch a page with the configured request headers.

        Args:
            url: Page URL
            options: Resolved options (request_headers are sent)

        Returns:
            Parsed document

        Raises:
            NetworkError: Transport failure, timeout, or non-success status
        """
        headers = parse_header_lines(options.request_headers)
        logger.debug(f"GET {url}", extra={"url": url})

        try:
            with metrics.timer("imdb_fetch_duration_ms"):
                response = self.session.get(url, headers=headers)
            response.raise_for_status()
        except requests.HTTPError as e:
            metrics.inc("imdb_fetches", labels={"status": "error"})
            status_code = e.response.status_code if e.response is not None else None
            raise NetworkError(url, str(e), status_code=status_code) from e
        except requests.RequestException as e:
            metrics.inc("imdb_fetches", labels={"status": "error"})
            raise NetworkError(url, str(e)) from e

        metrics.inc("imdb_fetches", labels={"status": "ok"})
        return BeautifulSoup(response.text, 'html.parser')
