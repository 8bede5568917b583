from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
import requests

from cache import FilmCache
from imdb_lookup import Imdb
from metrics import metrics


FILM_URL = "https://www.imdb.com/title/tt0133093"
TECH_URL = "https://www.imdb.com/title/tt0133093/technical"
FIND_ALL_URL = "https://www.imdb.com/find?q=the+matrix&s=all"
FIND_TT_URL = "https://www.imdb.com/find?q=the+matrix&s=tt"
VIDEO_URL = "https://api.dailymotion.com/videos?search=the+matrix&fields=id&country=us"


FILM_PAGE = """
<html>
<head>
<title>The Matrix (1999) - IMDb</title>
<script type="application/ld+json">{"@context":"https://schema.org","@type":"Movie",
"url":"https://www.imdb.com/title/tt0133093/","name":"The Matrix",
"image":"https://m.media-amazon.com/images/M/matrix_poster.jpg",
"description":"When a beautiful stranger leads computer hacker Neo to a forbidding underworld, he discovers the shocking truth.",
"aggregateRating":{"@type":"AggregateRating","ratingCount":2034567,"bestRating":10,"worstRating":1,"ratingValue":8.7},
"datePublished":"1999-03-31","duration":"PT2H16M",
"trailer":{"@type":"VideoObject","name":"Official Trailer","embedUrl":"https://www.imdb.com/video/imdb/vi1032782617"}}</script>
</head>
<body>
<section data-testid="title-cast">
  <div data-testid="title-cast-item">
    <div class="avatar"><img class="ipc-image" src="https://m.media-amazon.com/images/M/keanu._V1_QL75_UX140_CR0,1,140,207_.jpg"></div>
    <a data-testid="title-cast-item__actor" href="/name/nm0000206/?ref_=tt_cl_t_1">Keanu Reeves</a>
    <a data-testid="cast-item-characters-link" href="/title/tt0133093/characters/nm0000206"><span>Neo</span></a>
  </div>
  <div data-testid="title-cast-item">
    <a data-testid="title-cast-item__actor" href="/name/nm0000401/?ref_=tt_cl_t_2">Laurence Fishburne</a>
    <span data-testid="cast-item-characters-list">Morpheus</span>
  </div>
</section>
</body>
</html>
"""

TECH_PAGE = """
<html><body>
<ul class="ipc-metadata-list">
  <li role="presentation" class="ipc-metadata-list__item" data-testid="title-techspec_runtime">
    <span class="ipc-metadata-list-item__label">Runtime</span>
    <div class="ipc-metadata-list-item__content-container">
      <ul class="ipc-inline-list"><li class="ipc-inline-list__item">2h 16m</li></ul>
    </div>
  </li>
  <li role="presentation" class="ipc-metadata-list__item" data-testid="title-techspec_soundmix">
    <span class="ipc-metadata-list-item__label">Sound mix</span>
    <div class="ipc-metadata-list-item__content-container">
      <ul class="ipc-inline-list"><li>Dolby Digital</li><li>SDDS</li></ul>
    </div>
  </li>
  <li role="presentation" class="ipc-metadata-list__item" data-testid="title-techspec_color">
    <span class="ipc-metadata-list-item__label">Color</span>
    <div class="ipc-metadata-list-item__content-container">Color</div>
  </li>
</ul>
</body></html>
"""

FIND_PAGE = """
<html><body>
<section data-testid="find-results-section-title">
  <ul>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <img class="ipc-image" src="https://m.media-amazon.com/images/M/matrix_thumb.jpg">
      <a class="ipc-metadata-list-summary-item__t" href="/title/tt0133093/?ref_=fn_al_tt_1">The Matrix</a>
    </li>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <a class="ipc-metadata-list-summary-item__t" href="/title/tt0234215/?ref_=fn_al_tt_2">The Matrix Reloaded</a>
    </li>
  </ul>
</section>
<section data-testid="find-results-section-name">
  <ul>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <img class="ipc-image" src="https://m.media-amazon.com/images/M/keanu_thumb.jpg">
      <a class="ipc-metadata-list-summary-item__t" href="/name/nm0000206/?ref_=fn_al_nm_1">Keanu Reeves</a>
    </li>
  </ul>
</section>
<section data-testid="find-results-section-company">
  <ul>
    <li class="ipc-metadata-list-summary-item find-result-item">
      <a class="ipc-metadata-list-summary-item__t" href="/company/co0002663/?ref_=fn_al_co_1">Warner Bros.</a>
    </li>
  </ul>
</section>
</body></html>
"""

EMPTY_PAGE = "<html><body><p>No results found</p></body></html>"

VIDEO_PAYLOAD = {
    "page": 1,
    "limit": 10,
    "explicit": False,
    "total": 2,
    "has_more": False,
    "list": [{"id": "x7tgad0"}, {"id": "x6hlwd2"}],
}


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, url: str = ""):
        self.text = text
        self.status_code = status_code
        self.url = url

    @classmethod
    def from_json(cls, payload: Any, status_code: int = 200) -> "FakeResponse":
        return cls(json.dumps(payload), status_code)

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


Route = Union[FakeResponse, Exception]


class FakeSession:
    """
    Stand-in for ImdbSession routing exact URLs to canned responses.

    Unrouted URLs answer 404. Every call is recorded as (url, headers).
    """

    def __init__(self, routes: Optional[Dict[str, Route]] = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Tuple[str, Dict[str, str]]] = []
        self.closed = False

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs) -> FakeResponse:
        self.calls.append((url, dict(headers or {})))
        route = self.routes.get(url)
        if route is None:
            return FakeResponse("not found", 404, url)
        if isinstance(route, Exception):
            raise route
        route.url = url
        return route

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    def count(self, url: str) -> int:
        return self.urls().count(url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture()
def routes() -> Dict[str, Route]:
    return {
        FILM_URL: FakeResponse(FILM_PAGE),
        TECH_URL: FakeResponse(TECH_PAGE),
        FIND_ALL_URL: FakeResponse(FIND_PAGE),
        FIND_TT_URL: FakeResponse(FIND_PAGE),
        VIDEO_URL: FakeResponse.from_json(VIDEO_PAYLOAD),
    }


@pytest.fixture()
def fake_session(routes) -> FakeSession:
    return FakeSession(routes)


@pytest.fixture()
def imdb(fake_session) -> Imdb:
    return Imdb(cache=FilmCache(), session=fake_session)
