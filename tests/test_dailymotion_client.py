import pytest
import requests

from dailymotion_client import DailymotionClient, parse_video_ids
from errors import MalformedResponseError, NetworkError

from conftest import VIDEO_PAYLOAD, VIDEO_URL, FakeResponse, FakeSession


def test_parse_video_ids():
    assert parse_video_ids(VIDEO_PAYLOAD) == ["x7tgad0", "x6hlwd2"]
    assert parse_video_ids({"list": []}) == []


@pytest.mark.parametrize("payload", [
    [],
    "x7tgad0",
    {"error": {"code": 400, "message": "bad request"}},
    {"list": "x7tgad0"},
    {"list": [{"title": "no id"}]},
    {"list": [{"id": 42}]},
    {"list": ["x7tgad0"]},
])
def test_parse_video_ids_rejects_unexpected_shapes(payload):
    with pytest.raises(MalformedResponseError):
        parse_video_ids(payload)


def test_embed_urls_query_and_headers():
    session = FakeSession({VIDEO_URL: FakeResponse.from_json(VIDEO_PAYLOAD)})
    client = DailymotionClient(session=session)

    assert client.embed_urls("the+matrix") == [
        "https://www.dailymotion.com/embed/video/x7tgad0",
        "https://www.dailymotion.com/embed/video/x6hlwd2",
    ]

    url, headers = session.calls[0]
    assert url == VIDEO_URL
    assert headers["Content-Type"] == "application/json"
    assert headers["Accept"] == "application/json"
    assert headers["User-Agent"].startswith("Mozilla/5.0")


def test_forbidden_raises_network_error():
    session = FakeSession({VIDEO_URL: FakeResponse("forbidden", 403)})
    with pytest.raises(NetworkError) as exc:
        DailymotionClient(session=session).search_ids("the+matrix")
    assert exc.value.status_code == 403


def test_transport_failure_raises_network_error():
    session = FakeSession({VIDEO_URL: requests.ConnectionError("dns failure")})
    with pytest.raises(NetworkError):
        DailymotionClient(session=session).search_ids("the+matrix")


def test_non_json_body_is_malformed():
    session = FakeSession({VIDEO_URL: FakeResponse("<html>maintenance</html>")})
    with pytest.raises(MalformedResponseError):
        DailymotionClient(session=session).search_ids("the+matrix")
