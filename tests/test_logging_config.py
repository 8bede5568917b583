import json
import logging

from logging_config import (
    HumanFormatter,
    StructuredFormatter,
    get_request_id,
    request_id_var,
    set_request_id,
)


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("imdb_lookup", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_set_request_id():
    token = request_id_var.set("system")
    try:
        assert set_request_id("abc123") == "abc123"
        assert get_request_id() == "abc123"

        generated = set_request_id()
        assert len(generated) == 8
        assert get_request_id() == generated
    finally:
        request_id_var.reset(token)


def test_structured_formatter():
    token = request_id_var.set("req42")
    try:
        line = StructuredFormatter().format(
            _record("Cache hit: tt0133093", film_id="tt0133093", cache_hit=True, unrelated="x")
        )
    finally:
        request_id_var.reset(token)

    data = json.loads(line)
    assert data["level"] == "INFO"
    assert data["logger"] == "imdb_lookup"
    assert data["request_id"] == "req42"
    assert data["message"] == "Cache hit: tt0133093"
    assert data["film_id"] == "tt0133093"
    assert data["cache_hit"] is True
    assert "unrelated" not in data


def test_human_formatter_prefixes_request_id():
    formatter = HumanFormatter(use_colors=False)

    token = request_id_var.set("system")
    try:
        assert formatter.format(_record("hello")) == "INFO     hello"
        request_id_var.set("req42")
        assert formatter.format(_record("hello")) == "INFO     [req42] hello"
    finally:
        request_id_var.reset(token)
