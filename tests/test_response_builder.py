import pytest

from models import FILM_FIELDS, SEARCH_FIELDS
from response_builder import ResponseBuilder


def test_fields_keep_insertion_order():
    response = ResponseBuilder()
    response.add("id", "tt0133093")
    response.add("title", "The Matrix")
    response.add("year", "1999")
    assert list(response.result()) == ["id", "title", "year"]


def test_repeated_key_overwrites():
    response = ResponseBuilder()
    response.add("title", "first")
    response.add("year", "1999")
    response.add("title", "second")
    assert response.result() == {"title": "second", "year": "1999"}


def test_result_is_a_snapshot():
    response = ResponseBuilder()
    response.add("title", "The Matrix")
    record = response.result()
    response.add("year", "1999")
    assert record == {"title": "The Matrix"}


def test_film_default_shape():
    record = ResponseBuilder.default("film")
    assert tuple(record) == FILM_FIELDS
    assert record["id"] == ""
    assert record["trailer"] == {"id": "", "link": ""}
    assert record["cast"] == []
    assert record["technical_specs"] == []


def test_search_default_shape():
    record = ResponseBuilder.default("search")
    assert tuple(record) == SEARCH_FIELDS
    assert all(value == [] for value in record.values())


def test_defaults_are_fresh():
    first = ResponseBuilder.default("film")
    first["cast"].append("x")
    assert ResponseBuilder.default("film")["cast"] == []


def test_unknown_default_kind():
    with pytest.raises(ValueError):
        ResponseBuilder.default("person")
