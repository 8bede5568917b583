import pytest

from text_utils import (
    clean_text,
    extract_imdb_id,
    extract_video_id,
    format_duration,
    is_film_id,
    normalize_search_term,
    validate_imdb_id,
)


@pytest.mark.parametrize("term", ["the matrix", "the%20matrix", "the+matrix"])
def test_normalize_search_term_is_canonical(term):
    assert normalize_search_term(term) == "the+matrix"


def test_normalize_search_term_encodes_reserved_characters():
    assert normalize_search_term("amélie & co") == "am%C3%A9lie+%26+co"
    assert normalize_search_term("am%C3%A9lie+%26+co") == "am%C3%A9lie+%26+co"
    assert normalize_search_term("") == ""


def test_clean_text():
    assert clean_text("  The&nbsp;Matrix \n  Reloaded ") == "The Matrix Reloaded"
    assert clean_text("Tom &amp; Jerry") == "Tom & Jerry"
    assert clean_text(None) == ""


@pytest.mark.parametrize("duration,expected", [
    ("PT2H16M", "2h 16m"),
    ("PT58M", "58m"),
    ("PT2H", "2h"),
    ("PT1H0M", "1h"),
    ("", ""),
    ("2h 16m", ""),
])
def test_format_duration(duration, expected):
    assert format_duration(duration) == expected


def test_is_film_id():
    assert is_film_id("tt0133093")
    assert is_film_id("ttanything")
    assert not is_film_id("The Matrix")
    assert not is_film_id("TT0133093")
    assert not is_film_id("")


def test_validate_imdb_id():
    assert validate_imdb_id("tt0133093")
    assert validate_imdb_id("tt10872600")
    assert validate_imdb_id("nm0000206", prefix="nm")
    assert not validate_imdb_id("tt123")
    assert not validate_imdb_id("../tt0133093")
    assert not validate_imdb_id("")


def test_extract_ids():
    assert extract_imdb_id("/title/tt0133093/?ref_=fn_al_tt_1") == "tt0133093"
    assert extract_imdb_id("/name/nm0000206/", prefix="nm") == "nm0000206"
    assert extract_imdb_id("/company/co0002663/", prefix="co") == "co0002663"
    assert extract_imdb_id("/name/nm0000206/") == ""
    assert extract_imdb_id(None) == ""

    assert extract_video_id("https://www.imdb.com/video/imdb/vi1032782617") == "vi1032782617"
    assert extract_video_id("https://www.imdb.com/") == ""
