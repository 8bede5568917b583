"""
Accumulates lookup fields into ordered result records.
"""

from typing import Any, Callable, Dict

from html_pieces import empty_trailer


def _empty_film() -> Dict[str, Any]:
    return {
        "id": "",
        "title": "",
        "year": "",
        "length": "",
        "plot": "",
        "rating": "",
        "rating_votes": "",
        "poster": "",
        "trailer": empty_trailer(),
        "cast": [],
        "technical_specs": [],
    }


def _empty_search() -> Dict[str, Any]:
    return {
        "movies": [],
        "titles": [],
        "names": [],
        "companies": [],
    }


_DEFAULTS: Dict[str, Callable[[], Dict[str, Any]]] = {
    "film": _empty_film,
    "search": _empty_search,
}


class ResponseBuilder:
    """
    Builds one record per lookup.

    Fields keep the order in which they were first added.
    """

    def __init__(self):
        self._store: Dict[str, Any] = {}

    def add(self, key: str, value: Any) -> None:
        """Set a field, overwriting any earlier value for `key`."""
        self._store[key] = value

    def result(self) -> Dict[str, Any]:
        """Return the accumulated record."""
        return dict(self._store)

    @staticmethod
    def default(kind: str) -> Dict[str, Any]:
        """
        Return a fresh empty record for a failed lookup.

        Args:
            kind: "film" or "search"

        Raises:
            ValueError: Unknown record kind
        """
        try:
            return _DEFAULTS[kind]()
        except KeyError:
            raise ValueError(f"Unknown response kind: {kind!r}") from None
