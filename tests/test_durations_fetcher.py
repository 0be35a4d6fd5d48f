import pytest

from foodmood.domain.models import LatLng, Place
from foodmood.ingestion.durations import DurationsFetcher
from foodmood.ingestion.maps_client import MapsApiError

DESTINATION = LatLng(lat=32.0853, lng=34.7818)


def _place(place_id: str, lat: float = 32.0) -> Place:
    return Place(name=place_id, rating=4.0, price_level=1, location=LatLng(lat=lat, lng=34.0), place_id=place_id)


def _row(seconds: int | None, status: str = "OK") -> dict:
    element: dict = {"status": status}
    if seconds is not None:
        element["duration"] = {"value": seconds, "text": f"{seconds // 60} mins"}
    return {"elements": [element]}


class _StubMapsClient:
    def __init__(self, rows_per_call: list[list[dict]]):
        self.rows_per_call = list(rows_per_call)
        self.calls: list[dict] = []

    def distance_matrix(self, *, origins, destination, mode=None):
        self.calls.append({"origins": list(origins), "destination": destination})
        return {"status": "OK", "rows": self.rows_per_call.pop(0)}


def test_durations_keyed_by_place_id():
    client = _StubMapsClient([[_row(600), _row(1500)]])
    fetcher = DurationsFetcher(client)

    out = fetcher.get_durations([_place("a"), _place("b")], DESTINATION, fallback_seconds=2400)

    assert out == {"a": 600.0, "b": 1500.0}
    assert client.calls[0]["destination"] == DESTINATION


def test_unroutable_element_uses_fallback():
    client = _StubMapsClient([[_row(None, status="ZERO_RESULTS"), _row(300)]])

    out = DurationsFetcher(client).get_durations([_place("a"), _place("b")], DESTINATION, fallback_seconds=2400)

    assert out == {"a": 2400.0, "b": 300.0}


def test_origins_are_chunked():
    places = [_place(str(i), lat=30.0 + i) for i in range(5)]
    client = _StubMapsClient([[_row(1), _row(2)], [_row(3), _row(4)], [_row(5)]])

    out = DurationsFetcher(client, max_origins_per_request=2).get_durations(places, DESTINATION, 2400)

    assert [len(c["origins"]) for c in client.calls] == [2, 2, 1]
    assert out == {"0": 1.0, "1": 2.0, "2": 3.0, "3": 4.0, "4": 5.0}


def test_empty_places_make_no_request():
    client = _StubMapsClient([])
    assert DurationsFetcher(client).get_durations([], DESTINATION, 2400) == {}
    assert client.calls == []


def test_row_count_mismatch_is_an_error():
    client = _StubMapsClient([[_row(60)]])
    with pytest.raises(MapsApiError, match="MALFORMED_RESPONSE"):
        DurationsFetcher(client).get_durations([_place("a"), _place("b")], DESTINATION, 2400)
