import httpx
import pytest

from foodmood.config.settings import MapsRetrySettings, MapsSettings, Settings
from foodmood.domain.models import LatLng
from foodmood.ingestion.maps_client import MapsApiError, MapsClient

LOCATION = LatLng(lat=32.0853, lng=34.7818)


def _settings(api_key: str | None = "test-key") -> Settings:
    retry = MapsRetrySettings(max_attempts=2, base_delay_seconds=0.0, max_delay_seconds=0.0)
    return Settings(maps=MapsSettings(api_key=api_key, retry=retry))


def _http_error(url: str, status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", url)
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(str(status), request=request, response=response)


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("foodmood.ingestion.maps_client.time.sleep", lambda *_args, **_kwargs: None)


def test_retries_on_503_then_succeeds(monkeypatch):
    calls: list[str] = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        calls.append(url)
        if len(calls) == 1:
            raise _http_error(url, 503)
        return {"status": "OK", "results": [{"place_id": "p1"}]}

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", fake_get_json)

    results = MapsClient(_settings()).text_search(query="pizza", location=LOCATION, radius_m=1000)

    assert results == [{"place_id": "p1"}]
    assert len(calls) == 2
    assert calls[0].endswith("/place/textsearch/json")


def test_retries_on_over_query_limit(monkeypatch):
    responses = [{"status": "OVER_QUERY_LIMIT"}, {"status": "ZERO_RESULTS", "results": []}]
    monkeypatch.setattr(
        "foodmood.ingestion.maps_client.get_json", lambda *_args, **_kwargs: responses.pop(0)
    )

    assert MapsClient(_settings()).text_search(query="pizza", location=LOCATION, radius_m=1000) == []
    assert responses == []


def test_gives_up_after_max_attempts(monkeypatch):
    calls: list[int] = []

    def always_429(url, **_kwargs):
        calls.append(1)
        raise _http_error(url, 429)

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", always_429)

    with pytest.raises(httpx.HTTPStatusError):
        MapsClient(_settings()).place_details("p1")
    assert len(calls) == 3


def test_non_retryable_status_raises_immediately(monkeypatch):
    calls: list[int] = []

    def denied(*_args, **_kwargs):
        calls.append(1)
        return {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", denied)

    with pytest.raises(MapsApiError) as exc_info:
        MapsClient(_settings()).distance_matrix(origins=[LOCATION], destination=LOCATION)
    assert exc_info.value.status == "REQUEST_DENIED"
    assert len(calls) == 1


def test_missing_api_key_fails_before_any_request(monkeypatch):
    def should_not_be_called(*_args, **_kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", should_not_be_called)

    with pytest.raises(RuntimeError, match="API key"):
        MapsClient(_settings(api_key=None)).text_search(query="x", location=LOCATION, radius_m=1)


def test_request_params(monkeypatch):
    seen: list[dict] = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):  # noqa: ARG001
        seen.append(dict(params or {}))
        return {"status": "OK", "results": [], "rows": [], "result": {"place_id": "p1"}}

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", fake_get_json)
    client = MapsClient(_settings())

    client.text_search(query="sushi", location=LOCATION, radius_m=2000, max_price=3, place_type="restaurant")
    client.text_search(query="sushi", location=LOCATION, radius_m=2000, open_now=True)
    client.distance_matrix(origins=[LatLng(lat=1, lng=2), LatLng(lat=3, lng=4)], destination=LOCATION)

    assert seen[0] == {
        "query": "sushi",
        "location": "32.0853,34.7818",
        "radius": 2000,
        "maxprice": 3,
        "type": "restaurant",
        "key": "test-key",
    }
    assert seen[1]["opennow"] == "true"
    assert "opennow" not in seen[0]
    assert seen[2]["origins"] == "1.0,2.0|3.0,4.0"
    assert seen[2]["destinations"] == "32.0853,34.7818"
    assert seen[2]["mode"] == "driving"


def test_retry_after_header_sets_delay(monkeypatch):
    sleeps: list[float] = []
    monkeypatch.setattr("foodmood.ingestion.maps_client.time.sleep", lambda seconds: sleeps.append(seconds))

    calls: list[int] = []

    def fake_get_json(url, **_kwargs):
        calls.append(1)
        if len(calls) == 1:
            request = httpx.Request("GET", url)
            response = httpx.Response(429, request=request, headers={"Retry-After": "2"})
            raise httpx.HTTPStatusError("429", request=request, response=response)
        return {"status": "OK", "result": {"place_id": "p1"}}

    monkeypatch.setattr("foodmood.ingestion.maps_client.get_json", fake_get_json)
    retry = MapsRetrySettings(max_attempts=2, base_delay_seconds=0.5, max_delay_seconds=4.0)
    settings = Settings(maps=MapsSettings(api_key="k", retry=retry))

    assert MapsClient(settings).place_details("p1") == {"place_id": "p1"}
    assert sleeps == [2.0]
