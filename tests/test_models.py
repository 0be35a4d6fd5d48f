import pytest
from pydantic import ValidationError

from foodmood.domain.models import BusinessStatus, LatLng, Place, UserFeedback, UserPreferences


def _place(**overrides) -> Place:
    data = {
        "name": "Sushi Bar",
        "rating": 4.5,
        "price_level": 2,
        "location": LatLng(lat=32.08, lng=34.78),
        "place_id": "p1",
    }
    data.update(overrides)
    return Place(**data)


def test_place_defaults_and_value_equality():
    a = _place()
    b = _place()

    assert a == b
    assert hash(a) == hash(b)
    assert a.website_url == ""
    assert a.google_url == ""
    assert a.business_status == BusinessStatus.UNKNOWN
    assert a.cuisines == ()


@pytest.mark.parametrize("rating", [0.9, 5.1, -1.0])
def test_place_rejects_out_of_range_rating(rating):
    with pytest.raises(ValueError, match="Rating should be between 1.0-5.0"):
        _place(rating=rating)


@pytest.mark.parametrize("price_level", [-1, 5])
def test_place_rejects_out_of_range_price_level(price_level):
    with pytest.raises(ValueError, match="Price level should be between 0-4"):
        _place(price_level=price_level)


def test_place_accepts_range_bounds():
    assert _place(rating=1.0, price_level=0).rating == 1.0
    assert _place(rating=5.0, price_level=4).price_level == 4


def test_place_is_immutable():
    place = _place()
    with pytest.raises(ValidationError):
        place.rating = 3.0  # type: ignore[misc]


def test_business_status_parse_maps_unknown_values():
    assert BusinessStatus.parse("operational") == BusinessStatus.OPERATIONAL
    assert BusinessStatus.parse("CLOSED_PERMANENTLY") == BusinessStatus.CLOSED_PERMANENTLY
    assert BusinessStatus.parse(None) == BusinessStatus.UNKNOWN
    assert BusinessStatus.parse("SOMETHING_NEW") == BusinessStatus.UNKNOWN


def test_user_preferences_normalize_cuisines():
    prefs = UserPreferences(location=LatLng(lat=0, lng=0), cuisines=("Sushi", "pizza", "sushi", " "))
    assert prefs.cuisines == ("sushi", "pizza")
    assert prefs.min_rating == 1.0
    assert prefs.max_price_level == 4
    assert prefs.open_now is False


def test_user_preferences_validate_ranges():
    with pytest.raises(ValueError, match="Rating should be between"):
        UserPreferences(location=LatLng(lat=0, lng=0), min_rating=6)
    with pytest.raises(ValueError, match="Price level should be between"):
        UserPreferences(location=LatLng(lat=0, lng=0), max_price_level=9)


def test_latlng_as_param():
    assert LatLng(lat=32.5, lng=-34.25).as_param() == "32.5,-34.25"


def test_user_feedback_requires_chosen_place_among_recommended():
    ok = UserFeedback(user_id="u1", recommended_places=("a", "b"), chosen_place="b")
    assert ok.chosen_place == "b"

    with pytest.raises(ValueError, match="not one of the recommended places"):
        UserFeedback(user_id="u1", recommended_places=("a", "b"), chosen_place="c")


def test_user_feedback_without_choice_is_valid():
    fb = UserFeedback(user_id="u1", recommended_places=("a",), tried_again=True)
    assert fb.chosen_place is None
    assert fb.tried_again is True


def test_user_feedback_rejects_empty_user_id():
    with pytest.raises(ValueError):
        UserFeedback(user_id="", recommended_places=("a",))


def test_user_feedback_requires_recommended_places():
    with pytest.raises(ValueError, match="recommended_places"):
        UserFeedback(user_id="u1", recommended_places=())
