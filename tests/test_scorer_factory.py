from foodmood.scoring.factory import ScorerFactory
from foodmood.scoring.scorers import RegisteredScorer, UnregisteredScorer


class _StubVerifier:
    def __init__(self, users: dict[str, str] | None = None, error: Exception | None = None):
        self.users = users or {}
        self.error = error
        self.calls: list[str | None] = []

    def get_user_id(self, id_token):
        self.calls.append(id_token)
        if self.error is not None:
            raise self.error
        return self.users.get(id_token)


class _NoHistory:
    def get_preferred_cuisines(self, user_id):
        return {}


class _NoDurations:
    def get_durations(self, places, destination, fallback_seconds):
        return {}


def _factory(verifier) -> ScorerFactory:
    return ScorerFactory(verifier=verifier, history=_NoHistory(), durations=_NoDurations())


def test_valid_token_gives_registered_scorer_bound_to_user():
    verifier = _StubVerifier({"good-token": "user-123"})

    scorer = _factory(verifier).create("good-token")

    assert isinstance(scorer, RegisteredScorer)
    assert scorer.user_id == "user-123"


def test_missing_token_gives_unregistered_without_verifying():
    verifier = _StubVerifier()

    assert isinstance(_factory(verifier).create(None), UnregisteredScorer)
    assert isinstance(_factory(verifier).create(""), UnregisteredScorer)
    assert verifier.calls == []


def test_unverifiable_token_gives_unregistered():
    scorer = _factory(_StubVerifier({"good-token": "u"})).create("expired-token")
    assert isinstance(scorer, UnregisteredScorer)


def test_verifier_exception_gives_unregistered():
    scorer = _factory(_StubVerifier(error=RuntimeError("boom"))).create("token")
    assert isinstance(scorer, UnregisteredScorer)


def test_for_user():
    factory = _factory(_StubVerifier())
    assert isinstance(factory.for_user(None), UnregisteredScorer)
    assert factory.for_user("u9").user_id == "u9"
