import json

import pytest

from ballknowledge.api.models import Prediction
from ballknowledge.auth.errors import RequestFailed, SessionExpired, UnexpectedResponse

from conftest import NOW_S, make_token


def test_login_posts_credentials_and_installs_token(make_client, adapter, storage):
    token = make_token("u1")
    adapter.routes[("POST", "/api/login")] = (200, {"message": "Login successful", "token": token})
    adapter.routes[("GET", "/api/my-predictions")] = (200, {"predictions": [], "count": 0})
    client = make_client()

    session = client.api.login("alice", "secret")

    assert session.identity.user_id == "u1"
    assert storage.get_item("token") == token
    sent = json.loads(adapter.requests[0].body)
    assert sent == {"usernameOrEmail": "alice", "password": "secret"}


def test_login_with_already_expired_token_is_refused(make_client, adapter):
    adapter.routes[("POST", "/api/login")] = (200, {"token": make_token(exp=NOW_S - 10)})
    client = make_client()

    with pytest.raises(SessionExpired):
        client.api.login("alice", "secret")
    assert not client.store.current_session().is_authenticated


def test_failed_login_leaves_session_anonymous(make_client, adapter):
    adapter.routes[("POST", "/api/login")] = (401, {"error": "Invalid credentials"})
    client = make_client()

    with pytest.raises(RequestFailed) as excinfo:
        client.api.login("alice", "wrong")
    assert excinfo.value.status == 401
    assert not client.store.current_session().is_authenticated


def test_get_matches_parses_match_list(make_client, adapter):
    adapter.routes[("GET", "/api/matches")] = (
        200,
        {
            "data": [
                {"id": 1, "home_team": "Arsenal", "away_team": "Chelsea", "date": "2024-08-17T14:00:00Z"},
                {"id": "b2", "home_team": "Leeds", "away_team": "Everton", "date": "2024-08-18"},
            ],
            "count": 2,
        },
    )
    matches = make_client().api.get_matches()

    assert [m.id for m in matches] == ["1", "b2"]
    assert matches[0].kickoff_time == "2024-08-17T14:00:00Z"
    assert matches[1].label == "Leeds vs Everton - 2024-08-18"


def test_get_matches_for_gameweek(make_client, adapter):
    adapter.routes[("GET", "/api/matches/3")] = (
        200,
        {"data": [{"id": "x", "home_team": "A", "away_team": "B", "match_day": 3}], "gameweek": 3},
    )
    matches = make_client().api.get_matches_for_gameweek(3)
    assert matches[0].match_day == 3


def test_get_leaderboard_reads_data_envelope(make_client, adapter):
    adapter.routes[("GET", "/api/leaderboard")] = (
        200,
        {"data": [{"user_id": "u2", "username": "bob", "points": 12}, {"user_id": "u1", "username": "al", "points": 3}]},
    )
    entries = make_client().api.get_leaderboard()
    assert [(e.username, e.points) for e in entries] == [("bob", 12), ("al", 3)]


def test_get_leaderboard_reads_aggregated_total_points(make_client, adapter):
    adapter.routes[("GET", "/api/leaderboard")] = (
        200,
        {
            "leaderboard": [
                {"user_id": "u1", "username": "alice", "total_points": 12, "prediction_count": 4},
                {"user_id": "u2", "username": "bob", "total_points": 0, "prediction_count": 1},
            ]
        },
    )
    entries = make_client().api.get_leaderboard()
    assert [(e.username, e.points) for e in entries] == [("alice", 12), ("bob", 0)]
    assert entries[0].prediction_count == 4


@pytest.mark.parametrize("key", ["data", "user"])
def test_get_profile_accepts_both_envelopes(make_client, adapter, key):
    adapter.routes[("GET", "/api/profile")] = (200, {key: {"username": "al", "email": "al@example.com"}})
    profile = make_client().api.get_profile()
    assert profile.email == "al@example.com"


def test_create_prediction_sends_payload_and_returns_prediction(make_client, adapter):
    adapter.routes[("GET", "/api/my-predictions")] = (200, {"predictions": []})
    adapter.routes[("POST", "/api/predictions")] = (
        201,
        {
            "message": "Prediction created successfully",
            "prediction": {"id": "p1", "match_id": "7", "predicted_score_home": 2, "predicted_score_away": 1},
        },
    )
    client = make_client()
    client.store.login(make_token())

    prediction = client.api.create_prediction("7", 2, 1)

    assert prediction == Prediction(id="p1", match_id="7", predicted_score_home=2, predicted_score_away=1)
    assert json.loads(adapter.requests[-1].body) == {
        "match_id": "7",
        "predicted_score_home": 2,
        "predicted_score_away": 1,
    }


def test_create_prediction_rejects_negative_scores(make_client, adapter):
    client = make_client()
    with pytest.raises(ValueError):
        client.api.create_prediction("7", -1, 0)
    assert adapter.requests == []


def test_get_prediction_returns_none_when_missing(make_client, adapter):
    adapter.routes[("GET", "/api/predictions/9")] = (404, {"error": "Prediction not found"})
    assert make_client().api.get_prediction("9") is None


def test_get_user_predictions_tolerates_missing_list(make_client, adapter):
    adapter.routes[("GET", "/api/my-predictions")] = (200, {"predictions": None, "count": 0})
    assert make_client().api.get_user_predictions() == []


def test_refresh_token_replaces_credential(make_client, adapter, storage):
    adapter.routes[("GET", "/api/my-predictions")] = (200, {"predictions": []})
    fresh = make_token("u1", exp=NOW_S + 7200)
    adapter.routes[("POST", "/api/refresh-token")] = (200, {"token": fresh})
    client = make_client()
    old = make_token("u1")
    client.store.login(old)

    client.api.refresh_token()

    assert adapter.requests[-1].headers["Authorization"] == f"Bearer {old}"
    assert client.store.current_session().credential == fresh
    assert storage.get_item("token") == fresh


def test_success_without_expected_envelope_is_not_a_request_failure(make_client, adapter):
    adapter.routes[("GET", "/api/matches")] = (200, {"message": "maintenance"})

    with pytest.raises(UnexpectedResponse) as excinfo:
        make_client().api.get_matches()

    assert not isinstance(excinfo.value, RequestFailed)
    assert excinfo.value.body == {"message": "maintenance"}
    assert excinfo.value.expected == ("data",)


def test_create_prediction_echoes_payload_when_body_is_bare(make_client, adapter):
    adapter.routes[("GET", "/api/my-predictions")] = (200, {"predictions": []})
    adapter.routes[("POST", "/api/predictions")] = (201, {"message": "Prediction created"})
    client = make_client()
    client.store.login(make_token())

    prediction = client.api.create_prediction("7", 3, 0)

    assert (prediction.match_id, prediction.predicted_score_home, prediction.predicted_score_away) == ("7", 3, 0)
