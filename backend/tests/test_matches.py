import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from ladder.main import app
from ladder.schemas import MatchCreate, MatchUpdate

client = TestClient(app)
BASE = "/api/v0/matches"


def _player(name):
    resp = client.post("/api/v0/players", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def _record(team_a, team_b, score_a, score_b, **extra):
    return client.post(
        BASE,
        json={"teamAIds": team_a, "teamBIds": team_b, "scoreA": score_a, "scoreB": score_b, **extra},
    )


def test_match_create_rejects_string_scores():
    with pytest.raises(ValidationError):
        MatchCreate(teamAIds=["a"], teamBIds=["b"], scoreA="10", scoreB=3)


def test_match_update_needs_both_teams():
    with pytest.raises(ValidationError) as exc:
        MatchUpdate(scoreA=1, scoreB=0, teamAIds=["a"])

    assert "provided together" in str(exc.value)


def test_record_match_returns_match_and_roster():
    a, b = _player("A"), _player("B")

    resp = _record([a], [b], 10, 0)

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["match"]["type"] == "1v1"
    assert data["match"]["ratingDeltaA"] == 32
    assert data["match"]["ratingDeltaB"] == -16
    players = {p["id"]: p for p in data["players"]}
    assert players[a]["rating"] == 332
    assert players[a]["badges"][0]["id"] == "first_win"
    assert players[b]["rating"] == 284
    assert players[b]["crawls"] == 1


def test_record_match_problem_codes():
    a, b = _player("A"), _player("B")

    draw = _record([a], [b], 4, 4)
    unknown = _record([a], ["ghost"], 4, 2)
    wrong_type = _record([a], [b], 4, 2, type="2v2")

    assert draw.status_code == 400
    assert draw.json()["code"] == "match_invalid"
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "player_not_found"
    assert wrong_type.status_code == 400


def test_list_matches_is_paginated_newest_first():
    a, b = _player("A"), _player("B")
    ids = [_record([a], [b], 10, i).json()["match"]["id"] for i in range(3)]

    resp = client.get(BASE, params={"limit": 2})

    assert resp.status_code == 200
    assert [m["id"] for m in resp.json()] == ids[::-1][:2]
    assert resp.headers["X-Has-More"] == "true"
    assert resp.headers["X-Next-Offset"] == "2"

    rest = client.get(BASE, params={"limit": 2, "offset": 2})
    assert [m["id"] for m in rest.json()] == [ids[0]]
    assert rest.headers["X-Has-More"] == "false"


def test_list_matches_filters_by_player():
    a, b, c = _player("A"), _player("B"), _player("C")
    _record([a], [b], 10, 1)
    kept = _record([c], [b], 10, 1).json()["match"]["id"]

    resp = client.get(BASE, params={"playerId": c})

    assert [m["id"] for m in resp.json()] == [kept]


def test_edit_and_delete_match_rebuild_ratings():
    a, b = _player("A"), _player("B")
    match_id = _record([a], [b], 10, 0).json()["match"]["id"]

    edited = client.patch(f"{BASE}/{match_id}", json={"scoreA": 2, "scoreB": 10})
    assert edited.status_code == 200, edited.text
    players = {p["id"]: p for p in edited.json()["players"]}
    assert (players[a]["rating"], players[b]["rating"]) == (284, 332)

    assert client.delete(f"{BASE}/{match_id}").status_code == 204
    assert client.get(f"{BASE}/{match_id}").status_code == 404
    roster = {p["id"]: p for p in client.get("/api/v0/players").json()}
    assert roster[a]["rating"] == roster[b]["rating"] == 300
    assert roster[a]["wins"] == roster[b]["losses"] == 0


def test_recompute_endpoint():
    a, b = _player("A"), _player("B")
    _record([a], [b], 10, 5)

    resp = client.post(f"{BASE}/recompute")

    assert resp.status_code == 200
    assert resp.json()["matchCount"] == 1
    players = {p["id"]: p for p in resp.json()["players"]}
    assert players[a]["rating"] == 332


def test_generate_matchups():
    ids = [_player(name) for name in "ABCDE"]

    resp = client.post(f"{BASE}/generate", json={"playerIds": ids})

    assert resp.status_code == 200
    plan = resp.json()
    assert [m["type"] for m in plan["matchups"]] == ["2v2"]
    assert len(plan["bench"]) == 1


def test_generate_matchups_unknown_player():
    a = _player("A")

    resp = client.post(f"{BASE}/generate", json={"playerIds": [a, "ghost"]})

    assert resp.status_code == 404
    assert resp.json()["code"] == "player_not_found"
