from fastapi.testclient import TestClient

from ladder.main import app

client = TestClient(app)
BASE = "/api/v0/players"


def _create(name, **extra):
    resp = client.post(BASE, json={"name": name, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_and_fetch_player():
    created = _create("Dennis", nickname="The Menace", department="Backend")

    assert created["rating"] == 300
    assert created["level"] == "Noob"
    assert created["badges"] == []

    resp = client.get(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["nickname"] == "The Menace"


def test_duplicate_name_is_rejected():
    _create("Sarah")

    resp = client.post(BASE, json={"name": "SARAH"})

    assert resp.status_code == 400
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "player_invalid"


def test_blank_name_fails_validation():
    resp = client.post(BASE, json={"name": "   "})

    assert resp.status_code == 422


def test_list_players_filters_by_query():
    _create("Mark", nickname="Rookie")
    _create("Sarah", nickname="Sniper")

    resp = client.get(BASE, params={"q": "rook"})

    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Mark"]


def test_update_player_profile():
    player = _create("Mark")

    resp = client.patch(f"{BASE}/{player['id']}", json={"department": "Sales"})

    assert resp.status_code == 200
    assert resp.json()["department"] == "Sales"
    assert resp.json()["name"] == "Mark"


def test_update_rejects_stat_fields():
    player = _create("Mark")

    resp = client.patch(f"{BASE}/{player['id']}", json={"rating": 2000})

    assert resp.status_code == 422


def test_missing_player_is_problem_404():
    resp = client.get(f"{BASE}/nobody")

    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == "player_not_found"
    assert body["instance"] == f"{BASE}/nobody"


def test_delete_player():
    player = _create("Temp")

    assert client.delete(f"{BASE}/{player['id']}").status_code == 204
    assert client.get(f"{BASE}/{player['id']}").status_code == 404
    assert client.delete(f"{BASE}/{player['id']}").status_code == 404
