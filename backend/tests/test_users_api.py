"""User endpoints: provisioning, profile, follow graph, error mapping."""

from fastapi.testclient import TestClient

from tests.conftest import auth_headers


def _me(client: TestClient, token: str) -> dict:
    return client.get("/api/users/me", headers=auth_headers(token)).json()


def test_me_provisions_once(client: TestClient):
    first = client.get("/api/users/me", headers=auth_headers("token-a"))
    second = client.get("/api/users/me", headers=auth_headers("token-a"))

    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["username"] == "diver1"


def test_me_derives_username_from_email(client: TestClient):
    me = _me(client, "token-c")

    assert me["username"] == "Reef.Hunter"
    assert me["email"] == "reef.hunter@example.com"


def test_get_profile_with_follow_summaries(client: TestClient):
    a = _me(client, "token-a")
    b = _me(client, "token-b")
    client.post(f"/api/users/follow/{a['id']}", headers=auth_headers("token-b"))

    response = client.get(f"/api/users/profile/{a['id']}", headers=auth_headers("token-b"))

    assert response.status_code == 200
    assert response.json()["followers"] == [{"id": b["id"], "username": "diver2", "profile_picture": ""}]


def test_get_missing_profile_is_404(client: TestClient):
    response = client.get("/api/users/profile/999", headers=auth_headers("token-a"))
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_profile(client: TestClient):
    a = _me(client, "token-a")

    response = client.put(
        f"/api/users/profile/{a['id']}",
        json={"bio": "Spearo since 2010", "profilePicture": "https://img.example.com/me.jpg"},
        headers=auth_headers("token-a"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["bio"] == "Spearo since 2010"
    assert data["profile_picture"] == "https://img.example.com/me.jpg"
    assert data["username"] == "diver1"


def test_update_profile_short_username_is_422_and_unchanged(client: TestClient):
    a = _me(client, "token-a")

    response = client.put(
        f"/api/users/profile/{a['id']}", json={"username": "ab"}, headers=auth_headers("token-a")
    )

    assert response.status_code == 422
    profile = client.get(f"/api/users/profile/{a['id']}", headers=auth_headers("token-a")).json()
    assert profile["username"] == "diver1"


def test_update_profile_taken_username_is_422(client: TestClient):
    a = _me(client, "token-a")
    _me(client, "token-b")

    response = client.put(
        f"/api/users/profile/{a['id']}", json={"username": "diver2"}, headers=auth_headers("token-a")
    )

    assert response.status_code == 422


def test_update_missing_profile_is_404(client: TestClient):
    response = client.put("/api/users/profile/999", json={"bio": "x"}, headers=auth_headers("token-a"))
    assert response.status_code == 404


def test_follow_twice_is_400(client: TestClient):
    a = _me(client, "token-a")

    first = client.post(f"/api/users/follow/{a['id']}", headers=auth_headers("token-b"))
    second = client.post(f"/api/users/follow/{a['id']}", headers=auth_headers("token-b"))

    assert first.json() == {"message": "Successfully followed user"}
    assert second.status_code == 400
    assert second.json()["detail"] == "Already following this user"


def test_follow_missing_user_is_404(client: TestClient):
    response = client.post("/api/users/follow/999", headers=auth_headers("token-a"))
    assert response.status_code == 404


def test_unfollow_without_follow_is_ok(client: TestClient):
    a = _me(client, "token-a")

    response = client.post(f"/api/users/unfollow/{a['id']}", headers=auth_headers("token-b"))

    assert response.status_code == 200
    assert response.json() == {"message": "Successfully unfollowed user"}


def test_profile_stats(client: TestClient):
    a = _me(client, "token-a")
    client.post(
        "/api/sessions",
        json={"date": "2024-01-01T00:00:00", "location": {"name": "Catalina"}, "catches": [{"species": "Yellowtail"}]},
        headers=auth_headers("token-a"),
    )

    response = client.get(f"/api/users/profile/{a['id']}/stats", headers=auth_headers("token-b"))

    assert response.status_code == 200
    assert response.json() == {
        "total_sessions": 1,
        "total_catches": 1,
        "favorite_species": "Yellowtail",
        "best_spot": "Catalina",
    }


def test_unclassified_failure_is_generic_500(client: TestClient, monkeypatch):
    from spearo.services import user_service

    def boom(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(user_service, "get_profile", boom)
    a = _me(client, "token-a")

    response = client.get(f"/api/users/profile/{a['id']}", headers=auth_headers("token-a"))

    assert response.status_code == 500
    assert response.json()["detail"] == "Something went wrong!"


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
