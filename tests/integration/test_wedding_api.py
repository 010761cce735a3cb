"""
Integration tests for the planner wedding endpoints.
"""

import pytest


@pytest.fixture
def auth(make_planner):
    _, api_key = make_planner()
    return {"X-API-Key": api_key}


class TestAuthentication:

    def test_missing_api_key(self, client):
        response = client.get("/api/v1/weddings/")

        assert response.status_code == 401

    def test_unknown_api_key(self, client, auth):
        response = client.get("/api/v1/weddings/", headers={"X-API-Key": "not-a-key"})

        assert response.status_code == 401


class TestWeddingEndpoints:

    def test_create_and_get_wedding(self, client, auth):
        response = client.post(
            "/api/v1/weddings/",
            json={"name": "Alex & Sam", "date": "2030-06-14", "guest_capacity": 80},
            headers=auth,
        )
        assert response.status_code == 201
        wedding = response.json()
        assert wedding["name"] == "Alex & Sam"
        assert wedding["guest_capacity"] == 80

        response = client.get(f"/api/v1/weddings/{wedding['id']}", headers=auth)
        assert response.status_code == 200
        assert response.json()["date"] == "2030-06-14"

    def test_free_plan_second_wedding_refused(self, client, auth):
        assert client.post("/api/v1/weddings/", json={"name": "First"}, headers=auth).status_code == 201

        response = client.post("/api/v1/weddings/", json={"name": "Second"}, headers=auth)

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "PlanLimitExceededError"
        assert body["detail"] == (
            "The Free plan allows up to 1 wedding. Upgrade your subscription to manage more events."
        )

    def test_invalid_payload(self, client, auth):
        response = client.post("/api/v1/weddings/", json={"name": "", "guest_capacity": 0}, headers=auth)

        assert response.status_code == 422

    def test_other_planners_wedding_forbidden(self, client, make_planner, make_wedding):
        owner, _ = make_planner(email="owner@example.com")
        _, intruder_key = make_planner(email="intruder@example.com")
        wedding = make_wedding(owner)

        response = client.get(f"/api/v1/weddings/{wedding.id}", headers={"X-API-Key": intruder_key})

        assert response.status_code == 403
        assert response.json()["error"] == "PermissionDeniedError"

    def test_missing_wedding(self, client, auth):
        response = client.get("/api/v1/weddings/404", headers=auth)

        assert response.status_code == 404

    def test_update_wedding(self, client, auth):
        wedding_id = client.post("/api/v1/weddings/", json={"name": "Alex & Sam"}, headers=auth).json()["id"]

        response = client.patch(f"/api/v1/weddings/{wedding_id}", json={"location": "Old Mill"}, headers=auth)

        assert response.status_code == 200
        assert response.json()["location"] == "Old Mill"
        assert response.json()["name"] == "Alex & Sam"

    def test_delete_wedding_removes_guests(self, client, auth):
        wedding_id = client.post("/api/v1/weddings/", json={"name": "Alex & Sam"}, headers=auth).json()["id"]
        for name in ("A", "B"):
            client.post(f"/api/v1/weddings/{wedding_id}/guests/", json={"name": name}, headers=auth)

        response = client.delete(f"/api/v1/weddings/{wedding_id}", headers=auth)

        assert response.status_code == 204
        assert client.get(f"/api/v1/weddings/{wedding_id}", headers=auth).status_code == 404


class TestStatsAndDashboard:

    def test_stats(self, client, auth):
        wedding_id = client.post(
            "/api/v1/weddings/", json={"name": "Alex & Sam", "guest_capacity": 10}, headers=auth
        ).json()["id"]
        client.post(
            f"/api/v1/weddings/{wedding_id}/guests/",
            json={"name": "Ada", "rsvp_status": "confirmed", "plus_ones": 1},
            headers=auth,
        )
        client.post(f"/api/v1/weddings/{wedding_id}/guests/", json={"name": "Grace"}, headers=auth)

        response = client.get(f"/api/v1/weddings/{wedding_id}/stats", headers=auth)

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_guests"] == 2
        assert stats["confirmed"] == 1
        assert stats["pending"] == 1
        assert stats["expected_headcount"] == 2
        assert stats["remaining_capacity"] == 9

    def test_dashboard(self, client, make_planner, make_wedding):
        user, api_key = make_planner(plan="agency")
        make_wedding(user, name="First")
        make_wedding(user, name="Second")

        response = client.get("/api/v1/weddings/dashboard", headers={"X-API-Key": api_key})

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == {"plan": "agency", "limit": None, "used": 2}
        assert sorted(w["name"] for w in body["weddings"]) == ["First", "Second"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    def test_api_root(self, client):
        response = client.get("/api")

        assert response.status_code == 200
        assert response.json()["message"] == "Wedding Guests API"
