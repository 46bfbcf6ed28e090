"""
Test suite for user endpoints.

Tests cover:
- Admin-only listing and creation
- Admin-or-self access to a single user
- Applying to jobs
"""

import pytest

from app.core.security import decode_token


UNAUTHORIZED = {"error": {"message": "Unauthorized", "status": 401}}

U1 = {
    "username": "u1",
    "firstName": "U1F",
    "lastName": "U1L",
    "email": "user1@user.com",
    "isAdmin": False,
}


class TestUserCreation:
    """Tests for POST /users"""

    NEW_USER = {
        "username": "u-new",
        "firstName": "First-new",
        "lastName": "Last-new",
        "password": "password-new",
        "email": "new@email.com",
        "isAdmin": False,
    }

    def test_admin_can_create_user(self, client, seeded, admin_headers):
        response = client.post("/users", json=self.NEW_USER, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["user"] == {k: v for k, v in self.NEW_USER.items() if k != "password"}
        assert decode_token(body["token"])["sub"] == "u-new"

    def test_admin_can_create_admin(self, client, seeded, admin_headers):
        response = client.post("/users", json={**self.NEW_USER, "isAdmin": True}, headers=admin_headers)

        assert response.json()["user"]["isAdmin"] is True
        assert decode_token(response.json()["token"])["is_admin"] is True

    def test_non_admin_rejected(self, client, seeded, u1_headers):
        response = client.post("/users", json=self.NEW_USER, headers=u1_headers)

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_invalid_email(self, client, seeded, admin_headers):
        response = client.post("/users", json={**self.NEW_USER, "email": "not-an-email"}, headers=admin_headers)
        assert response.status_code == 400

    def test_duplicate_username(self, client, seeded, admin_headers):
        response = client.post("/users", json={**self.NEW_USER, "username": "u1"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Duplicate username: u1"


class TestUserListing:
    """Tests for GET /users"""

    def test_admin_can_list(self, client, seeded, admin_headers):
        response = client.get("/users", headers=admin_headers)

        assert response.status_code == 200
        users = response.json()["users"]
        assert [u["username"] for u in users] == ["admin", "u1", "u2"]
        assert users[1] == {**U1, "jobs": [seeded["UX Designer"]]}

    def test_non_admin_rejected(self, client, seeded, u1_headers):
        assert client.get("/users", headers=u1_headers).status_code == 401

    def test_anon_rejected(self, client, seeded):
        assert client.get("/users").status_code == 401


class TestUserRetrieval:
    """Tests for GET /users/{username}"""

    def test_self(self, client, seeded, u1_headers):
        response = client.get("/users/u1", headers=u1_headers)

        assert response.json() == {"user": {**U1, "jobs": [seeded["UX Designer"]]}}

    def test_admin(self, client, seeded, admin_headers):
        assert client.get("/users/u1", headers=admin_headers).status_code == 200

    def test_other_user_rejected(self, client, seeded, u1_headers):
        response = client.get("/users/u2", headers=u1_headers)

        assert response.status_code == 401
        assert response.json() == UNAUTHORIZED

    def test_anon_rejected(self, client, seeded):
        assert client.get("/users/u1").status_code == 401

    def test_invalid_token_is_anonymous(self, client, seeded):
        response = client.get("/users/u1", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_not_found(self, client, seeded, admin_headers):
        response = client.get("/users/nope", headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"error": {"message": "No user: nope", "status": 404}}


class TestUserUpdate:
    """Tests for PATCH /users/{username}"""

    def test_self_can_update(self, client, seeded, u1_headers):
        response = client.patch("/users/u1", json={"firstName": "New"}, headers=u1_headers)

        assert response.status_code == 200
        assert response.json()["user"]["firstName"] == "New"
        assert response.json()["user"]["lastName"] == "U1L"

    def test_password_change_allows_login(self, client, seeded, u1_headers):
        client.patch("/users/u1", json={"password": "new-password"}, headers=u1_headers)

        response = client.post("/auth/token", json={"username": "u1", "password": "new-password"})
        assert response.status_code == 200

    def test_is_admin_not_accepted(self, client, seeded, u1_headers):
        response = client.patch("/users/u1", json={"isAdmin": True}, headers=u1_headers)
        assert response.status_code == 400

    def test_other_user_rejected(self, client, seeded, u1_headers):
        response = client.patch("/users/u2", json={"firstName": "New"}, headers=u1_headers)
        assert response.status_code == 401

    def test_not_found(self, client, seeded, admin_headers):
        response = client.patch("/users/nope", json={"firstName": "New"}, headers=admin_headers)
        assert response.status_code == 404

    def test_null_rejected(self, client, seeded, admin_headers):
        response = client.patch("/users/u1", json={"firstName": None}, headers=admin_headers)
        assert response.status_code == 400


class TestUserDeletion:
    """Tests for DELETE /users/{username}"""

    def test_self_can_delete(self, client, seeded, u1_headers):
        response = client.delete("/users/u1", headers=u1_headers)
        assert response.json() == {"deleted": "u1"}

    def test_admin_can_delete(self, client, seeded, admin_headers):
        assert client.delete("/users/u2", headers=admin_headers).json() == {"deleted": "u2"}
        assert client.get("/users/u2", headers=admin_headers).status_code == 404

    def test_other_user_rejected(self, client, seeded, u1_headers):
        assert client.delete("/users/u2", headers=u1_headers).status_code == 401

    def test_not_found(self, client, seeded, admin_headers):
        assert client.delete("/users/nope", headers=admin_headers).status_code == 404


class TestApplyToJob:
    """Tests for POST /users/{username}/jobs/{id}"""

    def test_self_can_apply(self, client, seeded, u1_headers):
        job_id = seeded["Project Manager"]
        response = client.post(f"/users/u1/jobs/{job_id}", headers=u1_headers)

        assert response.json() == {"applied": job_id}
        jobs = client.get("/users/u1", headers=u1_headers).json()["user"]["jobs"]
        assert sorted(jobs) == sorted([seeded["UX Designer"], job_id])

    def test_other_user_rejected(self, client, seeded, u1_headers):
        response = client.post(f"/users/u2/jobs/{seeded['Project Manager']}", headers=u1_headers)
        assert response.status_code == 401

    def test_unknown_job(self, client, seeded, admin_headers):
        response = client.post("/users/u1/jobs/0", headers=admin_headers)
        assert response.status_code == 404

    def test_already_applied(self, client, seeded, u1_headers):
        response = client.post(f"/users/u1/jobs/{seeded['UX Designer']}", headers=u1_headers)
        assert response.status_code == 400
