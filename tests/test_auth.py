"""
Test suite for authentication endpoints.

Tests cover:
- Token issuance for valid credentials
- Self-registration
- Rejection of bad credentials and malformed bodies
"""

import pytest

from app.core.security import decode_token


class TestLogin:
    """Tests for POST /auth/token"""

    def test_login_success(self, client, seeded):
        response = client.post("/auth/token", json={"username": "u1", "password": "password1"})

        assert response.status_code == 200
        payload = decode_token(response.json()["token"])
        assert payload["sub"] == "u1"
        assert payload["is_admin"] is False

    def test_admin_token_carries_flag(self, client, seeded):
        response = client.post("/auth/token", json={"username": "admin", "password": "adminpass"})
        assert decode_token(response.json()["token"])["is_admin"] is True

    def test_unknown_user(self, client, seeded):
        response = client.post("/auth/token", json={"username": "no-such-user", "password": "password1"})

        assert response.status_code == 401
        assert response.json() == {"error": {"message": "Invalid username/password", "status": 401}}

    def test_wrong_password(self, client, seeded):
        response = client.post("/auth/token", json={"username": "u1", "password": "nope"})
        assert response.status_code == 401

    def test_missing_data(self, client, seeded):
        response = client.post("/auth/token", json={"username": "u1"})
        assert response.status_code == 400

    def test_invalid_data(self, client, seeded):
        response = client.post("/auth/token", json={"username": 42, "password": "above-is-a-number"})
        assert response.status_code == 400


class TestRegister:
    """Tests for POST /auth/register"""

    NEW_USER = {
        "username": "new",
        "firstName": "first",
        "lastName": "last",
        "password": "password",
        "email": "new@email.com",
    }

    def test_register_success(self, client, seeded):
        response = client.post("/auth/register", json=self.NEW_USER)

        assert response.status_code == 201
        payload = decode_token(response.json()["token"])
        assert payload["sub"] == "new"
        assert payload["is_admin"] is False

    def test_cannot_register_as_admin(self, client, seeded):
        response = client.post("/auth/register", json={**self.NEW_USER, "isAdmin": True})
        assert response.status_code == 400

    def test_duplicate_username(self, client, seeded):
        response = client.post("/auth/register", json={**self.NEW_USER, "username": "u1"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Duplicate username: u1"

    def test_missing_fields(self, client, seeded):
        response = client.post("/auth/register", json={"username": "new"})
        assert response.status_code == 400

    def test_short_password(self, client, seeded):
        response = client.post("/auth/register", json={**self.NEW_USER, "password": "abc"})
        assert response.status_code == 400
