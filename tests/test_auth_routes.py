"""
tests/test_auth_routes.py -- Integration tests for registration, login and account lookup.

These tests exercise the full stack: FastAPI routing -> request models ->
AccountService -> AccountStore -> exception handlers -> response models.

Coverage:
  - register 201 with token and no password field anywhere in the body
  - register 400 field map, 409 on duplicate email / username
  - login by username or email, 401 identical for wrong password and unknown user
  - /auth/me, /auth/verify, /auth/logout with a valid token
  - GET /accounts/{id}: 200, 400 invalid_id, 404
"""

from __future__ import annotations

from tests.factories import ApiContext

ALICE = {"username": "alice", "email": "a@x.com", "password": "Passw0rd!", "confirmPassword": "Passw0rd!"}


def _no_password_anywhere(body: dict) -> bool:
    text = str(body).lower()
    return "password" not in text and "$2b$" not in text


class TestRegister:
    def test_register_then_duplicate_email(self, api_client: ApiContext) -> None:
        client = api_client.client
        resp = client.post("/api/v1/auth/register", json=ALICE)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["token"]
        assert data["token_type"] == "bearer"
        assert data["account"]["username"] == "alice"
        assert data["account"]["email"] == "a@x.com"
        assert _no_password_anywhere(data)
        assert resp.headers["Cache-Control"] == "no-store"

        dup = client.post("/api/v1/auth/register", json={**ALICE, "username": "alice2"})
        assert dup.status_code == 409, dup.text
        error = dup.json()["error"]
        assert error["code"] == "conflict"
        assert error["fields"] == {"email": "This email is already taken"}

    def test_duplicate_username(self, api_client: ApiContext) -> None:
        body = {**ALICE, "username": "TestAuthor", "email": "fresh@x.com"}
        resp = api_client.client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 409
        assert list(resp.json()["error"]["fields"]) == ["username"]

    def test_snake_case_confirmation_accepted(self, api_client: ApiContext) -> None:
        body = {"username": "snake", "email": "snake@x.com", "password": "Passw0rd!", "confirm_password": "Passw0rd!"}
        resp = api_client.client.post("/api/v1/auth/register", json=body)
        assert resp.status_code == 201, resp.text

    def test_validation_map(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/register",
            json={"username": "ab", "email": "nope", "password": "short", "confirmPassword": "other"},
        )
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "validation_error"
        assert set(error["fields"]) == {"username", "email", "password", "confirmPassword"}

    def test_missing_body_fields_are_a_400(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/v1/auth/register", json={})
        assert resp.status_code == 400
        assert "username" in resp.json()["error"]["fields"]

    def test_wrong_types_are_a_400(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/v1/auth/register", json={**ALICE, "username": 42})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "validation_error"


class TestLogin:
    def test_login_with_username(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/login", json={"usernameOrEmail": "testauthor", "password": "testpass123"}
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["account"]["id"] == api_client.account_id
        assert api_client.issuer.verify(data["token"]).subject == api_client.account_id
        assert _no_password_anywhere(data)
        assert resp.headers["Cache-Control"] == "no-store"

    def test_login_with_email_any_case(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/login", json={"username": "TestAuthor@Example.com", "password": "testpass123"}
        )
        assert resp.status_code == 200, resp.text

    def test_wrong_password_and_unknown_user_identical(self, api_client: ApiContext) -> None:
        client = api_client.client
        wrong = client.post("/api/v1/auth/login", json={"usernameOrEmail": "testauthor", "password": "wrongpass1"})
        unknown = client.post("/api/v1/auth/login", json={"usernameOrEmail": "ghost", "password": "testpass123"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"]["code"] == "invalid_credentials"

    def test_blank_login_is_a_400(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/v1/auth/login", json={})
        assert resp.status_code == 400
        assert set(resp.json()["error"]["fields"]) == {"usernameOrEmail", "password"}


class TestSession:
    def test_me(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/me", headers=api_client.headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == api_client.account_id
        assert data["username"] == "testauthor"
        assert _no_password_anywhere(data)

    def test_verify(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/verify", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json() == {"valid": True}

    def test_logout_does_not_revoke(self, api_client: ApiContext) -> None:
        """Logout is client-side only: the same token keeps working until it expires."""
        client = api_client.client
        resp = client.post("/api/v1/auth/logout", headers=api_client.headers)
        assert resp.status_code == 200
        assert client.get("/api/v1/auth/verify", headers=api_client.headers).status_code == 200


class TestAccountLookup:
    def test_get_account(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/accounts/{api_client.account_id}", headers=api_client.headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["username"] == "testauthor"
        assert _no_password_anywhere(data)

    def test_get_account_not_found(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/accounts/{'0' * 24}", headers=api_client.headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_get_account_invalid_id(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/accounts/not-an-id", headers=api_client.headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_id"

    def test_get_account_requires_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/accounts/{api_client.account_id}")
        assert resp.status_code == 401
