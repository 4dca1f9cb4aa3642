"""
tests/test_auth_gate.py -- Bearer-token checks on protected routes.

Every way of failing authentication must produce the same 401 body:
no header, wrong scheme, garbage token, forged signature, expired token,
and a valid token whose account no longer exists.
"""

from __future__ import annotations

import time

import pytest
from jose import jwt

from tests.factories import OTHER_SECRET, TEST_SECRET, ApiContext, make_issuer

PROTECTED = "/api/v1/auth/me"


def _expected_body() -> dict:
    return {
        "error": {
            "code": "unauthorized",
            "message": "Authentication required.",
            "detail": None,
            "fields": None,
        }
    }


def test_valid_token_accepted(api_client: ApiContext) -> None:
    resp = api_client.client.get(PROTECTED, headers=api_client.headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == api_client.account_id


def test_scheme_is_case_insensitive(api_client: ApiContext) -> None:
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"bearer {api_client.token}"})
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": ""},
        {"Authorization": "Bearer"},
        {"Authorization": "Bearer garbage"},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Token abc.def.ghi"},
    ],
)
def test_missing_or_malformed_header(api_client: ApiContext, headers: dict) -> None:
    resp = api_client.client.get(PROTECTED, headers=headers)
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_forged_signature(api_client: ApiContext) -> None:
    forged = make_issuer(secret=OTHER_SECRET).issue(api_client.account_id)
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_expired_token(api_client: ApiContext) -> None:
    expired = api_client.issuer.issue(api_client.account_id, expire_seconds=-10)
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_token_for_missing_account(api_client: ApiContext) -> None:
    orphan = api_client.issuer.issue("f" * 24)
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"Bearer {orphan}"})
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_token_without_subject(api_client: ApiContext) -> None:
    now = int(time.time())
    token = jwt.encode({"iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_alg_none_rejected(api_client: ApiContext) -> None:
    header = "eyJhbGciOiJub25lIiwidHlwIjoiSldUIn0"
    payload = api_client.token.split(".")[1]
    resp = api_client.client.get(PROTECTED, headers={"Authorization": f"Bearer {header}.{payload}."})
    assert resp.status_code == 401


@pytest.mark.parametrize(
    "method, path",
    [
        ("post", "/api/v1/auth/logout"),
        ("get", "/api/v1/auth/verify"),
        ("get", "/api/v1/auth/me"),
        ("post", "/api/v1/posts"),
        ("put", f"/api/v1/posts/{'a' * 24}"),
        ("delete", f"/api/v1/posts/{'a' * 24}"),
    ],
)
def test_every_protected_route_requires_token(api_client: ApiContext, method: str, path: str) -> None:
    resp = getattr(api_client.client, method)(path)
    assert resp.status_code == 401
    assert resp.json() == _expected_body()


def test_public_routes_need_no_token(api_client: ApiContext) -> None:
    assert api_client.client.get("/api/v1/posts").status_code == 200
    assert api_client.client.get("/api/v1/health").status_code == 200
