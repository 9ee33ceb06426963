from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from orders_api.deps import get_current_user, require_role
from orders_api.services.auth import (
    ROLE_ADMIN,
    ROLE_USER,
    Account,
    authenticate,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def _build_request(path: str = "/api/resource", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": {},
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


def test_require_role_denies_user_on_admin_route():
    user = SimpleNamespace(username="user", role="User")
    dependency = require_role(["admin"])

    with pytest.raises(HTTPException) as exc:
        dependency(request=_build_request(path="/internal/metrics"), user=user)

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_require_role_is_case_insensitive():
    user = SimpleNamespace(username="admin", role="Admin")
    dependency = require_role(["ADMIN"])

    assert dependency(request=_build_request(), user=user) is user


def test_get_current_user_reads_claims_and_sets_request_state():
    token = create_access_token(Account("admin", "unused", ROLE_ADMIN))
    request = _build_request()

    user = get_current_user(request=request, token=token)

    assert user.username == "admin"
    assert user.is_admin is True
    assert request.state.user is user


def test_get_current_user_rejects_expired_token():
    token = create_access_token(Account("user", "unused", ROLE_USER), expires_minutes=-1)

    with pytest.raises(HTTPException) as exc:
        get_current_user(request=_build_request(), token=token)

    assert exc.value.status_code == 401
    assert exc.value.headers == {"WWW-Authenticate": "Bearer"}


def test_access_token_carries_issuer_and_audience():
    payload = decode_access_token(create_access_token(Account("user", "unused", ROLE_USER)))

    assert payload["sub"] == "user"
    assert payload["role"] == ROLE_USER
    assert payload["iss"] == "orders-mini"
    assert payload["aud"] == "orders-mini-clients"
    assert payload["exp"] > payload["iat"]


def test_decode_access_token_rejects_tampered_token():
    token = create_access_token(Account("user", "unused", ROLE_USER))

    with pytest.raises(ValueError):
        decode_access_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))


def test_password_hashing_round_trip():
    password_hash = hash_password("123")

    assert password_hash != "123"
    assert verify_password("123", password_hash) is True
    assert verify_password("124", password_hash) is False
    assert verify_password("123", "not-a-bcrypt-hash") is False


def test_authenticate_fixed_accounts():
    assert authenticate("admin", "123").role == ROLE_ADMIN
    assert authenticate("user", "123").role == ROLE_USER
    assert authenticate("user", "wrong") is None
    assert authenticate("ghost", "123") is None
