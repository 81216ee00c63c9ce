from datetime import timedelta

import pytest
from fastapi import HTTPException

from petshop.auth import CurrentUser, create_access_token, ensure_client_access, verify_access_token
from petshop.shared.errors import ForbiddenError

from conftest import auth_headers


def test_token_round_trip_keeps_identity():
    claims = verify_access_token(create_access_token("client-1", "CLIENT", email="a@b.com"))
    assert claims["sub"] == "client-1"
    assert claims["role"] == "CLIENT"
    assert claims["email"] == "a@b.com"


def test_unknown_role_cannot_be_issued():
    with pytest.raises(ValueError):
        create_access_token("someone", "OWNER")


def test_expired_token_is_flagged():
    token = create_access_token("client-1", "CLIENT", expires_in=timedelta(seconds=-30))
    with pytest.raises(HTTPException) as exc_info:
        verify_access_token(token)
    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"X-Token-Expired": "true"}


def test_client_access_rules():
    staff = CurrentUser(id="employee-1", role="EMPLOYEE")
    client = CurrentUser(id="client-1", role="CLIENT")

    assert staff.is_staff and not staff.is_admin
    assert staff.can_access_client("client-2")
    assert client.can_access_client("client-1")
    assert not client.can_access_client("client-2")

    ensure_client_access(client, "client-1")
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_client_access(client, "client-2")
    assert exc_info.value.status_code == 403
    assert exc_info.value.code == "FORBIDDEN"
    assert exc_info.value.extra == {"clientId": "client-2"}


def test_missing_token_returns_401(api):
    response = api.get("/services")
    assert response.status_code == 401


def test_garbage_token_returns_401(api):
    response = api.get("/services", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_expired_token_returns_401_with_header(api):
    token = create_access_token("employee-1", "EMPLOYEE", expires_in=timedelta(minutes=-5))
    response = api.get("/services", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.headers["X-Token-Expired"] == "true"


def test_role_guards(api):
    employee = auth_headers("employee-1", "EMPLOYEE")
    client = auth_headers("client-1", "CLIENT")

    assert api.get("/services", headers=client).status_code == 200
    assert api.get("/clients", headers=client).status_code == 403
    assert api.get("/clients", headers=employee).status_code == 200
    assert api.put("/shop", json={"name": "Pet Shop", "workingHours": {}}, headers=employee).status_code == 403
