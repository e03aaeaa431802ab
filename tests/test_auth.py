"""Login, token checks and role permissions."""

from datetime import timedelta

from fastapi.testclient import TestClient

from print_erp.core.security import create_access_token, get_password_hash, verify_password
from print_erp.models.user import User


def test_login_returns_bearer_token(client: TestClient, db_session, roles):
    db_session.add(User(
        email="owner@printshop.test",
        hashed_password=get_password_hash("s3cret-pass"),
        full_name="Shop Owner",
        role_id=roles["Admin"].id,
    ))
    db_session.commit()

    response = client.post(
        "/api/v1/auth/login",
        data={"username": "owner@printshop.test", "password": "s3cret-pass"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "owner@printshop.test"
    assert me.json()["role_name"] == "Admin"


def test_wrong_password(client: TestClient, manager_user):
    response = client.post(
        "/api/v1/auth/login",
        data={"username": manager_user.email, "password": "guess"},
    )
    assert response.status_code == 401


def test_malformed_hash_never_verifies():
    assert verify_password("anything", "!") is False
    assert verify_password("anything", "") is False


def test_missing_token(client: TestClient):
    assert client.get("/api/v1/procurement/orders").status_code == 401


def test_expired_token(client: TestClient, manager_user):
    token = create_access_token(manager_user.email, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/v1/procurement/orders", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_inactive_user(client: TestClient, db_session, manager_user, manager_headers):
    manager_user.is_active = False
    db_session.commit()
    response = client.get("/api/v1/auth/me", headers=manager_headers)
    assert response.status_code == 400


def test_permissions_by_role(client: TestClient, manager_headers, staff_headers):
    manager = client.get("/api/v1/auth/permissions", headers=manager_headers).json()
    assert manager["role"] == "Manager"
    assert "pay" in manager["permissions"]["procurement"]
    assert "delete" not in manager["permissions"]["procurement"]

    staff = client.get("/api/v1/auth/permissions", headers=staff_headers).json()
    assert staff["permissions"] == {"inventory": ["view"], "procurement": ["view"]}


def test_roles_are_public(client: TestClient, roles):
    response = client.get("/api/v1/auth/roles")
    assert sorted(role["name"] for role in response.json()) == ["Admin", "Manager", "Staff"]


def test_responses_carry_request_id(client: TestClient):
    response = client.get("/", headers={"X-Request-ID": "trace-42"})
    assert response.headers["X-Request-ID"] == "trace-42"
