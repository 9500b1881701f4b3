"""认证接口测试"""
from datetime import timedelta

from conftest import TEST_PASSWORD, create_user
from models import UserRole, UserStatus
from utils.auth import create_access_token


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "OK", "message": "Server is running"}


def test_unknown_route_returns_error_body(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Route not found"
    assert body["timestamp"].endswith("Z")


def test_login_success(client, qa_user):
    response = client.post("/api/auth/login", json={"email": qa_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["token"]
    assert body["user"]["email"] == qa_user.email
    assert body["user"]["role"] == "QA"
    assert "password" not in body["user"]
    assert body["user"]["lastActive"] is not None


def test_login_failures_are_indistinguishable(client, qa_user):
    wrong_password = client.post("/api/auth/login", json={"email": qa_user.email, "password": "nope"})
    unknown_email = client.post("/api/auth/login", json={"email": "ghost@test.com", "password": "nope"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["error"] == unknown_email.json()["error"] == "Invalid credentials"


def test_login_inactive_account(client, db_session):
    user = create_user(db_session, "Idle", "idle@test.com", UserRole.DEVELOPER, UserStatus.INACTIVE)
    response = client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert response.status_code == 403
    assert response.json()["error"] == "Account is inactive"


def test_login_missing_fields(client):
    response = client.post("/api/auth/login", json={"email": "a@test.com"})
    assert response.status_code == 400
    assert "password" in response.json()["error"]


def test_register_and_duplicate(client):
    payload = {"name": "New Person", "email": "new@test.com", "password": "pw123456"}
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "Developer"
    assert user["status"] == "Active"

    duplicate = client.post("/api/auth/register", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "User with this email already exists"

    login = client.post("/api/auth/login", json={"email": "new@test.com", "password": "pw123456"})
    assert login.status_code == 200


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["error"] == "Access token required"
    assert response.headers.get("www-authenticate") == "Bearer"


def test_me_with_token(client, developer_user, developer_headers):
    response = client.get("/api/auth/me", headers=developer_headers)
    assert response.status_code == 200
    assert response.json()["id"] == developer_user.id


def test_expired_and_garbage_tokens(client, developer_user):
    expired = create_access_token(
        {"id": developer_user.id, "email": developer_user.email, "role": "Developer"},
        expires_delta=timedelta(seconds=-10),
    )
    for token in (expired, "not-a-token"):
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"
