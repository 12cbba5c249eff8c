"""Tests for authentication endpoints: register and login."""
from uuid import uuid4

from fastapi.testclient import TestClient

from compass.auth.jwt import JWTPayload
from compass.auth.password import hash_password, validate_credentials, verify_password
from compass.models.domain import User


def test_register_user(client: TestClient, db_session):
    """Registration creates the user and returns a usable token."""
    response = client.post("/api/v1/auth/register", json={"username": "carol", "password": "pa55word"})
    assert response.status_code == 201

    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["username"] == "carol"
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]

    user = db_session.query(User).filter(User.username == "carol").first()
    assert user is not None
    assert verify_password("pa55word", user.password_hash)

    payload = JWTPayload.from_token(data["access_token"])
    assert payload.user_id == user.id
    assert payload.username == "carol"


def test_register_token_authenticates(client: TestClient):
    response = client.post("/api/v1/auth/register", json={"username": "dave", "password": "pa55word"})
    token = response.json()["access_token"]

    response = client.get("/api/v1/decisions", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json() == []


def test_register_duplicate_username(client: TestClient, test_user):
    response = client.post("/api/v1/auth/register", json={"username": test_user.username, "password": "pa55word"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Username already exists"


def test_register_strips_username(client: TestClient, test_user):
    response = client.post(
        "/api/v1/auth/register", json={"username": f"  {test_user.username}  ", "password": "pa55word"}
    )
    assert response.status_code == 400


def test_register_short_password(client: TestClient):
    response = client.post("/api/v1/auth/register", json={"username": "erin", "password": "123"})
    assert response.status_code == 422


def test_register_invalid_username(client: TestClient):
    response = client.post("/api/v1/auth/register", json={"username": "has space", "password": "pa55word"})
    assert response.status_code == 400
    assert "Username" in response.json()["error"]["message"]


def test_login_success(client: TestClient, test_user):
    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(test_user.id)
    assert data["expires_in"] > 0


def test_login_wrong_password(client: TestClient, test_user):
    response = client.post("/api/v1/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["message"] == "Invalid credentials"
    assert body["error"]["type"] == "HTTPException"
    assert "request_id" in body


def test_login_unknown_user(client: TestClient):
    response = client.post("/api/v1/auth/login", json={"username": "nobody", "password": "secret123"})
    assert response.status_code == 401


def test_protected_route_requires_token(client: TestClient):
    response = client.get("/api/v1/decisions")
    assert response.status_code in (401, 403)


def test_protected_route_rejects_bad_token(client: TestClient):
    response = client.get("/api/v1/decisions", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["message"].startswith("Not authorized, token failed")
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_token_for_deleted_user_rejected(client: TestClient):
    token = JWTPayload.create_token(uuid4(), "ghost")
    response = client.get("/api/v1/decisions", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_password_hashing():
    password_hash = hash_password("secret123")
    assert password_hash != "secret123"
    assert verify_password("secret123", password_hash)
    assert not verify_password("other", password_hash)
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_validate_credentials():
    assert validate_credentials("alice", "secret123") == (True, None)

    is_valid, message = validate_credentials("al", "secret123")
    assert not is_valid
    assert "Username" in message

    is_valid, message = validate_credentials("alice", "      ")
    assert not is_valid
    assert message == "Password cannot be blank"
