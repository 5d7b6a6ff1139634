import base64
import json
import re
import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from auth_portal.auth_portal.auth_service.auth import create_access_token, verify_access_token
from auth_portal.auth_portal.auth_service.config import Settings
from auth_portal.auth_portal.auth_service.main import create_app
from auth_portal.auth_portal.auth_service.models import User
from auth_portal.auth_portal.auth_service.routes import auth as auth_routes
from auth_portal.auth_portal.auth_service import service as service_module

TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
PUBLIC_FIELDS = {"id", "name", "email", "role", "createdAt", "updatedAt"}


def new_user_data(password="testing12345"):
    unique = uuid.uuid4().hex[:8]
    return {"name": f"User {unique}", "email": f"user_{unique}@example.com", "password": password}


def register(client, data):
    return client.post("/auth/register", json=data)


def login(client, data):
    return client.post("/auth/login", json={"email": data["email"], "password": data["password"]})


def test_register_returns_public_user(client):
    data = new_user_data()
    resp = register(client, data)
    assert resp.status_code == 201

    body = resp.json()
    assert body["message"] == "user created"
    user = body["user"]
    assert set(user) == PUBLIC_FIELDS
    assert user["name"] == data["name"]
    assert user["email"] == data["email"]
    assert user["role"] == "USER"
    assert TIMESTAMP.match(user["createdAt"])
    assert TIMESTAMP.match(user["updatedAt"])
    assert "password" not in resp.text.lower()


def test_register_duplicate_email_is_rejected(client, app):
    data = new_user_data()
    first = register(client, data)
    assert first.status_code == 201

    second = register(client, {**data, "name": "Someone Else", "password": "different1"})
    assert second.status_code == 400
    assert second.json() == {"message": "email already in use"}

    # First record is untouched
    with app.state.database.SessionLocal() as db:
        users = db.query(User).filter(User.email == data["email"]).all()
        assert len(users) == 1
        assert users[0].name == data["name"]
        assert users[0].id == first.json()["user"]["id"]

    assert login(client, data).status_code == 200


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "", "email": "a@example.com", "password": "secret1"},
        {"name": "A", "email": "not-an-email", "password": "secret1"},
        {"name": "A", "email": "a@example.com", "password": "short"},
        {"email": "a@example.com", "password": "secret1"},
    ],
)
def test_register_validation_errors_are_400(client, payload):
    resp = register(client, payload)
    assert resp.status_code == 400
    assert isinstance(resp.json()["message"], str)
    assert resp.json()["message"]


def test_register_unexpected_failure_is_400_with_message(client, monkeypatch):
    def broken_hash(_password):
        raise RuntimeError("hasher unavailable")

    monkeypatch.setattr(service_module, "hash_password", broken_hash)
    resp = register(client, new_user_data())
    assert resp.status_code == 400
    assert resp.json() == {"message": "hasher unavailable"}


def test_login_sets_verifiable_cookie(client, settings):
    data = new_user_data()
    user_id = register(client, data).json()["user"]["id"]

    resp = login(client, data)
    assert resp.status_code == 200
    assert resp.json()["message"] == "login successful"
    assert resp.json()["user"]["id"] == user_id

    token = resp.cookies.get("auth")
    assert token
    claims = verify_access_token(token, settings.JWT_SECRET)
    assert claims is not None
    assert claims.sub == user_id
    assert claims.role == "USER"


def test_login_cookie_attributes(client):
    data = new_user_data()
    register(client, data)

    set_cookie = login(client, data).headers["set-cookie"]
    assert set_cookie.startswith("auth=")
    assert "HttpOnly" in set_cookie
    assert "Path=/" in set_cookie
    assert "Max-Age=604800" in set_cookie
    assert "samesite=lax" in set_cookie.lower()
    assert "Secure" not in set_cookie


def test_login_cookie_is_secure_in_production(tmp_path):
    settings = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'prod.db'}",
        JWT_SECRET="production-secret-0123456789abcdefghij",
        ENVIRONMENT="production",
    )
    with TestClient(create_app(settings)) as client:
        data = new_user_data()
        register(client, data)
        resp = login(client, data)
        assert resp.status_code == 200
        assert "Secure" in resp.headers["set-cookie"]


def test_login_failures_share_one_message(client):
    data = new_user_data()
    register(client, data)

    wrong_password = client.post("/auth/login", json={"email": data["email"], "password": "wrongpassword"})
    unknown_email = client.post("/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == {"message": "invalid email or password"}
    assert unknown_email.json() == wrong_password.json()
    assert "auth" not in wrong_password.cookies


def test_login_rejects_malformed_email_before_lookup(client):
    resp = client.post("/auth/login", json={"email": "nope", "password": "whatever1"})
    assert resp.status_code == 400


def test_profile_requires_cookie(client):
    resp = client.get("/auth/profile")
    assert resp.status_code == 401
    assert resp.json() == {"message": "unauthorized"}


def test_profile_returns_same_user_as_login(client):
    data = new_user_data()
    register(client, data)
    login_user = login(client, data).json()["user"]

    resp = client.get("/auth/profile")
    assert resp.status_code == 200
    assert resp.json()["message"] == "profile retrieved"
    assert resp.json()["user"] == login_user


def test_profile_rejects_expired_token(client, settings):
    data = new_user_data()
    user_id = register(client, data).json()["user"]["id"]
    token = create_access_token(user_id, "USER", settings.JWT_SECRET, ttl=timedelta(seconds=-10))

    resp = client.get("/auth/profile", headers={"Cookie": f"auth={token}"})
    assert resp.status_code == 401


def test_profile_rejects_foreign_and_tampered_tokens(client, settings):
    data = new_user_data()
    user_id = register(client, data).json()["user"]["id"]

    foreign = create_access_token(user_id, "USER", "some-other-secret-0123456789abcdefghij")
    resp = client.get("/auth/profile", headers={"Cookie": f"auth={foreign}"})
    assert resp.status_code == 401

    genuine = create_access_token(user_id, "USER", settings.JWT_SECRET)
    header, _payload, signature = genuine.split(".")
    forged_claims = json.dumps({"sub": "someone-else", "role": "ADMIN", "exp": 9999999999}).encode()
    forged_payload = base64.urlsafe_b64encode(forged_claims).rstrip(b"=").decode()
    tampered = ".".join([header, forged_payload, signature])
    resp = client.get("/auth/profile", headers={"Cookie": f"auth={tampered}"})
    assert resp.status_code == 401


def test_profile_for_deleted_user_is_404(client, app):
    data = new_user_data()
    user_id = register(client, data).json()["user"]["id"]
    assert login(client, data).status_code == 200

    with app.state.database.SessionLocal() as db:
        db.query(User).filter(User.id == user_id).delete()
        db.commit()

    resp = client.get("/auth/profile")
    assert resp.status_code == 404
    assert resp.json() == {"message": "user not found"}


def test_profile_verification_failure_is_400(client, monkeypatch):
    def broken_verify(_token, _secret):
        raise RuntimeError("verifier crashed")

    monkeypatch.setattr(auth_routes, "verify_access_token", broken_verify)
    resp = client.get("/auth/profile", headers={"Cookie": "auth=anything"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "invalid token"}


def test_logout_without_cookie_succeeds(client):
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "logged out"}


def test_logout_clears_cookie(client):
    data = new_user_data()
    register(client, data)
    login(client, data)
    assert client.get("/auth/profile").status_code == 200

    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "logged out"}
    assert "auth=" in resp.headers["set-cookie"]
    assert "Max-Age=0" in resp.headers["set-cookie"]

    assert client.get("/auth/profile").status_code == 401
