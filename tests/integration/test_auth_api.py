from datetime import timedelta

import pytest

from utils.jwt_utils import JWTManager


async def _login(client, username, password):
    return await client.post("/api/v1/auth/login", json={"username": username, "password": password})


async def _token_for(client, make_user, username, role):
    await make_user(username, f"{username}@x.com", "secret123", role=role)
    response = await _login(client, username, "secret123")
    return response.json()["token"]


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_login_success_returns_token_and_public_user(client, make_user):
    await make_user("bob", "bob@x.com", "secret123")

    response = await _login(client, "bob", "secret123")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["username"] == "bob"
    assert "hashed_password" not in body["user"]
    assert JWTManager.extract_user_context(body["token"])["role"] == "agent"


@pytest.mark.asyncio
async def test_login_failures_are_byte_identical(client, make_user):
    await make_user("bob", "bob@x.com", "secret123")

    wrong_password = await _login(client, "bob", "wrong-password")
    unknown_user = await _login(client, "nobody", "wrong-password")

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json()["message"] == "Invalid credentials"
    assert wrong_password.json()["success"] is False
    assert wrong_password.content == unknown_user.content


@pytest.mark.asyncio
async def test_forgot_password_responses_do_not_enumerate(client, make_user, fake_dispatcher):
    await make_user("bob", "bob@x.com", "secret123")

    known = await client.post("/api/v1/auth/forgot-password", json={"identifier": "bob"})
    unknown = await client.post("/api/v1/auth/forgot-password", json={"identifier": "no-such-user"})

    assert known.status_code == unknown.status_code == 200
    assert known.content == unknown.content
    assert len(fake_dispatcher.sent) == 1


@pytest.mark.asyncio
async def test_reset_flow_over_http(client, make_user, fake_dispatcher):
    await make_user("bob", "bob@x.com", "secret123")
    await client.post("/api/v1/auth/forgot-password", json={"identifier": "bob@x.com"})
    token = fake_dispatcher.last_token

    probe = await client.get(f"/api/v1/auth/validate-reset-token/{token}")
    assert probe.status_code == 200
    assert probe.json() == {"valid": True, "message": None}

    short = await client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "short"})
    assert short.status_code == 400
    assert short.json()["success"] is False

    reset = await client.post("/api/v1/auth/reset-password", json={"token": token, "newPassword": "newsecret1"})
    assert reset.status_code == 200
    assert reset.json()["success"] is True

    reused = await client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "newsecret2"})
    assert reused.status_code == 400
    assert reused.json()["message"] == "Invalid or expired token"

    spent_probe = await client.get(f"/api/v1/auth/validate-reset-token/{token}")
    assert spent_probe.status_code == 400
    assert spent_probe.json() == {"valid": False, "message": "Invalid or expired token"}

    assert (await _login(client, "bob", "secret123")).status_code == 401
    assert (await _login(client, "bob", "newsecret1")).status_code == 200


@pytest.mark.asyncio
async def test_missing_invalid_and_expired_tokens(client, make_user):
    missing = await client.get("/api/v1/auth/me")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Authentication required"
    assert missing.headers["WWW-Authenticate"] == "Bearer"

    invalid = await client.get("/api/v1/auth/me", headers=_auth("garbage"))
    assert invalid.status_code == 401
    assert invalid.json()["message"] == "Invalid token"

    expired_token = JWTManager.encode_token(
        JWTManager.create_token_payload({"id": 1, "username": "bob", "email": "bob@x.com", "role": "agent"}),
        expires_delta=timedelta(seconds=-5),
    )
    expired = await client.get("/api/v1/auth/me", headers=_auth(expired_token))
    assert expired.status_code == 401
    assert expired.json()["message"] == "Token expired"


@pytest.mark.asyncio
async def test_agent_role_gate(client, make_user):
    token = await _token_for(client, make_user, "bob", "agent")

    me = await client.get("/api/v1/auth/me", headers=_auth(token))
    assert me.status_code == 200
    assert me.json()["user"]["role"] == "agent"

    forbidden = await client.post(
        "/api/v1/users",
        headers=_auth(token),
        json={"username": "eve", "email": "eve@x.com", "password": "secret123"},
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "Insufficient permissions"

    logout = await client.post("/api/v1/auth/logout", headers=_auth(token))
    assert logout.status_code == 200
    assert logout.json()["success"] is True


@pytest.mark.asyncio
async def test_admin_manages_users(client, make_user):
    admin_token = await _token_for(client, make_user, "root", "admin")

    created = await client.post(
        "/api/v1/users",
        headers=_auth(admin_token),
        json={"username": "bob", "email": "bob@x.com", "password": "secret123", "role": "agent"},
    )
    assert created.status_code == 201
    bob_id = created.json()["data"]["id"]

    duplicate = await client.post(
        "/api/v1/users",
        headers=_auth(admin_token),
        json={"username": "bob", "email": "other@x.com", "password": "secret123"},
    )
    assert duplicate.status_code == 409

    listing = await client.get("/api/v1/users?page=1&limit=10", headers=_auth(admin_token))
    assert listing.status_code == 200
    assert listing.json()["pagination"]["total"] == 2

    updated = await client.put(f"/api/v1/users/{bob_id}", headers=_auth(admin_token), json={"role": "manager"})
    assert updated.status_code == 200
    assert updated.json()["data"]["role"] == "manager"

    deleted = await client.delete(f"/api/v1/users/{bob_id}", headers=_auth(admin_token))
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/users/{bob_id}", headers=_auth(admin_token))).status_code == 404


@pytest.mark.asyncio
async def test_manager_can_list_but_not_delete(client, make_user):
    manager_token = await _token_for(client, make_user, "mia", "manager")
    bob = await make_user("bob", "bob@x.com", "secret123")

    assert (await client.get("/api/v1/users", headers=_auth(manager_token))).status_code == 200
    assert (await client.get(f"/api/v1/users/{bob.id}", headers=_auth(manager_token))).status_code == 200
    assert (await client.delete(f"/api/v1/users/{bob.id}", headers=_auth(manager_token))).status_code == 403


@pytest.mark.asyncio
async def test_request_validation_envelope(client):
    response = await client.post("/api/v1/auth/login", json={"username": "bob"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["path"] == "/api/v1/auth/login"


@pytest.mark.asyncio
async def test_liveness_probe(client):
    response = await client.get("/api/v1/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"
