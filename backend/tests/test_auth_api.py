from valet.core.config import settings

from conftest import TEST_PASSWORD


async def test_register_sets_session_cookie(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "email": "New.User@Example.com",
            "password": "long-enough",
            "confirm_password": "long-enough",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "new.user@example.com"
    assert settings.SESSION_COOKIE_NAME in response.cookies
    assert "httponly" in response.headers["set-cookie"].lower()


async def test_register_rejects_mismatched_passwords(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "a@example.com", "password": "long-enough", "confirm_password": "different"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Passwords do not match"


async def test_register_rejects_short_password(client):
    response = await client.post(
        "/api/auth/register",
        json={"email": "a@example.com", "password": "short", "confirm_password": "short"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "password" in body["errors"]


async def test_register_duplicate_email_conflicts(client, user):
    response = await client.post(
        "/api/auth/register",
        json={"email": "ADA@example.com", "password": "long-enough", "confirm_password": "long-enough"},
    )

    assert response.status_code == 409


async def test_login_then_me_then_logout(client, user):
    response = await client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    token = response.cookies[settings.SESSION_COOKIE_NAME]

    client.cookies.clear()
    client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "ada@example.com"
    assert me.json()["last_login_at"] is not None

    logout = await client.post("/api/auth/logout")
    assert logout.status_code == 200

    client.cookies.set(settings.SESSION_COOKIE_NAME, token)
    assert (await client.get("/api/auth/me")).status_code == 401


async def test_login_wrong_password(client, user):
    response = await client.post(
        "/api/auth/login", json={"email": "ada@example.com", "password": "nope-nope"}
    )

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid email or password"}


async def test_me_requires_session(client):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Authentication required"}


async def test_unknown_token_is_rejected(client):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "forged")

    assert (await client.get("/api/auth/me")).status_code == 401


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
