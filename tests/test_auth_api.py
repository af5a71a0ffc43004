"""HTTP tests for authentication and password reset."""

from datetime import UTC, datetime, timedelta

from app.core.security import hash_reset_token
from app.services.notification_service import notification_service

API = "/api/v1/auth"
PASSWORD = "Password123"


async def test_register(client):
    response = await client.post(
        f"{API}/register",
        json={"username": "Sara", "email": "Sara@Example.com", "password": PASSWORD},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "sara@example.com"
    assert body["user"]["role"] == "user"

    me = await client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "Sara"


async def test_register_duplicate_email(client, user):
    response = await client.post(
        f"{API}/register",
        json={"username": "Again", "email": "TRAVELER@example.com", "password": PASSWORD},
    )

    assert response.status_code == 409


async def test_register_weak_password(client):
    response = await client.post(
        f"{API}/register",
        json={"username": "Weak", "email": "weak@example.com", "password": "short"},
    )

    assert response.status_code == 400


async def test_login(client, user):
    response = await client.post(f"{API}/login", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(user.id)


async def test_login_bad_credentials(client, user):
    wrong_password = await client.post(f"{API}/login", json={"email": user.email, "password": "Wrong12345"})
    unknown = await client.post(f"{API}/login", json={"email": "nobody@example.com", "password": PASSWORD})

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401


async def test_login_suspended(client, create_user):
    await create_user("blocked@example.com", is_suspended=True)

    response = await client.post(f"{API}/login", json={"email": "blocked@example.com", "password": PASSWORD})

    assert response.status_code == 403


async def test_me_requires_valid_token(client):
    assert (await client.get(f"{API}/me")).status_code == 401
    assert (await client.get(f"{API}/me", headers={"Authorization": "Bearer garbage"})).status_code == 401


async def test_forgot_password_unknown_email(client):
    response = await client.post(f"{API}/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 202


async def test_password_reset_flow(client, db, user, monkeypatch):
    sent = {}

    async def capture(to_email, reset_url):
        sent["to"] = to_email
        sent["url"] = reset_url
        return True

    monkeypatch.setattr(notification_service, "send_password_reset", capture)

    response = await client.post(f"{API}/forgot-password", json={"email": user.email})
    assert response.status_code == 202
    assert sent["to"] == user.email

    token = sent["url"].rsplit("/", 1)[-1]
    await db.refresh(user)
    assert user.reset_password_token == hash_reset_token(token)

    reset = await client.put(f"{API}/reset-password/{token}", json={"password": "NewPassword1"})
    assert reset.status_code == 200
    assert reset.json()["access_token"]

    login = await client.post(f"{API}/login", json={"email": user.email, "password": "NewPassword1"})
    assert login.status_code == 200

    reused = await client.put(f"{API}/reset-password/{token}", json={"password": "OtherPassword1"})
    assert reused.status_code == 400


async def test_expired_reset_token(client, db, user):
    user.reset_password_token = hash_reset_token("expired-token")
    user.reset_password_expires_at = datetime.now(UTC) - timedelta(minutes=1)
    await db.commit()

    response = await client.put(f"{API}/reset-password/expired-token", json={"password": "NewPassword1"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"
