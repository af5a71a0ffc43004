"""Tests for application-level endpoints and error mapping."""


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["api"] == "/api/v1"


async def test_health_reports_database(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"


async def test_security_headers(client):
    response = await client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Request-ID" in response.headers


async def test_malformed_body_is_400(client):
    response = await client.post("/api/v1/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 400
    assert response.json()["errors"]
