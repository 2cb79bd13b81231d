import pytest
from httpx import AsyncClient

PASSWORD = "SecurePass123!"


async def _register(client: AsyncClient, email: str = "login@example.com") -> dict:
    response = await client.post("/users", json={"name": "Lo", "email": email, "password": PASSWORD})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_guest_session(client: AsyncClient):
    response = await client.get("/auth/session")
    assert response.status_code == 200
    data = response.json()
    assert data["authenticated"] is False
    assert data["user"] is None
    assert len(data["csrf"]) == 64
    assert client.cookies.get("sid")
    assert client.cookies.get("sid_active") is None


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient):
    user = await _register(client)
    response = await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert data["authenticated"] is True
    assert data["user"] == {"id": user["id"], "name": "Lo", "email": "login@example.com"}
    assert client.cookies.get("sid_active") == "1"


@pytest.mark.asyncio
async def test_login_rotates_session_id(client: AsyncClient):
    await _register(client)
    guest = (await client.get("/auth/session")).json()["csrf"]
    await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})
    authenticated = (await client.get("/auth/session")).json()["csrf"]
    assert guest != authenticated


@pytest.mark.asyncio
async def test_session_restored_on_next_request(client: AsyncClient):
    user = await _register(client)
    await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})

    response = await client.get("/auth/session")
    data = response.json()
    assert data["authenticated"] is True
    assert data["user"]["id"] == user["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient):
    await _register(client)
    response = await client.post("/auth/login", json={"email": "login@example.com", "password": "WrongPass!"})
    assert response.status_code == 401
    assert client.cookies.get("sid_active") is None


@pytest.mark.asyncio
async def test_login_nonexistent_user(client: AsyncClient):
    response = await client.post("/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, db):
    user = await _register(client)
    await db.update("users", {"status": "suspended"}, {"id": user["id"]})
    response = await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_logout_requires_csrf(client: AsyncClient):
    await _register(client)
    await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})

    response = await client.post("/auth/logout")
    assert response.status_code == 403
    response = await client.post("/auth/logout", headers={"X-CSRF-Token": "0" * 64})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_logout_clears_session(client: AsyncClient, db):
    user = await _register(client)
    login = await client.post("/auth/login", json={"email": "login@example.com", "password": PASSWORD})
    csrf = login.json()["csrf"]

    response = await client.post("/auth/logout", headers={"X-CSRF-Token": csrf})
    assert response.status_code == 204
    assert client.cookies.get("sid_active") is None
    assert (await db.get("users", ["session_id"], {"id": user["id"]}))["session_id"] is None

    data = (await client.get("/auth/session")).json()
    assert data["authenticated"] is False
