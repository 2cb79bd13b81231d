import pytest
from httpx import ASGITransport, AsyncClient

from sprig.main import create_app


@pytest.mark.asyncio
async def test_request_id_in_response(client: AsyncClient):
    """All responses include X-Request-ID header."""
    response = await client.get("/health")
    assert response.status_code == 200
    # UUID format: 8-4-4-4-12
    assert len(response.headers["X-Request-ID"]) == 36


@pytest.mark.asyncio
async def test_404_returns_structured_json(client: AsyncClient):
    """Non-existent endpoint returns structured JSON error with request_id."""
    response = await client.get("/nonexistent")
    assert response.status_code == 404
    data = response.json()
    assert data["error"] is True
    assert data["status_code"] == 404
    assert "request_id" in data


@pytest.mark.asyncio
async def test_first_request_gets_guest_cookie(client: AsyncClient):
    response = await client.get("/health")
    cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sid=") for c in cookies)
    assert not any(c.startswith("sid_active=") for c in cookies)


@pytest.mark.asyncio
async def test_expired_session_redirects_to_login(client: AsyncClient):
    response = await client.get("/health", headers={"Cookie": "sid_active=1"})

    assert response.status_code == 302
    assert response.headers["location"] == "/login"
    assert "X-Request-ID" in response.headers
    cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("alerts=") for c in cookies)
    assert any(c.startswith("sid_active=") for c in cookies)


@pytest.mark.asyncio
async def test_expired_session_on_login_page_continues_as_guest(client: AsyncClient):
    response = await client.get("/login", headers={"Cookie": "sid_active=1"})

    assert response.status_code == 404
    cookies = response.headers.get_list("set-cookie")
    guest = next(c for c in cookies if c.startswith("sid="))
    assert not guest.startswith("sid=;")


@pytest.mark.asyncio
async def test_config_missing_in_route_returns_500(db, make_settings):
    app = create_app(make_settings(auth_key=None), db=db)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as c:
        response = await c.get("/auth/session", headers={"Cookie": "sid=abc"})
    assert response.status_code == 500
    assert "AUTH_KEY is not defined" in response.json()["detail"]


@pytest.mark.asyncio
async def test_config_missing_in_session_setup_names_the_setting(db, make_settings, caplog):
    app = create_app(make_settings(session_cookie_name=None), db=db)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as c:
        response = await c.get("/health")

    assert response.status_code == 500
    data = response.json()
    assert data["detail"] == "SESSION_COOKIE_NAME is not defined."
    assert data["request_id"] == response.headers["X-Request-ID"]
    assert "Missing configuration: session_cookie_name" in caplog.text


@pytest.mark.asyncio
async def test_unhandled_error_keeps_session_cookies(db, settings):
    app = create_app(settings, db=db)

    @app.get("/explode")
    async def explode():
        raise RuntimeError("kaboom")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as c:
        response = await c.get("/explode")

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"
    cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sid=") for c in cookies)


def test_placeholder_auth_key_rejected_in_production(make_settings):
    with pytest.raises(RuntimeError):
        create_app(make_settings(auth_key="__AUTH_KEY__", app_env="production"))


def test_placeholder_auth_key_warns_in_development(make_settings):
    with pytest.warns(UserWarning):
        create_app(make_settings(auth_key="__AUTH_KEY__"))
