import pytest

from sprig.database import Database
from sprig.models.user import User, UserStatus


@pytest.mark.asyncio
async def test_create_and_read_user(db: Database, settings):
    """Round-trip: create user -> read user -> fields match."""
    user = User({"name": "Test", "email": "test@example.com", "password_hash": "fakehash123"}, settings=settings)
    assert await user.insert(db) is True

    fetched = await User.load(db, user.id, settings=settings)
    assert fetched.email == "test@example.com"
    assert fetched.password_hash == "fakehash123"
    assert fetched.status == UserStatus.active.value
    assert fetched.bio == ""
    assert fetched.created_at
    assert fetched.updated_at
    assert fetched.created_at_local


@pytest.mark.asyncio
async def test_user_unique_email(db: Database):
    assert await User({"email": "dup@example.com", "password_hash": "h1"}).insert(db) is True
    assert await User({"email": "dup@example.com", "password_hash": "h2"}).insert(db) is False


@pytest.mark.asyncio
async def test_find_by(db: Database):
    user = User({"email": "find@example.com", "password_hash": "h"})
    await user.insert(db)

    found = await User.find_by(db, email="find@example.com")
    assert found is not None
    assert found.id == user.id
    assert await User.find_by(db, email="nobody@example.com") is None


@pytest.mark.asyncio
async def test_find_by_renders_with_given_settings(db: Database, make_settings):
    await User({"email": "fmt@example.com", "password_hash": "h"}).insert(db)
    settings = make_settings(datetime_format="%Y", datetime_offset=None)

    found = await User.find_by(db, settings=settings, email="fmt@example.com")
    assert found.created_at_formatted == found.created_at[:4]
    assert found.created_at_local == ""


def test_session_payload():
    user = User({"id": "u-1", "name": "Ann", "email": "ann@example.com", "password_hash": "h"})
    assert user.session_payload() == {"id": "u-1", "name": "Ann", "email": "ann@example.com"}
    assert user.is_active
    assert not User({"status": "suspended"}).is_active
