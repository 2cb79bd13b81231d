"""Authentication: register, login, logout, current user, CSRF checks.

Identity lives in the cookie session; bcrypt for password hashing.
"""

import hmac
import logging

import bcrypt
from fastapi import Depends, HTTPException, Request, status

from sprig.config import Settings
from sprig.core.session import SessionManager
from sprig.database import Database
from sprig.dependencies import get_db, get_session, get_settings
from sprig.models.user import User, UserStatus

CSRF_HEADER = "X-CSRF-Token"

logger = logging.getLogger("sprig")


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


async def register_user(
    db: Database, settings: Settings, *, name: str, email: str, password: str
) -> User:
    """Register a new user. Raises HTTPException if email taken."""
    if await User.find_by(db, settings=settings, email=email) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        {"name": name, "email": email, "password_hash": hash_password(password)},
        settings=settings,
    )
    if not await user.insert(db):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not save user",
        )
    logger.info("Registered user %s", user.id)
    return user


async def login_user(
    db: Database, settings: Settings, session: SessionManager, *, email: str, password: str
) -> User:
    """Authenticate and promote the session to the user.

    Raises HTTPException on invalid credentials or inactive account.
    """
    user = await User.find_by(db, settings=settings, email=email)
    if user is None or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if user.status != UserStatus.active.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active",
        )

    session.set(user.id, user.session_payload())
    await user.update(db, {"session_id": session.get_id()})
    return user


async def logout_user(db: Database, session: SessionManager) -> None:
    user = session.get_user()
    if user:
        await db.update(User.__tablename__, {"session_id": None}, {"id": user["id"]})
    session.clear()


async def restore_user(db: Database, settings: Settings, session: SessionManager) -> dict | None:
    """Re-attach the user bound to this session id, refreshing the session cookies."""
    if session.get_user() or not session.get_id():
        return session.get_user()
    user = await User.find_by(db, settings=settings, session_id=session.get_id())
    if user is None or not user.is_active:
        return None
    session.update(user.session_payload())
    return session.get_user()


async def get_current_user(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionManager = Depends(get_session),
) -> dict:
    """FastAPI dependency: the authenticated session's user payload.

    Raises HTTPException 401 for guest sessions.
    """
    user = await restore_user(db, settings, session)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_csrf(request: Request, session: SessionManager = Depends(get_session)) -> None:
    """FastAPI dependency: the CSRF header must match the session's token."""
    expected = session.get_csrf()
    supplied = request.headers.get(CSRF_HEADER)
    if not expected or not supplied or not hmac.compare_digest(expected, supplied):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid CSRF token",
        )
