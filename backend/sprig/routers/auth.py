"""Auth routes: login, logout, current session."""

from fastapi import APIRouter, Depends

from sprig.config import Settings
from sprig.core.auth import login_user, logout_user, require_csrf, restore_user
from sprig.core.session import SessionManager
from sprig.database import Database
from sprig.dependencies import get_db, get_session, get_settings
from sprig.schemas.user import SessionRead, UserLogin

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SessionRead)
async def login(
    body: UserLogin,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionManager = Depends(get_session),
):
    await login_user(db, settings, session, email=body.email, password=body.password)
    return SessionRead(authenticated=True, user=session.get_user(), csrf=session.get_csrf())


@router.get("/session", response_model=SessionRead)
async def current_session(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionManager = Depends(get_session),
):
    user = await restore_user(db, settings, session)
    return SessionRead(authenticated=bool(user), user=user, csrf=session.get_csrf())


@router.post("/logout", status_code=204, dependencies=[Depends(require_csrf)])
async def logout(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionManager = Depends(get_session),
):
    await restore_user(db, settings, session)
    await logout_user(db, session)
