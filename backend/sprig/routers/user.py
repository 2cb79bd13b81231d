"""User routes: register, read, update, delete."""

from fastapi import APIRouter, Depends, HTTPException, status

from sprig.config import Settings
from sprig.core.auth import get_current_user, register_user, require_csrf
from sprig.core.session import SessionManager
from sprig.core.timefmt import utc_now
from sprig.database import Database
from sprig.dependencies import get_db, get_session, get_settings
from sprig.models.user import User
from sprig.schemas.user import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
async def register(
    body: UserCreate,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await register_user(db, settings, name=body.name, email=body.email, password=body.password)


@router.get("/{user_id}", response_model=UserRead)
async def read_user(
    user_id: str,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return await User.load(db, user_id, settings=settings)


@router.patch("/{user_id}", response_model=UserRead, dependencies=[Depends(require_csrf)])
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(get_current_user),
):
    if current_user["id"] != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your account")
    user = await User.load(db, user_id, settings=settings)
    patch = body.model_dump(exclude_none=True, mode="json")
    if patch:
        patch["updated_at"] = utc_now()
    if patch and not await user.update(db, patch):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not save user")
    return await User.load(db, user_id, settings=settings)


@router.delete("/{user_id}", status_code=204, dependencies=[Depends(require_csrf)])
async def delete_user(
    user_id: str,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    session: SessionManager = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if current_user["id"] != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your account")
    user = await User.load(db, user_id, settings=settings)
    await user.delete(db)
    session.clear()
