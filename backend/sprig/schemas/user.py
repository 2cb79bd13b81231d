from pydantic import BaseModel, Field

from sprig.models.user import UserStatus


class UserCreate(BaseModel):
    name: str = Field("", max_length=120)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)


class UserLogin(BaseModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class UserUpdate(BaseModel):
    name: str | None = Field(None, max_length=120)
    bio: str | None = None
    status: UserStatus | None = None


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    status: str
    bio: str
    created_at: str
    created_at_formatted: str
    created_at_local: str
    updated_at: str
    updated_at_formatted: str
    updated_at_local: str

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    authenticated: bool
    user: dict | None = None
    csrf: str | None = None
