from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from app.schemas.common import CamelModel


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=72)


class LoginIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)


class TokenOut(CamelModel):
    access_token: str
    token_type: str = "bearer"


class SessionUser(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    image: str | None = None


class SessionData(CamelModel):
    user: SessionUser


class SessionOut(CamelModel):
    data: SessionData | None = None
