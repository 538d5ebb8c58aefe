from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_optional_user
from app.core.config import get_settings
from app.core.security import create_access_token, hash_password, verify_password
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import LoginIn, RegisterIn, SessionData, SessionOut, SessionUser, TokenOut

logger = logging.getLogger("datacanvas.auth")

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _issue_session(response: Response, u: User) -> TokenOut:
    token = create_access_token(subject=str(u.id), extra={"email": u.email})
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return TokenOut(access_token=token)


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, response: Response, db: Session = Depends(get_db)):
    email = body.email.lower().strip()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail="Email already registered")

    u = User(name=body.name.strip(), email=email, password_hash=hash_password(body.password))
    db.add(u)
    db.commit()
    db.refresh(u)

    logger.info("User registered: %s", u.id)
    return _issue_session(response, u)


@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, response: Response, db: Session = Depends(get_db)):
    email = body.email.lower().strip()
    u = db.query(User).filter(User.email == email).first()
    if not u or not verify_password(body.password, u.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    return _issue_session(response, u)


@router.post("/logout")
def logout(response: Response) -> dict[str, bool]:
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get("/session", response_model=SessionOut)
def get_session(current_user: User | None = Depends(get_optional_user)) -> SessionOut:
    if current_user is None:
        return SessionOut(data=None)
    return SessionOut(data=SessionData(user=SessionUser.model_validate(current_user)))
