from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import resolve_session
from app.db.session import get_db
from app.models.user import User
from app.services import team_access
from app.services.team_access import TeamAccess

settings = get_settings()
security = HTTPBearer(auto_error=False)


def session_token(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Bearer header wins over the session cookie."""
    if creds is not None and creds.credentials:
        return creds.credentials
    return request.cookies.get(settings.session_cookie_name)


def get_optional_user(
    token: str | None = Depends(session_token),
    db: Session = Depends(get_db),
) -> User | None:
    user_id = resolve_session(token)
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    token: str | None = Depends(session_token),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    user_id = resolve_session(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )

    u = db.query(User).filter(User.id == user_id).first()
    if not u:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )

    return u


def require_team_membership(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TeamAccess:
    return team_access.require_team_membership(db, current_user, team_id)


def require_team_owner(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TeamAccess:
    return team_access.require_team_owner(db, current_user, team_id)
