from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import UserOut

router = APIRouter(prefix="/users", tags=["users"])

SEARCH_LIMIT = 10


@router.get("/search", response_model=list[UserOut])
def search_users(
    q: str = Query(default="", max_length=255),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    pattern = f"%{q.strip()}%"
    return (
        db.query(User)
        .filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        .filter(User.id != current_user.id)
        .order_by(User.name)
        .limit(SEARCH_LIMIT)
        .all()
    )
