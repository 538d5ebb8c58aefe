from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.comment import Comment
from app.models.user import User
from app.schemas.comment import CommentCreate, CommentOut
from app.services.dataset_access import get_visible_visualization

logger = logging.getLogger("datacanvas.comments")

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=List[CommentOut])
def list_comments(
    viz_id: Optional[UUID] = Query(default=None, alias="vizId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if viz_id is None:
        raise HTTPException(status_code=400, detail="Missing vizId parameter")
    get_visible_visualization(db, viz_id, current_user.id)
    return (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.viz_id == viz_id)
        .order_by(Comment.created_at.desc())
        .all()
    )


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_visible_visualization(db, payload.viz_id, current_user.id)

    comment = Comment(
        viz_id=payload.viz_id,
        content=payload.content,
        author_id=current_user.id,
        author=current_user,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/{comment_id}", response_model=CommentOut)
def delete_comment(
    comment_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.id == comment_id)
        .first()
    )
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own comments",
        )

    out = CommentOut.model_validate(comment)
    db.delete(comment)
    db.commit()
    logger.info("Comment deleted: id=%s viz=%s", comment_id, out.viz_id)
    return out
