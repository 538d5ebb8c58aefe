from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.user import UserOut


class CommentCreate(CamelModel):
    viz_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=2000)


class CommentOut(CamelModel):
    id: uuid.UUID
    content: str
    author_id: uuid.UUID
    viz_id: uuid.UUID
    created_at: datetime
    author: UserOut | None = None
