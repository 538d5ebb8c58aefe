from __future__ import annotations

import uuid

from app.schemas.common import CamelModel


class UserOut(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    image: str | None = None
