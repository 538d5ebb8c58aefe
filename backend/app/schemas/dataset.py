from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.models.enums import Visibility
from app.schemas.common import CamelModel


class DatasetCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_url: str = Field(..., min_length=1, max_length=2000)
    owner_id: uuid.UUID | None = None
    visibility: Visibility = Visibility.PRIVATE
    team_id: uuid.UUID | None = None


class DatasetUpdate(CamelModel):
    """Only these fields may be changed after upload."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    visibility: Visibility | None = None
    team_id: uuid.UUID | None = None


class DatasetListOut(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_at: datetime
    team: str | None
    visibility: Visibility
    visualization_count: int
    owner: str
    file_name: str


class DatasetOut(DatasetListOut):
    owner_id: uuid.UUID
    team_id: uuid.UUID | None
    file_url: str
