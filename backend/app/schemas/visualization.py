from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel


class VisualizationCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    type: str = Field(..., min_length=1, max_length=64)
    config: dict[str, Any]
    dataset_id: uuid.UUID


class VisualizationUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    type: str | None = Field(None, min_length=1, max_length=64)
    config: dict[str, Any] | None = None


class VisualizationOut(CamelModel):
    id: uuid.UUID
    dataset_id: uuid.UUID
    title: str
    description: str | None
    type: str
    config: dict[str, Any]
    created_at: datetime
    updated_at: datetime
