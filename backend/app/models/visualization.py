from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from app.db.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Visualization(Base):
    __tablename__ = "visualizations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    dataset_id = Column(
        UUID(as_uuid=True),
        ForeignKey("datasets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)

    # e.g. bar, line, pie, scatter
    type = Column(String(64), nullable=False)

    # Chart config as sent by the client, stored as-is
    config = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    dataset = relationship("Dataset", back_populates="visualizations")
    comments = relationship(
        "Comment",
        back_populates="visualization",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
