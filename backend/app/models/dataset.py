from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.models.enums import Visibility


def _utcnow():
    return datetime.now(timezone.utc)


class Dataset(Base):
    __tablename__ = "datasets"
    __table_args__ = (
        CheckConstraint(
            "(visibility = 'TEAM') = (team_id IS NOT NULL)",
            name="ck_datasets_team_visibility",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)

    file_name = Column(String(255), nullable=False)
    file_url = Column(String(2000), nullable=False)

    owner_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # TEAM datasets must reference a team; PRIVATE and PUBLIC ones never do
    visibility = Column(
        Enum(Visibility, name="dataset_visibility"),
        nullable=False,
        default=Visibility.PRIVATE,
    )
    team_id = Column(
        UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Relationships
    owner = relationship("User", back_populates="datasets")
    team = relationship("Team", back_populates="datasets")
    visualizations = relationship(
        "Visualization",
        back_populates="dataset",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
