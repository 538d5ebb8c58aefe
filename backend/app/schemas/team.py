from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field, field_validator, model_validator

from app.models.enums import TeamRole
from app.schemas.common import CamelModel


class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    member_ids: list[uuid.UUID] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Team name is required")
        return v


class MemberAdd(CamelModel):
    user_id: uuid.UUID
    role: TeamRole = TeamRole.MEMBER


class TeamMembersAdd(CamelModel):
    """Either a single ``{userId, role?}`` or a batch ``{members: [...]}``."""

    user_id: uuid.UUID | None = None
    role: TeamRole = TeamRole.MEMBER
    members: list[MemberAdd] | None = None

    @model_validator(mode="after")
    def _one_form(self) -> "TeamMembersAdd":
        if (self.user_id is None) == (self.members is None):
            raise ValueError("Provide either userId or members")
        if self.members is not None and not self.members:
            raise ValueError("members must not be empty")
        return self

    def entries(self) -> list[MemberAdd]:
        if self.members is not None:
            return list(self.members)
        return [MemberAdd(user_id=self.user_id, role=self.role)]


class TeamMemberOut(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    image: str | None = None
    role: TeamRole
    joined_at: datetime


class TeamOut(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_at: datetime
    members: list[TeamMemberOut] = Field(default_factory=list)


class TeamSummaryOut(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    role: TeamRole
    member_count: int
    created_at: datetime


class UserTeamsOut(CamelModel):
    teams: list[TeamSummaryOut]


class MembersAddedOut(CamelModel):
    added: list[TeamMemberOut]
    skipped: list[uuid.UUID]


class MemberRemovedOut(CamelModel):
    team_id: uuid.UUID
    user_id: uuid.UUID


class TeamDisbandedOut(CamelModel):
    id: uuid.UUID
    datasets_made_private: int
