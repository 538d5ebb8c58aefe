from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.enums import TeamRole
from app.models.team import TeamMember
from app.models.user import User

logger = logging.getLogger("datacanvas.access")

NOT_A_MEMBER = "You do not have access to this team"
NOT_THE_OWNER = "Only the team owner can perform this action"


@dataclass(frozen=True)
class TeamAccess:
    """Outcome of a successful team check: the caller and their membership row."""

    user: User
    member: TeamMember

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def role(self) -> TeamRole:
        return self.member.role


def get_membership(db: Session, team_id, user_id) -> TeamMember | None:
    return (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        .first()
    )


def is_team_member(db: Session, team_id, user_id) -> bool:
    if team_id is None or user_id is None:
        return False
    return get_membership(db, team_id, user_id) is not None


def require_team_membership(db: Session, user: User, team_id) -> TeamAccess:
    # An unknown team and a team the caller is not in look the same: 403.
    member = get_membership(db, team_id, user.id)
    if member is None:
        logger.debug("Membership denied: user=%s team=%s", user.id, team_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_A_MEMBER)
    return TeamAccess(user=user, member=member)


def require_team_role(db: Session, user: User, team_id, required: TeamRole) -> TeamAccess:
    access = require_team_membership(db, user, team_id)
    if not access.role.at_least(required):
        logger.debug(
            "Role check denied: user=%s team=%s role=%s required=%s",
            user.id,
            team_id,
            access.role.value,
            required.value,
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_THE_OWNER)
    return access


def require_team_owner(db: Session, user: User, team_id) -> TeamAccess:
    return require_team_role(db, user, team_id, TeamRole.OWNER)
