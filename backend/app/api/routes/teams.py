from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_team_membership, require_team_owner
from app.db.session import get_db
from app.models.user import User
from app.schemas.team import (
    MemberRemovedOut,
    MembersAddedOut,
    TeamCreate,
    TeamDisbandedOut,
    TeamMembersAdd,
    TeamOut,
    UserTeamsOut,
)
from app.services import team_service
from app.services.team_access import TeamAccess

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(
    payload: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TeamOut:
    team = team_service.create_team(
        db,
        current_user,
        name=payload.name,
        description=payload.description,
        member_ids=payload.member_ids,
    )
    return team_service.team_out(team)


@router.get("/me", response_model=UserTeamsOut)
def list_my_teams(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserTeamsOut:
    return UserTeamsOut(teams=team_service.list_user_teams(db, current_user.id))


@router.get("/{team_id}", response_model=TeamOut)
def get_team(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    access: TeamAccess = Depends(require_team_membership),
) -> TeamOut:
    team = team_service.get_team(db, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team_service.team_out(team)


@router.post("/{team_id}/members", response_model=MembersAddedOut)
def add_members(
    team_id: uuid.UUID,
    payload: TeamMembersAdd,
    db: Session = Depends(get_db),
    access: TeamAccess = Depends(require_team_owner),
) -> MembersAddedOut:
    result = team_service.add_members(db, team_id, payload.entries())
    return MembersAddedOut(
        added=[team_service.member_out(m) for m in result.added],
        skipped=result.skipped,
    )


@router.delete("/{team_id}/members/{user_id}", response_model=MemberRemovedOut)
def remove_member(
    team_id: uuid.UUID,
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    access: TeamAccess = Depends(require_team_owner),
) -> MemberRemovedOut:
    team_service.remove_member(db, team_id, access.user_id, user_id)
    return MemberRemovedOut(team_id=team_id, user_id=user_id)


@router.delete("/{team_id}", response_model=TeamDisbandedOut)
def disband_team(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    access: TeamAccess = Depends(require_team_owner),
) -> TeamDisbandedOut:
    changed = team_service.disband_team(db, team_id)
    return TeamDisbandedOut(id=team_id, datasets_made_private=changed)
