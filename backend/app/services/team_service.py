from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.models.dataset import Dataset
from app.models.enums import TeamRole, Visibility
from app.models.team import Team, TeamMember
from app.models.user import User
from app.schemas.team import MemberAdd, TeamMemberOut, TeamOut, TeamSummaryOut

logger = logging.getLogger("datacanvas.teams")


@dataclass
class AddMembersResult:
    added: list[TeamMember] = field(default_factory=list)
    skipped: list[uuid.UUID] = field(default_factory=list)


def member_out(member: TeamMember) -> TeamMemberOut:
    u = member.user
    return TeamMemberOut(
        id=u.id,
        name=u.name,
        email=u.email,
        image=u.image,
        role=member.role,
        joined_at=member.joined_at,
    )


def team_out(team: Team) -> TeamOut:
    return TeamOut(
        id=team.id,
        name=team.name,
        description=team.description,
        created_at=team.created_at,
        members=[member_out(m) for m in team.members],
    )


def _ensure_users_exist(db: Session, user_ids: Iterable[uuid.UUID]) -> None:
    wanted = set(user_ids)
    if not wanted:
        return
    found = {row[0] for row in db.query(User.id).filter(User.id.in_(wanted)).all()}
    missing = wanted - found
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found: {sorted(str(m) for m in missing)[0]}",
        )


def get_team(db: Session, team_id) -> Team | None:
    return (
        db.query(Team)
        .options(joinedload(Team.members).joinedload(TeamMember.user))
        .filter(Team.id == team_id)
        .first()
    )


def create_team(
    db: Session,
    creator: User,
    name: str,
    description: str | None = None,
    member_ids: Iterable[uuid.UUID] = (),
) -> Team:
    """
    Create a team owned by ``creator``.

    The team row, the OWNER membership and any initial MEMBER rows are
    committed together. The creator is dropped from ``member_ids`` and
    repeated ids are collapsed.
    """
    extra: list[uuid.UUID] = []
    for uid in member_ids:
        if uid != creator.id and uid not in extra:
            extra.append(uid)
    _ensure_users_exist(db, extra)

    team = Team(name=name, description=description)
    team.members.append(TeamMember(user_id=creator.id, role=TeamRole.OWNER))
    for uid in extra:
        team.members.append(TeamMember(user_id=uid, role=TeamRole.MEMBER))

    db.add(team)
    db.commit()
    logger.info(
        "Team created: id=%s owner=%s members=%d", team.id, creator.id, len(extra) + 1
    )
    return get_team(db, team.id)


def list_user_teams(db: Session, user_id) -> list[TeamSummaryOut]:
    counts = (
        db.query(TeamMember.team_id, func.count(TeamMember.id).label("n"))
        .group_by(TeamMember.team_id)
        .subquery()
    )
    rows = (
        db.query(Team, TeamMember.role, counts.c.n)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .join(counts, counts.c.team_id == Team.id)
        .filter(TeamMember.user_id == user_id)
        .order_by(Team.created_at.desc())
        .all()
    )
    return [
        TeamSummaryOut(
            id=team.id,
            name=team.name,
            description=team.description,
            role=role,
            member_count=n,
            created_at=team.created_at,
        )
        for team, role, n in rows
    ]


def add_members(db: Session, team_id, entries: list[MemberAdd]) -> AddMembersResult:
    """
    Add members to a team, skipping users who already belong to it.

    A duplicate is never an error, whether it was already stored, repeated
    in the same request, or inserted concurrently (unique constraint).
    """
    _ensure_users_exist(db, (e.user_id for e in entries))

    result = AddMembersResult()
    seen: set[uuid.UUID] = set()
    for entry in entries:
        if entry.user_id in seen:
            result.skipped.append(entry.user_id)
            continue
        seen.add(entry.user_id)

        existing = (
            db.query(TeamMember.id)
            .filter(TeamMember.team_id == team_id, TeamMember.user_id == entry.user_id)
            .first()
        )
        if existing:
            result.skipped.append(entry.user_id)
            continue

        member = TeamMember(team_id=team_id, user_id=entry.user_id, role=entry.role)
        try:
            with db.begin_nested():
                db.add(member)
        except IntegrityError:
            logger.info("Concurrent add of user %s to team %s, skipped", entry.user_id, team_id)
            result.skipped.append(entry.user_id)
            continue
        result.added.append(member)

    db.commit()
    for member in result.added:
        db.refresh(member)
    logger.info(
        "Team %s members added=%d skipped=%d", team_id, len(result.added), len(result.skipped)
    )
    return result


def remove_member(db: Session, team_id, caller_id, target_user_id) -> None:
    if caller_id == target_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove yourself from a team you own",
        )

    member = (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == target_user_id)
        .first()
    )
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found"
        )

    db.delete(member)
    db.commit()
    logger.info("Removed user %s from team %s", target_user_id, team_id)


def disband_team(db: Session, team_id) -> int:
    """
    Delete a team and its memberships.

    Datasets shared with the team fall back to PRIVATE for their owner so no
    dataset is left TEAM-visible without a team. Returns how many were
    changed.
    """
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")

    made_private = (
        db.query(Dataset)
        .filter(Dataset.team_id == team_id)
        .update(
            {Dataset.visibility: Visibility.PRIVATE, Dataset.team_id: None},
            synchronize_session="fetch",
        )
    )
    db.delete(team)
    db.commit()
    logger.info("Team %s disbanded, %d dataset(s) made private", team_id, made_private)
    return made_private
