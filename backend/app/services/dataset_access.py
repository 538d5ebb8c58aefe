"""
Dataset visibility rules.

A dataset is visible to a caller when it is PUBLIC, when it is PRIVATE and
the caller owns it, or when it is TEAM-shared with a team the caller belongs
to. The same predicate backs both the listing filter and direct fetches;
the listing variant only enables the TEAM branch for an explicitly
requested team.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session

from app.models.dataset import Dataset
from app.models.enums import Visibility
from app.models.visualization import Visualization
from app.services.team_access import is_team_member

logger = logging.getLogger("datacanvas.access")


def can_view(
    visibility: Visibility,
    owner_id,
    team_id,
    caller_id,
    is_member: bool,
) -> bool:
    """
    Pure visibility predicate.

    ``is_member`` tells whether the caller belongs to ``team_id``; it is
    ignored for non-TEAM datasets. A TEAM dataset without a team is never
    visible.
    """
    if visibility == Visibility.PUBLIC:
        return True
    if visibility == Visibility.PRIVATE:
        return caller_id is not None and owner_id == caller_id
    if visibility == Visibility.TEAM:
        return team_id is not None and is_member
    return False


def is_dataset_visible(db: Session, dataset: Dataset, caller_id) -> bool:
    is_member = False
    if dataset.visibility == Visibility.TEAM and dataset.team_id is not None:
        is_member = is_team_member(db, dataset.team_id, caller_id)
    return can_view(
        dataset.visibility,
        dataset.owner_id,
        dataset.team_id,
        caller_id,
        is_member,
    )


def visible_datasets_query(db: Session, caller_id, team_id=None) -> Query:
    """Datasets the caller may see in a listing, optionally scoped to a team."""
    clauses = [
        Dataset.visibility == Visibility.PUBLIC,
        and_(Dataset.visibility == Visibility.PRIVATE, Dataset.owner_id == caller_id),
    ]
    if team_id is not None and is_team_member(db, team_id, caller_id):
        clauses.append(
            and_(
                Dataset.visibility == Visibility.TEAM,
                Dataset.team_id.isnot(None),
                Dataset.team_id == team_id,
            )
        )
    elif team_id is not None:
        logger.debug("Team filter ignored, caller %s is not in team %s", caller_id, team_id)

    return db.query(Dataset).filter(or_(*clauses))


def get_dataset_or_404(db: Session, dataset_id) -> Dataset:
    ds = db.query(Dataset).filter(Dataset.id == dataset_id).first()
    if not ds:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dataset not found",
        )
    return ds


def get_visible_dataset(db: Session, dataset_id, user_id) -> Dataset:
    ds = get_dataset_or_404(db, dataset_id)
    if not is_dataset_visible(db, ds, user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this dataset",
        )
    return ds


def get_owned_dataset(db: Session, dataset_id, user_id) -> Dataset:
    ds = get_dataset_or_404(db, dataset_id)
    if ds.owner_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to edit this dataset",
        )
    return ds


def get_visible_visualization(db: Session, viz_id, user_id) -> Visualization:
    """Visualizations have no visibility of their own; the parent dataset decides."""
    viz = db.query(Visualization).filter(Visualization.id == viz_id).first()
    if not viz:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Visualization not found",
        )
    get_visible_dataset(db, viz.dataset_id, user_id)
    return viz
