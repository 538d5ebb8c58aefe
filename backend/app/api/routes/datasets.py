from __future__ import annotations

import logging
import mimetypes
import os
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models import Dataset, Team, Visibility, Visualization
from app.models.user import User
from app.schemas.dataset import DatasetCreate, DatasetListOut, DatasetOut, DatasetUpdate
from app.schemas.visualization import VisualizationOut
from app.services.dataset_access import (
    get_owned_dataset,
    get_visible_dataset,
    visible_datasets_query,
)
from app.services.team_access import require_team_membership
from app.services.upload_storage import is_owned_upload, is_remote_url, resolve_upload

logger = logging.getLogger("datacanvas.datasets")

router = APIRouter(prefix="/datasets", tags=["datasets"])

FILE_MIME_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "xls": "application/vnd.ms-excel",
}


def _visualization_counts(db: Session, dataset_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    if not dataset_ids:
        return {}
    rows = (
        db.query(Visualization.dataset_id, func.count(Visualization.id))
        .filter(Visualization.dataset_id.in_(dataset_ids))
        .group_by(Visualization.dataset_id)
        .all()
    )
    return {dataset_id: n for dataset_id, n in rows}


def _list_fields(ds: Dataset, viz_count: int) -> dict:
    return {
        "id": ds.id,
        "name": ds.name,
        "description": ds.description,
        "created_at": ds.created_at,
        "team": ds.team.name if ds.team else None,
        "visibility": ds.visibility,
        "visualization_count": viz_count,
        "owner": ds.owner.name if ds.owner else "",
        "file_name": ds.file_name,
    }


def _dataset_out(db: Session, ds: Dataset) -> DatasetOut:
    count = _visualization_counts(db, [ds.id]).get(ds.id, 0)
    return DatasetOut(
        **_list_fields(ds, count),
        owner_id=ds.owner_id,
        team_id=ds.team_id,
        file_url=ds.file_url,
    )


def _check_team_target(db: Session, user: User, team_id: uuid.UUID | None) -> uuid.UUID:
    """A TEAM dataset needs an existing team that the owner belongs to."""
    if team_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="teamId is required when visibility is TEAM",
        )
    if not db.query(Team.id).filter(Team.id == team_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="teamId does not reference an existing team",
        )
    require_team_membership(db, user, team_id)
    return team_id


@router.get("", response_model=list[DatasetListOut])
def list_datasets(
    team_id: uuid.UUID | None = Query(default=None, alias="teamId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[DatasetListOut]:
    rows = (
        visible_datasets_query(db, current_user.id, team_id)
        .options(joinedload(Dataset.owner), joinedload(Dataset.team))
        .order_by(Dataset.created_at.desc())
        .all()
    )
    counts = _visualization_counts(db, [r.id for r in rows])
    return [DatasetListOut(**_list_fields(r, counts.get(r.id, 0))) for r in rows]


@router.post("", response_model=DatasetOut, status_code=status.HTTP_201_CREATED)
def create_dataset(
    payload: DatasetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DatasetOut:
    if payload.owner_id is not None and payload.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Datasets can only be created for yourself",
        )

    if not is_remote_url(payload.file_url) and not is_owned_upload(current_user.id, payload.file_url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="fileUrl must be an http(s) URL or one of your uploads",
        )

    team_id = None
    if payload.visibility == Visibility.TEAM:
        team_id = _check_team_target(db, current_user, payload.team_id)
    elif payload.team_id is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="teamId is only allowed for TEAM visibility",
        )

    ds = Dataset(
        name=payload.name,
        description=payload.description,
        file_name=payload.file_name,
        file_url=payload.file_url,
        owner_id=current_user.id,
        visibility=payload.visibility,
        team_id=team_id,
    )
    db.add(ds)
    db.commit()
    db.refresh(ds)

    logger.info("Dataset created: id=%s owner=%s visibility=%s", ds.id, ds.owner_id, ds.visibility.value)
    return _dataset_out(db, ds)


@router.get("/{dataset_id}", response_model=DatasetOut)
def get_dataset(
    dataset_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DatasetOut:
    ds = get_visible_dataset(db, dataset_id, current_user.id)
    return _dataset_out(db, ds)


@router.put("/{dataset_id}", response_model=DatasetOut)
def update_dataset(
    dataset_id: uuid.UUID,
    payload: DatasetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> DatasetOut:
    ds = get_owned_dataset(db, dataset_id, current_user.id)
    updates = payload.model_dump(exclude_unset=True)

    for key in ("name", "visibility"):
        if key in updates and updates[key] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be null"
            )

    if "visibility" in updates or "team_id" in updates:
        visibility = updates.get("visibility", ds.visibility)
        if visibility == Visibility.TEAM:
            team_id = updates["team_id"] if "team_id" in updates else ds.team_id
            ds.team_id = _check_team_target(db, current_user, team_id)
        elif updates.get("team_id") is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="teamId is only allowed for TEAM visibility",
            )
        else:
            ds.team_id = None
        ds.visibility = visibility

    if "name" in updates:
        ds.name = updates["name"]
    if "description" in updates:
        ds.description = updates["description"]

    db.commit()
    db.refresh(ds)

    logger.info("Dataset updated: id=%s fields=%s", ds.id, sorted(updates))
    return _dataset_out(db, ds)


@router.delete("/{dataset_id}")
def delete_dataset(
    dataset_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    ds = get_owned_dataset(db, dataset_id, current_user.id)
    db.delete(ds)
    db.commit()
    logger.info("Dataset deleted: id=%s", dataset_id)
    return {"id": str(dataset_id)}


@router.get("/{dataset_id}/visualizations", response_model=list[VisualizationOut])
def list_dataset_visualizations(
    dataset_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Visualization]:
    get_visible_dataset(db, dataset_id, current_user.id)
    return (
        db.query(Visualization)
        .filter(Visualization.dataset_id == dataset_id)
        .order_by(Visualization.created_at.desc())
        .all()
    )


@router.get("/{dataset_id}/file")
def get_dataset_file(
    dataset_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ds = get_visible_dataset(db, dataset_id, current_user.id)
    if not ds.file_url or not ds.file_name:
        raise HTTPException(status_code=404, detail="Dataset not found or invalid")

    if is_remote_url(ds.file_url):
        return RedirectResponse(ds.file_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    ext = ds.file_name.rsplit(".", 1)[-1].lower() if "." in ds.file_name else ""
    media_type = FILE_MIME_TYPES.get(ext) or mimetypes.guess_type(ds.file_name)[0] or "application/octet-stream"

    # Local files only resolve inside the dataset owner's upload directory.
    path = resolve_upload(ds.owner_id, ds.file_url)
    if path is None or not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Dataset file not found")

    return FileResponse(path, media_type=media_type, filename=ds.file_name)
