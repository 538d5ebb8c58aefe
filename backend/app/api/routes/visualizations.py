from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.dataset import Dataset
from app.models.user import User
from app.models.visualization import Visualization
from app.schemas.visualization import VisualizationCreate, VisualizationOut, VisualizationUpdate
from app.services.dataset_access import get_visible_dataset, get_visible_visualization

logger = logging.getLogger("datacanvas.visualizations")

router = APIRouter(prefix="/visualizations", tags=["visualizations"])


@router.get("", response_model=List[VisualizationOut])
def list_visualizations(
    dataset_id: Optional[uuid.UUID] = Query(default=None, alias="datasetId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(Visualization)
    if dataset_id:
        get_visible_dataset(db, dataset_id, current_user.id)
        q = q.filter(Visualization.dataset_id == dataset_id)
    else:
        q = q.join(Dataset, Dataset.id == Visualization.dataset_id).filter(
            Dataset.owner_id == current_user.id
        )
    return q.order_by(Visualization.created_at.desc()).all()


@router.post("", response_model=VisualizationOut, status_code=status.HTTP_201_CREATED)
def create_visualization(
    payload: VisualizationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_visible_dataset(db, payload.dataset_id, current_user.id)

    viz = Visualization(
        dataset_id=payload.dataset_id,
        title=payload.title,
        description=payload.description,
        type=payload.type,
        config=payload.config,
    )
    db.add(viz)
    db.commit()
    db.refresh(viz)
    logger.info("Visualization created: id=%s dataset=%s", viz.id, viz.dataset_id)
    return viz


@router.get("/{viz_id}", response_model=VisualizationOut)
def get_visualization(
    viz_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_visible_visualization(db, viz_id, current_user.id)


@router.put("/{viz_id}", response_model=VisualizationOut)
def update_visualization(
    viz_id: uuid.UUID,
    payload: VisualizationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    viz = get_visible_visualization(db, viz_id, current_user.id)

    updates = payload.model_dump(exclude_unset=True)
    for key in ("title", "type", "config"):
        if key in updates and updates[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")

    for key, value in updates.items():
        setattr(viz, key, value)
    db.commit()
    db.refresh(viz)
    return viz


@router.delete("/{viz_id}", response_model=VisualizationOut)
def delete_visualization(
    viz_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    viz = get_visible_visualization(db, viz_id, current_user.id)
    out = VisualizationOut.model_validate(viz)
    db.delete(viz)
    db.commit()
    logger.info("Visualization deleted: id=%s", viz_id)
    return out
