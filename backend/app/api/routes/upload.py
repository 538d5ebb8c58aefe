from __future__ import annotations

import logging
import os
import re

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.api.deps import get_current_user
from app.core.config import get_settings
from app.models.user import User
from app.schemas.upload import UploadOut
from app.services.upload_storage import store_upload

logger = logging.getLogger("datacanvas.upload")

router = APIRouter(tags=["upload"])
settings = get_settings()

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")


def sanitize_file_name(name: str) -> str:
    """Replace anything outside ``[a-zA-Z0-9.-_]`` with an underscore."""
    cleaned = _UNSAFE_CHARS.sub("_", os.path.basename(name or ""))
    if cleaned.strip(".") == "":
        raise HTTPException(status_code=400, detail="Invalid file name")
    return cleaned


@router.post("/upload", response_model=UploadOut)
async def upload_file(
    file: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
) -> UploadOut:
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    file_name = sanitize_file_name(file.filename)
    contents = await file.read()
    if len(contents) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    path = store_upload(current_user.id, file_name, contents)

    logger.info("Saved upload %s (%d bytes) for user %s", path, len(contents), current_user.id)
    return UploadOut(file_name=file_name, path=path)
