from __future__ import annotations

import logging

from fastapi import APIRouter

logger = logging.getLogger("datacanvas")

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    logger.debug("Health check requested")
    return {"status": "ok"}
