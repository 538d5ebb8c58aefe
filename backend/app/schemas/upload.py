from __future__ import annotations

from app.schemas.common import CamelModel


class UploadOut(CamelModel):
    success: bool = True
    file_name: str
    path: str
