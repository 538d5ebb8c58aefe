"""
Local upload storage.

Uploads live under ``<upload_dir>/<owner id>/<unique prefix>_<name>`` and are
addressed as ``/upload/<owner id>/<stored name>``. A local file URL is only
ever resolved inside the directory of the dataset owner, so a dataset can
never point at another user's upload.
"""

from __future__ import annotations

import os
import uuid

from app.core.config import get_settings

UPLOAD_URL_PREFIX = "/upload/"

settings = get_settings()


def is_remote_url(file_url: str) -> bool:
    return file_url.startswith(("http://", "https://"))


def store_upload(owner_id: uuid.UUID, file_name: str, contents: bytes) -> str:
    """Write an upload under the owner's directory and return its URL."""
    stored_name = f"{uuid.uuid4().hex}_{file_name}"
    owner_dir = os.path.join(settings.upload_dir, str(owner_id))
    os.makedirs(owner_dir, exist_ok=True)
    # "xb" so an existing file is never replaced
    with open(os.path.join(owner_dir, stored_name), "xb") as fh:
        fh.write(contents)
    return f"{UPLOAD_URL_PREFIX}{owner_id}/{stored_name}"


def resolve_upload(owner_id: uuid.UUID, file_url: str) -> str | None:
    """Filesystem path for one of ``owner_id``'s uploads, or None."""
    if not file_url.startswith(UPLOAD_URL_PREFIX):
        return None
    parts = file_url[len(UPLOAD_URL_PREFIX):].split("/")
    if len(parts) != 2 or parts[0] != str(owner_id):
        return None
    name = parts[1]
    if name in ("", ".", "..") or name != os.path.basename(name):
        return None
    return os.path.join(settings.upload_dir, str(owner_id), name)


def is_owned_upload(owner_id: uuid.UUID, file_url: str) -> bool:
    return resolve_upload(owner_id, file_url) is not None
