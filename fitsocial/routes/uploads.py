from __future__ import annotations

import os
import re
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query

from fitsocial.db import UserRow
from fitsocial.dependencies import get_current_user, get_storage_client
from fitsocial.schemas import SignUploadResponse, UploadKind
from fitsocial.storage import StorageClient

router = APIRouter(prefix="/upload", tags=["uploads"])

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def _safe_filename(filename: str) -> str:
    name = filename.rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._") or "upload"


@router.get("/sign-url", response_model=SignUploadResponse)
def sign_upload_url(
    kind: UploadKind = Query(...),
    filename: str = Query(..., min_length=1, max_length=200),
    expires_in: int = Query(900, ge=60, le=3600),
    user: UserRow = Depends(get_current_user),
    storage: StorageClient = Depends(get_storage_client),
):
    """
    Presign a PUT for an image owned by the caller. The client uploads the file
    directly, then stores ``read_url`` (or ``path``) on the profile or post.
    """
    content_type = CONTENT_TYPES.get(os.path.splitext(filename)[1].lower())
    if content_type is None:
        raise HTTPException(
            status_code=400, detail="Only JPEG, PNG, GIF or WebP images can be uploaded."
        )
    path = f"users/{user.user_id}/{kind}/{uuid4().hex}-{_safe_filename(filename)}"
    return SignUploadResponse(
        upload_url=storage.presign_put(path, content_type, expires_in=expires_in),
        read_url=storage.presign_get(path),
        path=path,
        content_type=content_type,
    )
