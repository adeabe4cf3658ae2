"""File upload and metadata routes.

  POST   /upload            — multipart ``file`` (+ optional ``uploadedBy``)
  GET    /upload?path=      — metadata by public URL, as {success, file}
  DELETE /upload?path=      — delete by public URL
  GET    /files             — list, optional ``?category=``
  GET    /files/{id}        — metadata by id, as {success, file}
  DELETE /files/{id}        — delete by id

Only the uploader or an admin may delete a file. Blobs themselves are
served as static assets under the upload URL prefix (see app.main).
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, is_admin
from app.database import get_db
from app.middleware.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from app.models.stored_file import StoredFile
from app.models.user import User
from app.schemas.common import SuccessResponse
from app.schemas.file import FileMetadataOut, UploadResponse
from app.services.file_storage import CATEGORIES, FileStorageService, get_file_storage

logger = logging.getLogger(__name__)

upload_router = APIRouter()
files_router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def read_upload(file: UploadFile, max_size: int) -> bytes:
    """Read at most max_size + 1 bytes so oversized uploads fail fast."""
    content = await file.read(max_size + 1)
    await file.close()
    return content


def _check_can_delete(user: User, stored: StoredFile) -> None:
    if not is_admin(user) and stored.uploaded_by != user.id:
        raise PermissionDeniedError("Only the uploader or an admin can delete this file")


async def _delete(db: AsyncSession, storage: FileStorageService, user: User, stored: StoredFile | None, ref: str):
    if stored is None:
        raise NotFoundError("File", ref)
    _check_can_delete(user, stored)
    if not await storage.delete_stored(db, stored):
        raise HTTPException(status_code=500, detail="Failed to delete file")
    return SuccessResponse(message="File deleted successfully")


# ── /upload ──────────────────────────────────────────────────

@upload_router.post("", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    uploaded_by: str | None = Form(default=None, alias="uploadedBy"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    content = await read_upload(file, storage.max_file_size)
    mime_type = file.content_type or "application/octet-stream"
    # Admins may upload on someone else's behalf
    owner = uploaded_by if uploaded_by and is_admin(user) else user.id

    result = await storage.save_file(
        db, content, file.filename or "upload", mime_type, len(content), owner
    )
    if not result.success:
        raise ValidationError(result.error or "Upload failed", error_code="UPLOAD_REJECTED")
    return UploadResponse(file=FileMetadataOut.model_validate(result.file))


@upload_router.get("", response_model=UploadResponse)
async def get_upload_info(
    path: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    stored = await storage.get_file_info(db, path)
    if stored is None:
        raise NotFoundError("File", path)
    return UploadResponse(file=FileMetadataOut.model_validate(stored))


@upload_router.delete("", response_model=SuccessResponse)
async def delete_upload(
    path: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    stored = await storage.get_file_info(db, path)
    return await _delete(db, storage, user, stored, path)


# ── /files ───────────────────────────────────────────────────

@files_router.get("", response_model=list[FileMetadataOut])
async def list_files(
    category: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    if category is not None and category not in CATEGORIES:
        raise ValidationError(f"Unknown category: {category}")
    files = await storage.list_files(db, category)
    if not is_admin(user):
        files = [f for f in files if f.uploaded_by == user.id]
    return files


@files_router.get("/{file_id}", response_model=UploadResponse)
async def get_file(
    file_id: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    stored = await storage.get_file_by_id(db, file_id)
    if stored is None:
        raise NotFoundError("File", file_id)
    return UploadResponse(file=FileMetadataOut.model_validate(stored))


@files_router.delete("/{file_id}", response_model=SuccessResponse)
async def delete_file(
    file_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorageService = Depends(get_file_storage),
):
    stored = await storage.get_file_by_id(db, file_id)
    return await _delete(db, storage, user, stored, file_id)
