"""File storage: blobs on disk, metadata in the ``stored_files`` table.

Layout:
    <upload_dir>/images/<id><ext>
    <upload_dir>/documents/<id><ext>
    <upload_dir>/temp/<id><ext>

Public URL: ``<url_prefix>/<category>/<id><ext>``.

Every operation returns a result or None/False instead of raising, so
callers decide how a storage failure maps to HTTP. Validation (size cap,
mime allow-list) happens before any byte reaches the disk.
"""

import base64
import binascii
import logging
import mimetypes
import os
import re
import secrets
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.stored_file import StoredFile

logger = logging.getLogger("incorpdesk.storage")

IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})

DOCUMENT_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})

ALLOWED_TYPES = IMAGE_TYPES | DOCUMENT_TYPES

CATEGORIES = ("images", "documents", "temp")

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[^,]*)?;base64,(?P<data>.*)$", re.DOTALL)


def category_for(mime_type: str) -> str:
    """images → images, documents → documents, anything else → temp."""
    if mime_type in IMAGE_TYPES:
        return "images"
    if mime_type in DOCUMENT_TYPES:
        return "documents"
    return "temp"


@dataclass
class FileUploadResult:
    success: bool
    file: StoredFile | None = None
    error: str | None = None


class FileStorageService:
    def __init__(
        self,
        upload_dir: str | os.PathLike | None = None,
        max_file_size: int | None = None,
        url_prefix: str | None = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_file_size = max_file_size or settings.max_upload_size
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    # ── Helpers ──────────────────────────────────────────────

    def ensure_directories(self) -> None:
        """Create the upload root and category folders (idempotent)."""
        for category in CATEGORIES:
            (self.upload_dir / category).mkdir(parents=True, exist_ok=True)

    def validate(self, mime_type: str, size: int) -> str | None:
        """Return an error message, or None if the upload is acceptable."""
        if size > self.max_file_size:
            limit_mb = self.max_file_size / (1024 * 1024)
            return f"File size exceeds maximum allowed size of {limit_mb:g}MB"
        if mime_type not in ALLOWED_TYPES:
            return f"File type {mime_type} is not allowed"
        return None

    def url_for(self, category: str, file_name: str) -> str:
        return f"{self.url_prefix}/{category}/{file_name}"

    def _resolve_url(self, path: str) -> str:
        """Accept either a public URL or a path relative to the upload dir."""
        path = path.strip()
        if path.startswith(self.url_prefix + "/"):
            return path
        return f"{self.url_prefix}/{path.lstrip('/')}"

    # ── Operations ───────────────────────────────────────────

    async def save_file(
        self,
        db: AsyncSession,
        content: bytes,
        original_name: str,
        mime_type: str,
        size: int | None = None,
        uploaded_by: str | None = None,
    ) -> FileUploadResult:
        """Validate, write the blob, and record its metadata row."""
        size = len(content) if size is None else size
        error = self.validate(mime_type, size)
        if error:
            logger.info(
                "Rejected upload %s (%s, %d bytes): %s",
                original_name, mime_type, size, error,
            )
            return FileUploadResult(success=False, error=error)

        file_id = secrets.token_hex(16)
        extension = Path(original_name).suffix.lower()
        category = category_for(mime_type)
        file_name = f"{file_id}{extension}"
        file_path = self.upload_dir / category / file_name

        try:
            self.ensure_directories()
            file_path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            return FileUploadResult(success=False, error="Failed to save file")

        stored = StoredFile(
            id=file_id,
            original_name=original_name,
            file_name=file_name,
            file_path=str(file_path.resolve()),
            file_type=mime_type,
            file_size=size,
            category=category,
            url=self.url_for(category, file_name),
            uploaded_by=uploaded_by,
        )
        db.add(stored)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to record metadata for {file_path}: {e}")
            file_path.unlink(missing_ok=True)
            await db.rollback()
            return FileUploadResult(success=False, error="Failed to save file")

        logger.info(
            "Stored %s as %s/%s (%d bytes)",
            original_name, category, file_name, size,
            extra={"file_id": file_id, "uploaded_by": uploaded_by},
        )
        return FileUploadResult(success=True, file=stored)

    async def save_base64_file(
        self,
        db: AsyncSession,
        data_url: str,
        original_name: str,
        uploaded_by: str | None = None,
    ) -> FileUploadResult:
        """Store a ``data:<mime>;base64,<payload>`` string as a regular upload."""
        match = _DATA_URL_RE.match(data_url or "")
        if not match:
            return FileUploadResult(success=False, error="Invalid base64 data URL")

        mime_type = match.group("mime") or mimetypes.guess_type(original_name)[0]
        if not mime_type:
            return FileUploadResult(success=False, error="Could not determine file type")
        try:
            content = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError):
            return FileUploadResult(success=False, error="Invalid base64 data URL")

        return await self.save_file(
            db, content, original_name, mime_type, len(content), uploaded_by
        )

    async def get_file_by_id(self, db: AsyncSession, file_id: str) -> StoredFile | None:
        result = await db.execute(select(StoredFile).where(StoredFile.id == file_id))
        return result.scalar_one_or_none()

    async def get_file_info(self, db: AsyncSession, path: str) -> StoredFile | None:
        """Look up metadata by public URL (or upload-relative path)."""
        result = await db.execute(
            select(StoredFile).where(StoredFile.url == self._resolve_url(path))
        )
        return result.scalar_one_or_none()

    async def delete_file(self, db: AsyncSession, path: str) -> bool:
        """Remove the blob and its metadata row. False if nothing was found."""
        stored = await self.get_file_info(db, path)
        if stored is None:
            return False
        return await self.delete_stored(db, stored)

    async def delete_stored(self, db: AsyncSession, stored: StoredFile) -> bool:
        blob = Path(stored.file_path)
        try:
            blob.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete {blob}: {e}")
            return False
        await db.delete(stored)
        await db.flush()
        logger.info("Deleted %s", stored.url, extra={"file_id": stored.id})
        return True

    async def list_files(self, db: AsyncSession, category: str | None = None) -> list[StoredFile]:
        query = select(StoredFile).order_by(StoredFile.uploaded_at.desc())
        if category:
            query = query.where(StoredFile.category == category)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def find_orphans(self, db: AsyncSession) -> list[Path]:
        """Blobs on disk with no metadata row (left behind by failed requests)."""
        result = await db.execute(select(StoredFile.file_name))
        known = {name for name in result.scalars().all()}
        orphans = []
        for category in CATEGORIES:
            folder = self.upload_dir / category
            if not folder.is_dir():
                continue
            orphans.extend(p for p in folder.iterdir() if p.is_file() and p.name not in known)
        return orphans


_storage: FileStorageService | None = None


def get_file_storage() -> FileStorageService:
    """FastAPI dependency returning the process-wide storage service."""
    global _storage
    if _storage is None:
        _storage = FileStorageService()
    return _storage
