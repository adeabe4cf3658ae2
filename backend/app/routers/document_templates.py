"""Document templates: blank forms admins upload for customers to sign.

POST and PUT take multipart form data (``file`` plus ``documentType`` /
``directorIndex`` or ``id``); DELETE takes ``?id=``. Reads are open to
any signed-in user.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, require_admin
from app.database import get_db
from app.middleware.exceptions import NotFoundError, ValidationError
from app.models.document_template import DocumentTemplate
from app.models.user import User
from app.routers.files import read_upload
from app.schemas.common import SuccessResponse
from app.schemas.document_template import DocumentTemplateOut, DocumentTemplateResponse
from app.services.file_storage import FileStorageService, get_file_storage

logger = logging.getLogger(__name__)

router = APIRouter()


async def _store(
    db: AsyncSession,
    storage: FileStorageService,
    file: UploadFile,
    admin: User,
):
    content = await read_upload(file, storage.max_file_size)
    result = await storage.save_file(
        db,
        content,
        file.filename or "template",
        file.content_type or "application/octet-stream",
        len(content),
        admin.id,
    )
    if not result.success:
        raise ValidationError(result.error or "Upload failed", error_code="UPLOAD_REJECTED")
    return result.file


def _point_at(template: DocumentTemplate, stored) -> None:
    template.name = stored.original_name
    template.type = stored.file_type
    template.size = stored.file_size
    template.url = stored.url
    template.file_path = stored.file_path
    template.file_id = stored.id


@router.get("", response_model=list[DocumentTemplateOut])
async def list_templates(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(DocumentTemplate).order_by(DocumentTemplate.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=DocumentTemplateResponse)
async def create_template(
    file: UploadFile = File(...),
    document_type: str = Form(..., alias="documentType", min_length=1),
    director_index: int | None = Form(default=None, alias="directorIndex"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    storage: FileStorageService = Depends(get_file_storage),
):
    stored = await _store(db, storage, file, admin)
    template = DocumentTemplate(document_type=document_type, director_index=director_index)
    _point_at(template, stored)
    db.add(template)
    await db.flush()

    logger.info("Template %s uploaded for %s", template.id, document_type)
    return DocumentTemplateResponse(template=DocumentTemplateOut.model_validate(template))


@router.put("", response_model=DocumentTemplateResponse)
async def replace_template_file(
    file: UploadFile = File(...),
    template_id: str = Form(..., alias="id", min_length=1),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    storage: FileStorageService = Depends(get_file_storage),
):
    template = await db.get(DocumentTemplate, template_id)
    if template is None:
        raise NotFoundError("Document template", template_id)

    old_url = template.url
    stored = await _store(db, storage, file, admin)
    _point_at(template, stored)
    await db.flush()

    if old_url and not await storage.delete_file(db, old_url):
        logger.warning("Could not delete previous template file %s", old_url)
    return DocumentTemplateResponse(template=DocumentTemplateOut.model_validate(template))


@router.delete("", response_model=SuccessResponse)
async def delete_template(
    template_id: str = Query(..., alias="id", min_length=1),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
    storage: FileStorageService = Depends(get_file_storage),
):
    template = await db.get(DocumentTemplate, template_id)
    if template is None:
        raise NotFoundError("Document template", template_id)

    if template.url and not await storage.delete_file(db, template.url):
        logger.warning("Could not delete template file %s", template.url)
    await db.delete(template)
    await db.flush()
    return SuccessResponse(message="Document template deleted successfully")
