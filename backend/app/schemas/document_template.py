from datetime import datetime

from app.schemas.common import CamelModel


class DocumentTemplateOut(CamelModel):
    id: str
    document_type: str
    name: str
    type: str | None
    size: int | None
    url: str | None
    file_path: str | None
    file_id: str | None
    director_index: int | None
    uploaded_at: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DocumentTemplateResponse(CamelModel):
    success: bool = True
    template: DocumentTemplateOut
