from datetime import datetime

from app.schemas.common import CamelModel


class FileMetadataOut(CamelModel):
    id: str
    original_name: str
    file_name: str
    file_path: str
    file_type: str
    file_size: int
    category: str
    url: str
    uploaded_by: str | None = None
    uploaded_at: datetime


class UploadResponse(CamelModel):
    success: bool = True
    file: FileMetadataOut
