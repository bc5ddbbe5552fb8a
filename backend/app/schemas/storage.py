from app.schemas.common import CamelModel


class UploadResponse(CamelModel):
    """Result of storing an uploaded file."""

    file_url: str
    original_name: str
    size: int
    mime_type: str


class DownloadUrlResponse(CamelModel):
    download_url: str


class DeleteFileResponse(CamelModel):
    success: bool
