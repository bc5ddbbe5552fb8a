import logging
import time

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.api.v1.dependencies import get_current_user, get_object_store
from app.core.config import settings
from app.core.exceptions import FileTooLargeError, ForbiddenError, ValidationError
from app.schemas.auth import CallerIdentity
from app.schemas.storage import DeleteFileResponse, DownloadUrlResponse, UploadResponse
from app.services.storage import ObjectStore, is_user_path, user_upload_prefix

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_MIME_TYPE = "application/octet-stream"


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    path: str | None = Form(default=None),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
) -> UploadResponse:
    """Store an uploaded file under the caller's uploads folder, at ``path`` when given."""
    if path is not None and not is_user_path(path, current_user.id):
        raise ForbiddenError(f"Upload path must be under {user_upload_prefix(current_user.id)}")

    filename = file.filename or "upload"
    try:
        data = await file.read()
    finally:
        await file.close()

    if not data:
        raise ValidationError("Uploaded file is empty")
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(data) > max_bytes:
        raise FileTooLargeError(
            f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB upload limit",
            details={"size": len(data), "limit": max_bytes},
        )

    file_path = path or f"{user_upload_prefix(current_user.id)}{int(time.time() * 1000)}-{filename}"
    mime_type = file.content_type or DEFAULT_MIME_TYPE
    file_url = store.upload(data, path=file_path, content_type=mime_type)
    logger.info("User %s uploaded %s (%s bytes)", current_user.id, filename, len(data))

    return UploadResponse(
        file_url=file_url,
        original_name=filename,
        size=len(data),
        mime_type=mime_type,
    )


@router.get("/download-url", response_model=DownloadUrlResponse)
async def get_download_url(
    file_url: str = Query(..., alias="fileUrl", min_length=1),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
) -> DownloadUrlResponse:
    return DownloadUrlResponse(download_url=store.get_download_url(file_url))


@router.delete("/delete", response_model=DeleteFileResponse)
async def delete_file(
    file_url: str = Query(..., alias="fileUrl", min_length=1),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
) -> DeleteFileResponse:
    if not is_user_path(store.object_path(file_url), current_user.id):
        raise ForbiddenError("File is not in your uploads folder")
    store.delete(file_url)
    return DeleteFileResponse(success=True)
