"""Pydantic schemas package."""
from app.schemas.auth import CallerIdentity
from app.schemas.common import CamelModel, ErrorResponse
from app.schemas.contract import (
    ContractCreate,
    ContractMetadata,
    ContractRead,
    ContractStatusUpdate,
    ContractSummarizeRequest,
    ContractSummaryUpdate,
    ContractUpdate,
    ContractVersionCreate,
    ContractVersionRead,
    TextExtractionRequest,
    TextExtractionResponse,
    TextSummaryRequest,
    TextSummaryResponse,
)
from app.schemas.document import DocumentCreate, DocumentRead, DocumentUpdate
from app.schemas.storage import DeleteFileResponse, DownloadUrlResponse, UploadResponse

__all__ = [
    "CallerIdentity",
    "CamelModel",
    "ErrorResponse",
    "ContractCreate",
    "ContractMetadata",
    "ContractRead",
    "ContractStatusUpdate",
    "ContractSummarizeRequest",
    "ContractSummaryUpdate",
    "ContractUpdate",
    "ContractVersionCreate",
    "ContractVersionRead",
    "TextExtractionRequest",
    "TextExtractionResponse",
    "TextSummaryRequest",
    "TextSummaryResponse",
    "DocumentCreate",
    "DocumentRead",
    "DocumentUpdate",
    "DeleteFileResponse",
    "DownloadUrlResponse",
    "UploadResponse",
]
