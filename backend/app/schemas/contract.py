from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, model_validator

from app.models.contract import ContractStatus
from app.schemas.common import CamelModel

# Columns that are NOT NULL and therefore cannot be cleared by a partial update.
REQUIRED_CONTRACT_FIELDS = (
    "title",
    "original_filename",
    "file_url",
    "file_type",
    "file_size",
    "status",
)


class ContractCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str | None = None
    original_filename: str | None = Field(
        default=None, description="Defaults to the last path segment of the file URL"
    )
    file_url: str = Field(min_length=1)
    file_type: str = Field(min_length=1)
    file_size: int = Field(ge=0)
    status: ContractStatus | None = Field(default=None, description="Optional status override")
    expiry_date: datetime | None = None
    summary: str | None = None
    extracted_text: str | None = None


class ContractUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    original_filename: str | None = None
    file_url: str | None = Field(default=None, min_length=1)
    file_type: str | None = Field(default=None, min_length=1)
    file_size: int | None = Field(default=None, ge=0)
    status: ContractStatus | None = None
    expiry_date: datetime | None = None
    summary: str | None = None
    extracted_text: str | None = None

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self) -> "ContractUpdate":
        cleared = [
            name
            for name in REQUIRED_CONTRACT_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class ContractStatusUpdate(CamelModel):
    status: ContractStatus


class ContractSummaryUpdate(CamelModel):
    summary: str


class ContractSummarizeRequest(CamelModel):
    text: str | None = Field(
        default=None, description="Text to summarize; defaults to the stored extracted text"
    )


class ContractVersionCreate(CamelModel):
    file_url: str = Field(min_length=1)
    version_name: str | None = None
    description: str | None = None


class ContractVersionRead(CamelModel):
    id: UUID
    contract_id: UUID
    file_url: str
    version_number: int
    version_name: str | None = None
    description: str | None = None
    created_at: datetime


class ContractRead(CamelModel):
    id: UUID
    title: str
    description: str | None = None
    owner_id: str
    original_filename: str
    file_url: str
    file_type: str
    file_size: int
    status: ContractStatus
    expiry_date: datetime | None = None
    extracted_text: str | None = None
    summary: str | None = None
    created_at: datetime
    updated_at: datetime
    versions: list[ContractVersionRead] = []


class ContractMetadata(CamelModel):
    """Structured fields pulled out of contract text by the language model."""

    effective_date: str | None = None
    expiry_date: str | None = None
    parties: list[str] = []
    contract_type: str | None = None
    error: str | None = None


class TextExtractionRequest(CamelModel):
    file_url: str = Field(min_length=1)
    file_type: str | None = None


class TextExtractionResponse(CamelModel):
    text: str
    file_type: str
    token_count: int


class TextSummaryRequest(CamelModel):
    text: str = Field(min_length=1)


class TextSummaryResponse(CamelModel):
    summary: str
    degraded: bool = False
