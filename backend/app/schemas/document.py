from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, model_validator

from app.models.document import DocumentStatus
from app.schemas.common import CamelModel

REQUIRED_DOCUMENT_FIELDS = ("title", "file_url", "file_type", "file_size")


class DocumentCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str | None = None
    file_url: str = Field(min_length=1)
    file_type: str = Field(min_length=1)
    file_size: int = Field(ge=0)
    tags: list[str] | None = None


class DocumentUpdate(CamelModel):
    """Partial update; status is owned by the processing pipeline."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    file_url: str | None = Field(default=None, min_length=1)
    file_type: str | None = Field(default=None, min_length=1)
    file_size: int | None = Field(default=None, ge=0)
    tags: list[str] | None = None

    @model_validator(mode="after")
    def _reject_cleared_required_fields(self) -> "DocumentUpdate":
        cleared = [
            name
            for name in REQUIRED_DOCUMENT_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class DocumentRead(CamelModel):
    id: UUID
    title: str
    description: str | None = None
    file_url: str
    file_type: str
    file_size: int
    uploaded_by: str
    status: DocumentStatus
    extracted_text: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    uploaded_at: datetime
    updated_at: datetime
