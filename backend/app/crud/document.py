"""Persistence operations for uploaded documents."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

import pydantic
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidStatusTransitionError, NotFoundError
from app.crud.contract import validation_error_from
from app.models.document import Document, DocumentStatus
from app.schemas.document import DocumentCreate, DocumentUpdate

logger = logging.getLogger(__name__)

# Moves out of Processing. Entering Processing is allowed from any state.
ALLOWED_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.PROCESSING: {DocumentStatus.COMPLETED, DocumentStatus.FAILED},
}


def create_document(
    db: Session, data: DocumentCreate | Mapping[str, Any], owner_id: str
) -> Document:
    if not isinstance(data, DocumentCreate):
        try:
            data = DocumentCreate.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            raise validation_error_from(exc, "Invalid document metadata") from exc

    document = Document(
        **data.model_dump(),
        uploaded_by=owner_id,
        status=DocumentStatus.PENDING.value,
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    logger.info("Created document %s for owner %s", document.id, owner_id)
    return document


def list_documents(
    db: Session,
    owner_id: str,
    status: DocumentStatus | str | None = None,
    tag: str | None = None,
    search: str | None = None,
) -> list[Document]:
    """List an owner's documents, newest first, with optional filters."""
    stmt = select(Document).where(Document.uploaded_by == owner_id)
    if status:
        stmt = stmt.where(Document.status == DocumentStatus(status).value)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(Document.title.ilike(pattern), Document.description.ilike(pattern))
        )
    stmt = stmt.order_by(Document.uploaded_at.desc())

    documents = list(db.scalars(stmt))
    if tag:
        # Tags live in a JSON column, so membership is checked after loading.
        documents = [doc for doc in documents if tag in (doc.tags or [])]
    return documents


def get_document(db: Session, document_id: UUID, owner_id: str | None = None) -> Document:
    document = db.get(Document, document_id, populate_existing=True)
    if document is None or (owner_id is not None and document.uploaded_by != owner_id):
        raise NotFoundError(f"Document with ID {document_id} not found")
    return document


def update_document(
    db: Session,
    document_id: UUID,
    data: DocumentUpdate | Mapping[str, Any],
    owner_id: str | None = None,
) -> Document:
    if not isinstance(data, DocumentUpdate):
        try:
            data = DocumentUpdate.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            raise validation_error_from(exc, "Invalid document update") from exc

    document = get_document(db, document_id, owner_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(document, field, value)
    db.commit()
    db.refresh(document)
    return document


def delete_document(db: Session, document_id: UUID, owner_id: str | None = None) -> None:
    document = get_document(db, document_id, owner_id)
    db.delete(document)
    db.commit()
    logger.info("Deleted document %s", document_id)


def transition_status(document: Document, new_status: DocumentStatus) -> None:
    """Move a document to a new status, rejecting moves the pipeline never makes."""
    new_status = DocumentStatus(new_status)
    current = DocumentStatus(document.status)
    if new_status is not DocumentStatus.PROCESSING and new_status not in ALLOWED_TRANSITIONS.get(
        current, set()
    ):
        raise InvalidStatusTransitionError(
            f"Cannot move document {document.id} from {current.value} to {new_status.value}"
        )
    document.status = new_status.value
