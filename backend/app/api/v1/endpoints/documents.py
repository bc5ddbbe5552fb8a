from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import (
    get_current_user,
    get_db,
    get_object_store,
    get_text_extractor,
)
from app.core.config import settings
from app.crud import document as document_crud
from app.models.document import DocumentStatus
from app.schemas.auth import CallerIdentity
from app.schemas.document import DocumentCreate, DocumentRead, DocumentUpdate
from app.services.pipeline import DocumentPipeline
from app.services.storage import ObjectStore
from app.services.text_extractor import TextExtractor

router = APIRouter()


@router.post("", response_model=DocumentRead, status_code=201)
async def create_document(
    payload: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> DocumentRead:
    return document_crud.create_document(db, payload, owner_id=current_user.id)


@router.get("", response_model=list[DocumentRead])
async def list_documents(
    status_filter: DocumentStatus | None = Query(default=None, alias="status"),
    tag: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> list[DocumentRead]:
    return document_crud.list_documents(
        db, owner_id=current_user.id, status=status_filter, tag=tag, search=search
    )


@router.get("/{document_id}", response_model=DocumentRead)
async def get_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> DocumentRead:
    return document_crud.get_document(db, document_id, owner_id=current_user.id)


@router.patch("/{document_id}", response_model=DocumentRead)
async def update_document(
    document_id: UUID,
    payload: DocumentUpdate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> DocumentRead:
    return document_crud.update_document(db, document_id, payload, owner_id=current_user.id)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    """Delete the stored file, then the document."""
    document = document_crud.get_document(db, document_id, owner_id=current_user.id)
    store.delete(document.file_url)
    document_crud.delete_document(db, document_id, owner_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{document_id}/process", response_model=DocumentRead)
async def process_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    extractor: TextExtractor = Depends(get_text_extractor),
) -> DocumentRead:
    """Run extraction and the fallback summary synchronously; failures leave the document Failed."""
    pipeline = DocumentPipeline(
        db, extractor, store, summary_length=settings.DOCUMENT_SUMMARY_LENGTH
    )
    return await pipeline.process(document_id, owner_id=current_user.id)
