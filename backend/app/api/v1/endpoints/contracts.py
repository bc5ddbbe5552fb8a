from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import (
    get_current_user,
    get_db,
    get_object_store,
    get_summarizer,
    get_text_extractor,
)
from app.core.exceptions import UnsupportedFormatError, ValidationError
from app.crud import contract as contract_crud
from app.schemas.auth import CallerIdentity
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
from app.services.pipeline import ContractPipeline
from app.services.storage import ObjectStore
from app.services.summarizer import Summarizer
from app.services.text_extractor import TextExtractor, count_tokens, detect_format

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/extract", response_model=TextExtractionResponse)
async def extract_text(
    payload: TextExtractionRequest,
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    extractor: TextExtractor = Depends(get_text_extractor),
) -> TextExtractionResponse:
    """Extract text from a stored file without touching any contract."""
    fmt = detect_format(payload.file_url)
    if fmt is None:
        raise UnsupportedFormatError(f"Unsupported file type for {payload.file_url}")

    download_url = store.get_download_url(payload.file_url)
    text = await extractor.extract(download_url, payload.file_type)
    return TextExtractionResponse(text=text, file_type=fmt.value, token_count=count_tokens(text))


@router.post("/summarize", response_model=TextSummaryResponse)
async def summarize_text(
    payload: TextSummaryRequest,
    current_user: CallerIdentity = Depends(get_current_user),
    summarizer: Summarizer = Depends(get_summarizer),
) -> TextSummaryResponse:
    result = await summarizer.summarize(payload.text)
    return TextSummaryResponse(summary=result.text, degraded=result.degraded)


@router.post("", response_model=ContractRead, status_code=201)
async def create_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractRead:
    return contract_crud.create_contract(db, payload, owner_id=current_user.id)


@router.get("", response_model=list[ContractRead])
async def list_contracts(
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> list[ContractRead]:
    return contract_crud.list_contracts(db, owner_id=current_user.id)


@router.get("/{contract_id}", response_model=ContractRead)
async def get_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractRead:
    return contract_crud.get_contract(db, contract_id, owner_id=current_user.id)


@router.patch("/{contract_id}", response_model=ContractRead)
async def update_contract(
    contract_id: UUID,
    payload: ContractUpdate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractRead:
    return contract_crud.update_contract(db, contract_id, payload, owner_id=current_user.id)


@router.delete("/{contract_id}", status_code=204)
async def delete_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    """Delete the contract's stored files, then the contract and its versions."""
    contract = contract_crud.get_contract(db, contract_id, owner_id=current_user.id)
    for file_url in contract_crud.contract_file_urls(contract):
        store.delete(file_url)
    contract_crud.delete_contract(db, contract_id, owner_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{contract_id}/status", response_model=ContractRead)
async def update_contract_status(
    contract_id: UUID,
    payload: ContractStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractRead:
    return contract_crud.update_status(db, contract_id, payload.status, owner_id=current_user.id)


@router.patch("/{contract_id}/summary", response_model=ContractRead)
async def update_contract_summary(
    contract_id: UUID,
    payload: ContractSummaryUpdate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractRead:
    return contract_crud.update_summary(db, contract_id, payload.summary, owner_id=current_user.id)


@router.post("/{contract_id}/summarize", response_model=ContractRead)
async def summarize_contract(
    contract_id: UUID,
    payload: ContractSummarizeRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    summarizer: Summarizer = Depends(get_summarizer),
) -> ContractRead:
    """Summarize the given text, or the contract's extracted text, and store the result."""
    contract = contract_crud.get_contract(db, contract_id, owner_id=current_user.id)
    text = (payload.text if payload else None) or contract.extracted_text
    if not text:
        raise ValidationError(
            "No text available to summarize",
            details=[{"field": "text", "message": "required when no text has been extracted"}],
        )

    result = await summarizer.summarize(text)
    if result.degraded:
        logger.warning("Contract %s summary degraded: %s", contract_id, result.reason)
    return contract_crud.update_summary(db, contract_id, result.text)


@router.post("/{contract_id}/process", response_model=ContractRead)
async def process_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    store: ObjectStore = Depends(get_object_store),
    extractor: TextExtractor = Depends(get_text_extractor),
    summarizer: Summarizer = Depends(get_summarizer),
) -> ContractRead:
    pipeline = ContractPipeline(db, extractor, summarizer, store)
    return await pipeline.process(contract_id, owner_id=current_user.id)


@router.post("/{contract_id}/metadata", response_model=ContractMetadata)
async def extract_contract_metadata(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
    summarizer: Summarizer = Depends(get_summarizer),
) -> ContractMetadata:
    contract = contract_crud.get_contract(db, contract_id, owner_id=current_user.id)
    if not contract.extracted_text:
        raise ValidationError("Contract has no extracted text; process it first")
    return await summarizer.extract_metadata(contract.extracted_text)


@router.get("/{contract_id}/versions", response_model=list[ContractVersionRead])
async def list_contract_versions(
    contract_id: UUID,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> list[ContractVersionRead]:
    return contract_crud.list_versions(db, contract_id, owner_id=current_user.id)


@router.post("/{contract_id}/versions", response_model=ContractVersionRead, status_code=201)
async def add_contract_version(
    contract_id: UUID,
    payload: ContractVersionCreate,
    db: Session = Depends(get_db),
    current_user: CallerIdentity = Depends(get_current_user),
) -> ContractVersionRead:
    return contract_crud.add_version(
        db,
        contract_id,
        file_url=payload.file_url,
        version_name=payload.version_name,
        description=payload.description,
        owner_id=current_user.id,
    )
