"""
Upload -> extract -> summarize -> persist orchestration.

Both pipelines run inside the request that triggers them. Documents carry a
status through the run; contract status is left to explicit status updates.
"""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from app.crud.contract import get_contract
from app.crud.document import get_document, transition_status
from app.models.contract import Contract
from app.models.document import Document, DocumentStatus
from app.services.storage import ObjectStore
from app.services.summarizer import Summarizer, SummaryResult
from app.services.text_extractor import TextExtractor

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_LENGTH = 200


def fallback_summary(text: str, limit: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """First ``limit`` characters of the text, with an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class DocumentPipeline:
    def __init__(
        self,
        db: Session,
        extractor: TextExtractor,
        store: ObjectStore,
        summary_length: int = DEFAULT_SUMMARY_LENGTH,
    ) -> None:
        self.db = db
        self.extractor = extractor
        self.store = store
        self.summary_length = summary_length

    async def process(self, document_id: UUID, owner_id: str | None = None) -> Document:
        """
        Extract and summarize a document, tracking progress in its status.

        Re-running after a failure starts again from Processing. Any error while
        fetching or extracting marks the document Failed and is re-raised;
        extracted text and summary keep their previous values in that case.
        """
        document = get_document(self.db, document_id, owner_id)

        transition_status(document, DocumentStatus.PROCESSING)
        self.db.commit()
        logger.info("Processing document %s", document_id)

        try:
            download_url = self.store.get_download_url(document.file_url)
            text = await self.extractor.extract(download_url, document.file_type)
        except Exception:
            logger.warning("Extraction failed for document %s", document_id, exc_info=True)
            transition_status(document, DocumentStatus.FAILED)
            self.db.commit()
            raise

        document.extracted_text = text
        document.summary = fallback_summary(text, self.summary_length)
        transition_status(document, DocumentStatus.COMPLETED)
        self.db.commit()
        self.db.refresh(document)
        logger.info("Document %s processed (%s chars)", document_id, len(text))
        return document


class ContractPipeline:
    def __init__(
        self,
        db: Session,
        extractor: TextExtractor,
        summarizer: Summarizer,
        store: ObjectStore,
    ) -> None:
        self.db = db
        self.extractor = extractor
        self.summarizer = summarizer
        self.store = store

    async def process(self, contract_id: UUID, owner_id: str | None = None) -> Contract:
        contract = get_contract(self.db, contract_id, owner_id)

        download_url = self.store.get_download_url(contract.file_url)
        text = await self.extractor.extract(download_url, contract.file_type)
        result: SummaryResult = await self.summarizer.summarize(text)
        if result.degraded:
            logger.warning("Contract %s summarized in degraded mode: %s", contract_id, result.reason)

        contract.extracted_text = text
        contract.summary = result.text
        self.db.commit()
        logger.info("Contract %s processed (%s chars)", contract_id, len(text))
        return get_contract(self.db, contract_id)
