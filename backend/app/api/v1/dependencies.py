from collections.abc import Generator
from functools import lru_cache

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import get_current_user, get_identity_verifier
from app.db.session import SessionLocal
from app.services.storage import ObjectStore
from app.services.summarizer import Summarizer
from app.services.text_extractor import TextExtractor


def get_db() -> Generator[Session, None, None]:
    """Yield a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.firebase.object_store()


@lru_cache
def get_text_extractor() -> TextExtractor:
    return TextExtractor.from_settings(settings)


@lru_cache
def get_summarizer() -> Summarizer:
    return Summarizer.from_settings(settings)


__all__ = [
    "get_db",
    "get_current_user",
    "get_identity_verifier",
    "get_object_store",
    "get_summarizer",
    "get_text_extractor",
]
