"""ORM models."""

# Import all models so they are registered with SQLAlchemy
from app.models.contract import Contract, ContractStatus, ContractVersion  # noqa
from app.models.document import Document, DocumentStatus  # noqa

__all__ = [
    "Contract",
    "ContractStatus",
    "ContractVersion",
    "Document",
    "DocumentStatus",
]
