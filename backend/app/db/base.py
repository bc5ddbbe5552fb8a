"""Import all models here for Alembic migrations."""
from app.db.base_class import Base  # noqa: F401
from app.models.contract import Contract, ContractVersion  # noqa: F401
from app.models.document import Document  # noqa: F401
