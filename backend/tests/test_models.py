"""
Checks that the ORM metadata and the Alembic migration describe the same schema.
"""
import re
from pathlib import Path

from app.db.base import Base

MIGRATIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _migration_indexes() -> set[tuple[str, str, tuple[str, ...]]]:
    pattern = re.compile(r"op\.create_index\('(\w+)', '(\w+)', \[([^\]]*)\]")
    indexes = set()
    for migration in MIGRATIONS.glob("*.py"):
        for name, table, columns in pattern.findall(migration.read_text()):
            indexes.add((name, table, tuple(c.strip(" '\"") for c in columns.split(","))))
    return indexes


def _model_indexes() -> set[tuple[str, str, tuple[str, ...]]]:
    return {
        (index.name, table.name, tuple(column.name for column in index.columns))
        for table in Base.metadata.sorted_tables
        for index in table.indexes
    }


def test_migration_indexes_match_models():
    assert _migration_indexes() == _model_indexes()


def test_document_status_is_indexed():
    assert ("ix_documents_status", "documents", ("status",)) in _model_indexes()
