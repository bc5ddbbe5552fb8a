"""CRUD operations."""
from app.crud.contract import (
    add_version,
    contract_file_urls,
    create_contract,
    delete_contract,
    get_contract,
    list_contracts,
    list_versions,
    update_contract,
    update_extracted_text,
    update_status,
    update_summary,
)
from app.crud.document import (
    create_document,
    delete_document,
    get_document,
    list_documents,
    transition_status,
    update_document,
)

__all__ = [
    "add_version",
    "contract_file_urls",
    "create_contract",
    "delete_contract",
    "get_contract",
    "list_contracts",
    "list_versions",
    "update_contract",
    "update_extracted_text",
    "update_status",
    "update_summary",
    "create_document",
    "delete_document",
    "get_document",
    "list_documents",
    "transition_status",
    "update_document",
]
