"""Persistence operations for contracts and their versions."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import unquote, urlparse
from uuid import UUID

import pydantic
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import NotFoundError, ValidationError
from app.models.contract import Contract, ContractStatus, ContractVersion
from app.schemas.contract import ContractCreate, ContractUpdate

logger = logging.getLogger(__name__)

INITIAL_VERSION_NAME = "Initial Version"


def validation_error_from(exc: pydantic.ValidationError, message: str) -> ValidationError:
    """Convert a pydantic error into the API's field-level ValidationError."""
    details = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return ValidationError(message, details=details)


def _coerce_create(data: ContractCreate | Mapping[str, Any]) -> ContractCreate:
    if isinstance(data, ContractCreate):
        return data
    try:
        return ContractCreate.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise validation_error_from(exc, "Invalid contract metadata") from exc


def _filename_from_url(file_url: str) -> str:
    path = unquote(urlparse(file_url).path)
    return PurePosixPath(path).name or file_url


def create_contract(
    db: Session, data: ContractCreate | Mapping[str, Any], owner_id: str
) -> Contract:
    """Persist a new contract together with its initial version."""
    contract_in = _coerce_create(data)

    contract = Contract(
        title=contract_in.title,
        description=contract_in.description,
        owner_id=owner_id,
        original_filename=contract_in.original_filename
        or _filename_from_url(contract_in.file_url),
        file_url=contract_in.file_url,
        file_type=contract_in.file_type,
        file_size=contract_in.file_size,
        status=(contract_in.status or ContractStatus.DRAFT).value,
        expiry_date=contract_in.expiry_date,
        summary=contract_in.summary,
        extracted_text=contract_in.extracted_text,
        last_version_number=1,
    )
    ContractVersion(
        contract=contract,
        file_url=contract_in.file_url,
        version_number=1,
        version_name=INITIAL_VERSION_NAME,
    )

    db.add(contract)
    db.commit()
    logger.info("Created contract %s for owner %s", contract.id, owner_id)
    return get_contract(db, contract.id)


def list_contracts(db: Session, owner_id: str) -> list[Contract]:
    stmt = (
        select(Contract)
        .options(selectinload(Contract.versions))
        .where(Contract.owner_id == owner_id)
        .order_by(Contract.created_at.desc())
    )
    return list(db.scalars(stmt))


def get_contract(db: Session, contract_id: UUID, owner_id: str | None = None) -> Contract:
    """Load a contract with its versions, optionally scoped to an owner."""
    stmt = (
        select(Contract)
        .options(selectinload(Contract.versions))
        .where(Contract.id == contract_id)
        .execution_options(populate_existing=True)
    )
    contract = db.scalar(stmt)
    if contract is None or (owner_id is not None and contract.owner_id != owner_id):
        raise NotFoundError(f"Contract with ID {contract_id} not found")
    return contract


def list_versions(
    db: Session, contract_id: UUID, owner_id: str | None = None
) -> list[ContractVersion]:
    get_contract(db, contract_id, owner_id)
    stmt = (
        select(ContractVersion)
        .where(ContractVersion.contract_id == contract_id)
        .order_by(ContractVersion.version_number)
    )
    return list(db.scalars(stmt))


def _reserve_version_number(db: Session, contract_id: UUID) -> int:
    # The UPDATE holds the contract row lock until commit, serializing writers per contract.
    result = db.execute(
        update(Contract)
        .where(Contract.id == contract_id)
        .values(last_version_number=Contract.last_version_number + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"Contract with ID {contract_id} not found")
    return db.scalar(
        select(Contract.last_version_number).where(Contract.id == contract_id)
    )


def add_version(
    db: Session,
    contract_id: UUID,
    file_url: str,
    version_name: str | None = None,
    description: str | None = None,
    owner_id: str | None = None,
) -> ContractVersion:
    """Append the next numbered version to a contract."""
    if not file_url:
        raise ValidationError(
            "File URL is required", details=[{"field": "fileUrl", "message": "required"}]
        )
    get_contract(db, contract_id, owner_id)

    try:
        version_number = _reserve_version_number(db, contract_id)
        version = ContractVersion(
            contract_id=contract_id,
            file_url=file_url,
            version_number=version_number,
            version_name=version_name or f"Version {version_number}",
            description=description,
        )
        db.add(version)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(version)
    logger.info("Added version %s to contract %s", version_number, contract_id)
    return version


def _apply(db: Session, contract: Contract, changes: Mapping[str, Any]) -> Contract:
    for field, value in changes.items():
        setattr(contract, field, value)
    db.commit()
    return get_contract(db, contract.id)


def update_status(
    db: Session, contract_id: UUID, status: ContractStatus, owner_id: str | None = None
) -> Contract:
    contract = get_contract(db, contract_id, owner_id)
    return _apply(db, contract, {"status": ContractStatus(status).value})


def update_summary(
    db: Session, contract_id: UUID, summary: str, owner_id: str | None = None
) -> Contract:
    contract = get_contract(db, contract_id, owner_id)
    return _apply(db, contract, {"summary": summary})


def update_extracted_text(
    db: Session, contract_id: UUID, text: str, owner_id: str | None = None
) -> Contract:
    contract = get_contract(db, contract_id, owner_id)
    return _apply(db, contract, {"extracted_text": text})


def update_contract(
    db: Session,
    contract_id: UUID,
    data: ContractUpdate | Mapping[str, Any],
    owner_id: str | None = None,
) -> Contract:
    """Shallow-merge the explicitly provided fields over the stored contract."""
    if not isinstance(data, ContractUpdate):
        try:
            data = ContractUpdate.model_validate(dict(data))
        except pydantic.ValidationError as exc:
            raise validation_error_from(exc, "Invalid contract update") from exc

    contract = get_contract(db, contract_id, owner_id)
    changes = data.model_dump(exclude_unset=True)
    if "status" in changes:
        changes["status"] = ContractStatus(changes["status"]).value
    return _apply(db, contract, changes)


def contract_file_urls(contract: Contract) -> list[str]:
    """Distinct file URLs referenced by a contract and its versions."""
    file_urls = [contract.file_url]
    for version in contract.versions:
        if version.file_url not in file_urls:
            file_urls.append(version.file_url)
    return file_urls


def delete_contract(db: Session, contract_id: UUID, owner_id: str | None = None) -> None:
    """Remove a contract; its versions are removed with it."""
    contract = get_contract(db, contract_id, owner_id)
    db.delete(contract)
    db.commit()
    logger.info("Deleted contract %s", contract_id)
