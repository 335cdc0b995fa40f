"""Reading and writing documents in the local datastore."""

import uuid
from collections.abc import Iterable
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from compagnon.catalog import EquipmentValidationError, ReferenceCatalog, flatten_record
from compagnon.sheet import CharacterRecord

from .models import Personnage, RefItem

logger = structlog.get_logger(__name__)


async def save_personnage(session: AsyncSession, record: CharacterRecord) -> CharacterRecord:
    """
    Insert or replace a character document.

    Args:
        session: Database session
        record: Character to store; a record without id gets a new one

    Returns:
        The stored record (with its id filled in)
    """
    if not record.id:
        record = record.model_copy(update={"id": str(uuid.uuid4())})

    await session.merge(Personnage(id=record.id, name=record.name, data=record.to_document()))
    await session.flush()

    logger.info("personnage_saved", personnage_id=record.id, name=record.name)
    return record


async def get_personnage(session: AsyncSession, personnage_id: str) -> CharacterRecord | None:
    """Load a character document by id."""
    row = await session.get(Personnage, personnage_id)
    if row is None:
        return None
    return CharacterRecord.from_document(row.data)


async def list_personnages(session: AsyncSession) -> list[tuple[str, str]]:
    """
    List the stored characters.

    Returns:
        (id, name) pairs sorted by name
    """
    result = await session.execute(
        select(Personnage.id, Personnage.name).order_by(Personnage.name)
    )
    return [(row.id, row.name) for row in result.all()]


async def delete_personnage(session: AsyncSession, personnage_id: str) -> bool:
    """
    Delete a character document.

    Returns:
        True if a document was deleted
    """
    row = await session.get(Personnage, personnage_id)
    if row is None:
        return False

    await session.delete(row)
    await session.flush()
    logger.info("personnage_deleted", personnage_id=personnage_id)
    return True


async def save_ref_items(session: AsyncSession, records: Iterable[dict[str, Any]]) -> int:
    """
    Store reference equipment records, replacing existing ones with the same id.

    Records keep their original shape; id, category and name are read from
    the flattened form.

    Args:
        session: Database session
        records: Raw reference records (nested or flat)

    Returns:
        Number of records stored
    """
    result = await session.execute(select(RefItem.id))
    existing_ids = {row[0] for row in result.all()}

    added = 0
    updated = 0
    for record in records:
        flat = flatten_record(record)
        if not flat.get("id"):
            raise EquipmentValidationError(f"Reference record without id: {record!r}")
        item = RefItem(
            id=str(flat.get("id", "")),
            category=str(flat.get("category", "")),
            name=str(flat.get("name", "")),
            data=dict(record),
        )
        if item.id in existing_ids:
            await session.merge(item)
            updated += 1
        else:
            session.add(item)
            existing_ids.add(item.id)
            added += 1

    await session.flush()

    logger.info("ref_items_saved", added=added, updated=updated)
    return added + updated


async def load_ref_items(session: AsyncSession) -> ReferenceCatalog:
    """
    Build the reference catalog from the stored equipment records.

    Raises:
        EquipmentValidationError: If a stored record is invalid
    """
    result = await session.execute(select(RefItem.data).order_by(RefItem.category, RefItem.name))
    catalog = ReferenceCatalog.from_records(row[0] for row in result.all())
    logger.debug("ref_items_loaded", count=len(catalog))
    return catalog
