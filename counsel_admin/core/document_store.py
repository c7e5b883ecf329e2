"""
Document store client.

Collections of JSON documents addressed by collection name + id, persisted
in a single SQLAlchemy table. Exposes the operations the admin screens
need:
- ordered, limited reads continued after a cursor (keyset pagination)
- point get / add / update (merge) / delete by id

Timestamps are normalised at this boundary so callers always see aware
UTC datetimes under ``createdAt`` / ``updatedAt``.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError

from counsel_admin.core.db_client import DatabaseManager, db
from counsel_admin.core.db_models import DocumentRecord
from counsel_admin.core.exceptions import DocumentStoreError, RecordNotFoundError
from counsel_admin.core.logging import get_db_logger
from counsel_admin.utils.timestamps import normalize_timestamp, utc_now

logger = get_db_logger()

CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

ORDER_COLUMNS = {
    CREATED_AT: DocumentRecord.created_at,
    UPDATED_AT: DocumentRecord.updated_at,
}

RESERVED_KEYS = ("id", CREATED_AT, UPDATED_AT)


@dataclass(frozen=True)
class StoreCursor:
    """Position of the last record of a page: its ordering value and id."""

    value: datetime
    id: str


def _to_document(record: DocumentRecord) -> Dict[str, Any]:
    document = dict(record.data or {})
    document["id"] = record.id
    document[CREATED_AT] = normalize_timestamp(record.created_at)
    document[UPDATED_AT] = normalize_timestamp(record.updated_at)
    return document


def _split_body(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in RESERVED_KEYS}


class DocumentStore:
    """Async document store over the ``documents`` table."""

    def __init__(self, database: Optional[DatabaseManager] = None):
        self._db = database or db

    async def query_page(
        self,
        collection: str,
        order_by: str = CREATED_AT,
        descending: bool = False,
        limit: int = 10,
        start_after: Optional[StoreCursor] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[StoreCursor]]:
        """
        Read up to ``limit`` documents ordered by ``order_by``.

        Args:
            collection: Collection name
            order_by: Ordering field (createdAt or updatedAt)
            descending: Newest first when True
            limit: Maximum number of documents to return
            start_after: Cursor of the last document already read

        Returns:
            Tuple of (documents, cursor of the last returned document or None)

        Raises:
            DocumentStoreError: On unsupported ordering or database failure
        """
        column = ORDER_COLUMNS.get(order_by)
        if column is None:
            raise DocumentStoreError(
                f"Unsupported ordering field: {order_by}",
                {"supported": sorted(ORDER_COLUMNS)},
            )
        if limit < 1:
            raise DocumentStoreError("Page limit must be at least 1")

        stmt = select(DocumentRecord).where(DocumentRecord.collection == collection)

        if start_after is not None:
            value = normalize_timestamp(start_after.value)
            if descending:
                stmt = stmt.where(
                    or_(
                        column < value,
                        and_(column == value, DocumentRecord.id < start_after.id),
                    )
                )
            else:
                stmt = stmt.where(
                    or_(
                        column > value,
                        and_(column == value, DocumentRecord.id > start_after.id),
                    )
                )

        if descending:
            stmt = stmt.order_by(column.desc(), DocumentRecord.id.desc())
        else:
            stmt = stmt.order_by(column.asc(), DocumentRecord.id.asc())
        stmt = stmt.limit(limit)

        try:
            async with self._db.session() as session:
                result = await session.execute(stmt)
                records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Document page query failed",
                collection=collection,
                order_by=order_by,
                error=str(e),
            )
            raise DocumentStoreError(f"Failed to query {collection}: {e}")

        documents = [_to_document(record) for record in records]
        cursor = None
        if documents:
            last = documents[-1]
            cursor = StoreCursor(value=last[order_by], id=last["id"])

        logger.debug(
            "Document page fetched",
            collection=collection,
            count=len(documents),
            after=start_after.id if start_after else None,
        )
        return documents, cursor

    async def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document, or None when it does not exist."""
        try:
            async with self._db.session() as session:
                record = await session.get(DocumentRecord, (collection, document_id))
                return _to_document(record) if record else None
        except SQLAlchemyError as e:
            logger.error(
                "Document read failed",
                collection=collection,
                document_id=document_id,
                error=str(e),
            )
            raise DocumentStoreError(f"Failed to read {collection}/{document_id}: {e}")

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """
        Insert a new document with a generated id.

        ``createdAt`` / ``updatedAt`` in ``data`` are honoured when present,
        otherwise both default to now.

        Returns:
            The new document id
        """
        document_id = str(uuid.uuid4())
        now = utc_now()
        created_at = normalize_timestamp(data.get(CREATED_AT)) or now
        updated_at = normalize_timestamp(data.get(UPDATED_AT)) or created_at

        try:
            async with self._db.session() as session:
                session.add(
                    DocumentRecord(
                        collection=collection,
                        id=document_id,
                        data=_split_body(data),
                        created_at=created_at,
                        updated_at=updated_at,
                    )
                )
        except SQLAlchemyError as e:
            logger.error("Document insert failed", collection=collection, error=str(e))
            raise DocumentStoreError(f"Failed to insert into {collection}: {e}")

        logger.info("Document created", collection=collection, document_id=document_id)
        return document_id

    async def update(
        self, collection: str, document_id: str, patch: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Merge ``patch`` into an existing document.

        Returns:
            The updated document

        Raises:
            RecordNotFoundError: If the document does not exist
            DocumentStoreError: On database failure
        """
        try:
            async with self._db.session() as session:
                record = await session.get(DocumentRecord, (collection, document_id))
                if record is None:
                    raise RecordNotFoundError(
                        "Record not found", collection=collection, record_id=document_id
                    )

                # Reassign so the JSON column is flagged dirty
                record.data = {**(record.data or {}), **_split_body(patch)}
                if patch.get(UPDATED_AT) is not None:
                    record.updated_at = normalize_timestamp(patch[UPDATED_AT])
                await session.flush()
                document = _to_document(record)
        except SQLAlchemyError as e:
            logger.error(
                "Document update failed",
                collection=collection,
                document_id=document_id,
                error=str(e),
            )
            raise DocumentStoreError(
                f"Failed to update {collection}/{document_id}: {e}"
            )

        logger.info(
            "Document updated",
            collection=collection,
            document_id=document_id,
            fields=sorted(patch),
        )
        return document

    async def delete(self, collection: str, document_id: str) -> None:
        """
        Delete a document by id.

        Raises:
            RecordNotFoundError: If the document does not exist
            DocumentStoreError: On database failure
        """
        try:
            async with self._db.session() as session:
                record = await session.get(DocumentRecord, (collection, document_id))
                if record is None:
                    raise RecordNotFoundError(
                        "Record not found", collection=collection, record_id=document_id
                    )
                await session.delete(record)
        except SQLAlchemyError as e:
            logger.error(
                "Document delete failed",
                collection=collection,
                document_id=document_id,
                error=str(e),
            )
            raise DocumentStoreError(
                f"Failed to delete {collection}/{document_id}: {e}"
            )

        logger.info("Document deleted", collection=collection, document_id=document_id)


# Global store instance
document_store = DocumentStore()
