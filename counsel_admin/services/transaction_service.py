"""Transaction Service - read-only payment history, oldest first."""

from typing import Optional

from counsel_admin.core.config import settings
from counsel_admin.core.document_store import CREATED_AT, DocumentStore, document_store
from counsel_admin.core.exceptions import RecordNotFoundError
from counsel_admin.core.logging import get_service_logger
from counsel_admin.models.base import Page
from counsel_admin.models.transaction import Transaction
from counsel_admin.services.pager import CursorPager


class TransactionService:
    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        collection: Optional[str] = None,
    ):
        self.store = store if store is not None else document_store
        self.collection = collection or settings.TRANSACTIONS_COLLECTION
        self.logger = get_service_logger("transaction")
        self.pager = CursorPager(
            self.store,
            self.collection,
            parse=Transaction.model_validate,
            order_by=CREATED_AT,
            descending=False,
        )

    async def list_page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Page[Transaction]:
        self.logger.debug("Listing transactions", cursor=cursor, limit=limit)
        return await self.pager.fetch_page(cursor, limit)

    async def get(self, transaction_id: str) -> Transaction:
        document = await self.store.get(self.collection, transaction_id)
        if document is None:
            raise RecordNotFoundError(
                "Transaction not found",
                collection=self.collection,
                record_id=transaction_id,
            )
        return Transaction.model_validate(document)


# Global service instance
transaction_service = TransactionService()


def get_transaction_service() -> TransactionService:
    return transaction_service
