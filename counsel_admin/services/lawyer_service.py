"""
Lawyer Service - onboarding application review.

Applications are read newest first. The only write is the approval flag;
each row allows one outstanding approval update at a time while different
rows proceed concurrently.
"""

import asyncio
from typing import Optional, Set

from counsel_admin.core.config import settings
from counsel_admin.core.document_store import (
    CREATED_AT,
    DocumentStore,
    document_store,
)
from counsel_admin.core.exceptions import RecordBusyError, RecordNotFoundError
from counsel_admin.core.logging import get_service_logger
from counsel_admin.models.base import Page
from counsel_admin.models.lawyer import LawyerApplication
from counsel_admin.services.pager import CursorPager


class LawyerService:
    """Service for listing and approving lawyer applications."""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        collection: Optional[str] = None,
    ):
        self.store = store if store is not None else document_store
        self.collection = collection or settings.LAWYERS_COLLECTION
        self.logger = get_service_logger("lawyer")
        self.pager = CursorPager(
            self.store,
            self.collection,
            parse=LawyerApplication.model_validate,
            order_by=CREATED_AT,
            descending=True,
        )
        self._in_flight: Set[str] = set()
        self._lock = asyncio.Lock()

    async def list_page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Page[LawyerApplication]:
        """Page of applications, newest first."""
        return await self.pager.fetch_page(cursor, limit)

    async def get(self, lawyer_id: str) -> LawyerApplication:
        """
        Fetch one application.

        Raises:
            RecordNotFoundError: If no application has this id
        """
        document = await self.store.get(self.collection, lawyer_id)
        if document is None:
            raise RecordNotFoundError(
                "Lawyer application not found",
                collection=self.collection,
                record_id=lawyer_id,
            )
        return LawyerApplication.model_validate(document)

    def is_busy(self, lawyer_id: str) -> bool:
        return lawyer_id in self._in_flight

    async def set_approval(self, lawyer_id: str, approved: bool) -> LawyerApplication:
        """
        Write ``isApproved`` for one application.

        Args:
            lawyer_id: Application id
            approved: New approval state

        Returns:
            The updated application

        Raises:
            RecordBusyError: If an update for this id is still outstanding
            RecordNotFoundError: If the application does not exist
            DocumentStoreError: If the store write fails
        """
        async with self._lock:
            if lawyer_id in self._in_flight:
                self.logger.warning(
                    "Approval update already in flight", lawyer_id=lawyer_id
                )
                raise RecordBusyError(lawyer_id)
            self._in_flight.add(lawyer_id)

        try:
            document = await self.store.update(
                self.collection,
                lawyer_id,
                {"isApproved": approved},
            )
        finally:
            async with self._lock:
                self._in_flight.discard(lawyer_id)

        self.logger.info(
            "Lawyer approval updated", lawyer_id=lawyer_id, approved=approved
        )
        return LawyerApplication.model_validate(document)

    async def approve(self, lawyer_id: str) -> LawyerApplication:
        return await self.set_approval(lawyer_id, True)

    async def disapprove(self, lawyer_id: str) -> LawyerApplication:
        return await self.set_approval(lawyer_id, False)


# Global service instance
lawyer_service = LawyerService()


def get_lawyer_service() -> LawyerService:
    """FastAPI dependency returning the shared lawyer service."""
    return lawyer_service
