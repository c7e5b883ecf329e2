"""
Cursor pagination over document store collections.

- CursorPager: stateless page fetcher; the continuation cursor is an opaque
  token owned by the caller and passed back for the next page.
- PagedList: accumulated "load more" list for callers that keep view state
  in memory. Failures are recorded as a message and never clear what was
  already loaded.
"""

import base64
import binascii
import json
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from pydantic import ValidationError

from counsel_admin.core.config import settings
from counsel_admin.core.document_store import (
    CREATED_AT,
    DocumentStore,
    StoreCursor,
)
from counsel_admin.core.exceptions import CounselAdminError, InvalidCursorError
from counsel_admin.core.logging import get_service_logger
from counsel_admin.models.base import Page
from counsel_admin.utils.timestamps import normalize_timestamp

logger = get_service_logger("pager")

T = TypeVar("T")


def encode_cursor(cursor: StoreCursor) -> str:
    """Serialise a store position into an opaque url-safe token."""
    raw = json.dumps(
        {"v": cursor.value.isoformat(), "id": cursor.id}, separators=(",", ":")
    ).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(token: str) -> StoreCursor:
    """
    Parse a token produced by ``encode_cursor``.

    Raises:
        InvalidCursorError: If the token is malformed
    """
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        value = normalize_timestamp(payload["v"])
        record_id = payload["id"]
    except (binascii.Error, ValueError, KeyError, TypeError):
        raise InvalidCursorError()

    if value is None or not isinstance(record_id, str) or not record_id:
        raise InvalidCursorError()
    return StoreCursor(value=value, id=record_id)


class CursorPager(Generic[T]):
    """Fetch pages of one collection ordered by a timestamp field."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        parse: Callable[[Dict[str, Any]], T],
        order_by: str = CREATED_AT,
        descending: bool = False,
        page_size: Optional[int] = None,
    ):
        self.store = store
        self.collection = collection
        self.parse = parse
        self.order_by = order_by
        self.descending = descending
        self.page_size = page_size or settings.DEFAULT_PAGE_SIZE

    async def fetch_page(
        self, cursor: Optional[str] = None, limit: Optional[int] = None
    ) -> Page[T]:
        """
        Fetch the page following ``cursor`` (the first page when None).

        Args:
            cursor: Token returned as ``next_cursor`` by the previous page
            limit: Page size override

        Returns:
            Page whose ``next_cursor`` is None once fewer than ``limit``
            records came back
        """
        page_size = limit or self.page_size
        start_after = decode_cursor(cursor) if cursor else None

        documents, last = await self.store.query_page(
            self.collection,
            order_by=self.order_by,
            descending=self.descending,
            limit=page_size,
            start_after=start_after,
        )

        items: List[T] = []
        for document in documents:
            try:
                items.append(self.parse(document))
            except ValidationError as e:
                logger.error(
                    "Skipping malformed record",
                    collection=self.collection,
                    document_id=document.get("id"),
                    error=str(e),
                )

        next_cursor = None
        if len(documents) >= page_size and last is not None:
            next_cursor = encode_cursor(last)

        return Page(items=items, next_cursor=next_cursor)


class PagedList(Generic[T]):
    """In-memory accumulated listing with "load more" semantics."""

    def __init__(
        self,
        pager: CursorPager[T],
        label: str = "records",
        key: Callable[[T], str] = lambda record: record.id,
    ):
        self.pager = pager
        self.label = label
        self.key = key
        self.items: List[T] = []
        self.error: Optional[str] = None
        self.loading = False
        self._cursor: Optional[str] = None
        self._exhausted = False
        self._loaded = False

    @property
    def has_more(self) -> bool:
        return not self._loaded or not self._exhausted

    async def load_first(self) -> List[T]:
        """(Re)load from the start; the current list survives a failure."""
        page = await self._fetch(None)
        if page is None:
            return self.items
        self.items = list(page.items)
        self._advance(page)
        return self.items

    async def load_more(self) -> List[T]:
        """Append the next page; no-op once the listing is exhausted."""
        if not self._loaded:
            return await self.load_first()
        if self._exhausted:
            return self.items
        page = await self._fetch(self._cursor)
        if page is not None:
            self.items.extend(page.items)
            self._advance(page)
        return self.items

    def replace(self, record_id: str, **changes: Any) -> Optional[T]:
        """Apply an optimistic field update to the local copy of a record."""
        for index, item in enumerate(self.items):
            if self.key(item) == record_id:
                updated = item.model_copy(update=changes)
                self.items[index] = updated
                return updated
        return None

    def remove(self, record_id: str) -> bool:
        """Drop a record from the local list after it was deleted remotely."""
        before = len(self.items)
        self.items = [item for item in self.items if self.key(item) != record_id]
        return len(self.items) != before

    def _advance(self, page: Page[T]) -> None:
        self._loaded = True
        self._cursor = page.next_cursor
        self._exhausted = page.next_cursor is None

    async def _fetch(self, cursor: Optional[str]) -> Optional[Page[T]]:
        self.loading = True
        self.error = None
        try:
            return await self.pager.fetch_page(cursor)
        except CounselAdminError as e:
            self.error = f"Failed to fetch {self.label}. Please try again."
            logger.error(
                "Page load failed",
                collection=self.pager.collection,
                error=e.message,
            )
            return None
        finally:
            self.loading = False
