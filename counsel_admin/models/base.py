"""Base classes shared by the per-collection record schemas.

Documents are stored with camelCase keys; the models expose snake_case
attributes and accept either spelling on input.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from counsel_admin.utils.timestamps import normalize_timestamp


class RecordModel(BaseModel):
    """Base for schemas mapped onto stored documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )


class StoredRecord(RecordModel):
    """Record read back from the document store."""

    id: str = Field(..., description="Document id")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")
    updated_at: Optional[datetime] = Field(None, description="Last update time (UTC)")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v):
        """Normalise stored timestamp shapes to aware UTC datetimes."""
        return normalize_timestamp(v)


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a cursor-paginated listing."""

    items: List[T] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(
        None,
        description="Opaque token for the next page; null once the listing is exhausted",
    )

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


class PageResponse(BaseModel, Generic[T]):
    """Page as returned by the list endpoints."""

    items: List[T]
    next_cursor: Optional[str] = None
    has_more: bool = False

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls(items=page.items, next_cursor=page.next_cursor, has_more=page.has_more)
