"""Payment transaction schemas (collection ``transactions``, read-only)."""

from enum import Enum

from pydantic import Field, computed_field

from counsel_admin.utils.timestamps import format_date
from .base import StoredRecord


class TransactionStatus(str, Enum):
    """Payment outcome."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


class Transaction(StoredRecord):
    user_id: str = ""
    order_id: str = ""
    payment_id: str = ""
    amount: float = Field(default=0, ge=0)
    currency: str = "INR"
    status: TransactionStatus = TransactionStatus.PENDING

    @computed_field(alias="createdDate")
    @property
    def created_date(self) -> str:
        return format_date(self.created_at)
