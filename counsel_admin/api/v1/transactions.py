"""Read-only payment transaction endpoints."""

from fastapi import APIRouter, Depends, Path

from counsel_admin.core.security import get_current_admin
from counsel_admin.models.base import PageResponse
from counsel_admin.models.transaction import Transaction
from counsel_admin.services.transaction_service import (
    TransactionService,
    get_transaction_service,
)
from .common import PageParams, get_page_params

router = APIRouter(prefix="/transactions", dependencies=[Depends(get_current_admin)])


@router.get(
    "",
    response_model=PageResponse[Transaction],
    summary="List Transactions",
    operation_id="listTransactions",
    description="Page through payment transactions, oldest first.",
)
async def list_transactions(
    page: PageParams = Depends(get_page_params),
    service: TransactionService = Depends(get_transaction_service),
) -> PageResponse[Transaction]:
    result = await service.list_page(page.cursor, page.limit)
    return PageResponse.from_page(result)


@router.get(
    "/{transaction_id}",
    response_model=Transaction,
    summary="Get Transaction",
    operation_id="getTransaction",
)
async def get_transaction(
    transaction_id: str = Path(..., description="Transaction id"),
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return await service.get(transaction_id)
