"""Lawyer application review endpoints."""

from fastapi import APIRouter, Depends, Path

from counsel_admin.core.security import AdminSession, get_current_admin
from counsel_admin.models.base import PageResponse
from counsel_admin.models.lawyer import LawyerApplication, LawyerApprovalResponse
from counsel_admin.services.lawyer_service import LawyerService, get_lawyer_service
from .common import PageParams, get_page_params, log_operation_start, log_operation_success

router = APIRouter(prefix="/lawyers", dependencies=[Depends(get_current_admin)])

BUSY_RESPONSE = {
    409: {"description": "An approval update for this lawyer is already in progress"}
}


@router.get(
    "",
    response_model=PageResponse[LawyerApplication],
    summary="List Lawyer Applications",
    operation_id="listLawyers",
    description="""Page through lawyer onboarding applications, newest first.

Pass the `next_cursor` of a response as `cursor` to fetch the following page;
`next_cursor` is null once the listing is exhausted.""",
)
async def list_lawyers(
    page: PageParams = Depends(get_page_params),
    service: LawyerService = Depends(get_lawyer_service),
) -> PageResponse[LawyerApplication]:
    result = await service.list_page(page.cursor, page.limit)
    return PageResponse.from_page(result)


@router.get(
    "/{lawyer_id}",
    response_model=LawyerApplication,
    summary="Get Lawyer Application",
    operation_id="getLawyer",
)
async def get_lawyer(
    lawyer_id: str = Path(..., description="Application id"),
    service: LawyerService = Depends(get_lawyer_service),
) -> LawyerApplication:
    return await service.get(lawyer_id)


@router.post(
    "/{lawyer_id}/approve",
    response_model=LawyerApprovalResponse,
    summary="Approve Lawyer",
    operation_id="approveLawyer",
    responses=BUSY_RESPONSE,
)
async def approve_lawyer(
    lawyer_id: str = Path(..., description="Application id"),
    service: LawyerService = Depends(get_lawyer_service),
    session: AdminSession = Depends(get_current_admin),
) -> LawyerApprovalResponse:
    log_operation_start("Lawyer approval", lawyer_id=lawyer_id, admin=session.email)
    lawyer = await service.approve(lawyer_id)
    log_operation_success("Lawyer approval", lawyer_id=lawyer_id)
    return LawyerApprovalResponse(message="Lawyer approved successfully!", lawyer=lawyer)


@router.post(
    "/{lawyer_id}/disapprove",
    response_model=LawyerApprovalResponse,
    summary="Disapprove Lawyer",
    operation_id="disapproveLawyer",
    responses=BUSY_RESPONSE,
)
async def disapprove_lawyer(
    lawyer_id: str = Path(..., description="Application id"),
    service: LawyerService = Depends(get_lawyer_service),
    session: AdminSession = Depends(get_current_admin),
) -> LawyerApprovalResponse:
    log_operation_start("Lawyer disapproval", lawyer_id=lawyer_id, admin=session.email)
    lawyer = await service.disapprove(lawyer_id)
    log_operation_success("Lawyer disapproval", lawyer_id=lawyer_id)
    return LawyerApprovalResponse(message="Lawyer disapproved.", lawyer=lawyer)
