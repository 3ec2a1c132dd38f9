import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hris.api.deps import get_leave_engine, get_reporting
from hris.core.errors import NotFound
from hris.core.middleware import get_scope
from hris.core.scope import CallerScope
from hris.db.models import LeaveRequest
from hris.schemas.leave import (
    LeaveBalance,
    LeaveDecision,
    LeaveRequestCreate,
    LeaveRequestResponse,
)
from hris.services.leave import LeaveWorkflowEngine
from hris.services.reporting import ReportingService

router = APIRouter()


def _to_response(request: LeaveRequest, **joined: str | None) -> LeaveRequestResponse:
    """Build the response, filling in names joined from the employees table."""
    response = LeaveRequestResponse.model_validate(request)
    return response.model_copy(update=joined)


@router.get(
    "/",
    response_model=list[LeaveRequestResponse],
    summary="List leave requests (own requests only for employees)",
)
async def list_leave_requests(
    employee_id: uuid.UUID | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    start_date: date | None = Query(default=None, description="Requests starting on/after"),
    end_date: date | None = Query(default=None, description="Requests ending on/before"),
    scope: CallerScope = Depends(get_scope),
    engine: LeaveWorkflowEngine = Depends(get_leave_engine),
) -> list[LeaveRequestResponse]:
    rows = await engine.list_requests(scope, employee_id, status_filter, start_date, end_date)
    return [_to_response(**row) for row in rows]


@router.post(
    "/",
    response_model=LeaveRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a leave request",
)
async def create_leave_request(
    body: LeaveRequestCreate,
    scope: CallerScope = Depends(get_scope),
    engine: LeaveWorkflowEngine = Depends(get_leave_engine),
) -> LeaveRequestResponse:
    request = await engine.create_request(
        scope.resolve_target(body.employee_id),
        body.leave_type,
        body.start_date,
        body.end_date,
        body.reason,
    )
    return _to_response(request)


@router.get(
    "/balance/{employee_id}",
    response_model=LeaveBalance,
    summary="Leave entitlements, usage and balance for a year",
)
async def get_balance(
    employee_id: uuid.UUID,
    year: int | None = Query(default=None, ge=1970, le=9999),
    scope: CallerScope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> LeaveBalance:
    return await reporting.leave_balance(scope, employee_id, year)


@router.get(
    "/{request_id}",
    response_model=LeaveRequestResponse,
    summary="Get a single leave request",
)
async def get_leave_request(
    request_id: uuid.UUID,
    scope: CallerScope = Depends(get_scope),
    engine: LeaveWorkflowEngine = Depends(get_leave_engine),
) -> LeaveRequestResponse:
    request = await engine.get_request(request_id)
    # Employees only see their own requests; others look missing.
    if not scope.is_privileged and request.employee_id != scope.employee_id:
        raise NotFound("Leave request not found")
    return _to_response(request)


@router.put(
    "/{request_id}/status",
    response_model=LeaveRequestResponse,
    summary="Approve or reject a pending leave request (admin/manager)",
)
async def decide_leave_request(
    request_id: uuid.UUID,
    body: LeaveDecision,
    scope: CallerScope = Depends(get_scope),
    engine: LeaveWorkflowEngine = Depends(get_leave_engine),
) -> LeaveRequestResponse:
    scope.ensure_can_decide()
    request = await engine.decide(
        request_id,
        scope.require_own_employee(),
        body.status,
        body.rejection_reason,
    )
    return _to_response(request)
