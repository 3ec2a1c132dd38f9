import uuid

from fastapi import APIRouter, Depends, Query

from hris.api.deps import get_reporting
from hris.core.middleware import get_scope
from hris.core.scope import CallerScope
from hris.schemas.stats import EmployeeSummary
from hris.services.reporting import ReportingService

router = APIRouter()


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeSummary,
    summary="Monthly attendance statistics and yearly leave balance for an employee",
)
async def get_employee_summary(
    employee_id: uuid.UUID,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1970, le=9999),
    scope: CallerScope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> EmployeeSummary:
    return await reporting.employee_summary(scope, employee_id, month, year)
