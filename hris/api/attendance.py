import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from hris.api.deps import get_attendance_engine, get_reporting
from hris.core.middleware import get_scope
from hris.core.scope import CallerScope
from hris.db.models import AttendanceRecord
from hris.schemas.attendance import AttendanceRecordResponse, ClockRequest
from hris.schemas.stats import AttendanceStats
from hris.services.attendance import AttendanceEngine
from hris.services.reporting import ReportingService

router = APIRouter()


def _to_response(
    record: AttendanceRecord,
    full_name: str | None = None,
    employee_code: str | None = None,
) -> AttendanceRecordResponse:
    response = AttendanceRecordResponse.model_validate(record)
    response.full_name = full_name
    response.employee_code = employee_code
    return response


@router.get(
    "/",
    response_model=list[AttendanceRecordResponse],
    summary="List attendance records (own records only for employees)",
)
async def list_attendance(
    employee_id: uuid.UUID | None = Query(default=None),
    start_date: date | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    end_date: date | None = Query(default=None, description="ISO date YYYY-MM-DD"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    scope: CallerScope = Depends(get_scope),
    engine: AttendanceEngine = Depends(get_attendance_engine),
) -> list[AttendanceRecordResponse]:
    rows = await engine.list_records(scope, employee_id, start_date, end_date, limit)
    return [_to_response(r["record"], r["full_name"], r["employee_code"]) for r in rows]


@router.get(
    "/today/{employee_id}",
    response_model=AttendanceRecordResponse | None,
    summary="Today's attendance record for an employee",
)
async def get_today(
    employee_id: uuid.UUID,
    scope: CallerScope = Depends(get_scope),
    engine: AttendanceEngine = Depends(get_attendance_engine),
) -> AttendanceRecordResponse | None:
    record = await engine.get_today(scope.resolve_target(employee_id))
    return _to_response(record) if record is not None else None


@router.post(
    "/clock-in",
    response_model=AttendanceRecordResponse,
    summary="Open today's attendance session",
)
async def clock_in(
    body: ClockRequest,
    scope: CallerScope = Depends(get_scope),
    engine: AttendanceEngine = Depends(get_attendance_engine),
) -> AttendanceRecordResponse:
    record = await engine.clock_in(
        scope.resolve_target(body.employee_id),
        location=body.location,
        photo_url=body.photo_url,
    )
    return _to_response(record)


@router.post(
    "/clock-out",
    response_model=AttendanceRecordResponse,
    summary="Close today's attendance session",
)
async def clock_out(
    body: ClockRequest,
    scope: CallerScope = Depends(get_scope),
    engine: AttendanceEngine = Depends(get_attendance_engine),
) -> AttendanceRecordResponse:
    record = await engine.clock_out(
        scope.resolve_target(body.employee_id),
        location=body.location,
        photo_url=body.photo_url,
    )
    return _to_response(record)


@router.get(
    "/stats/{employee_id}",
    response_model=AttendanceStats,
    summary="Monthly attendance statistics",
)
async def get_stats(
    employee_id: uuid.UUID,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1970, le=9999),
    scope: CallerScope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> AttendanceStats:
    return await reporting.attendance_stats(scope, employee_id, month, year)
