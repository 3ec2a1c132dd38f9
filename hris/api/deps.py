from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hris.db.session import get_db
from hris.services.attendance import AttendanceEngine
from hris.services.clock import Clock, get_clock
from hris.services.leave import LeaveWorkflowEngine
from hris.services.reporting import ReportingService


def get_attendance_engine(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AttendanceEngine:
    return AttendanceEngine(db, clock)


def get_leave_engine(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LeaveWorkflowEngine:
    return LeaveWorkflowEngine(db, clock)


def get_reporting(
    attendance: AttendanceEngine = Depends(get_attendance_engine),
    leave: LeaveWorkflowEngine = Depends(get_leave_engine),
    clock: Clock = Depends(get_clock),
) -> ReportingService:
    return ReportingService(attendance, leave, clock)
