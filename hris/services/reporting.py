"""
Read-only aggregation over the attendance and leave engines.

Nothing here is cached: every call recomputes from the store.
"""

import uuid

from hris.core.scope import CallerScope
from hris.schemas.leave import LeaveBalance
from hris.schemas.stats import AttendanceStats, EmployeeSummary
from hris.services.attendance import AttendanceEngine
from hris.services.clock import Clock, system_clock
from hris.services.leave import LeaveWorkflowEngine


class ReportingService:
    def __init__(
        self,
        attendance: AttendanceEngine,
        leave: LeaveWorkflowEngine,
        clock: Clock = system_clock,
    ) -> None:
        self._attendance = attendance
        self._leave = leave
        self._clock = clock

    async def attendance_stats(
        self,
        scope: CallerScope,
        employee_id: uuid.UUID | None,
        month: int | None = None,
        year: int | None = None,
    ) -> AttendanceStats:
        today = self._clock.today()
        eid = scope.resolve_target(employee_id)
        return await self._attendance.compute_stats(
            eid, month or today.month, year or today.year
        )

    async def leave_balance(
        self,
        scope: CallerScope,
        employee_id: uuid.UUID | None,
        year: int | None = None,
    ) -> LeaveBalance:
        eid = scope.resolve_target(employee_id)
        return await self._leave.compute_balance(eid, year or self._clock.today().year)

    async def employee_summary(
        self,
        scope: CallerScope,
        employee_id: uuid.UUID | None,
        month: int | None = None,
        year: int | None = None,
    ) -> EmployeeSummary:
        """Month attendance statistics plus the leave balance for the same year."""
        eid = scope.resolve_target(employee_id)
        year = year or self._clock.today().year
        return EmployeeSummary(
            employee_id=eid,
            attendance=await self.attendance_stats(scope, eid, month, year),
            leave=await self.leave_balance(scope, eid, year),
        )
