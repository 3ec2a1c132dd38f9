from uuid import UUID

from pydantic import BaseModel

from hris.schemas.leave import LeaveBalance


class AttendanceStats(BaseModel):
    employee_id: UUID
    month: int
    year: int
    total_days: int
    present_days: int
    late_days: int
    absent_days: int
    half_days: int
    average_hours_worked: float | None


class EmployeeSummary(BaseModel):
    employee_id: UUID
    attendance: AttendanceStats
    leave: LeaveBalance
