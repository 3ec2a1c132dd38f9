from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

LeaveType = Literal["annual", "sick", "emergency", "maternity", "paternity", "other"]
LeaveStatus = Literal["pending", "approved", "rejected"]


class LeaveRequestCreate(BaseModel):
    employee_id: UUID | None = None
    # Plain strings so the workflow engine reports every bad field at once.
    leave_type: str
    start_date: date
    end_date: date
    reason: str


class LeaveDecision(BaseModel):
    status: str
    rejection_reason: str | None = None


class LeaveRequestResponse(BaseModel):
    id: UUID
    employee_id: UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: LeaveStatus
    approver_id: UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime | None = None
    full_name: str | None = None
    employee_code: str | None = None
    position: str | None = None
    approver_name: str | None = None

    model_config = {"from_attributes": True}


class LeaveBalance(BaseModel):
    employee_id: UUID
    year: int
    entitlements: dict[str, int]
    used: dict[str, int]
    balance: dict[str, int]
