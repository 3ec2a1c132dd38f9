from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ClockRequest(BaseModel):
    employee_id: UUID | None = None
    location: str | None = None
    photo_url: str | None = None

    @field_validator("location", "photo_url")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class AttendanceRecordResponse(BaseModel):
    id: UUID
    employee_id: UUID
    work_date: date = Field(serialization_alias="date")
    clock_in: datetime | None
    clock_out: datetime | None
    clock_in_location: str | None
    clock_out_location: str | None
    clock_in_photo: str | None
    clock_out_photo: str | None
    status: Literal["present", "absent", "late", "half_day"]
    notes: str | None
    full_name: str | None = None
    employee_code: str | None = None

    model_config = {"from_attributes": True}
