"""
Attendance engine: the clock-in -> clock-out state machine per employee-day.

The (employee_id, date) unique constraint in the store is what arbitrates
concurrent clock-ins. Both transitions are issued as single statements whose
conflict/condition is evaluated by the database, never as a read followed by
a write.
"""

import logging
import uuid
from calendar import monthrange
from datetime import date

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hris.core.config import settings
from hris.core.errors import Conflict, NotFound, ValidationError
from hris.core.scope import CallerScope
from hris.db.models import AttendanceRecord, Employee
from hris.db.session import store_guard, upsert_insert
from hris.schemas.stats import AttendanceStats
from hris.services.clock import Clock, system_clock

logger = logging.getLogger(__name__)


class AttendanceEngine:
    def __init__(self, db: AsyncSession, clock: Clock = system_clock) -> None:
        self._db = db
        self._clock = clock

    async def clock_in(
        self,
        employee_id: uuid.UUID,
        day: date | None = None,
        location: str | None = None,
        photo_url: str | None = None,
    ) -> AttendanceRecord:
        day = day or self._clock.today()
        now = self._clock.now()

        async with store_guard(self._db, "clock in"):
            await self._ensure_employee(employee_id)

            insert = upsert_insert(self._db)
            stmt = insert(AttendanceRecord).values(
                {
                    "id": uuid.uuid4(),
                    "employee_id": employee_id,
                    "date": day,
                    "clock_in": now,
                    "clock_in_location": location,
                    "clock_in_photo": photo_url,
                    "status": "present",
                    "updated_at": now,
                }
            )
            # A placeholder row for the day only gets its clock-in fields set;
            # a row that already has a clock-in is left alone and nothing is returned.
            stmt = stmt.on_conflict_do_update(
                index_elements=["employee_id", "date"],
                set_={
                    "clock_in": stmt.excluded.clock_in,
                    "clock_in_location": stmt.excluded.clock_in_location,
                    "clock_in_photo": stmt.excluded.clock_in_photo,
                    "status": stmt.excluded.status,
                    "updated_at": stmt.excluded.updated_at,
                },
                where=AttendanceRecord.clock_in.is_(None),
            )
            result = await self._db.scalars(
                stmt.returning(AttendanceRecord),
                execution_options={"populate_existing": True},
            )
            record = result.one_or_none()
            if record is None:
                await self._db.rollback()
                logger.warning(
                    "Rejected second clock-in: employee=%s date=%s", employee_id, day
                )
                raise Conflict("Already clocked in today")
            await self._db.commit()

        logger.info("Clock-in: employee=%s date=%s at=%s", employee_id, day, now.isoformat())
        return record

    async def clock_out(
        self,
        employee_id: uuid.UUID,
        day: date | None = None,
        location: str | None = None,
        photo_url: str | None = None,
    ) -> AttendanceRecord:
        day = day or self._clock.today()
        now = self._clock.now()

        async with store_guard(self._db, "clock out"):
            stmt = (
                update(AttendanceRecord)
                .where(
                    AttendanceRecord.employee_id == employee_id,
                    AttendanceRecord.work_date == day,
                    AttendanceRecord.clock_in.is_not(None),
                    AttendanceRecord.clock_out.is_(None),
                )
                .values(
                    clock_out=now,
                    clock_out_location=location,
                    clock_out_photo=photo_url,
                    updated_at=now,
                )
                .returning(AttendanceRecord)
            )
            result = await self._db.scalars(
                stmt, execution_options={"populate_existing": True}
            )
            record = result.one_or_none()
            if record is None:
                await self._db.rollback()
                existing = await self.get_day(employee_id, day)
                if existing is None or existing.clock_in is None:
                    logger.warning(
                        "Clock-out without clock-in: employee=%s date=%s", employee_id, day
                    )
                    raise NotFound("No clock-in record found for today")
                logger.warning(
                    "Rejected second clock-out: employee=%s date=%s", employee_id, day
                )
                raise Conflict("Already clocked out today")
            await self._db.commit()

        logger.info("Clock-out: employee=%s date=%s at=%s", employee_id, day, now.isoformat())
        return record

    async def get_today(self, employee_id: uuid.UUID) -> AttendanceRecord | None:
        return await self.get_day(employee_id, self._clock.today())

    async def get_day(self, employee_id: uuid.UUID, day: date) -> AttendanceRecord | None:
        async with store_guard(self._db, "fetch attendance record"):
            result = await self._db.execute(
                select(AttendanceRecord).where(
                    AttendanceRecord.employee_id == employee_id,
                    AttendanceRecord.work_date == day,
                )
            )
            return result.scalar_one_or_none()

    async def list_records(
        self,
        scope: CallerScope,
        employee_id: uuid.UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """
        Attendance rows newest first, joined with the employee's name.

        Non-privileged callers only ever see their own rows.
        """
        eid = scope.resolve_employee_id(employee_id)
        stmt = (
            select(AttendanceRecord, Employee.full_name, Employee.employee_code)
            .outerjoin(Employee, AttendanceRecord.employee_id == Employee.id)
            .order_by(AttendanceRecord.work_date.desc())
            .limit(limit or settings.DEFAULT_ATTENDANCE_LIMIT)
        )
        if eid is not None:
            stmt = stmt.where(AttendanceRecord.employee_id == eid)
        if start_date is not None:
            stmt = stmt.where(AttendanceRecord.work_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(AttendanceRecord.work_date <= end_date)

        async with store_guard(self._db, "fetch attendance records"):
            result = await self._db.execute(stmt)
            rows = result.all()

        return [
            {"record": record, "full_name": full_name, "employee_code": code}
            for record, full_name, code in rows
        ]

    async def compute_stats(
        self, employee_id: uuid.UUID, month: int, year: int
    ) -> AttendanceStats:
        if not 1 <= month <= 12:
            raise ValidationError.for_field("month", "Month must be between 1 and 12")

        period_start = date(year, month, 1)
        period_end = date(year, month, monthrange(year, month)[1])
        in_period = (
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.work_date.between(period_start, period_end),
        )

        totals_stmt = select(
            func.count(AttendanceRecord.id).label("total_days"),
            func.count(case((AttendanceRecord.status == "present", 1))).label("present_days"),
            func.count(case((AttendanceRecord.status == "late", 1))).label("late_days"),
            func.count(case((AttendanceRecord.status == "absent", 1))).label("absent_days"),
            func.count(case((AttendanceRecord.status == "half_day", 1))).label("half_days"),
        ).where(*in_period)
        sessions_stmt = select(AttendanceRecord.clock_in, AttendanceRecord.clock_out).where(
            *in_period,
            AttendanceRecord.clock_in.is_not(None),
            AttendanceRecord.clock_out.is_not(None),
        )

        async with store_guard(self._db, "compute attendance statistics"):
            totals = (await self._db.execute(totals_stmt)).mappings().one()
            sessions = (await self._db.execute(sessions_stmt)).all()

        hours = [(out - in_).total_seconds() / 3600 for in_, out in sessions]
        average = round(sum(hours) / len(hours), 2) if hours else None

        return AttendanceStats(
            employee_id=employee_id,
            month=month,
            year=year,
            total_days=int(totals["total_days"] or 0),
            present_days=int(totals["present_days"] or 0),
            late_days=int(totals["late_days"] or 0),
            absent_days=int(totals["absent_days"] or 0),
            half_days=int(totals["half_days"] or 0),
            average_hours_worked=average,
        )

    async def _ensure_employee(self, employee_id: uuid.UUID) -> None:
        if await self._db.get(Employee, employee_id) is None:
            raise NotFound("Employee not found")
