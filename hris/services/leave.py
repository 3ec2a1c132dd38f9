"""
Leave workflow engine: request creation, the pending -> decided transition
and balance accounting against annual entitlements.

No balance check happens at submission; approval is the gate, and an
over-approved type simply shows a negative balance.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import date

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hris.core.config import settings
from hris.core.errors import Conflict, NotFound, ValidationError
from hris.core.scope import CallerScope
from hris.db.models import LEAVE_STATUSES, LEAVE_TYPES, Employee, LeaveRequest
from hris.db.session import store_guard
from hris.schemas.leave import LeaveBalance
from hris.services.clock import Clock, system_clock

logger = logging.getLogger(__name__)

DECISIONS = ("approved", "rejected")


def days_requested(start_date: date, end_date: date) -> int:
    """Inclusive day count between two calendar dates."""
    return (end_date - start_date).days + 1


class LeaveWorkflowEngine:
    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = system_clock,
        entitlements: Mapping[str, int] | None = None,
    ) -> None:
        self._db = db
        self._clock = clock
        source = settings.LEAVE_ENTITLEMENTS if entitlements is None else entitlements
        # Every leave type gets an entry, unknown ones default to zero days.
        self._entitlements = {t: int(source.get(t, 0)) for t in LEAVE_TYPES}

    @property
    def entitlements(self) -> dict[str, int]:
        return dict(self._entitlements)

    async def create_request(
        self,
        employee_id: uuid.UUID,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        reason = (reason or "").strip()
        errors = []
        if leave_type not in LEAVE_TYPES:
            errors.append(
                {
                    "field": "leave_type",
                    "message": f"Leave type must be one of: {', '.join(LEAVE_TYPES)}",
                }
            )
        if end_date < start_date:
            errors.append(
                {"field": "end_date", "message": "End date must not be before start date"}
            )
        if not reason:
            errors.append({"field": "reason", "message": "Reason must not be empty"})
        if errors:
            raise ValidationError(errors)

        request = LeaveRequest(
            id=uuid.uuid4(),
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            days_requested=days_requested(start_date, end_date),
            reason=reason,
            status="pending",
        )
        async with store_guard(self._db, "create leave request"):
            if await self._db.get(Employee, employee_id) is None:
                raise NotFound("Employee not found")
            self._db.add(request)
            await self._db.commit()
            await self._db.refresh(request)

        logger.info(
            "Leave request created: id=%s employee=%s type=%s %s..%s (%d days)",
            request.id, employee_id, leave_type, start_date, end_date, request.days_requested,
        )
        return request

    async def decide(
        self,
        request_id: uuid.UUID,
        approver_id: uuid.UUID,
        decision: str,
        rejection_reason: str | None = None,
    ) -> LeaveRequest:
        if decision not in DECISIONS:
            raise ValidationError.for_field(
                "status", f"Decision must be one of: {', '.join(DECISIONS)}"
            )
        if decision == "rejected" and rejection_reason is not None:
            rejection_reason = rejection_reason.strip() or None
        else:
            rejection_reason = None

        now = self._clock.now()
        stmt = (
            update(LeaveRequest)
            .where(LeaveRequest.id == request_id, LeaveRequest.status == "pending")
            .values(
                status=decision,
                approver_id=approver_id,
                approved_at=now,
                rejection_reason=rejection_reason,
                updated_at=now,
            )
            .returning(LeaveRequest)
        )

        async with store_guard(self._db, "decide leave request"):
            result = await self._db.scalars(
                stmt, execution_options={"populate_existing": True}
            )
            request = result.one_or_none()
            if request is None:
                await self._db.rollback()
                existing = await self._db.get(LeaveRequest, request_id)
                if existing is None:
                    raise NotFound("Leave request not found")
                logger.warning(
                    "Rejected re-decision of leave request %s (already %s)",
                    request_id, existing.status,
                )
                raise Conflict(f"Leave request has already been {existing.status}")
            await self._db.commit()

        logger.info(
            "Leave request %s %s by approver=%s", request_id, decision, approver_id
        )
        return request

    async def get_request(self, request_id: uuid.UUID) -> LeaveRequest:
        async with store_guard(self._db, "fetch leave request"):
            request = await self._db.get(LeaveRequest, request_id)
        if request is None:
            raise NotFound("Leave request not found")
        return request

    async def list_requests(
        self,
        scope: CallerScope,
        employee_id: uuid.UUID | None = None,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict]:
        """
        Leave requests newest first, with the requester's name, code and
        position and the approver's name. ``start_date``/``end_date`` bound
        the request window (start on or after, end on or before).
        """
        if status is not None and status not in LEAVE_STATUSES:
            raise ValidationError.for_field(
                "status", f"Status must be one of: {', '.join(LEAVE_STATUSES)}"
            )

        eid = scope.resolve_employee_id(employee_id)
        approver = aliased(Employee)
        stmt = (
            select(
                LeaveRequest,
                Employee.full_name,
                Employee.employee_code,
                Employee.position,
                approver.full_name.label("approver_name"),
            )
            .outerjoin(Employee, LeaveRequest.employee_id == Employee.id)
            .outerjoin(approver, LeaveRequest.approver_id == approver.id)
            .order_by(LeaveRequest.created_at.desc(), LeaveRequest.start_date.desc())
        )
        if eid is not None:
            stmt = stmt.where(LeaveRequest.employee_id == eid)
        if status is not None:
            stmt = stmt.where(LeaveRequest.status == status)
        if start_date is not None:
            stmt = stmt.where(LeaveRequest.start_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(LeaveRequest.end_date <= end_date)

        async with store_guard(self._db, "fetch leave requests"):
            result = await self._db.execute(stmt)
            rows = result.all()

        return [
            {
                "request": request,
                "full_name": full_name,
                "employee_code": code,
                "position": position,
                "approver_name": approver_name,
            }
            for request, full_name, code, position, approver_name in rows
        ]

    async def compute_balance(self, employee_id: uuid.UUID, year: int) -> LeaveBalance:
        stmt = (
            select(LeaveRequest.leave_type, func.sum(LeaveRequest.days_requested))
            .where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status == "approved",
                LeaveRequest.start_date.between(date(year, 1, 1), date(year, 12, 31)),
            )
            .group_by(LeaveRequest.leave_type)
        )
        async with store_guard(self._db, "compute leave balance"):
            result = await self._db.execute(stmt)
            rows = result.all()

        used = {t: 0 for t in self._entitlements}
        for leave_type, days in rows:
            used[leave_type] = int(days or 0)

        return LeaveBalance(
            employee_id=employee_id,
            year=year,
            entitlements=self.entitlements,
            used=used,
            balance={t: self._entitlements[t] - used[t] for t in self._entitlements},
        )
