import uuid
from dataclasses import dataclass

from hris.core.errors import Forbidden, NotFound

PRIVILEGED_ROLES = ("admin", "manager")


@dataclass(frozen=True)
class CallerScope:
    """
    Which records the current caller may see and act on.

    Built once per request from the authenticated user and passed explicitly
    into the engines and the reporting layer.
    """

    user_id: uuid.UUID
    role: str
    employee_id: uuid.UUID | None = None

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def resolve_employee_id(self, requested: uuid.UUID | None) -> uuid.UUID | None:
        """
        Admins and managers may target any employee; None means all employees.
        Regular employees always get their own employee ID.
        """
        if self.is_privileged:
            return requested
        return self.require_own_employee()

    def resolve_target(self, requested: uuid.UUID | None) -> uuid.UUID:
        """Like resolve_employee_id, but a single employee is always required."""
        resolved = self.resolve_employee_id(requested)
        if resolved is None:
            return self.require_own_employee()
        return resolved

    def require_own_employee(self) -> uuid.UUID:
        if self.employee_id is None:
            raise NotFound("No employee record is linked to this account")
        return self.employee_id

    def ensure_can_decide(self) -> None:
        if not self.is_privileged:
            raise Forbidden(
                f"Access denied. Required roles: {', '.join(PRIVILEGED_ROLES)}"
            )
