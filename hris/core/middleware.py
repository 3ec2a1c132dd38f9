"""
Bearer-token authentication resolved straight to a CallerScope.

One query loads the account together with its linked employee (if any), so
every route gets the caller's role and employee ID without a second lookup.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hris.core.scope import CallerScope
from hris.core.security import decode_token
from hris.db.models import Employee, User
from hris.db.session import get_db

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_id_from_token(credentials: HTTPAuthorizationCredentials | None) -> uuid.UUID:
    if credentials is None:
        raise _unauthorized()
    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise _unauthorized()
    if payload.get("type") != "access":
        raise _unauthorized()
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise _unauthorized()


async def get_scope(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CallerScope:
    user_id = _user_id_from_token(credentials)

    result = await db.execute(
        select(User.role, User.is_active, Employee.id)
        .outerjoin(Employee, Employee.user_id == User.id)
        .where(User.id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        raise _unauthorized()

    role, is_active, employee_id = row
    if not is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )
    return CallerScope(user_id=user_id, role=role, employee_id=employee_id)
