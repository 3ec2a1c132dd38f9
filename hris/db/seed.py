"""
Seed script: creates a default admin user with a linked employee record.

Usage:
    python -m hris.db.seed
"""

import asyncio
import uuid

from sqlalchemy import select

from hris.core.security import hash_password
from hris.db.models import Employee, User
from hris.db.session import AsyncSessionLocal


async def create_admin(session) -> User:
    result = await session.execute(select(User).where(User.username == "admin"))
    admin = result.scalar_one_or_none()
    if admin is None:
        admin = User(
            id=uuid.uuid4(),
            username="admin",
            password_hash=hash_password("admin123"),
            role="admin",
            full_name="System Administrator",
            is_active=True,
        )
        session.add(admin)
        await session.flush()
        print(f"Created admin user: id={admin.id}")
    else:
        print("Admin user already exists, skipping.")

    result = await session.execute(select(Employee).where(Employee.user_id == admin.id))
    if result.scalar_one_or_none() is None:
        employee = Employee(
            id=uuid.uuid4(),
            user_id=admin.id,
            employee_code="ADM-0001",
            full_name=admin.full_name or admin.username,
            position="Administrator",
        )
        session.add(employee)
        await session.flush()
        print(f"Linked employee record: id={employee.id}")
    return admin


async def main():
    async with AsyncSessionLocal() as session:
        async with session.begin():
            await create_admin(session)
            print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(main())
