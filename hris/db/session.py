import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hris.core.config import settings
from hris.core.errors import Conflict, StoreFailure

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Dialects whose INSERT supports ON CONFLICT ... DO UPDATE ... WHERE.
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


def upsert_insert(db: AsyncSession):
    """Return the bound dialect's ``insert`` construct (with on_conflict_* support)."""
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_INSERTS[dialect]
    except KeyError:
        raise StoreFailure(f"Dialect '{dialect}' does not support atomic upserts") from None


@asynccontextmanager
async def store_guard(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """
    Translate persistence errors into domain errors and roll back.

    A unique/foreign key violation becomes Conflict; anything else from the
    driver becomes StoreFailure. Nothing is retried.
    """
    try:
        yield
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Integrity violation while trying to %s: %s", action, exc.orig)
        raise Conflict("Duplicate entry - record already exists") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Store failure while trying to %s", action)
        raise StoreFailure(f"Failed to {action}") from exc
