"""Database engine, declarative base and the per-request session dependency."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hrms.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request: commit when the handler returns, roll back on error.

    Service methods only flush, so a request's changes and its audit
    entries land in a single transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


async def create_tables() -> None:
    """Create any missing tables (used when ``DB_CREATE_TABLES`` is set)."""
    import hrms.attendance.models  # noqa: F401
    import hrms.common.audit  # noqa: F401
    import hrms.core_hr.models  # noqa: F401
    import hrms.leave.models  # noqa: F401
    import hrms.payroll.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
