"""Database plumbing: async engine, session factory, declarative base and mixins."""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime

from sqlalchemy import MetaData, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from villamarket.config import settings

# Index and unique names match the ones in the Alembic migrations.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


def _engine_options() -> dict:
    options: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)
    return options


engine = create_async_engine(settings.async_database_url, **_engine_options())

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())


class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


def dialect_name(db: AsyncSession) -> str:
    """``postgresql`` or ``sqlite``; picks the upsert construct for the ledger."""
    return db.get_bind().dialect.name


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: committed when the handler returns, rolled back if it raises.

    A rejected booking transition therefore never leaves half-claimed nights
    in the availability ledger.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
