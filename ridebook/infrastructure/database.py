"""
Async SQLAlchemy engine and session factory.

One engine per process, pooled according to ``DB_POOL_SIZE`` and
``DB_MAX_OVERFLOW``; request handlers borrow sessions from
``async_session_factory`` (see ``ridebook.api.dependencies.get_db``).
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ridebook.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""
