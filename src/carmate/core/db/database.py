"""Async engine and session factory for the CarMate database."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config import settings


class Base(DeclarativeBase, MappedAsDataclass):
    """Declarative base for the tables and views read by the backend."""


async_engine = create_async_engine(settings.POSTGRES_URL, echo=False, pool_pre_ping=True)

local_session = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


async def async_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request."""
    async with local_session() as db:
        yield db
