"""Row-level record store used by the cache, rate limiter and file registry.

The store exposes five operations (find by key, upsert, insert, delete
where, count where). Each call runs in its own short transaction so
concurrent requests interleave at operation boundaries. Driver and
connection failures surface as ``InfrastructureError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, TypeVar

import structlog
from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from typoscale.core.exceptions import InfrastructureError
from typoscale.models.base import Base

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=Base)

Criterion = ColumnElement[bool]


class RecordStore(ABC):
    """Key/row operations over persisted records."""

    @abstractmethod
    async def find_by_key(self, model: type[M], key: Any) -> M | None:
        """Return the row with primary key ``key`` or None."""

    @abstractmethod
    async def find_where(self, model: type[M], *criteria: Criterion) -> Sequence[M]:
        """Return every row matching all criteria."""

    @abstractmethod
    async def upsert(self, record: M) -> M:
        """Insert ``record`` or fully replace the row with the same primary key."""

    @abstractmethod
    async def insert(self, record: M) -> M:
        """Insert a new row."""

    @abstractmethod
    async def delete_where(self, model: type[Base], *criteria: Criterion) -> int:
        """Delete matching rows and return how many were removed."""

    @abstractmethod
    async def count_where(self, model: type[Base], *criteria: Criterion) -> int:
        """Count matching rows."""


class SQLRecordStore(RecordStore):
    """RecordStore backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_key(self, model: type[M], key: Any) -> M | None:
        try:
            async with self._session_factory() as session:
                return await session.get(model, key)
        except SQLAlchemyError as e:
            raise self._wrap(e, "find_by_key", model) from e

    async def find_where(self, model: type[M], *criteria: Criterion) -> Sequence[M]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(model).where(*criteria))
                return result.scalars().all()
        except SQLAlchemyError as e:
            raise self._wrap(e, "find_where", model) from e

    async def upsert(self, record: M) -> M:
        try:
            async with self._session_factory() as session, session.begin():
                merged = await session.merge(record)
            return merged
        except SQLAlchemyError as e:
            raise self._wrap(e, "upsert", type(record)) from e

    async def insert(self, record: M) -> M:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(record)
            return record
        except SQLAlchemyError as e:
            raise self._wrap(e, "insert", type(record)) from e

    async def delete_where(self, model: type[Base], *criteria: Criterion) -> int:
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(delete(model).where(*criteria))
            return result.rowcount or 0
        except SQLAlchemyError as e:
            raise self._wrap(e, "delete_where", model) from e

    async def count_where(self, model: type[Base], *criteria: Criterion) -> int:
        try:
            async with self._session_factory() as session:
                stmt = select(func.count()).select_from(model).where(*criteria)
                result = await session.execute(stmt)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise self._wrap(e, "count_where", model) from e

    @staticmethod
    def _wrap(error: SQLAlchemyError, operation: str, model: type[Base]) -> InfrastructureError:
        logger.error(
            "record_store_error",
            operation=operation,
            table=getattr(model, "__tablename__", model.__name__),
            error=str(error),
        )
        return InfrastructureError(
            f"Record store {operation} failed on {model.__name__}",
            details={"operation": operation},
        )
