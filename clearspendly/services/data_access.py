"""Table-scoped data access — insert / select / update / delete by column filters.

Each call opens its own session and commits on its own. There is no
transaction spanning calls: callers that need all-or-nothing behaviour
compensate with explicit deletes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from clearspendly.models.base import utcnow

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


class DataAccessError(Exception):
    """A database call failed; wraps the driver / SQLAlchemy error."""

    def __init__(self, operation: str, table: str, cause: Exception) -> None:
        self.operation = operation
        self.table = table
        self.cause = cause
        super().__init__(f"{operation} on {table} failed: {cause}")


def _table(model: type[SQLModel]) -> str:
    return getattr(model, "__tablename__", model.__name__)


def _where(model: type[SQLModel], filters: dict[str, Any]) -> list:
    return [getattr(model, column) == value for column, value in filters.items()]


class TableStore:
    """Async table gateway bound to a session factory."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, model: type[ModelT], values: dict[str, Any]) -> ModelT:
        """Insert one row and return it with server defaults populated."""
        row = model(**values)
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
                await session.refresh(row)
        except SQLAlchemyError as exc:
            raise DataAccessError("insert", _table(model), exc) from exc
        return row

    async def select(
        self,
        model: type[ModelT],
        filters: dict[str, Any],
        limit: int | None = None,
    ) -> list[ModelT]:
        stmt = select(model).where(*_where(model, filters))
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise DataAccessError("select", _table(model), exc) from exc

    async def exists(self, model: type[SQLModel], filters: dict[str, Any]) -> bool:
        """``SELECT ... LIMIT 1`` existence probe."""
        return bool(await self.select(model, filters, limit=1))

    async def update(
        self,
        model: type[ModelT],
        patch: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[ModelT]:
        """Apply ``patch`` to every matching row and return the updated rows."""
        stmt = select(model).where(*_where(model, filters))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
                for row in rows:
                    for column, value in patch.items():
                        setattr(row, column, value)
                    if hasattr(row, "updated_at"):
                        row.updated_at = utcnow()
                    session.add(row)
                await session.commit()
                for row in rows:
                    await session.refresh(row)
                return rows
        except SQLAlchemyError as exc:
            raise DataAccessError("update", _table(model), exc) from exc

    async def delete(self, model: type[SQLModel], filters: dict[str, Any]) -> int:
        """Delete matching rows; returns the number of rows removed."""
        if not filters:
            raise ValueError(f"Refusing unscoped delete on {_table(model)}")
        stmt = sa_delete(model).where(*_where(model, filters))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise DataAccessError("delete", _table(model), exc) from exc
        logger.debug("Deleted %d rows from %s where %s", result.rowcount, _table(model), filters)
        return result.rowcount
