"""Generic storage service: one async method per table operation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hr_compliance.models.base import Base
from hr_compliance.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class Page(Generic[ModelT]):
    """One page of a paginated query."""

    items: list[ModelT]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Number of pages needed to cover ``total`` rows."""
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


async def paginate(
    session: AsyncSession,
    query: Select[Any],
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """Run ``query`` for one page and count the full result set."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await session.scalar(count_query) or 0

    result = await session.execute(query.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


class CrudService(Generic[ModelT]):
    """CRUD operations for a single model.

    Services flush but never commit; the caller owns the transaction so
    audit rows written alongside a change commit (or roll back) with it.
    """

    model: type[ModelT]
    entity_name: str = "Record"
    search_columns: Sequence[str] = ()
    order_columns: Sequence[str] = ("id",)

    def __init__(self, session: AsyncSession):
        self.session = session

    def base_query(self) -> Select[Any]:
        return select(self.model)

    def apply_filters(
        self,
        query: Select[Any],
        search: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> Select[Any]:
        """Add search and equality filters to a query."""
        if search and self.search_columns:
            pattern = f"%{search}%"
            query = query.where(
                or_(*(getattr(self.model, col).ilike(pattern) for col in self.search_columns))
            )
        for column, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, column) == value)
        return query

    async def find(self, record_id: int) -> ModelT | None:
        """Get a record by id, or None."""
        return await self.session.get(self.model, record_id)

    async def get(self, record_id: int) -> ModelT:
        """Get a record by id, raising NotFoundError if absent."""
        record = await self.find(record_id)
        if record is None:
            raise NotFoundError(self.entity_name, record_id)
        return record

    async def list_page(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> Page[ModelT]:
        """List records with optional search, filters and pagination."""
        query = self.apply_filters(self.base_query(), search, filters)
        query = query.order_by(*(getattr(self.model, col) for col in self.order_columns))
        items, total = await paginate(self.session, query, page, limit)
        return Page(items=items, total=total, page=page, limit=limit)

    async def list_all(self, filters: dict[str, Any] | None = None) -> list[ModelT]:
        """List every record matching the filters."""
        query = self.apply_filters(self.base_query(), filters=filters)
        query = query.order_by(*(getattr(self.model, col) for col in self.order_columns))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def validate(self, data: dict[str, Any], record: ModelT | None = None) -> None:
        """Hook for cross-field and cross-table checks before a write."""

    async def create(self, data: dict[str, Any]) -> ModelT:
        """Insert a new record."""
        await self.validate(data)
        record = self.model(**data)
        self.session.add(record)
        await self._flush()
        return record

    async def update(self, record_id: int, data: dict[str, Any]) -> tuple[dict[str, Any], ModelT]:
        """Apply a partial update.

        Returns the snapshot taken before the change and the updated record.
        """
        record = await self.get(record_id)
        before = record.snapshot()
        await self.validate(data, record)
        for key, value in data.items():
            setattr(record, key, value)
        await self._flush()
        return before, record

    async def delete(self, record_id: int) -> dict[str, Any]:
        """Delete a record, returning its last snapshot."""
        record = await self.get(record_id)
        before = record.snapshot()
        await self.session.delete(record)
        await self._flush()
        return before

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.info("Integrity error writing %s: %s", self.entity_name, exc.orig)
            raise ConflictError(
                f"{self.entity_name} conflicts with existing data",
                detail=str(exc.orig),
            ) from exc
