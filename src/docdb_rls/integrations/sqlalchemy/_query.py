"""SQLAlchemyQuery — the engine query surface over a Core ``Select``."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, Table, select
from sqlalchemy.sql.expression import ColumnClause

from docdb_rls._types import Document, Order, PaginationOptions, PaginationResult
from docdb_rls.exceptions import NotUniqueError

if TYPE_CHECKING:
    from docdb_rls.integrations.sqlalchemy._database import SQLAlchemyDatabase

__all__ = ["SQLAlchemyQuery"]

logger = logging.getLogger("docdb_rls.integrations.sqlalchemy")

# Either a ready-made boolean clause or ``table.c -> clause``.
Criterion = ColumnElement[bool] | Callable[[Any], ColumnElement[bool]]


def _clause(table: Table, criterion: Criterion) -> ColumnElement[bool]:
    if callable(criterion) and not isinstance(criterion, ColumnElement):
        return criterion(table.c)
    return criterion


@dataclass(frozen=True)
class SQLAlchemyQuery:
    """Immutable query over one table, compiled to a single SELECT.

    Filters and index ranges are pushed down as WHERE clauses.  Rows are
    ordered by the active index columns, then by primary key.
    """

    db: SQLAlchemyDatabase
    table: Table
    where: tuple[ColumnElement[bool], ...] = ()
    order_columns: tuple[ColumnClause[Any], ...] = ()
    descending: bool = False

    # -- scan strategies ----------------------------------------------------

    def full_table_scan(self) -> SQLAlchemyQuery:
        return self

    def with_index(self, index_name: str, index_range: Criterion | None = None) -> SQLAlchemyQuery:
        """Scan along the named ``Index``, optionally bounded by *index_range*.

        Example::

            db.query("messages").with_index("ix_author", lambda c: c.author == "alice")
        """
        index = self.db._index(self.table, index_name)
        where = self.where
        if index_range is not None:
            where = where + (_clause(self.table, index_range),)
        return replace(self, where=where, order_columns=tuple(index.columns))

    def with_search_index(self, index_name: str, search_filter: Criterion) -> SQLAlchemyQuery:
        """Scan along the named ``Index`` restricted by a text-matching clause.

        Example::

            db.query("messages").with_search_index(
                "ix_body", lambda c: c.body.contains("hello")
            )
        """
        return self.with_index(index_name, search_filter)

    # -- shaping ------------------------------------------------------------

    def filter(self, expression: Criterion) -> SQLAlchemyQuery:
        return replace(self, where=self.where + (_clause(self.table, expression),))

    def order(self, order: Order) -> SQLAlchemyQuery:
        if order not in ("asc", "desc"):
            raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
        return replace(self, descending=order == "desc")

    # -- execution ----------------------------------------------------------

    def statement(self) -> Select[Any]:
        """Return the SELECT this query runs."""
        columns = self.order_columns + tuple(self.table.primary_key.columns)
        ordering = [c.desc() if self.descending else c.asc() for c in columns]
        return select(self.table).where(*self.where).order_by(*ordering)

    async def _fetch(self, stmt: Select[Any]) -> list[Document]:
        logger.debug("Executing %s", stmt)
        result = await self.db.connection.execute(stmt)
        return [self.db._to_document(self.table, row) for row in result]

    async def collect(self) -> list[Document]:
        return await self._fetch(self.statement())

    async def paginate(self, options: PaginationOptions) -> PaginationResult:
        offset = int(options.get("cursor") or 0)
        num_items = options.get("num_items", 10)
        rows = await self._fetch(self.statement().offset(offset).limit(num_items + 1))
        page = rows[:num_items]
        end = offset + len(page)
        return PaginationResult(page=page, continue_cursor=str(end), is_done=len(rows) <= num_items)

    async def take(self, n: int) -> list[Document]:
        if n <= 0:
            return []
        return await self._fetch(self.statement().limit(n))

    async def first(self) -> Document | None:
        rows = await self.take(1)
        return rows[0] if rows else None

    async def unique(self) -> Document | None:
        rows = await self.take(2)
        if len(rows) > 1:
            raise NotUniqueError(table_name=self.table.name)
        return rows[0] if rows else None

    def __aiter__(self) -> AsyncIterator[Document]:
        return self._stream()

    async def _stream(self) -> AsyncIterator[Document]:
        stmt = self.statement()
        logger.debug("Streaming %s", stmt)
        result = await self.db.connection.stream(stmt)
        try:
            async for row in result:
                yield self.db._to_document(self.table, row)
        finally:
            await result.close()
