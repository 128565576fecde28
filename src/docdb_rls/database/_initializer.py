"""AuthorizedQueryInitializer — per-table entry point for authorized queries."""

from __future__ import annotations

from typing import Any

from docdb_rls._types import (
    Document,
    DocumentPredicate,
    Order,
    PaginationOptions,
    PaginationResult,
    QueryInitializer,
)
from docdb_rls.database._cursor import AuthorizedCursor
from docdb_rls.database._query import AuthorizedQuery

__all__ = ["AuthorizedQueryInitializer"]


class AuthorizedQueryInitializer:
    """Wraps the engine's query initializer for one table.

    Each scan strategy returns an :class:`AuthorizedQuery` bound to the
    table's read predicate.  Calling a shaping or materialization method
    directly on the initializer implies a full table scan.

    Example::

        visible = await db.query("messages").collect()
        mine = await db.query("messages").with_index(
            "by_author", lambda q: q.eq("author", token)
        ).collect()
    """

    def __init__(
        self,
        initializer: QueryInitializer,
        predicate: DocumentPredicate,
        *,
        table_name: str | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._initializer = initializer
        self._predicate = predicate
        self._table_name = table_name
        self._max_concurrency = max_concurrency

    def _wrap(self, query: Any) -> AuthorizedQuery:
        return AuthorizedQuery(
            query,
            self._predicate,
            table_name=self._table_name,
            max_concurrency=self._max_concurrency,
        )

    # -- scan strategies ----------------------------------------------------

    def full_table_scan(self) -> AuthorizedQuery:
        return self._wrap(self._initializer.full_table_scan())

    def with_index(self, index_name: str, index_range: Any = None) -> AuthorizedQuery:
        """Scan a named index, optionally restricted to *index_range*."""
        return self._wrap(self._initializer.with_index(index_name, index_range))

    def with_search_index(self, index_name: str, search_filter: Any) -> AuthorizedQuery:
        """Scan a named search index with an engine-specific search filter."""
        return self._wrap(self._initializer.with_search_index(index_name, search_filter))

    # -- full-scan shortcuts ------------------------------------------------

    def filter(self, expression: Any) -> AuthorizedQuery:
        return self.full_table_scan().filter(expression)

    def order(self, order: Order) -> AuthorizedQuery:
        return self.full_table_scan().order(order)

    async def paginate(self, options: PaginationOptions) -> PaginationResult:
        return await self.full_table_scan().paginate(options)

    async def collect(self) -> list[Document]:
        return await self.full_table_scan().collect()

    async def take(self, n: int) -> list[Document]:
        return await self.full_table_scan().take(n)

    async def first(self) -> Document | None:
        return await self.full_table_scan().first()

    async def unique(self) -> Document | None:
        return await self.full_table_scan().unique()

    def cursor(self) -> AuthorizedCursor:
        return self.full_table_scan().cursor()

    def __aiter__(self) -> AuthorizedCursor:
        """Stream a full table scan; see :meth:`AuthorizedQuery.__aiter__` on early exit."""
        return self.cursor()

    def __repr__(self) -> str:
        return f"AuthorizedQueryInitializer(table={self._table_name!r})"
