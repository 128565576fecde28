"""AuthorizedQuery — an engine query whose results pass through a read predicate."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from docdb_rls._types import (
    Document,
    DocumentPredicate,
    Order,
    PaginationOptions,
    PaginationResult,
    Query,
)
from docdb_rls.database._cursor import AuthorizedCursor
from docdb_rls.exceptions import NotUniqueError

__all__ = ["AuthorizedQuery", "filter_documents"]


async def filter_documents(
    documents: Sequence[Document],
    predicate: DocumentPredicate,
    *,
    max_concurrency: int | None = None,
) -> list[Document]:
    """Return the accepted documents, keeping their original order.

    The documents are already materialized, so the predicate runs
    concurrently.  Pass *max_concurrency* to bound how many evaluations
    are in flight at once.

    If any evaluation raises, the others are cancelled and awaited
    before the error propagates, so no rule keeps running afterwards.
    """
    check = predicate
    if max_concurrency is not None:
        semaphore = asyncio.Semaphore(max_concurrency)

        async def _bounded(document: Document) -> bool:
            async with semaphore:
                return await predicate(document)

        check = _bounded

    tasks = [asyncio.ensure_future(check(d)) for d in documents]
    try:
        verdicts = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return [d for d, allowed in zip(documents, verdicts) if allowed]


class AuthorizedQuery:
    """Mirror of the engine's query surface that enforces a read predicate.

    ``filter`` and ``order`` only reshape the underlying query and never
    evaluate the predicate.  Every way of materializing results does:

    - ``collect()`` evaluates all fetched documents concurrently.
    - ``paginate()`` filters the page *after* the engine has cut it.
    - ``take()``, ``first()``, ``unique()`` and ``async for`` stream
      through an :class:`AuthorizedCursor`, one document at a time.

    Example::

        messages = await db.query("messages").with_index("by_author").take(10)
    """

    def __init__(
        self,
        query: Query,
        predicate: DocumentPredicate,
        *,
        table_name: str | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._query = query
        self._predicate = predicate
        self._table_name = table_name
        self._max_concurrency = max_concurrency

    def _rewrap(self, query: Query) -> AuthorizedQuery:
        return AuthorizedQuery(
            query,
            self._predicate,
            table_name=self._table_name,
            max_concurrency=self._max_concurrency,
        )

    # -- shaping ------------------------------------------------------------

    def filter(self, expression: Any) -> AuthorizedQuery:
        """Narrow the underlying query. The expression is engine-specific."""
        return self._rewrap(self._query.filter(expression))

    def order(self, order: Order) -> AuthorizedQuery:
        """Set the underlying query's ordering (``"asc"`` or ``"desc"``)."""
        return self._rewrap(self._query.order(order))

    # -- materialization ----------------------------------------------------

    async def collect(self) -> list[Document]:
        """Fetch every matching document and drop the ones the caller may not read."""
        documents = await self._query.collect()
        return await filter_documents(
            documents, self._predicate, max_concurrency=self._max_concurrency
        )

    async def paginate(self, options: PaginationOptions) -> PaginationResult:
        """Fetch one engine page and filter it.

        The page is cut by the engine *before* filtering, so a page may
        hold fewer than ``num_items`` documents, including none at all.
        ``continue_cursor`` is returned unchanged.  Keep paginating until
        ``is_done`` to see every visible document.
        """
        result = await self._query.paginate(options)
        page = await filter_documents(
            result.page, self._predicate, max_concurrency=self._max_concurrency
        )
        return PaginationResult(
            page=page,
            continue_cursor=result.continue_cursor,
            is_done=result.is_done,
        )

    async def take(self, n: int) -> list[Document]:
        """Return up to *n* visible documents.

        Stops pulling from the engine as soon as *n* are found.
        """
        results: list[Document] = []
        if n <= 0:
            return results
        async with self.cursor() as cursor:
            while len(results) < n:
                document = await cursor.advance()
                if document is None:
                    break
                results.append(document)
        return results

    async def first(self) -> Document | None:
        """Return the first visible document, or ``None``."""
        results = await self.take(1)
        return results[0] if results else None

    async def unique(self) -> Document | None:
        """Return the single visible document, or ``None`` if there is none.

        Reads one visible document past the first to prove uniqueness.
        Denied documents between two visible ones do not hide the
        duplicate.

        Raises:
            NotUniqueError: If a second visible document exists.
        """
        async with self.cursor() as cursor:
            found = await cursor.advance()
            if found is None:
                return None
            if await cursor.advance() is not None:
                raise NotUniqueError(table_name=self._table_name)
        return found

    # -- iteration ----------------------------------------------------------

    def cursor(self) -> AuthorizedCursor:
        """Open a streaming cursor over the visible documents."""
        return AuthorizedCursor(self._query, self._predicate)

    def __aiter__(self) -> AuthorizedCursor:
        """Stream visible documents with ``async for``.

        Leaving an ``async for`` loop early does not close the engine's
        iterator.  When the loop may ``break`` or raise, hold the cursor
        explicitly so the engine stream is released::

            async with query.cursor() as cursor:
                async for document in cursor:
                    ...
        """
        return self.cursor()

    def __repr__(self) -> str:
        return f"AuthorizedQuery(table={self._table_name!r}, query={self._query!r})"
