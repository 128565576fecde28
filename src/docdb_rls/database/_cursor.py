"""AuthorizedCursor — lazy, predicate-filtered iteration over an engine query."""

from __future__ import annotations

import enum
from collections.abc import AsyncIterator
from types import TracebackType

from docdb_rls._types import Document, DocumentPredicate, Query

__all__ = ["AuthorizedCursor", "CursorState"]


class CursorState(enum.Enum):
    PENDING = "pending"
    EXHAUSTED = "exhausted"


class AuthorizedCursor:
    """Async iterator yielding only the documents the predicate accepts.

    Ordering and termination follow the underlying query exactly.  Denied
    documents are skipped inside :meth:`advance`, which loops rather than
    recursing, so any run of denied documents costs constant stack.  When
    every remaining document is denied, ``advance()`` reads the rest of the
    underlying source before reporting completion.  That is
    O(remaining documents), not O(1).

    The underlying iterator is opened on the first ``advance()`` and
    released by :meth:`aclose`, which is also called on ``async with``
    exit.

    Example::

        async with query.cursor() as cursor:
            async for message in cursor:
                ...
    """

    def __init__(self, query: Query, predicate: DocumentPredicate) -> None:
        self._query = query
        self._predicate = predicate
        self._iterator: AsyncIterator[Document] | None = None
        self._state = CursorState.PENDING

    @property
    def state(self) -> CursorState:
        return self._state

    async def advance(self) -> Document | None:
        """Return the next accepted document, or ``None`` once exhausted."""
        while self._state is CursorState.PENDING:
            if self._iterator is None:
                self._iterator = self._query.__aiter__()
            try:
                document = await self._iterator.__anext__()
            except StopAsyncIteration:
                self._state = CursorState.EXHAUSTED
                return None
            if await self._predicate(document):
                return document
        return None

    async def aclose(self) -> None:
        """Stop iterating and release the underlying iterator.

        Safe to call more than once, and before iteration has started.
        """
        self._state = CursorState.EXHAUSTED
        iterator, self._iterator = self._iterator, None
        if iterator is None:
            return
        close = getattr(iterator, "aclose", None)
        if close is not None:
            await close()

    def __aiter__(self) -> AuthorizedCursor:
        return self

    async def __anext__(self) -> Document:
        document = await self.advance()
        if document is None:
            raise StopAsyncIteration
        return document

    async def __aenter__(self) -> AuthorizedCursor:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"AuthorizedCursor(state={self._state.value})"
