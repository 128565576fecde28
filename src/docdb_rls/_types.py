"""Shared protocols and type aliases for docdb-rls.

The protocols describe the surface of the underlying document engine and
identity provider.  docdb-rls only ever calls these; it never implements
storage, indexing, or query planning itself.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, TypedDict, runtime_checkable

__all__ = [
    "Auth",
    "DatabaseReader",
    "DatabaseWriter",
    "Document",
    "DocumentId",
    "DocumentPredicate",
    "Id",
    "OnMissingRule",
    "Operation",
    "Order",
    "PaginationOptions",
    "PaginationResult",
    "Query",
    "QueryInitializer",
    "RuleFn",
    "UserIdentity",
]

# Valid values for RLSConfig.on_missing_rule.
OnMissingRule = Literal["allow", "deny"]

# The three rule slots per table.
Operation = Literal["read", "write", "insert"]

Order = Literal["asc", "desc"]

# Documents are opaque, engine-owned records.
Document = Mapping[str, Any]

# A rule: (ambient context, candidate document) -> allowed?
RuleFn = Callable[[Any, Document], Awaitable[bool] | bool]

# A rule bound to one table, one operation and one ambient context.
DocumentPredicate = Callable[[Document], Awaitable[bool]]


@runtime_checkable
class DocumentId(Protocol):
    """Structural type for document references.

    Anything carrying the name of the table it points into qualifies.
    """

    @property
    def table_name(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Id:
    """Reference to a single document: ``(table_name, key)``.

    Example::

        message_id = Id("messages", 42)
        doc = await db.get(message_id)
    """

    table_name: str
    key: Any

    def __str__(self) -> str:
        return f"{self.table_name}:{self.key}"


class PaginationOptions(TypedDict, total=False):
    """Options accepted by ``paginate()``.

    ``cursor`` is the opaque continuation returned by a previous page, or
    ``None`` to start from the beginning.
    """

    num_items: int
    cursor: str | None


@dataclass(slots=True)
class PaginationResult:
    """A single page plus the engine's continuation cursor."""

    page: list[Document] = field(default_factory=lambda: [])
    continue_cursor: str | None = None
    is_done: bool = True


@runtime_checkable
class Query(Protocol):
    """The query surface exposed by the underlying engine."""

    def filter(self, expression: Any) -> Query: ...

    def order(self, order: Order) -> Query: ...

    async def paginate(self, options: PaginationOptions) -> PaginationResult: ...

    async def collect(self) -> list[Document]: ...

    async def take(self, n: int) -> list[Document]: ...

    async def first(self) -> Document | None: ...

    async def unique(self) -> Document | None: ...

    def __aiter__(self) -> AsyncIterator[Document]: ...


@runtime_checkable
class QueryInitializer(Query, Protocol):
    """Entry point for building a query against one table."""

    def full_table_scan(self) -> Query: ...

    def with_index(self, index_name: str, index_range: Any = None) -> Query: ...

    def with_search_index(self, index_name: str, search_filter: Any) -> Query: ...


@runtime_checkable
class DatabaseReader(Protocol):
    """Read handle of the underlying engine."""

    async def get(self, id: DocumentId) -> Document | None: ...

    def query(self, table_name: str) -> QueryInitializer: ...


@runtime_checkable
class DatabaseWriter(DatabaseReader, Protocol):
    """Write handle of the underlying engine."""

    async def insert(self, table_name: str, value: Mapping[str, Any]) -> DocumentId: ...

    async def patch(self, id: DocumentId, value: Mapping[str, Any]) -> None: ...

    async def replace(self, id: DocumentId, value: Mapping[str, Any]) -> None: ...

    async def delete(self, id: DocumentId) -> None: ...


@runtime_checkable
class UserIdentity(Protocol):
    """Identity returned by the auth provider for an authenticated caller."""

    @property
    def token_identifier(self) -> str: ...


@runtime_checkable
class Auth(Protocol):
    """Identity provider.  ``None`` means the caller is unauthenticated."""

    async def get_user_identity(self) -> UserIdentity | None: ...
