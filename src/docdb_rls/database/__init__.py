"""Database wrappers — authorized reader/writer, queries and cursors."""

from __future__ import annotations

from docdb_rls.database._context import (
    AuthorizedHandle,
    RequestContext,
    get_raw_db,
    with_db,
)
from docdb_rls.database._cursor import AuthorizedCursor, CursorState
from docdb_rls.database._initializer import AuthorizedQueryInitializer
from docdb_rls.database._query import AuthorizedQuery, filter_documents
from docdb_rls.database._reader import AuthorizedReader
from docdb_rls.database._wrap import RowLevelSecurity
from docdb_rls.database._writer import AuthorizedWriter

__all__ = [
    "AuthorizedCursor",
    "AuthorizedHandle",
    "AuthorizedQuery",
    "AuthorizedQueryInitializer",
    "AuthorizedReader",
    "AuthorizedWriter",
    "CursorState",
    "RequestContext",
    "RowLevelSecurity",
    "filter_documents",
    "get_raw_db",
    "with_db",
]
