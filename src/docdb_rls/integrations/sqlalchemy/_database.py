"""SQLAlchemyDatabase — exposes Core tables through the document engine protocols."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Column, Index, MetaData, Row, Table, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from docdb_rls._types import Document, DocumentId, Id
from docdb_rls.integrations.sqlalchemy._query import SQLAlchemyQuery

__all__ = ["SQLAlchemyDatabase"]

logger = logging.getLogger("docdb_rls.integrations.sqlalchemy")

_SYSTEM_FIELDS = frozenset({"_id", "_creation_time"})


class SQLAlchemyDatabase:
    """Document engine backed by an ``AsyncConnection`` and Core ``Table`` objects.

    Each row becomes a document: its columns, plus ``_id`` holding an
    :class:`~docdb_rls.Id` of the table name and primary key value.
    Tables must have a single-column primary key.  Named ``Index``
    objects on a table are usable with ``with_index`` and
    ``with_search_index``.

    Transactions belong to the caller: this class only executes
    statements on the connection it is given.

    Example::

        async with engine.begin() as conn:
            db = SQLAlchemyDatabase(conn, metadata)
            ctx = RequestContext(db=db, auth=auth)
            messages = await rls.reader(ctx).query("messages").collect()
    """

    def __init__(
        self,
        connection: AsyncConnection,
        tables: MetaData | Iterable[Table],
    ) -> None:
        self.connection = connection
        source = tables.tables.values() if isinstance(tables, MetaData) else tables
        self._tables: dict[str, Table] = {table.name: table for table in source}
        for table in self._tables.values():
            if len(table.primary_key.columns) != 1:
                raise ValueError(f"Table {table.name!r} must have a single-column primary key")

    # -- schema helpers -----------------------------------------------------

    def table(self, table_name: str) -> Table:
        try:
            return self._tables[table_name]
        except KeyError:
            raise ValueError(f"Unknown table {table_name!r}") from None

    @staticmethod
    def _primary_key(table: Table) -> Column[Any]:
        return next(iter(table.primary_key.columns))

    @staticmethod
    def _index(table: Table, index_name: str) -> Index:
        for index in table.indexes:
            if index.name == index_name:
                return index
        raise ValueError(f"Unknown index {index_name!r} on table {table.name!r}")

    def _to_document(self, table: Table, row: Row[Any]) -> Document:
        document = dict(row._mapping)
        document["_id"] = Id(table.name, document[self._primary_key(table).name])
        return document

    def _columns(self, table: Table, value: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(value) - _SYSTEM_FIELDS - set(table.c.keys())
        if unknown:
            raise ValueError(f"Unknown columns for table {table.name!r}: {sorted(unknown)}")
        return {k: v for k, v in value.items() if k not in _SYSTEM_FIELDS}

    def _target(self, id: DocumentId) -> tuple[Table, Any]:
        table = self.table(id.table_name)
        return table, self._primary_key(table) == getattr(id, "key", None)

    # -- reader -------------------------------------------------------------

    async def get(self, id: DocumentId) -> Document | None:
        table, where = self._target(id)
        row = (await self.connection.execute(select(table).where(where))).first()
        return self._to_document(table, row) if row is not None else None

    def query(self, table_name: str) -> SQLAlchemyQuery:
        return SQLAlchemyQuery(self, self.table(table_name))

    # -- writer -------------------------------------------------------------

    async def insert(self, table_name: str, value: Mapping[str, Any]) -> Id:
        table = self.table(table_name)
        result = await self.connection.execute(insert(table).values(self._columns(table, value)))
        key = result.inserted_primary_key[0]
        logger.debug("Inserted %s:%s", table_name, key)
        return Id(table_name, key)

    async def _update(self, id: DocumentId, values: dict[str, Any], action: str) -> None:
        table, where = self._target(id)
        result = await self.connection.execute(update(table).where(where).values(values))
        if result.rowcount == 0:
            raise KeyError(f"Document {id} does not exist")
        logger.debug("%s %s", action.capitalize(), id)

    async def patch(self, id: DocumentId, value: Mapping[str, Any]) -> None:
        table = self.table(id.table_name)
        values = self._columns(table, value)
        if not values:
            if await self.get(id) is None:
                raise KeyError(f"Document {id} does not exist")
            return
        await self._update(id, values, "patched")

    async def replace(self, id: DocumentId, value: Mapping[str, Any]) -> None:
        table = self.table(id.table_name)
        given = self._columns(table, value)
        pk_name = self._primary_key(table).name
        # Columns absent from the new value are reset to NULL.
        values = {c.name: given.get(c.name) for c in table.c if c.name != pk_name}
        await self._update(id, values, "replaced")

    async def delete(self, id: DocumentId) -> None:
        table, where = self._target(id)
        result = await self.connection.execute(delete(table).where(where))
        if result.rowcount == 0:
            raise KeyError(f"Document {id} does not exist")
        logger.debug("Deleted %s", id)

    def __repr__(self) -> str:
        return f"SQLAlchemyDatabase(tables={sorted(self._tables)!r})"
