"""AuthorizedWriter — drop-in replacement for the engine's write handle."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from docdb_rls._checks import authorize
from docdb_rls._types import DatabaseWriter, Document, DocumentId
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.database._context import AuthorizedHandle
from docdb_rls.database._initializer import AuthorizedQueryInitializer
from docdb_rls.database._reader import AuthorizedReader
from docdb_rls.exceptions import ConfigurationError, NotFoundOrForbidden
from docdb_rls.rules._registry import RuleRegistry, get_default_registry

__all__ = ["AuthorizedWriter"]


class AuthorizedWriter(AuthorizedHandle):
    """Write handle enforcing read, write and insert rules.

    ``patch``, ``replace`` and ``delete`` run in three steps.  First the
    document is read through the inner :class:`AuthorizedReader`.  Next
    the write rule is evaluated against that *stored* document, never
    against the proposed value.  Only then is the mutation delegated.

    The check and the mutation are two separate engine calls.  Without
    isolation in the engine, a concurrent writer can change the document
    between them.

    ``insert`` is unrestricted unless the table has an insert rule, which
    is evaluated against the proposed value.

    Example::

        writer = AuthorizedWriter(ctx, ctx.db, registry)
        await writer.patch(message_id, {"body": "edited"})
    """

    __slots__ = ("_config", "_ctx", "_db", "_reader", "_registry")

    def __init__(
        self,
        ctx: Any,
        db: DatabaseWriter,
        registry: RuleRegistry | None = None,
        *,
        config: RLSConfig | None = None,
    ) -> None:
        if isinstance(db, AuthorizedHandle):
            raise ConfigurationError("AuthorizedWriter must wrap a raw database handle")
        self._ctx = ctx
        self._db = db
        self._registry = registry if registry is not None else get_default_registry()
        self._config = config if config is not None else get_global_config()
        self._reader = AuthorizedReader(ctx, db, self._registry, config=self._config)

    # -- reads --------------------------------------------------------------

    async def get(self, id: DocumentId) -> Document | None:
        return await self._reader.get(id)

    def query(self, table_name: str) -> AuthorizedQueryInitializer:
        return self._reader.query(table_name)

    # -- writes -------------------------------------------------------------

    async def insert(self, table_name: str, value: Mapping[str, Any]) -> DocumentId:
        """Insert a new document.

        Raises:
            InsertForbidden: If the table's insert rule rejects *value*.
        """
        if self._registry.has_rule(table_name, "insert"):
            await authorize(
                self._ctx,
                "insert",
                table_name,
                value,
                registry=self._registry,
                config=self._config,
            )
        return await self._db.insert(table_name, value)

    async def _check_write(self, id: DocumentId, action: str) -> None:
        document = await self._reader.get(id)
        if document is None:
            raise NotFoundOrForbidden(document_id=id, action=action)
        await authorize(
            self._ctx,
            "write",
            id.table_name,
            document,
            registry=self._registry,
            config=self._config,
            document_id=id,
            action=action,
        )

    async def patch(self, id: DocumentId, value: Mapping[str, Any]) -> None:
        """Shallow-merge *value* into an existing document.

        Raises:
            NotFoundOrForbidden: If the document is absent or hidden.
            WriteForbidden: If the write rule rejects the stored document.
        """
        await self._check_write(id, "patch")
        await self._db.patch(id, value)

    async def replace(self, id: DocumentId, value: Mapping[str, Any]) -> None:
        """Replace an existing document wholesale.

        Raises:
            NotFoundOrForbidden: If the document is absent or hidden.
            WriteForbidden: If the write rule rejects the stored document.
        """
        await self._check_write(id, "replace")
        await self._db.replace(id, value)

    async def delete(self, id: DocumentId) -> None:
        """Delete an existing document.

        Raises:
            NotFoundOrForbidden: If the document is absent or hidden.
            WriteForbidden: If the write rule rejects the stored document.
        """
        await self._check_write(id, "delete")
        await self._db.delete(id)

    def __repr__(self) -> str:
        return f"AuthorizedWriter(db={self._db!r})"
