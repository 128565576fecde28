"""AuthorizedReader — drop-in replacement for the engine's read handle."""

from __future__ import annotations

from typing import Any

from docdb_rls._types import DatabaseReader, Document, DocumentId, DocumentPredicate
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.database._context import AuthorizedHandle
from docdb_rls.database._initializer import AuthorizedQueryInitializer
from docdb_rls.exceptions import ConfigurationError
from docdb_rls.rules._registry import RuleRegistry, get_default_registry
from docdb_rls.rules._resolve import bind_predicate

__all__ = ["AuthorizedReader"]


class AuthorizedReader(AuthorizedHandle):
    """Read handle that hides every document the read rule rejects.

    A document that does not exist and a document the caller may not see
    look the same: ``get()`` returns ``None`` for both.

    Args:
        ctx: Ambient context passed to rules.  Its database handle must be
            the raw engine, never a wrapper.
        db: The raw engine read handle to delegate to.
        registry: Rule registry. Defaults to the global registry.
        config: Configuration. Defaults to the global config.

    Example::

        reader = AuthorizedReader(ctx, ctx.db, registry)
        message = await reader.get(message_id)  # None if hidden
    """

    __slots__ = ("_config", "_ctx", "_db", "_registry")

    def __init__(
        self,
        ctx: Any,
        db: DatabaseReader,
        registry: RuleRegistry | None = None,
        *,
        config: RLSConfig | None = None,
    ) -> None:
        if isinstance(db, AuthorizedHandle):
            raise ConfigurationError("AuthorizedReader must wrap a raw database handle")
        self._ctx = ctx
        self._db = db
        self._registry = registry if registry is not None else get_default_registry()
        self._config = config if config is not None else get_global_config()

    def predicate(self, table_name: str, operation: str = "read") -> DocumentPredicate:
        """Return the rule for (*table_name*, *operation*) bound to this context."""
        return bind_predicate(
            self._registry, table_name, operation, self._ctx, config=self._config
        )

    async def get(self, id: DocumentId) -> Document | None:
        """Fetch a document by reference, or ``None`` if absent or hidden."""
        document = await self._db.get(id)
        if document is None:
            return None
        if await self.predicate(id.table_name)(document):
            return document
        return None

    def query(self, table_name: str) -> AuthorizedQueryInitializer:
        """Start an authorized query against *table_name*."""
        return AuthorizedQueryInitializer(
            self._db.query(table_name),
            self.predicate(table_name),
            table_name=table_name,
            max_concurrency=self._config.max_concurrent_checks,
        )

    def __repr__(self) -> str:
        return f"AuthorizedReader(db={self._db!r})"
