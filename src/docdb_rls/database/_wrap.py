"""RowLevelSecurity — setup step that hands handlers an authorized handle."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from docdb_rls._types import RuleFn
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.database._context import get_raw_db, with_db
from docdb_rls.database._reader import AuthorizedReader
from docdb_rls.database._writer import AuthorizedWriter
from docdb_rls.rules._registry import RuleRegistry, get_default_registry

__all__ = ["RowLevelSecurity"]

R = TypeVar("R")
Handler = Callable[..., Awaitable[R]]


class RowLevelSecurity:
    """Apply row level security to query and mutation handlers.

    Handlers receive a copy of their context whose database handle has
    been replaced by an :class:`AuthorizedReader` (queries) or
    :class:`AuthorizedWriter` (mutations).  Rules keep receiving the
    original context, so a rule may read any row through ``ctx.db``
    without triggering rules recursively.

    Tables with no rule default to full access unless the config says
    ``on_missing_rule="deny"``.

    Args:
        registry: Rule registry. Defaults to the global registry.
        config: Configuration. Defaults to the global config at call time.

    Example::

        rls = RowLevelSecurity(RuleRegistry({
            "messages": {"read": message_read, "write": message_write},
        }))

        @rls.with_mutation_rls
        async def edit_message(ctx, message_id, body):
            # NotFoundOrForbidden if hidden, WriteForbidden if not the author
            await ctx.db.patch(message_id, {"body": body})
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        *,
        config: RLSConfig | None = None,
    ) -> None:
        self._registry = registry if registry is not None else get_default_registry()
        self._config = config

    @classmethod
    def from_rules(
        cls,
        read_rules: Mapping[str, RuleFn],
        write_rules: Mapping[str, RuleFn] | None = None,
        insert_rules: Mapping[str, RuleFn] | None = None,
        *,
        config: RLSConfig | None = None,
    ) -> RowLevelSecurity:
        """Build from per-operation ``table -> rule`` maps.

        When *write_rules* are omitted, writes are only restricted by the
        read rules (a hidden document cannot be written).
        """
        registry = RuleRegistry.from_rules(read_rules, write_rules, insert_rules)
        return cls(registry, config=config)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def config(self) -> RLSConfig:
        return self._config if self._config is not None else get_global_config()

    def reader(self, ctx: Any) -> AuthorizedReader:
        """Build an authorized reader over the raw handle found on *ctx*.

        Raises:
            ConfigurationError: If *ctx* has no raw database handle.
        """
        config = self.config
        db = get_raw_db(ctx, config.db_attribute)
        if config.log_rule_decisions:
            from docdb_rls._audit import log_wrapper_created

            log_wrapper_created(kind="reader", tables=self._registry.tables())
        return AuthorizedReader(ctx, db, self._registry, config=config)

    def writer(self, ctx: Any) -> AuthorizedWriter:
        """Build an authorized writer over the raw handle found on *ctx*.

        Raises:
            ConfigurationError: If *ctx* has no raw database handle.
        """
        config = self.config
        db = get_raw_db(ctx, config.db_attribute)
        if config.log_rule_decisions:
            from docdb_rls._audit import log_wrapper_created

            log_wrapper_created(kind="writer", tables=self._registry.tables())
        return AuthorizedWriter(ctx, db, self._registry, config=config)

    def with_query_rls(self, fn: Handler[R]) -> Handler[R]:
        """Decorate an async query handler ``fn(ctx, *args, **kwargs)``."""

        @functools.wraps(fn)
        async def _wrapped(ctx: Any, *args: Any, **kwargs: Any) -> R:
            reader = self.reader(ctx)
            return await fn(with_db(ctx, reader, self.config.db_attribute), *args, **kwargs)

        return _wrapped

    def with_mutation_rls(self, fn: Handler[R]) -> Handler[R]:
        """Decorate an async mutation handler ``fn(ctx, *args, **kwargs)``."""

        @functools.wraps(fn)
        async def _wrapped(ctx: Any, *args: Any, **kwargs: Any) -> R:
            writer = self.writer(ctx)
            return await fn(with_db(ctx, writer, self.config.db_attribute), *args, **kwargs)

        return _wrapped
