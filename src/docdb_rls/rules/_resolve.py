"""Predicate binding — close a resolved rule over a table and an ambient context."""

from __future__ import annotations

from typing import Any

from docdb_rls._types import Document, DocumentPredicate
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.rules._combinators import call_rule, rule_name
from docdb_rls.rules._registry import RuleRegistry

__all__ = ["bind_predicate"]


def bind_predicate(
    registry: RuleRegistry,
    table_name: str,
    operation: str,
    ctx: Any,
    *,
    config: RLSConfig | None = None,
) -> DocumentPredicate:
    """Resolve the rule for (*table_name*, *operation*) and bind it to *ctx*.

    The returned predicate takes only a document, so the cursor and query
    wrappers never need to know about rule lookup.  The lookup happens
    here, once; each call of the predicate only runs the rule.

    *ctx* must carry the raw engine handle.  Rules that read other rows
    through it do not trigger further rule evaluation.

    When ``log_rule_decisions`` is enabled, every decision is logged via
    the ``docdb_rls.audit`` logger.
    """
    target_config = config if config is not None else get_global_config()
    fn = registry.resolve(table_name, operation, config=target_config)

    if not target_config.log_rule_decisions:

        async def _predicate(document: Document) -> bool:
            return await call_rule(fn, ctx, document)

        return _predicate

    from docdb_rls._audit import log_missing_rule, log_rule_decision

    configured = registry.has_rule(table_name, operation)
    if not configured:
        log_missing_rule(table_name=table_name, operation=operation, fallback=rule_name(fn))
    name = rule_name(fn)

    async def _logged_predicate(document: Document) -> bool:
        allowed = await call_rule(fn, ctx, document)
        log_rule_decision(
            table_name=table_name,
            operation=operation,
            rule=name,
            document=document,
            allowed=allowed,
        )
        return allowed

    return _logged_predicate
