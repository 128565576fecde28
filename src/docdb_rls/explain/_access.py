"""explain_access() — explain why a caller can/can't touch a document."""

from __future__ import annotations

from typing import Any

from docdb_rls._types import Document
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.explain._models import AccessExplanation, RuleEvaluation
from docdb_rls.rules._base import OPERATIONS
from docdb_rls.rules._combinators import call_rule, rule_name
from docdb_rls.rules._registry import RuleRegistry, get_default_registry

__all__ = ["explain_access"]


async def explain_access(
    ctx: Any,
    table_name: str,
    document: Document,
    *,
    registry: RuleRegistry | None = None,
    config: RLSConfig | None = None,
) -> AccessExplanation:
    """Evaluate every rule slot of *table_name* against *document*.

    Write operations on a hidden document fail with the same error as
    a missing document.  This tells the two apart while debugging.  It
    does not change what the authorized wrappers do.

    Args:
        ctx: Ambient context carrying the raw database handle.
        table_name: The table the document belongs to.
        document: The document to explain.
        registry: Optional custom registry. Defaults to the global registry.
        config: Optional config. Defaults to the global config.

    Returns:
        An ``AccessExplanation`` with one evaluation per operation.

    Example::

        explanation = await explain_access(ctx, "messages", message)
        print(explanation)
    """
    target_registry = registry if registry is not None else get_default_registry()
    target_config = config if config is not None else get_global_config()

    evaluations: list[RuleEvaluation] = []
    for operation in OPERATIONS:
        fn = target_registry.resolve(table_name, operation, config=target_config)
        evaluations.append(
            RuleEvaluation(
                operation=operation,
                rule_name=rule_name(fn),
                configured=target_registry.has_rule(table_name, operation),
                allowed=await call_rule(fn, ctx, document),
            )
        )

    document_id = document.get("_id")
    return AccessExplanation(
        table_name=table_name,
        document_id=str(document_id) if document_id is not None else None,
        evaluations=evaluations,
    )
