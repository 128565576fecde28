"""@table_rule decorator — register row-level rules."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from docdb_rls._types import RuleFn
from docdb_rls.rules._registry import RuleRegistry, get_default_registry

__all__ = ["table_rule"]

F = TypeVar("F", bound=RuleFn)


def table_rule(
    table_name: str,
    operation: str,
    *,
    registry: RuleRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator that registers a rule for (table, operation).

    The decorated function receives the ambient context (with the raw,
    unwrapped database handle) and the candidate document.

    Args:
        table_name: The table the rule guards.
        operation: ``"read"``, ``"write"`` or ``"insert"``.
        registry: Optional custom registry. Defaults to the global registry.

    Returns:
        A decorator that registers the function and returns it unchanged.

    Example::

        @table_rule("messages", "read")
        async def message_read(ctx, message) -> bool:
            identity = await ctx.auth.get_user_identity()
            return identity is not None or message["published"]
    """

    def decorator(fn: F) -> F:
        target = registry if registry is not None else get_default_registry()
        target.register(table_name, operation, fn)
        return fn

    return decorator
