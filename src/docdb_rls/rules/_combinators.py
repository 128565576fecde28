"""Composable rules — combine async row-level predicates with ``&``, ``|``, ``~``."""

from __future__ import annotations

import inspect
from typing import Any

from docdb_rls._types import Document, RuleFn

__all__ = ["Rule", "always_allow", "always_deny", "call_rule", "rule", "rule_name"]


async def call_rule(fn: RuleFn, ctx: Any, document: Document) -> bool:
    """Invoke *fn* and await its result if it returned an awaitable.

    Rules are normally ``async def`` functions, but a plain function
    returning a ``bool`` is accepted too.
    """
    result = fn(ctx, document)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


def rule_name(fn: RuleFn) -> str:
    """Best-effort human-readable name of a rule (for logging)."""
    if isinstance(fn, Rule):
        return fn.name
    return getattr(fn, "__name__", "<anonymous>")


class Rule:
    """A composable row-level rule.

    Wraps a callable ``(ctx, document) -> bool | Awaitable[bool]``.
    ``&`` and ``|`` short-circuit: the right-hand side is only evaluated
    when the left-hand side does not already decide the outcome.

    Example::

        is_published = Rule(lambda ctx, msg: msg["published"])
        is_author = Rule(author_matches)

        can_read = is_published | is_author
        allowed = await can_read(ctx, message)
    """

    def __init__(self, fn: RuleFn, *, name: str = "") -> None:
        self._fn = fn
        self._name = name or getattr(fn, "__name__", "<anonymous>")

    async def __call__(self, ctx: Any, document: Document) -> bool:
        return await call_rule(self._fn, ctx, document)

    def __and__(self, other: RuleFn) -> Rule:
        async def _and(ctx: Any, document: Document) -> bool:
            if not await self(ctx, document):
                return False
            return await call_rule(other, ctx, document)

        return Rule(_and, name=f"({self._name} & {rule_name(other)})")

    def __or__(self, other: RuleFn) -> Rule:
        async def _or(ctx: Any, document: Document) -> bool:
            if await self(ctx, document):
                return True
            return await call_rule(other, ctx, document)

        return Rule(_or, name=f"({self._name} | {rule_name(other)})")

    def __invert__(self) -> Rule:
        async def _not(ctx: Any, document: Document) -> bool:
            return not await self(ctx, document)

        return Rule(_not, name=f"~{self._name}")

    @property
    def name(self) -> str:
        """The human-readable name of this rule."""
        return self._name

    def __repr__(self) -> str:
        return f"Rule({self._name!r})"


def rule(fn: RuleFn) -> Rule:
    """Decorator/factory that creates a composable Rule from a callable.

    Example::

        @rule
        async def is_authenticated(ctx, doc) -> bool:
            return await ctx.auth.get_user_identity() is not None
    """
    return Rule(fn, name=getattr(fn, "__name__", "<lambda>"))


# Built-in rules


async def _always_allow(ctx: Any, document: Document) -> bool:
    return True


async def _always_deny(ctx: Any, document: Document) -> bool:
    return False


always_allow: Rule = Rule(_always_allow, name="always_allow")
always_deny: Rule = Rule(_always_deny, name="always_deny")
