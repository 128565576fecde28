"""RuleRegistry — table-keyed rule configuration and rule resolution."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping

from docdb_rls._types import RuleFn
from docdb_rls.config._config import RLSConfig, get_global_config
from docdb_rls.rules._base import OPERATIONS, RuleSet, _check_operation
from docdb_rls.rules._combinators import Rule, always_allow, always_deny

__all__ = ["RuleRegistry", "get_default_registry"]


class RuleRegistry:
    """Registry that maps table names to a :class:`RuleSet`.

    Configured once at setup time and only read afterwards.  A table that
    is absent from the registry, or a slot left empty, is unrestricted
    unless ``on_missing_rule="deny"`` is configured.  This fail-open
    default is intentional; use :func:`docdb_rls.testing.rule_matrix` to
    find tables you forgot to cover.

    Example::

        registry = RuleRegistry({
            "messages": {"read": can_read_message, "write": is_author},
        })
        read_rule = registry.resolve("messages", "read")
    """

    def __init__(
        self,
        rules: Mapping[str, RuleSet | Mapping[str, RuleFn | None]] | None = None,
    ) -> None:
        self._rules: dict[str, RuleSet] = {}
        for table_name, slots in (rules or {}).items():
            rule_set = slots if isinstance(slots, RuleSet) else RuleSet.from_mapping(slots)
            for operation in OPERATIONS:
                fn = rule_set.get(operation)
                if fn is not None:
                    self.register(table_name, operation, fn)

    @classmethod
    def from_rules(
        cls,
        read_rules: Mapping[str, RuleFn],
        write_rules: Mapping[str, RuleFn] | None = None,
        insert_rules: Mapping[str, RuleFn] | None = None,
    ) -> RuleRegistry:
        """Build a registry from one ``table -> rule`` map per operation.

        Example::

            registry = RuleRegistry.from_rules(
                {"cookies": lambda ctx, cookie: not cookie["eaten"]},
                {"cookies": only_parents},
            )
        """
        registry = cls()
        for operation, table_rules in (
            ("read", read_rules),
            ("write", write_rules or {}),
            ("insert", insert_rules or {}),
        ):
            for table_name, fn in table_rules.items():
                registry.register(table_name, operation, fn)
        return registry

    def register(
        self,
        table_name: str,
        operation: str,
        fn: RuleFn,
        *,
        name: str | None = None,
    ) -> None:
        """Place *fn* in the *operation* slot of *table_name*.

        Args:
            table_name: The table the rule applies to.
            operation: ``"read"``, ``"write"`` or ``"insert"``.
            fn: ``(ctx, document) -> bool | Awaitable[bool]``.
            name: Name shown in audit logs and explanations.  When given,
                *fn* is stored wrapped in a :class:`Rule` carrying it.

        Raises:
            ValueError: If *operation* is unknown or the slot is already
                taken.  Combine rules explicitly with ``Rule`` operators
                instead of registering twice.
        """
        _check_operation(operation)
        current = self._rules.get(table_name, RuleSet())
        if current.get(operation) is not None:
            raise ValueError(f"A {operation!r} rule is already registered for table {table_name!r}")
        if name is not None:
            fn = Rule(fn, name=name)
        self._rules[table_name] = dataclasses.replace(current, **{operation: fn})

    def lookup(self, table_name: str) -> RuleSet:
        """Return the RuleSet for *table_name* (empty if none is configured)."""
        return self._rules.get(table_name, RuleSet())

    def has_rule(self, table_name: str, operation: str) -> bool:
        """Check whether a rule is configured in the given slot."""
        return self.lookup(table_name).get(operation) is not None

    def resolve(
        self,
        table_name: str,
        operation: str,
        *,
        config: RLSConfig | None = None,
    ) -> RuleFn:
        """Return the rule to apply for (*table_name*, *operation*).

        Resolution is a synchronous name lookup.  When the slot is empty
        the fallback is ``always_allow``, or ``always_deny`` for read/write
        when ``on_missing_rule="deny"``.  Inserts always fall back to
        ``always_allow``.

        Args:
            table_name: The addressed table.
            operation: ``"read"``, ``"write"`` or ``"insert"``.
            config: Configuration to consult. Defaults to the global config.

        Returns:
            A rule callable ``(ctx, document) -> bool | Awaitable[bool]``.
        """
        fn = self.lookup(table_name).get(operation)
        if fn is not None:
            return fn
        if operation == "insert":
            return always_allow
        target_config = config if config is not None else get_global_config()
        if target_config.on_missing_rule == "deny":
            return always_deny
        return always_allow

    def tables(self) -> set[str]:
        """Return the names of all tables with at least one configured slot."""
        return set(self._rules)

    def clear(self) -> None:
        """Remove all registered rules.

        Primarily useful in test teardown.
        """
        self._rules.clear()


# Module-level default registry (singleton).
_default_registry = RuleRegistry()


def get_default_registry() -> RuleRegistry:
    """Return the global default (singleton) rule registry.

    This is the registry used by ``@table_rule`` and ``RowLevelSecurity``
    when no explicit registry is provided.
    """
    return _default_registry
