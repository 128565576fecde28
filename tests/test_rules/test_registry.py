"""Tests for RuleSet and RuleRegistry resolution."""

from __future__ import annotations

from typing import Any

import pytest

from docdb_rls import RLSConfig
from docdb_rls.rules import (
    Rule,
    RuleRegistry,
    RuleSet,
    always_allow,
    always_deny,
    get_default_registry,
)
from docdb_rls.rules._combinators import rule_name


async def _read(ctx: Any, doc: Any) -> bool:
    return True


async def _write(ctx: Any, doc: Any) -> bool:
    return False


class TestRuleSet:
    def test_slots_default_to_empty(self):
        rule_set = RuleSet()
        assert rule_set.get("read") is None
        assert rule_set.get("write") is None
        assert rule_set.get("insert") is None

    def test_from_mapping(self):
        rule_set = RuleSet.from_mapping({"read": _read})
        assert rule_set.read is _read
        assert rule_set.write is None

    def test_from_mapping_rejects_unknown_operation(self):
        with pytest.raises(ValueError, match="operation must be one of"):
            RuleSet.from_mapping({"update": _read})

    def test_get_rejects_unknown_operation(self):
        with pytest.raises(ValueError):
            RuleSet().get("delete")


class TestRuleRegistry:
    def test_constructor_accepts_mappings_and_rule_sets(self):
        registry = RuleRegistry(
            {"messages": {"read": _read}, "users": RuleSet(write=_write)},
        )
        assert registry.lookup("messages").read is _read
        assert registry.lookup("users").write is _write
        assert registry.tables() == {"messages", "users"}

    def test_from_rules_splits_operations(self):
        registry = RuleRegistry.from_rules({"messages": _read}, {"messages": _write})
        assert registry.resolve("messages", "read") is _read
        assert registry.resolve("messages", "write") is _write
        assert not registry.has_rule("messages", "insert")

    def test_duplicate_slot_raises(self):
        registry = RuleRegistry({"messages": {"read": _read}})
        with pytest.raises(ValueError, match="already registered"):
            registry.register("messages", "read", _write)

    def test_register_with_name_wraps_rule(self):
        registry = RuleRegistry()
        registry.register("messages", "read", _read, name="published_or_member")
        resolved = registry.resolve("messages", "read")
        assert isinstance(resolved, Rule)
        assert rule_name(resolved) == "published_or_member"

    def test_register_without_name_keeps_callable(self):
        registry = RuleRegistry()
        registry.register("messages", "read", _read)
        assert registry.resolve("messages", "read") is _read

    def test_register_other_slot_of_same_table(self):
        registry = RuleRegistry({"messages": {"read": _read}})
        registry.register("messages", "write", _write)
        assert registry.lookup("messages") == RuleSet(read=_read, write=_write)

    def test_lookup_unknown_table_is_empty(self):
        assert RuleRegistry().lookup("nothing") == RuleSet()

    def test_clear(self):
        registry = RuleRegistry({"messages": {"read": _read}})
        registry.clear()
        assert registry.tables() == set()


class TestResolveDefaults:
    """Missing rules mean full access unless configured otherwise."""

    def test_missing_rule_is_always_allow_by_default(self):
        registry = RuleRegistry()
        for operation in ("read", "write", "insert"):
            assert registry.resolve("anything", operation, config=RLSConfig()) is always_allow

    def test_missing_rule_with_deny_config(self):
        registry = RuleRegistry()
        config = RLSConfig(on_missing_rule="deny")
        assert registry.resolve("anything", "read", config=config) is always_deny
        assert registry.resolve("anything", "write", config=config) is always_deny

    def test_insert_is_never_denied_by_default(self):
        config = RLSConfig(on_missing_rule="deny")
        assert RuleRegistry().resolve("anything", "insert", config=config) is always_allow

    def test_resolve_uses_global_config(self, isolated_rls_state):
        from docdb_rls import configure

        configure(on_missing_rule="deny")
        assert RuleRegistry().resolve("anything", "read") is always_deny

    @pytest.mark.asyncio
    async def test_default_allow_accepts_any_document(self):
        fn = RuleRegistry().resolve("secrets", "read", config=RLSConfig())
        assert await fn(None, {"classified": True})


class TestDefaultRegistry:
    def test_singleton(self):
        assert get_default_registry() is get_default_registry()
