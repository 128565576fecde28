"""Rule engine — table-keyed registration, composition and resolution of rules."""

from docdb_rls.rules._base import OPERATIONS, RuleSet
from docdb_rls.rules._combinators import Rule, always_allow, always_deny, rule
from docdb_rls.rules._decorator import table_rule
from docdb_rls.rules._registry import RuleRegistry, get_default_registry
from docdb_rls.rules._resolve import bind_predicate

__all__ = [
    "OPERATIONS",
    "Rule",
    "RuleRegistry",
    "RuleSet",
    "always_allow",
    "always_deny",
    "bind_predicate",
    "get_default_registry",
    "rule",
    "table_rule",
]
