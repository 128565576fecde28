"""RuleSet dataclass — the read/write/insert slots configured for one table."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from docdb_rls._types import Operation, RuleFn

__all__ = ["OPERATIONS", "RuleSet"]

OPERATIONS: tuple[Operation, ...] = ("read", "write", "insert")


def _check_operation(operation: str) -> None:
    if operation not in OPERATIONS:
        raise ValueError(f"operation must be one of {OPERATIONS!r}, got {operation!r}")


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Rules for a single table.  Every slot is optional.

    An empty slot means the operation is not restricted by this table's
    configuration (see ``RLSConfig.on_missing_rule`` for read/write).

    Attributes:
        read: Decides whether a document is visible at all.
        write: Decides whether an existing, visible document may be
            patched, replaced or deleted.
        insert: Decides whether a proposed new document may be inserted.
    """

    read: RuleFn | None = None
    write: RuleFn | None = None
    insert: RuleFn | None = None

    def get(self, operation: str) -> RuleFn | None:
        """Return the rule in the *operation* slot, or ``None``."""
        _check_operation(operation)
        return getattr(self, operation)

    @classmethod
    def from_mapping(cls, slots: Mapping[str, RuleFn | None]) -> RuleSet:
        """Build a RuleSet from ``{"read": ..., "write": ..., "insert": ...}``.

        Example::

            RuleSet.from_mapping({"read": can_read_message})
        """
        for operation in slots:
            _check_operation(operation)
        return cls(
            read=slots.get("read"),
            write=slots.get("write"),
            insert=slots.get("insert"),
        )
