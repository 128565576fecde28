"""Data models for access explanations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["AccessExplanation", "RuleEvaluation"]


@dataclass(frozen=True, slots=True)
class RuleEvaluation:
    """Outcome of one rule slot for one document.

    Attributes:
        operation: ``"read"``, ``"write"`` or ``"insert"``.
        rule_name: Name of the configured rule, or of the fallback applied.
        configured: False when the slot was empty and the fallback decided.
        allowed: The verdict.
    """

    operation: str
    rule_name: str
    configured: bool
    allowed: bool

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "operation": self.operation,
            "rule_name": self.rule_name,
            "configured": self.configured,
            "allowed": self.allowed,
        }


@dataclass(frozen=True, slots=True)
class AccessExplanation:
    """Why the caller can or cannot read, write or insert a document.

    ``can_write`` combines the read and write slots, matching what the
    authorized writer does: a hidden document is never writable.

    Attributes:
        table_name: The table the document belongs to.
        document_id: The document's ``_id`` if it has one.
        evaluations: One entry per operation.
    """

    table_name: str
    document_id: str | None
    evaluations: list[RuleEvaluation]

    def _verdict(self, operation: str) -> bool:
        return any(e.allowed for e in self.evaluations if e.operation == operation)

    @property
    def can_read(self) -> bool:
        return self._verdict("read")

    @property
    def can_write(self) -> bool:
        return self.can_read and self._verdict("write")

    @property
    def can_insert(self) -> bool:
        return self._verdict("insert")

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "table_name": self.table_name,
            "document_id": self.document_id,
            "can_read": self.can_read,
            "can_write": self.can_write,
            "can_insert": self.can_insert,
            "evaluations": [e.to_dict() for e in self.evaluations],
        }

    def __str__(self) -> str:
        """Return a human-readable multi-line explanation."""
        lines: list[str] = []
        lines.append(f"Access Check: {self.table_name} ({self.document_id or '<new>'})")
        for e in self.evaluations:
            verdict = "ALLOW" if e.allowed else "DENY"
            source = e.rule_name if e.configured else f"{e.rule_name} (no rule configured)"
            lines.append(f"  - {e.operation:<6} [{verdict}]: {source}")
        if self._verdict("write") and not self.can_read:
            lines.append("  write is blocked because the document is not readable")
        return "\n".join(lines)
