"""Audit logging for rule evaluation decisions."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from docdb_rls._types import Document

__all__ = ["log_missing_rule", "log_rule_decision", "log_wrapper_created"]

logger = logging.getLogger("docdb_rls.audit")


def log_rule_decision(
    *,
    table_name: str,
    operation: str,
    rule: str,
    document: Document,
    allowed: bool,
) -> None:
    """Log a single allow/deny decision at DEBUG level.

    Only the document's ``_id`` is logged, never its contents.

    Example::

        log_rule_decision(
            table_name="messages",
            operation="read",
            rule="message_read",
            document=doc,
            allowed=False,
        )
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "Rule decision: %s.%s — rule=%s id=%s -> %s",
        table_name,
        operation,
        rule,
        document.get("_id", "<no id>"),
        "allow" if allowed else "deny",
    )


def log_missing_rule(*, table_name: str, operation: str, fallback: str) -> None:
    """Warn that a slot is empty and the configured fallback applies."""
    logger.warning(
        "No %r rule configured for table %r — %s applied",
        operation,
        table_name,
        fallback,
    )


def log_wrapper_created(*, kind: str, tables: Iterable[str]) -> None:
    """INFO summary emitted when a reader/writer wrapper is built."""
    names = sorted(tables)
    logger.info(
        "Row level security: %s wrapper created — %d table(s) with rules: %s",
        kind,
        len(names),
        ", ".join(names) or "(none)",
    )
