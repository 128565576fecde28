"""Point checks — can() and authorize() for a single document."""

from __future__ import annotations

from typing import Any

from docdb_rls._types import Document
from docdb_rls.config._config import RLSConfig
from docdb_rls.exceptions import InsertForbidden, NotFoundOrForbidden, WriteForbidden
from docdb_rls.rules._registry import RuleRegistry, get_default_registry
from docdb_rls.rules._resolve import bind_predicate

__all__ = ["authorize", "can"]


async def can(
    ctx: Any,
    operation: str,
    table_name: str,
    document: Document,
    *,
    registry: RuleRegistry | None = None,
    config: RLSConfig | None = None,
) -> bool:
    """Check whether the caller in *ctx* may perform *operation* on *document*.

    The rule for (*table_name*, *operation*) is resolved exactly as the
    authorized reader and writer resolve it, including the missing-rule
    fallback.

    Args:
        ctx: Ambient context carrying the raw database handle.
        operation: ``"read"``, ``"write"`` or ``"insert"``.
        table_name: The table *document* belongs (or would belong) to.
        document: The stored document, or the proposed value for inserts.
        registry: Optional custom registry.  Defaults to the global registry.
        config: Optional config.  Defaults to the global config.

    Returns:
        ``True`` if the rule accepts the document.

    Example::

        if await can(ctx, "write", "messages", message):
            show_edit_button()
    """
    target_registry = registry if registry is not None else get_default_registry()
    predicate = bind_predicate(target_registry, table_name, operation, ctx, config=config)
    return await predicate(document)


async def authorize(
    ctx: Any,
    operation: str,
    table_name: str,
    document: Document,
    *,
    registry: RuleRegistry | None = None,
    config: RLSConfig | None = None,
    document_id: object = None,
    action: str | None = None,
) -> None:
    """Assert that *operation* on *document* is allowed.

    Raises the error kind matching the operation when it is not.

    Raises:
        NotFoundOrForbidden: For a denied ``read``.
        WriteForbidden: For a denied ``write``.
        InsertForbidden: For a denied ``insert``.

    Example::

        await authorize(ctx, "write", "messages", message, action="patch")
    """
    if await can(ctx, operation, table_name, document, registry=registry, config=config):
        return
    if document_id is None:
        document_id = document.get("_id")
    if operation == "read":
        raise NotFoundOrForbidden(document_id=document_id, action=action or "read")
    if operation == "write":
        raise WriteForbidden(
            document_id=document_id,
            table_name=table_name,
            action=action or "write",
        )
    raise InsertForbidden(table_name=table_name)
