"""FastAPI dependencies for docdb-rls."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any, Literal

from fastapi import Depends, HTTPException, Request

from docdb_rls._types import Auth, DocumentId, Id
from docdb_rls.database._context import RequestContext
from docdb_rls.database._wrap import RowLevelSecurity

__all__ = ["DocumentDep", "RLSDep", "get_auth", "get_database"]


# ---------------------------------------------------------------------------
# Sentinel dependency functions for DI-based configuration
# ---------------------------------------------------------------------------


def get_database(request: Request) -> Any:
    """Sentinel dependency — override via ``app.dependency_overrides[get_database]``.

    Must return the raw (unwrapped) engine handle for the request.

    Example::

        from docdb_rls.integrations.fastapi import get_database

        app.dependency_overrides[get_database] = lambda: raw_db
    """
    raise NotImplementedError(
        "Override get_database via app.dependency_overrides[get_database]. "
        "See docdb-rls docs for configuration guide."
    )


def get_auth(request: Request) -> Auth:
    """Sentinel dependency — override via ``app.dependency_overrides[get_auth]``.

    Must return the identity provider for the caller.
    """
    raise NotImplementedError(
        "Override get_auth via app.dependency_overrides[get_auth]. "
        "See docdb-rls docs for configuration guide."
    )


# ---------------------------------------------------------------------------
# Dependency builders
# ---------------------------------------------------------------------------


def _context(rls: RowLevelSecurity, db: Any, auth: Auth, request: Request) -> Any:
    attribute = rls.config.db_attribute
    if attribute == "db":
        return RequestContext(db=db, auth=auth, state={"request": request})
    return SimpleNamespace(**{attribute: db, "auth": auth, "request": request})


def RLSDep(  # noqa: N802
    mode: Literal["read", "write"] = "read",
    *,
    rls: RowLevelSecurity | None = None,
) -> Any:
    """FastAPI dependency yielding an authorized reader or writer.

    The raw handle and the identity provider come from the
    :func:`get_database` and :func:`get_auth` sentinels.

    Args:
        mode: ``"read"`` for an ``AuthorizedReader``, ``"write"`` for an
            ``AuthorizedWriter``.
        rls: The ``RowLevelSecurity`` to apply. Defaults to one over the
            global registry.

    Example::

        @app.get("/messages")
        async def list_messages(db: AuthorizedReader = RLSDep()) -> list[dict]:
            return await db.query("messages").collect()
    """
    if mode not in ("read", "write"):
        raise ValueError(f"mode must be 'read' or 'write', got {mode!r}")

    async def _resolve(
        request: Request,
        db: Any = Depends(get_database),
        auth: Any = Depends(get_auth),
    ) -> Any:
        target = rls if rls is not None else RowLevelSecurity()
        ctx = _context(target, db, auth, request)
        return target.reader(ctx) if mode == "read" else target.writer(ctx)

    return Depends(_resolve)


def DocumentDep(  # noqa: N802
    table_name: str,
    id_param: str,
    *,
    rls: RowLevelSecurity | None = None,
    id_factory: Callable[[str, str], DocumentId] = Id,
) -> Any:
    """FastAPI dependency fetching one readable document by path parameter.

    Responds 404 when the document does not exist or is hidden by the
    read rule; the two cases are indistinguishable to the client.

    Args:
        table_name: The table to read from.
        id_param: Name of the path parameter holding the document key.
        rls: The ``RowLevelSecurity`` to apply.
        id_factory: ``(table_name, raw_key) -> id``. Defaults to :class:`Id`.

    Example::

        @app.get("/messages/{message_id}")
        async def get_message(
            message: dict = DocumentDep("messages", "message_id",
                                        id_factory=lambda t, k: Id(t, int(k))),
        ) -> dict:
            return message
    """

    async def _resolve(
        request: Request,
        db: Any = Depends(get_database),
        auth: Any = Depends(get_auth),
    ) -> Any:
        target = rls if rls is not None else RowLevelSecurity()
        reader = target.reader(_context(target, db, auth, request))
        document = await reader.get(id_factory(table_name, request.path_params[id_param]))
        if document is None:
            raise HTTPException(status_code=404, detail="Not found")
        return document

    return Depends(_resolve)
