"""Exception handlers for FastAPI integration."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docdb_rls.exceptions import (
    ConfigurationError,
    InsertForbidden,
    NotFoundOrForbidden,
    NotUniqueError,
    RLSError,
    WriteForbidden,
)

__all__ = ["install_error_handlers"]

_STATUS_CODES: dict[type[RLSError], int] = {
    NotFoundOrForbidden: 404,
    WriteForbidden: 403,
    InsertForbidden: 403,
    NotUniqueError: 409,
    ConfigurationError: 500,
}


def install_error_handlers(app: FastAPI) -> None:
    """Install exception handlers for docdb-rls errors on a FastAPI app.

    Converts row level security exceptions into HTTP responses:

    - ``NotFoundOrForbidden`` -> 404 Not Found
    - ``WriteForbidden`` / ``InsertForbidden`` -> 403 Forbidden
    - ``NotUniqueError`` -> 409 Conflict
    - ``ConfigurationError`` -> 500 Internal Server Error

    Args:
        app: The FastAPI application instance.

    Example::

        from fastapi import FastAPI
        from docdb_rls.integrations.fastapi import install_error_handlers

        app = FastAPI()
        install_error_handlers(app)
    """

    async def rls_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = next(
            (code for cls, code in _STATUS_CODES.items() if isinstance(exc, cls)),
            500,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for exc_class in _STATUS_CODES:
        app.add_exception_handler(exc_class, rls_error_handler)
