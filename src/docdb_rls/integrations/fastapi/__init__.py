"""FastAPI integration for docdb-rls."""

from __future__ import annotations

try:
    import fastapi as _fastapi_check  # noqa: F401  # pyright: ignore[reportUnusedImport]

    del _fastapi_check
except ImportError as exc:
    raise ImportError(
        "FastAPI integration requires fastapi. Install it with: pip install docdb-rls[fastapi]"
    ) from exc

from docdb_rls.integrations.fastapi._dependencies import (
    DocumentDep,
    RLSDep,
    get_auth,
    get_database,
)
from docdb_rls.integrations.fastapi._errors import install_error_handlers

__all__ = [
    "DocumentDep",
    "RLSDep",
    "get_auth",
    "get_database",
    "install_error_handlers",
]
