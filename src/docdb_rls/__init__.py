"""docdb-rls — row level security for document database handles.

Wraps a document database reader/writer so that every read and write is
checked against per-table rules, without changing application code.

Example::

    from docdb_rls import RequestContext, RowLevelSecurity, RuleRegistry

    async def message_read(ctx, message) -> bool:
        if await ctx.auth.get_user_identity() is None:
            return message["published"]
        return True

    rls = RowLevelSecurity(RuleRegistry({"messages": {"read": message_read}}))

    @rls.with_query_rls
    async def list_messages(ctx):
        return await ctx.db.query("messages").collect()

    messages = await list_messages(RequestContext(db=raw_db, auth=auth))
"""

from importlib.metadata import PackageNotFoundError, version

from docdb_rls._checks import authorize, can
from docdb_rls._types import Auth, DatabaseReader, DatabaseWriter, Id
from docdb_rls.config._config import RLSConfig, configure
from docdb_rls.database import (
    AuthorizedQuery,
    AuthorizedQueryInitializer,
    AuthorizedReader,
    AuthorizedWriter,
    RequestContext,
    RowLevelSecurity,
)
from docdb_rls.exceptions import (
    ConfigurationError,
    InsertForbidden,
    NotFoundOrForbidden,
    NotUniqueError,
    RLSError,
    WriteForbidden,
)
from docdb_rls.explain import explain_access
from docdb_rls.rules import Rule, RuleRegistry, RuleSet, rule, table_rule

try:
    __version__ = version("docdb-rls")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "Auth",
    "AuthorizedQuery",
    "AuthorizedQueryInitializer",
    "AuthorizedReader",
    "AuthorizedWriter",
    "ConfigurationError",
    "DatabaseReader",
    "DatabaseWriter",
    "Id",
    "InsertForbidden",
    "NotFoundOrForbidden",
    "NotUniqueError",
    "RLSConfig",
    "RLSError",
    "RequestContext",
    "RowLevelSecurity",
    "Rule",
    "RuleRegistry",
    "RuleSet",
    "WriteForbidden",
    "authorize",
    "can",
    "configure",
    "explain_access",
    "rule",
    "table_rule",
]
