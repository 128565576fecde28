"""Shared test fixtures for docdb-rls tests.

The "messages" scenario: anyone may read published messages, signed-in
callers may read everything, and only the author may change a message.
"""

from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio

from docdb_rls import RequestContext, RowLevelSecurity, RuleRegistry
from docdb_rls._types import Document
from docdb_rls.testing import InMemoryDatabase, MockAuth, make_anonymous, make_user
from docdb_rls.testing._fixtures import (  # noqa: F401
    isolated_rls_state,
    memory_db,
    rls_config,
    rls_registry,
)

# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


async def message_read(ctx: Any, message: Document) -> bool:
    if message["published"]:
        return True
    return await ctx.auth.get_user_identity() is not None


async def message_write(ctx: Any, message: Document) -> bool:
    identity = await ctx.auth.get_user_identity()
    return identity is not None and message["author"] == identity.token_identifier


async def message_insert(ctx: Any, message: Document) -> bool:
    identity = await ctx.auth.get_user_identity()
    return identity is not None and message.get("author") == identity.token_identifier


def make_registry(*, with_insert: bool = False) -> RuleRegistry:
    slots: dict[str, Any] = {"read": message_read, "write": message_write}
    if with_insert:
        slots["insert"] = message_insert
    return RuleRegistry({"messages": slots})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> RuleRegistry:
    """Fresh registry with the messages rules."""
    return make_registry()


@pytest.fixture()
def rls(registry: RuleRegistry) -> RowLevelSecurity:
    return RowLevelSecurity(registry)


@pytest.fixture()
def alice() -> MockAuth:
    return make_user("alice")


@pytest.fixture()
def bob() -> MockAuth:
    return make_user("bob")


@pytest.fixture()
def anonymous() -> MockAuth:
    return make_anonymous()


@pytest_asyncio.fixture()
async def messages(memory_db: InMemoryDatabase) -> dict[str, Any]:
    """Seed two messages: alice's published one and bob's draft."""
    published = await memory_db.insert(
        "messages", {"author": "alice", "body": "hello world", "published": True}
    )
    draft = await memory_db.insert(
        "messages", {"author": "bob", "body": "secret draft", "published": False}
    )
    memory_db.stats.reset()
    return {"published": published, "draft": draft}


@pytest.fixture()
def context(memory_db: InMemoryDatabase):
    """Build a ``RequestContext`` over the raw in-memory engine."""

    def _make(auth: MockAuth) -> RequestContext:
        return RequestContext(db=memory_db, auth=auth)

    return _make
