"""docdb-rls testing utilities — in-memory engine, mock auth, assertions, fixtures.

Provides test helpers for verifying row level security rules:

- **InMemoryDatabase**: A reference document engine with streaming
  iterators that count pulled documents.
- **MockAuth / factories**: Signed-in and anonymous callers.
- **Assertion helpers**: ``assert_visible``, ``assert_hidden``,
  ``assert_collects``, ``assert_write_denied``.
- **Fixtures**: ``rls_registry``, ``rls_config``, ``memory_db``,
  ``isolated_rls_state``.
- **Coverage**: ``rule_matrix`` lists unrestricted slots.

Example::

    from docdb_rls import RequestContext, RowLevelSecurity
    from docdb_rls.testing import InMemoryDatabase, assert_hidden, make_anonymous

    async def test_drafts_hidden(rls, draft_id, memory_db):
        ctx = RequestContext(db=memory_db, auth=make_anonymous())
        await assert_hidden(rls.reader(ctx), draft_id)
"""

from docdb_rls.testing._assertions import (
    assert_collects,
    assert_hidden,
    assert_visible,
    assert_write_denied,
)
from docdb_rls.testing._coverage import RuleCoverage, RuleMatrix, rule_matrix
from docdb_rls.testing._fixtures import (
    isolated_rls_state,
    memory_db,
    rls_config,
    rls_registry,
)
from docdb_rls.testing._identity import MockAuth, MockIdentity, make_anonymous, make_user
from docdb_rls.testing._isolation import isolated_rls
from docdb_rls.testing._memory import (
    EngineStats,
    InMemoryDatabase,
    IndexRangeBuilder,
    MemoryQuery,
    SearchFilterBuilder,
)

__all__ = [
    "EngineStats",
    "InMemoryDatabase",
    "IndexRangeBuilder",
    "MemoryQuery",
    "MockAuth",
    "MockIdentity",
    "RuleCoverage",
    "RuleMatrix",
    "SearchFilterBuilder",
    "assert_collects",
    "assert_hidden",
    "assert_visible",
    "assert_write_denied",
    "isolated_rls",
    "isolated_rls_state",
    "make_anonymous",
    "make_user",
    "memory_db",
    "rls_config",
    "rls_registry",
    "rule_matrix",
]
