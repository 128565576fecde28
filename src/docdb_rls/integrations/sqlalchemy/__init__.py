"""SQLAlchemy Core adapter — relational tables as a document engine.

Wrap an ``AsyncConnection`` in :class:`SQLAlchemyDatabase` and hand it
to ``RowLevelSecurity`` like any other raw engine handle.
"""

from docdb_rls.integrations.sqlalchemy._database import SQLAlchemyDatabase
from docdb_rls.integrations.sqlalchemy._query import SQLAlchemyQuery

__all__ = ["SQLAlchemyDatabase", "SQLAlchemyQuery"]
