"""Explain mode — structured insight into row level security decisions."""

from docdb_rls.explain._access import explain_access
from docdb_rls.explain._models import AccessExplanation, RuleEvaluation

__all__ = [
    "AccessExplanation",
    "RuleEvaluation",
    "explain_access",
]
