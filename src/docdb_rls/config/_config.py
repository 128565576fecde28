"""Layered configuration for docdb-rls."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from docdb_rls._types import OnMissingRule

__all__ = [
    "RLSConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]

_VALID_MISSING_RULE: set[str] = {"allow", "deny"}


class _Unset(enum.Enum):
    UNSET = enum.auto()


_UNSET = _Unset.UNSET


@dataclass(frozen=True, slots=True)
class RLSConfig:
    """Configuration with merge semantics (global -> wrapper).

    Attributes:
        on_missing_rule: Behavior for ``read``/``write`` when a table has no
            rule in that slot.  ``"allow"`` grants full access (the
            historical default).  ``"deny"`` fails closed: documents are
            hidden and writes raise.  Inserts are never affected; they are
            only gated by an explicit insert rule.
        log_rule_decisions: Emit audit log records for every rule decision.
        max_concurrent_checks: Upper bound on rule evaluations running at
            once inside ``collect()`` / ``paginate()``.  ``None`` means
            unbounded.
        db_attribute: Name of the ambient-context entry holding the raw
            database handle.

    Example::

        config = RLSConfig(on_missing_rule="deny")
        merged = config.merge(log_rule_decisions=True)
    """

    on_missing_rule: OnMissingRule = "allow"
    log_rule_decisions: bool = False
    max_concurrent_checks: int | None = None
    db_attribute: str = "db"

    def __post_init__(self) -> None:
        if self.on_missing_rule not in _VALID_MISSING_RULE:
            raise ValueError(
                f"on_missing_rule must be one of {_VALID_MISSING_RULE!r}, "
                f"got {self.on_missing_rule!r}"
            )
        if self.max_concurrent_checks is not None and self.max_concurrent_checks < 1:
            raise ValueError(
                f"max_concurrent_checks must be a positive integer or None, "
                f"got {self.max_concurrent_checks!r}"
            )
        if not self.db_attribute:
            raise ValueError("db_attribute must be a non-empty string")

    def merge(
        self,
        *,
        on_missing_rule: OnMissingRule | None = None,
        log_rule_decisions: bool | None = None,
        max_concurrent_checks: int | None | _Unset = _UNSET,
        db_attribute: str | None = None,
    ) -> RLSConfig:
        """Return a new config with non-None overrides applied.

        Args:
            on_missing_rule: Override for on_missing_rule (ignored if None).
            log_rule_decisions: Override for log_rule_decisions (ignored if None).
            max_concurrent_checks: Override for max_concurrent_checks.
                Unlike the other fields, ``None`` is a real value here
                (unbounded); omit the argument to keep the current one.
            db_attribute: Override for db_attribute (ignored if None).

        Returns:
            A new ``RLSConfig`` with overrides merged.
        """
        return RLSConfig(
            on_missing_rule=(
                on_missing_rule if on_missing_rule is not None else self.on_missing_rule
            ),
            log_rule_decisions=(
                log_rule_decisions if log_rule_decisions is not None else self.log_rule_decisions
            ),
            max_concurrent_checks=(
                self.max_concurrent_checks
                if max_concurrent_checks is _UNSET
                else max_concurrent_checks
            ),
            db_attribute=db_attribute if db_attribute is not None else self.db_attribute,
        )


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = RLSConfig()


def get_global_config() -> RLSConfig:
    """Return the current global configuration.

    Example::

        config = get_global_config()
        print(config.on_missing_rule)  # "allow"
    """
    return _global_config


def configure(
    *,
    on_missing_rule: OnMissingRule | None = None,
    log_rule_decisions: bool | None = None,
    max_concurrent_checks: int | None | _Unset = _UNSET,
    db_attribute: str | None = None,
) -> RLSConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied, except ``max_concurrent_checks``
    where passing ``None`` restores unbounded checks. Returns the new
    global config.

    Example::

        configure(on_missing_rule="deny")
        # Tables without a read rule are now invisible
    """
    global _global_config
    _global_config = _global_config.merge(
        on_missing_rule=on_missing_rule,
        log_rule_decisions=log_rule_decisions,
        max_concurrent_checks=max_concurrent_checks,
        db_attribute=db_attribute,
    )
    return _global_config


def _set_global_config(cfg: RLSConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = RLSConfig()
