"""Ambient context helpers — locate the raw handle and swap in the wrapper."""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docdb_rls._types import Auth
from docdb_rls.exceptions import ConfigurationError

__all__ = ["AuthorizedHandle", "RequestContext", "get_raw_db", "with_db"]


class AuthorizedHandle:
    """Marker base class for the authorized reader and writer.

    Rule functions must only ever see the raw engine handle.  Anything
    deriving from this class is refused wherever a raw handle is expected.
    """

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-request ambient context passed to rules.

    Attributes:
        db: The raw (unwrapped) engine handle.
        auth: The identity provider for the current caller.
        state: Free-form per-request values rules may need (caches,
            tenant ids, ...).

    Example::

        ctx = RequestContext(db=raw_db, auth=request_auth)
        db = rls.writer(ctx)
    """

    db: Any
    auth: Auth | None = None
    state: Mapping[str, Any] = field(default_factory=lambda: {})


def get_raw_db(ctx: Any, attribute: str = "db") -> Any:
    """Return the raw engine handle stored on *ctx*.

    *ctx* may be a mapping or any object with the handle as an attribute.

    Raises:
        ConfigurationError: If there is no handle, or if the handle is
            already an authorized wrapper.
    """
    if isinstance(ctx, Mapping):
        db = ctx.get(attribute)
    else:
        db = getattr(ctx, attribute, None)
    if db is None:
        raise ConfigurationError(f"ctx must contain `{attribute}` for row level security")
    if isinstance(db, AuthorizedHandle):
        raise ConfigurationError(
            f"ctx.{attribute} is already wrapped by row level security; "
            "rules must be given the raw database handle"
        )
    return db


def with_db(ctx: Any, db: Any, attribute: str = "db") -> Any:
    """Return a copy of *ctx* whose *attribute* is *db*.

    The original *ctx* is left untouched so rules keep seeing the raw
    handle.
    """
    if dataclasses.is_dataclass(ctx) and not isinstance(ctx, type):
        return dataclasses.replace(ctx, **{attribute: db})
    if isinstance(ctx, Mapping):
        return {**ctx, attribute: db}
    clone = copy.copy(ctx)
    setattr(clone, attribute, db)
    return clone
