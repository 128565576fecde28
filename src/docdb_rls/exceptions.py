"""Exception hierarchy for docdb-rls."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "InsertForbidden",
    "NotFoundOrForbidden",
    "NotUniqueError",
    "RLSError",
    "WriteForbidden",
]


class RLSError(Exception):
    """Base exception for all docdb-rls errors."""


class NotFoundOrForbidden(RLSError):  # noqa: N818
    """The target of a write does not exist or cannot be read.

    The two cases are deliberately reported as one error so that callers
    without read access cannot probe for the existence of a document.

    Attributes:
        document_id: The reference that was addressed.
        action: The write that was attempted (``"patch"``, ``"replace"``,
            ``"delete"``).

    Example::

        try:
            await db.patch(message_id, {"body": "edited"})
        except NotFoundOrForbidden:
            raise HTTPException(404)
    """

    def __init__(
        self,
        *,
        document_id: object,
        action: str,
        message: str | None = None,
    ) -> None:
        self.document_id = document_id
        self.action = action
        if message is None:
            message = "no read access or document does not exist"
        super().__init__(message)


class WriteForbidden(RLSError):  # noqa: N818
    """The document is readable but the write rule denies the change.

    Attributes:
        document_id: The reference that was addressed.
        table_name: The table the document belongs to.
        action: The write that was attempted.
    """

    def __init__(
        self,
        *,
        document_id: object,
        table_name: str,
        action: str,
        message: str | None = None,
    ) -> None:
        self.document_id = document_id
        self.table_name = table_name
        self.action = action
        if message is None:
            message = f"write access not allowed: cannot {action} {table_name} document"
        super().__init__(message)


class InsertForbidden(RLSError):  # noqa: N818
    """An insert rule is configured for the table and it denied the new value.

    Attributes:
        table_name: The table the insert targeted.
    """

    def __init__(self, *, table_name: str, message: str | None = None) -> None:
        self.table_name = table_name
        if message is None:
            message = f"insert not allowed into {table_name}"
        super().__init__(message)


class NotUniqueError(RLSError):
    """``unique()`` found more than one visible document."""

    def __init__(self, *, table_name: str | None = None, message: str | None = None) -> None:
        self.table_name = table_name
        if message is None:
            message = "not unique" if table_name is None else f"not unique in {table_name}"
        super().__init__(message)


class ConfigurationError(RLSError):
    """The ambient context cannot be wrapped.

    Raised at wrap time when the context has no database handle, or when
    the handle is itself already an authorized wrapper (rules must only
    ever see the raw engine).
    """
