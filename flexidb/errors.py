"""Error taxonomy for FlexiDB.

Every error derives from :class:`FlexiDBError` and also from the closest
built-in exception, so callers can catch either ``NotFound`` or ``KeyError``.
"""

from __future__ import annotations


class FlexiDBError(Exception):
    """Base class for all FlexiDB errors."""


class InvalidArgument(FlexiDBError, ValueError):
    """Missing/empty key, non-numeric operand, unknown operator, bad value."""


class NotFound(FlexiDBError, KeyError):
    """The operation requires an existing key and the key is absent."""

    def __str__(self) -> str:
        # KeyError repr()s its message; keep it readable.
        return str(self.args[0]) if self.args else ""


class TypeMismatch(FlexiDBError, TypeError):
    """The stored value has the wrong shape (e.g. push onto a non-list)."""


class DivisionByZero(FlexiDBError, ZeroDivisionError):
    """Division or modulo by zero in :func:`flexidb.operations.math`."""


class InvalidState(FlexiDBError):
    """Stored value cannot take part in the operation, or the db is closed."""


class IOFailure(FlexiDBError, OSError):
    """Directory creation, file read or file write failed."""


class TransactionFailed(FlexiDBError):
    """A transaction operation failed and the whole batch was rolled back.

    ``cause`` is the original error, ``index`` the position of the failing
    operation and ``operation`` the operation itself.
    """

    def __init__(self, cause: BaseException, index: int, operation: object) -> None:
        super().__init__(f"Transaction failed at operation {index}: {cause}")
        self.cause = cause
        self.index = index
        self.operation = operation
