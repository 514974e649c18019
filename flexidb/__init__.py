"""FlexiDB – an embedded key-value store persisted to a single JSON file."""

from .config import AutoBackupOptions, DatabaseOptions, load_options
from .database import FlexiDB
from .errors import (
    DivisionByZero,
    FlexiDBError,
    InvalidArgument,
    InvalidState,
    IOFailure,
    NotFound,
    TransactionFailed,
    TypeMismatch,
)
from .transaction import Operation

__version__ = "1.0.0"

__all__ = [
    "AutoBackupOptions",
    "DatabaseOptions",
    "DivisionByZero",
    "FlexiDB",
    "FlexiDBError",
    "IOFailure",
    "InvalidArgument",
    "InvalidState",
    "NotFound",
    "Operation",
    "TransactionFailed",
    "TypeMismatch",
    "load_options",
]
