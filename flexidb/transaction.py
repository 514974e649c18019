"""All-or-nothing batches of mutation operations.

The coordinator applies operations to a scratch :class:`Store` built from a
shallow snapshot of the live one.  Only when every operation succeeds is the
scratch mapping swapped in; on failure the live store was never touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from . import operations
from .errors import FlexiDBError, InvalidArgument, TransactionFailed
from .store import Store, Value


@dataclass(frozen=True)
class Operation:
    """One step of a transaction.

    ``value`` is the payload for ``set``/``push``, the delta for
    ``add``/``subtract`` and the operand for ``math``.
    """

    kind: str
    key: str
    value: Value = None
    operator: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Operation:
        """Build from ``{"type": ..., "key": ..., "value": ..., "operator": ...}``."""
        if not isinstance(data, Mapping):
            raise InvalidArgument(f"Operation must be a mapping, got {type(data).__name__}")
        kind = data.get("type", data.get("kind"))
        return cls(
            kind=kind,
            key=data.get("key"),
            value=data.get("value"),
            operator=data.get("operator"),
        )

    def apply(self, store: Store) -> Value:
        """Run this operation against *store* and return its result."""
        if self.kind not in operations.OPERATIONS:
            raise InvalidArgument(f"Unknown operation type: {self.kind!r}")
        fn = operations.OPERATIONS[self.kind]
        if self.kind == "delete":
            return fn(store, self.key)
        if self.kind == "math":
            return fn(store, self.key, self.operator, self.value)
        return fn(store, self.key, self.value)


def _coerce(op: Operation | Mapping[str, Any]) -> Operation:
    return op if isinstance(op, Operation) else Operation.from_mapping(op)


class TransactionCoordinator:
    """Applies a sequence of operations to a store as a unit."""

    def apply(
        self,
        store: Store,
        ops: Iterable[Operation | Mapping[str, Any]],
    ) -> list[Value]:
        """Apply *ops* in order; return one result per operation.

        Raises :class:`~flexidb.errors.TransactionFailed` wrapping the first
        failing operation's error, with *store* unchanged.
        """
        scratch = Store(store.snapshot())
        results: list[Value] = []
        for index, raw in enumerate(ops):
            op: object = raw
            try:
                op = _coerce(raw)
                results.append(op.apply(scratch))
            except FlexiDBError as exc:
                raise TransactionFailed(exc, index, op) from exc
        store.replace(scratch.snapshot())
        return results
