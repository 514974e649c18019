"""In-memory key-value store.

The :class:`Store` is the authoritative state of a database while the process
is alive.  It never touches disk; the scheduler snapshots it for flushing.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Iterable

from .errors import InvalidArgument

# JSON-compatible value: None | bool | int | float | str | list | dict[str, ...]
Value = Any


def validate_key(key: object) -> str:
    """Return *key* if it is a non-empty string, else raise ``InvalidArgument``."""
    if not isinstance(key, str) or not key:
        raise InvalidArgument("Key is not defined!")
    return key


def normalize_value(value: object) -> Value:
    """Return a detached JSON-compatible copy of *value*.

    Tuples become lists.  Anything JSON cannot represent (sets, objects,
    non-string dict keys, ``nan``/``inf``) raises ``InvalidArgument``.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidArgument(f"Value must be a finite number, got {value!r}")
        return value
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    if isinstance(value, dict):
        result: dict[str, Value] = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise InvalidArgument(f"Object keys must be strings, got {k!r}")
            result[k] = normalize_value(v)
        return result
    raise InvalidArgument(f"Value of type {type(value).__name__} is not JSON-compatible")


class Store:
    """Ordered mapping of non-empty string keys to JSON-compatible values."""

    def __init__(self, data: dict[str, Value] | None = None) -> None:
        self._data: dict[str, Value] = dict(data or {})

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._data

    def get(self, key: str) -> Value | None:
        """Return a copy of the value at *key*, or ``None`` if absent."""
        validate_key(key)
        return copy.deepcopy(self._data.get(key))

    def has(self, key: str) -> bool:
        validate_key(key)
        return key in self._data

    def set(self, key: str, value: Value) -> None:
        validate_key(key)
        self._data[key] = value

    def delete(self, key: str) -> bool:
        """Remove *key*.  Return ``False`` if it was not present."""
        validate_key(key)
        if key not in self._data:
            return False
        del self._data[key]
        return True

    def entries(self, limit: int = 0) -> list[tuple[str, Value]]:
        """Return ``(key, value)`` pairs in insertion order.

        Only the first *limit* pairs are returned when *limit* is positive.
        """
        items: Iterable[tuple[str, Value]] = self._data.items()
        pairs = [(k, copy.deepcopy(v)) for k, v in items]
        return pairs[:limit] if limit > 0 else pairs

    # -- whole-state access ---------------------------------------------------

    def snapshot(self) -> dict[str, Value]:
        """Return a shallow copy of the mapping.

        Values are never mutated in place by FlexiDB, so sharing them between
        the snapshot and the live mapping is safe.
        """
        return dict(self._data)

    def replace(self, data: dict[str, Value]) -> None:
        """Swap in *data* as the new state."""
        self._data = data

    def clear(self) -> None:
        self._data = {}
