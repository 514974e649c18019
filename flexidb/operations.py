"""Mutation operations.

Each function validates its arguments, computes the new value from the
current one and writes it to the given :class:`~flexidb.store.Store`.
Existing values are never modified in place (``push`` builds a new list), so
a shallow snapshot of the store stays untouched by later mutations.  On any
error the store is left exactly as it was.
"""

from __future__ import annotations

from math import isfinite
from typing import Callable

from .errors import DivisionByZero, InvalidArgument, InvalidState, NotFound, TypeMismatch
from .store import Store, Value, normalize_value, validate_key

Number = int | float

OPERATORS = ("+", "-", "*", "/", "%")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_operand(value: object) -> Number:
    if not _is_number(value):
        raise InvalidArgument("Value must be a number!")
    try:
        finite = isfinite(value)  # type: ignore[arg-type]
    except OverflowError as exc:
        raise InvalidArgument("Value is too large to use as an operand") from exc
    if not finite:
        raise InvalidArgument("Value must be a number!")
    return value  # type: ignore[return-value]


def _current_number(store: Store, key: str, *, default: Number | None) -> Number:
    """Return the numeric value at *key*.

    An absent key yields *default*, or ``NotFound`` when *default* is None.
    """
    if key not in store:
        if default is None:
            raise NotFound(f"Key does not exist: {key!r}")
        return default
    current = store.get(key)
    if not _is_number(current):
        raise InvalidState(
            f"Value at {key!r} is {type(current).__name__}, not a number"
        )
    return current  # type: ignore[return-value]


def _compute(key: str, fn: Callable[[], Number]) -> Number:
    """Run *fn* and return its result if it is a finite JSON number."""
    try:
        result = fn()
    except OverflowError as exc:
        raise InvalidState(f"Result for {key!r} is out of range") from exc
    if isinstance(result, float) and not isfinite(result):
        raise InvalidState(f"Result for {key!r} is not a finite number")
    return result


def _remainder(dividend: Number, divisor: Number) -> Number:
    """Truncated remainder: the sign follows the dividend."""
    result = abs(dividend) % abs(divisor)
    return -result if dividend < 0 else result


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def set_value(store: Store, key: str, value: Value) -> Value:
    """Overwrite *key* with *value* and return the stored value."""
    validate_key(key)
    stored = normalize_value(value)
    store.set(key, stored)
    return store.get(key)


def delete(store: Store, key: str) -> bool:
    """Remove *key*; raise ``NotFound`` if it does not exist."""
    validate_key(key)
    if not store.delete(key):
        raise NotFound(f"Key does not exist: {key!r}")
    return True


def add(store: Store, key: str, delta: Number) -> Number:
    """Add *delta* to the number at *key* (absent counts as 0)."""
    validate_key(key)
    delta = _require_operand(delta)
    current = _current_number(store, key, default=0)
    result = _compute(key, lambda: current + delta)
    store.set(key, result)
    return result


def subtract(store: Store, key: str, delta: Number) -> Number:
    """Subtract *delta* from the number at *key* (absent counts as 0)."""
    validate_key(key)
    delta = _require_operand(delta)
    current = _current_number(store, key, default=0)
    result = _compute(key, lambda: current - delta)
    store.set(key, result)
    return result


def math(store: Store, key: str, operator: str, operand: Number) -> Number:
    """Apply ``current <operator> operand`` to an existing number at *key*."""
    validate_key(key)
    if operator not in OPERATORS:
        raise InvalidArgument(f"Invalid operator: {operator!r}")
    operand = _require_operand(operand)
    current = _current_number(store, key, default=None)
    if operator in ("/", "%") and operand == 0:
        raise DivisionByZero("Cannot divide by zero!")

    if operator == "+":
        result = _compute(key, lambda: current + operand)
    elif operator == "-":
        result = _compute(key, lambda: current - operand)
    elif operator == "*":
        result = _compute(key, lambda: current * operand)
    elif operator == "/":
        result = _compute(key, lambda: current / operand)
    else:
        result = _compute(key, lambda: _remainder(current, operand))

    store.set(key, result)
    return result


def push(store: Store, key: str, value: Value) -> list[Value]:
    """Append *value* to the list at *key* (absent starts a new list)."""
    validate_key(key)
    item = normalize_value(value)
    if key in store:
        current = store.get(key)
        if not isinstance(current, list):
            raise TypeMismatch(
                f"Value at {key!r} is {type(current).__name__}, not an array"
            )
    else:
        current = []
    store.set(key, [*current, item])
    return store.get(key)


# kind -> operation, as used by transactions
OPERATIONS: dict[str, Callable[..., Value]] = {
    "set": set_value,
    "delete": delete,
    "add": add,
    "subtract": subtract,
    "math": math,
    "push": push,
}
