"""Tests for flexidb.transaction -- copy-and-swap batches with rollback."""

from __future__ import annotations

import pytest

from flexidb.errors import InvalidArgument, InvalidState, NotFound, TransactionFailed
from flexidb.store import Store
from flexidb.transaction import Operation, TransactionCoordinator


@pytest.fixture
def coordinator() -> TransactionCoordinator:
    return TransactionCoordinator()


class TestOperation:
    def test_from_mapping_uses_type(self):
        op = Operation.from_mapping({"type": "math", "key": "n", "operator": "*", "value": 2})
        assert op == Operation(kind="math", key="n", value=2, operator="*")

    def test_from_mapping_accepts_kind(self):
        assert Operation.from_mapping({"kind": "delete", "key": "k"}).kind == "delete"

    def test_from_mapping_rejects_non_mapping(self):
        with pytest.raises(InvalidArgument):
            Operation.from_mapping(["set", "k", 1])

    def test_unknown_kind(self):
        with pytest.raises(InvalidArgument):
            Operation(kind="rename", key="k").apply(Store())

    def test_apply_dispatches(self):
        store = Store()
        assert Operation("push", "xs", 1).apply(store) == [1]
        assert Operation("math", "n", 2, "+").apply(Store({"n": 1})) == 3


class TestTransactionCoordinator:
    def test_success_applies_all(self, coordinator):
        store = Store({"a": 1})
        results = coordinator.apply(
            store,
            [
                {"type": "set", "key": "b", "value": "x"},
                {"type": "add", "key": "a", "value": 4},
                {"type": "subtract", "key": "c", "value": 1},
                {"type": "push", "key": "xs", "value": 1},
                {"type": "math", "key": "a", "operator": "*", "value": 2},
                {"type": "delete", "key": "b"},
            ],
        )
        assert results == ["x", 5, -1, [1], 10, True]
        assert store.entries() == [("a", 10), ("c", -1), ("xs", [1])]

    def test_failure_rolls_back_everything(self, coordinator):
        store = Store({"a": 7, "xs": [1]})
        with pytest.raises(TransactionFailed) as excinfo:
            coordinator.apply(
                store,
                [
                    Operation("set", "a", 1),
                    Operation("math", "a", 1, "+"),
                    Operation("push", "xs", 2),
                    Operation("delete", "missingKey"),
                ],
            )
        assert store.get("a") == 7
        assert store.get("xs") == [1]
        err = excinfo.value
        assert isinstance(err.cause, NotFound)
        assert err.__cause__ is err.cause
        assert err.index == 3
        assert err.operation == Operation("delete", "missingKey")

    def test_failure_on_absent_key_leaves_it_absent(self, coordinator):
        store = Store()
        with pytest.raises(TransactionFailed):
            coordinator.apply(
                store,
                [
                    {"type": "set", "key": "a", "value": 1},
                    {"type": "math", "key": "a", "operator": "+", "value": 1},
                    {"type": "delete", "key": "missingKey"},
                ],
            )
        assert not store.has("a")

    def test_out_of_range_result_is_wrapped(self, coordinator):
        store = Store({"big": 10**400})
        with pytest.raises(TransactionFailed) as excinfo:
            coordinator.apply(
                store,
                [
                    {"type": "set", "key": "a", "value": 1},
                    {"type": "add", "key": "big", "value": 0.5},
                ],
            )
        assert isinstance(excinfo.value.cause, InvalidState)
        assert store.entries() == [("big", 10**400)]

    def test_malformed_operation_is_wrapped(self, coordinator):
        store = Store()
        with pytest.raises(TransactionFailed) as excinfo:
            coordinator.apply(store, [{"type": "set", "key": "", "value": 1}])
        assert isinstance(excinfo.value.cause, InvalidArgument)

    def test_empty_batch(self, coordinator):
        store = Store({"a": 1})
        assert coordinator.apply(store, []) == []
        assert store.entries() == [("a", 1)]
