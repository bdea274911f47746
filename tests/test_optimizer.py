"""Tests for partition pruning."""

import pytest

from logshark.ast import AnyStatus, StatusRange, StatusSet, status_set
from logshark.optimizer import PartitionPruner, prune_partitions

KEYS = [500, 200, 404, 301, 403]


class TestPartitionPruner:
    def test_status_set_intersects_keys(self):
        assert PartitionPruner().prune(StatusSet({404, 500, 418}), KEYS) == [404, 500]

    def test_status_range_is_inclusive(self):
        assert PartitionPruner().prune(StatusRange(301, 404), KEYS) == [301, 403, 404]

    def test_any_status_returns_sorted_keys(self):
        assert PartitionPruner().prune(AnyStatus(), KEYS) == [200, 301, 403, 404, 500]

    def test_callable_is_evaluated_per_key(self):
        calls = []

        def predicate(code):
            calls.append(code)
            return code % 100 == 0

        assert prune_partitions(predicate, KEYS) == [200, 500]
        assert sorted(calls) == sorted(KEYS)

    def test_no_keys(self):
        assert prune_partitions(StatusSet({404}), []) == []

    def test_rejects_non_predicate(self):
        with pytest.raises(TypeError):
            PartitionPruner().prune("404", KEYS)


class TestPredicates:
    def test_status_set_accepts_any_iterable(self):
        assert status_set([404, 500]) == StatusSet(frozenset({404, 500}))
        assert StatusSet(["404"]).matches(404)

    def test_predicates_are_callable(self):
        assert StatusSet({404})(404)
        assert not StatusSet({404})(500)
        assert StatusRange(500, 599)(503)
        assert AnyStatus()(100)

    def test_empty_range_raises(self):
        with pytest.raises(ValueError):
            StatusRange(500, 400)

    def test_predicates_are_hashable(self):
        assert len({StatusSet({404, 500}), StatusSet({500, 404})}) == 1
