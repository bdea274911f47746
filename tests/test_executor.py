"""Tests for query execution against the store."""

import pytest

from logshark.ast import (
    GroupCount,
    Query,
    StatusRange,
    StatusSet,
    ThresholdFilteredGroupCount,
    TimeBucketedCount,
    TopN,
    TotalCount,
    status_predicate_of,
)
from logshark.errors import InvalidArgument, StoreNotSealed
from logshark.executor import execute, execute_all
from logshark.store import PartitionedStore


class TestExecute:
    def test_total_count(self, store):
        assert execute(TotalCount(), store).rows == ((18,),)

    def test_group_count(self, store):
        assert execute(GroupCount(key="status_code"), store).rows[0] == (404, 7)

    def test_top_n(self, store):
        assert execute(TopN(key="path", n=1), store).rows == (("/index.html", 5),)

    def test_time_bucketed(self, store):
        assert len(execute(TimeBucketedCount(precision=16), store)) == 3

    def test_threshold_query_is_pruned(self, store):
        query = ThresholdFilteredGroupCount(
            key="client_address", statuses=StatusSet({404, 500}), min_count=3
        )
        visited = []
        result = execute(query, store, observer=visited.append)
        assert visited == [404, 500]
        assert result.rows == (("192.168.1.22", 5), ("192.168.1.12", 4))

    def test_other_queries_do_a_full_scan(self, store):
        visited = []
        execute(GroupCount(key="path"), store, observer=visited.append)
        assert visited == store.keys()

    def test_range_threshold(self, store):
        query = ThresholdFilteredGroupCount(
            key="path", statuses=StatusRange(400, 499), min_count=1
        )
        assert execute(query, store).rows == (
            ("/login", 2),
            ("/missing", 2),
            ("/wp-login.php", 2),
        )

    def test_unknown_query_type(self, store):
        with pytest.raises(InvalidArgument):
            execute(Query(), store)

    def test_status_predicate_of(self):
        statuses = StatusSet({500})
        assert status_predicate_of(TotalCount()) is None
        assert (
            status_predicate_of(
                ThresholdFilteredGroupCount(key="path", statuses=statuses, min_count=0)
            )
            is statuses
        )


class TestExecuteAll:
    def test_runs_every_query(self, store):
        outcomes = execute_all(
            {
                "total": TotalCount(),
                "statuses": GroupCount(key="status_code"),
                "trend": TimeBucketedCount(precision=13),
            },
            store,
            workers=3,
        )
        assert list(outcomes) == ["total", "statuses", "trend"]
        assert all(o.ok for o in outcomes.values())
        assert outcomes["total"].result.name == "total"
        assert outcomes["trend"].result.rows == (("2024-03-01 10", 18),)

    def test_failure_is_isolated(self, store):
        outcomes = execute_all(
            {"bad": TopN(key="path", n=0), "good": TotalCount()},
            store,
        )
        assert not outcomes["bad"].ok
        assert isinstance(outcomes["bad"].error, InvalidArgument)
        assert outcomes["bad"].result is None
        assert outcomes["good"].result.rows == ((18,),)

    def test_requires_sealed_store(self):
        with pytest.raises(StoreNotSealed):
            execute_all({"total": TotalCount()}, PartitionedStore())

    def test_empty_query_set(self, store):
        assert execute_all({}, store) == {}

    def test_empty_store(self):
        store = PartitionedStore()
        store.seal()
        outcomes = execute_all(
            {"total": TotalCount(), "pages": TopN(key="path", n=3)}, store, workers=2
        )
        assert outcomes["total"].result.rows == ((0,),)
        assert outcomes["pages"].result.rows == ()
