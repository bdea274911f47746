"""Run query plan nodes against a sealed PartitionedStore."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Iterator, Mapping, Optional

from logshark.aggregations import (
    AggregationResult,
    field_key,
    group_count,
    threshold_filtered_group_count,
    time_bucketed_count,
    top_n,
    total_count,
)
from logshark.ast import (
    GroupCount,
    Query,
    ThresholdFilteredGroupCount,
    TimeBucketedCount,
    TopN,
    TotalCount,
    status_predicate_of,
)
from logshark.errors import InvalidArgument, QueryError, StoreNotSealed
from logshark.records import LogRecord
from logshark.store import PartitionedStore, PartitionObserver
from logshark.tools import get_parallel_workers

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of running one named query."""

    name: str
    query: Query
    result: Optional[AggregationResult] = None
    error: Optional[QueryError] = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


def scan_for(
    query: Query,
    store: PartitionedStore,
    observer: Optional[PartitionObserver] = None,
) -> Iterator[LogRecord]:
    """Return the narrowest scan of store that can answer query."""
    predicate = status_predicate_of(query)
    if predicate is not None:
        return store.scan(predicate, observer=observer)
    return store.full_scan(observer=observer)


def execute(
    query: Query,
    store: PartitionedStore,
    observer: Optional[PartitionObserver] = None,
) -> AggregationResult:
    """
    Run a single query against a store.

    Args:
        query: Plan node from logshark.ast.
        store: Store to read. Does not need to be sealed for a single query.
        observer: Called with each visited partition key.

    Returns:
        AggregationResult for the query.

    Raises:
        QueryError: If the query arguments are invalid.
    """
    records = scan_for(query, store, observer)

    if isinstance(query, TotalCount):
        return total_count(records)
    elif isinstance(query, GroupCount):
        return group_count(records, field_key(query.key))
    elif isinstance(query, TopN):
        return top_n(records, field_key(query.key), query.n)
    elif isinstance(query, ThresholdFilteredGroupCount):
        return threshold_filtered_group_count(
            records, field_key(query.key), query.statuses, query.min_count
        )
    elif isinstance(query, TimeBucketedCount):
        return time_bucketed_count(records, query.precision)
    else:
        raise InvalidArgument(f"Cannot execute query type: {type(query).__name__}")


def _execute_named(name: str, query: Query, store: PartitionedStore) -> ExecutionResult:
    start = time.perf_counter()
    try:
        result = replace(execute(query, store), name=name)
    except QueryError as e:
        logger.warning("Query %s failed: %s", name, e)
        return ExecutionResult(
            name=name, query=query, error=e, elapsed=time.perf_counter() - start
        )
    elapsed = time.perf_counter() - start
    logger.debug("Query %s produced %d rows in %.3fs", name, len(result), elapsed)
    return ExecutionResult(name=name, query=query, result=result, elapsed=elapsed)


def execute_all(
    queries: Mapping[str, Query],
    store: PartitionedStore,
    workers: Optional[int] = None,
) -> dict[str, ExecutionResult]:
    """
    Run independent queries in parallel against a sealed store.

    A QueryError in one query is captured in its ExecutionResult; the
    other queries still run. Results come back in the order of queries.

    Args:
        queries: Mapping of name to plan node.
        store: Sealed store to read.
        workers: Thread count. None means CPU count.

    Raises:
        StoreNotSealed: If the ingestion phase has not ended.
    """
    if not store.sealed:
        raise StoreNotSealed("Queries may only run after the store is sealed")

    if not queries:
        return {}

    max_workers = min(get_parallel_workers(workers), len(queries))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="query") as pool:
        futures = {
            name: pool.submit(_execute_named, name, query, store)
            for name, query in queries.items()
        }
        return {name: future.result() for name, future in futures.items()}
