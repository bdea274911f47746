"""Aggregation functions for LogShark.

Each function is a pure function over an iterable of LogRecord and returns
an AggregationResult whose row order is part of its contract. Every
function accepts empty input and returns an empty (or zero) result.

Ranked results are sorted by descending count with ties broken by
ascending key, so output is reproducible across runs.

Example:
    top_n(store.full_scan(), by_path, 3)
    threshold_filtered_group_count(
        store.scan(StatusSet({404, 500})), by_client_address, StatusSet({404, 500}), 3
    )
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable

from logshark.ast import StatusFilter
from logshark.errors import InvalidArgument
from logshark.records import FIELD_NAMES, TIMESTAMP_LENGTH, LogRecord

KeyFn = Callable[[LogRecord], Hashable]


@dataclass(frozen=True)
class AggregationResult:
    """Ordered rows produced by one query.

    Each row is a tuple (key..., metric). Metric is always an int count.
    """

    name: str
    rows: tuple[tuple[Any, ...], ...]
    arity: int

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def as_dict(self) -> dict:
        """Return {key: metric} for two-column results."""
        if self.arity != 2:
            raise ValueError(f"as_dict() needs 2-column rows, result has {self.arity}")
        return {key: metric for key, metric in self.rows}


def by_status(record: LogRecord) -> int:
    return record.status_code


def by_path(record: LogRecord) -> str:
    return record.path


def by_user_agent(record: LogRecord) -> str:
    return record.user_agent


def by_client_address(record: LogRecord) -> str:
    return record.client_address


def by_timestamp(record: LogRecord) -> str:
    return record.timestamp


_KEY_FUNCTIONS: dict[str, KeyFn] = {
    "client_address": by_client_address,
    "timestamp": by_timestamp,
    "path": by_path,
    "status_code": by_status,
    "user_agent": by_user_agent,
}


def field_key(name: str) -> KeyFn:
    """
    Look up the key function for a record field.

    Args:
        name: One of client_address, timestamp, path, status_code, user_agent.

    Raises:
        InvalidArgument: If name is not a record field.
    """
    try:
        return _KEY_FUNCTIONS[name]
    except KeyError:
        raise InvalidArgument(
            f"Unknown record field '{name}'. Supported: {', '.join(FIELD_NAMES)}"
        ) from None


def rank_counts(counts: Counter) -> list[tuple[Any, int]]:
    """Sort (key, count) pairs by descending count, then ascending key."""
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def total_count(records: Iterable[LogRecord]) -> AggregationResult:
    """
    Count records.

    Returns:
        Single row (n,).

    Example:
        >>> total_count([]).rows
        ((0,),)
    """
    n = sum(1 for _ in records)
    return AggregationResult(name="total_count", rows=((n,),), arity=1)


def group_count(records: Iterable[LogRecord], key_fn: KeyFn) -> AggregationResult:
    """
    Count records per distinct key_fn(record).

    Args:
        records: Records to aggregate.
        key_fn: Derives the grouping key from a record.

    Returns:
        Rows (key, count), descending count, ascending key on ties.

    Example:
        >>> group_count(records, by_status).rows
        ((200, 5), (404, 2), (500, 2))
    """
    counts = Counter(key_fn(record) for record in records)
    return AggregationResult(
        name="group_count", rows=tuple(rank_counts(counts)), arity=2
    )


def top_n(records: Iterable[LogRecord], key_fn: KeyFn, n: int) -> AggregationResult:
    """
    Return the first n rows of group_count().

    Args:
        records: Records to aggregate.
        key_fn: Derives the grouping key from a record.
        n: Number of rows to keep. Must be >= 1.

    Raises:
        InvalidArgument: If n < 1.

    Example:
        >>> top_n(records, by_path, 1).rows
        (('/index.html', 4),)
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise InvalidArgument(f"top_n requires n >= 1, got {n!r}")
    ranked = group_count(records, key_fn).rows
    return AggregationResult(name="top_n", rows=ranked[:n], arity=2)


def threshold_filtered_group_count(
    records: Iterable[LogRecord],
    key_fn: KeyFn,
    predicate: StatusFilter,
    min_count: int,
) -> AggregationResult:
    """
    Group records with a matching status and keep groups above min_count.

    Records whose status fails predicate are skipped, so this is correct on
    a full scan. Feed it a pruned scan to avoid reading excluded partitions.

    Args:
        records: Records to aggregate.
        key_fn: Derives the grouping key from a record.
        predicate: Status predicate node or callable on a status code.
        min_count: Groups need a count strictly greater than this.

    Raises:
        InvalidArgument: If min_count is negative.

    Example:
        >>> threshold_filtered_group_count(
        ...     records, by_client_address, StatusSet({404, 500}), 3
        ... ).rows
        (('192.168.1.22', 5), ('192.168.1.12', 4))
    """
    if isinstance(min_count, bool) or not isinstance(min_count, int) or min_count < 0:
        raise InvalidArgument(f"min_count must be an integer >= 0, got {min_count!r}")
    counts = Counter(
        key_fn(record) for record in records if predicate(record.status_code)
    )
    kept = [(key, count) for key, count in rank_counts(counts) if count > min_count]
    return AggregationResult(
        name="threshold_filtered_group_count", rows=tuple(kept), arity=2
    )


def truncate_timestamp(timestamp: str, precision: int) -> str:
    """Return the bucket a timestamp falls in: its first precision characters."""
    return timestamp[:precision]


def time_bucketed_count(
    records: Iterable[LogRecord], precision: int = 16
) -> AggregationResult:
    """
    Count records per timestamp bucket, in chronological order.

    Because timestamps are fixed-width YYYY-MM-DD HH:MM:SS strings, a prefix
    is a coarser instant and lexical order is chronological order. 16 gives
    minute buckets, 13 hour buckets, 10 day buckets.

    Args:
        records: Records to aggregate.
        precision: Prefix length, 1 through 19.

    Raises:
        InvalidArgument: If precision is out of range.

    Example:
        >>> time_bucketed_count(records, 13).rows
        (('2024-03-01 10', 6), ('2024-03-01 11', 3))
    """
    if (
        isinstance(precision, bool)
        or not isinstance(precision, int)
        or not 1 <= precision <= TIMESTAMP_LENGTH
    ):
        raise InvalidArgument(
            f"precision must be between 1 and {TIMESTAMP_LENGTH}, got {precision!r}"
        )
    counts = Counter(truncate_timestamp(r.timestamp, precision) for r in records)
    return AggregationResult(
        name="time_bucketed_count", rows=tuple(sorted(counts.items())), arity=2
    )
