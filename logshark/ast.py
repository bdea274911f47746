"""Plan nodes for LogShark queries and status predicates."""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union


@dataclass(frozen=True)
class Node:
    """Base class for all plan nodes."""

    pass


@dataclass(frozen=True)
class StatusPredicate(Node):
    """Base class for predicates over the partition key (status code)."""

    def matches(self, status_code: int) -> bool:
        raise NotImplementedError

    def __call__(self, status_code: int) -> bool:
        return self.matches(status_code)


@dataclass(frozen=True)
class StatusSet(StatusPredicate):
    """Matches status codes in a finite set."""

    codes: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "codes", frozenset(int(c) for c in self.codes))

    def matches(self, status_code: int) -> bool:
        return status_code in self.codes


@dataclass(frozen=True)
class StatusRange(StatusPredicate):
    """Matches status codes in the inclusive range [low, high]."""

    low: int
    high: int

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"empty status range: {self.low} > {self.high}")

    def matches(self, status_code: int) -> bool:
        return self.low <= status_code <= self.high


@dataclass(frozen=True)
class AnyStatus(StatusPredicate):
    """Matches every status code."""

    def matches(self, status_code: int) -> bool:
        return True


# Anything scan() accepts: a predicate node or a plain callable on the code.
StatusFilter = Union[StatusPredicate, Callable[[int], bool]]


def status_set(codes: Iterable[int]) -> StatusSet:
    """Build a StatusSet from any iterable of codes."""
    return StatusSet(codes=frozenset(codes))


@dataclass(frozen=True)
class Query(Node):
    """Base class for the fixed family of aggregation queries."""

    pass


@dataclass(frozen=True)
class TotalCount(Query):
    """Number of records scanned."""

    pass


@dataclass(frozen=True)
class GroupCount(Query):
    """Count records per distinct value of a record field."""

    key: str


@dataclass(frozen=True)
class TopN(Query):
    """GroupCount truncated to the first n rows."""

    key: str
    n: int


@dataclass(frozen=True)
class ThresholdFilteredGroupCount(Query):
    """GroupCount over matching statuses, keeping groups above min_count."""

    key: str
    statuses: StatusPredicate
    min_count: int


@dataclass(frozen=True)
class TimeBucketedCount(Query):
    """Count records per timestamp prefix of the given length."""

    precision: int = 16


def status_predicate_of(query: Query) -> Optional[StatusPredicate]:
    """Return the status predicate a query restricts its input to, if any."""
    if isinstance(query, ThresholdFilteredGroupCount):
        return query.statuses
    return None
