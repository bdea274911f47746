"""Partition pruning: decide which partitions a status predicate can touch."""

import bisect
import logging
from typing import Iterable

from logshark.ast import AnyStatus, StatusFilter, StatusRange, StatusSet

logger = logging.getLogger(__name__)


class PartitionPruner:
    """
    Resolve a status predicate to the partition keys that must be visited.

    The predicate is only ever evaluated against partition keys, never
    against records, so an excluded partition is never opened. Known
    predicate shapes take a direct path:
    1. StatusSet - intersect the set with the available keys
    2. StatusRange - bisect the sorted keys
    3. AnyStatus - every key
    Any other callable is evaluated once per key.
    """

    def prune(self, predicate: StatusFilter, keys: Iterable[int]) -> list[int]:
        """
        Return the keys satisfying predicate, in ascending order.

        Args:
            predicate: Status predicate node or callable on a status code.
            keys: Partition keys present in the store.

        Returns:
            Sorted list of keys to visit.
        """
        ordered = sorted(keys)

        if isinstance(predicate, AnyStatus):
            selected = ordered
        elif isinstance(predicate, StatusSet):
            selected = sorted(predicate.codes.intersection(ordered))
        elif isinstance(predicate, StatusRange):
            lo = bisect.bisect_left(ordered, predicate.low)
            hi = bisect.bisect_right(ordered, predicate.high)
            selected = ordered[lo:hi]
        elif callable(predicate):
            selected = [k for k in ordered if predicate(k)]
        else:
            raise TypeError(
                f"Expected a status predicate or callable, got {type(predicate).__name__}"
            )

        logger.debug(
            "Pruned %d of %d partitions for %r",
            len(ordered) - len(selected),
            len(ordered),
            predicate,
        )
        return selected


def prune_partitions(predicate: StatusFilter, keys: Iterable[int]) -> list[int]:
    """Shortcut for PartitionPruner().prune()."""
    return PartitionPruner().prune(predicate, keys)
