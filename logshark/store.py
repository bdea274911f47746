"""Status-partitioned record store.

Every record lives in exactly one partition, chosen solely by its status
code. Partitions are created on first write, are append-only, and are read
back in ascending key order with records in insertion order.
"""

import csv
import io
import logging
import re
import threading
from collections import defaultdict
from typing import Callable, Iterable, Iterator, Optional

from logshark.ast import AnyStatus, StatusFilter, StatusRange, StatusSet, status_set
from logshark.blobstore import BlobStore
from logshark.errors import StoreSealed
from logshark.optimizer import PartitionPruner
from logshark.records import LogRecord, split_line

logger = logging.getLogger(__name__)

__all__ = [
    "AnyStatus",
    "Partition",
    "PartitionedStore",
    "StatusRange",
    "StatusSet",
    "load_store",
    "partition_key",
    "persist_store",
    "status_set",
]

PartitionObserver = Callable[[int], None]

PART_FILE = "part-00000.csv"
_PARTITION_DIR_RE = re.compile(r"(?:^|/)status=(\d{3})/[^/]+$")


class Partition:
    """Append-only sequence of records sharing one status code."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        self._records: list[LogRecord] = []
        self._lock = threading.Lock()

    def append(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    def extend(self, records: list[LogRecord]) -> None:
        with self._lock:
            self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"Partition(status_code={self.status_code}, records={len(self)})"


class PartitionedStore:
    """
    Mapping of status code to Partition.

    Lifecycle: created empty, filled through append()/extend() during
    ingestion, then seal()ed. After sealing the store is read-only and may
    be scanned from any number of threads without locking.

    Example:
        >>> store = PartitionedStore()
        >>> store.append(record)
        >>> store.seal()
        >>> list(store.scan(StatusSet({404, 500})))
    """

    def __init__(self, pruner: Optional[PartitionPruner] = None):
        self._partitions: dict[int, Partition] = {}
        self._create_lock = threading.Lock()
        self._sealed = False
        self._pruner = pruner or PartitionPruner()

    def _partition_for(self, status_code: int) -> Partition:
        partition = self._partitions.get(status_code)
        if partition is None:
            with self._create_lock:
                partition = self._partitions.get(status_code)
                if partition is None:
                    partition = Partition(status_code)
                    self._partitions[status_code] = partition
                    logger.debug("Created partition status=%d", status_code)
        return partition

    def append(self, record: LogRecord) -> None:
        """
        Route a record to the partition for its status code.

        Raises:
            StoreSealed: If the store has been sealed.
        """
        if self._sealed:
            raise StoreSealed("Cannot append to a sealed store")
        self._partition_for(record.status_code).append(record)

    def extend(self, records: Iterable[LogRecord]) -> None:
        """
        Append a batch of records, taking each partition lock once.

        Raises:
            StoreSealed: If the store has been sealed.
        """
        if self._sealed:
            raise StoreSealed("Cannot append to a sealed store")
        batches: dict[int, list[LogRecord]] = defaultdict(list)
        for record in records:
            batches[record.status_code].append(record)
        for status_code, batch in batches.items():
            self._partition_for(status_code).extend(batch)

    def seal(self) -> None:
        """End the ingestion phase. Idempotent."""
        with self._create_lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def keys(self) -> list[int]:
        """Return partition keys in ascending order."""
        return sorted(self._partitions)

    def partition(self, status_code: int) -> Optional[Partition]:
        return self._partitions.get(status_code)

    def partition_counts(self) -> dict[int, int]:
        """Return {status_code: record count}, ascending by key."""
        return {code: len(self._partitions[code]) for code in self.keys()}

    def __len__(self) -> int:
        return sum(len(p) for p in self._partitions.values())

    def __contains__(self, status_code: int) -> bool:
        return status_code in self._partitions

    def scan(
        self,
        predicate: StatusFilter,
        observer: Optional[PartitionObserver] = None,
    ) -> Iterator[LogRecord]:
        """
        Yield records from partitions whose key satisfies predicate.

        Excluded partitions are never opened.

        Args:
            predicate: Status predicate node or callable on a status code.
            observer: Called with the status code of each visited partition.

        Yields:
            Records in ascending key order, insertion order within a key.
        """
        for status_code in self._pruner.prune(predicate, self._partitions.keys()):
            if observer is not None:
                observer(status_code)
            yield from self._partitions[status_code]

    def full_scan(self, observer: Optional[PartitionObserver] = None) -> Iterator[LogRecord]:
        """Yield every record, ascending key order."""
        return self.scan(AnyStatus(), observer=observer)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"PartitionedStore({len(self._partitions)} partitions, {len(self)} records, {state})"


def partition_key(root: str, status_code: int) -> str:
    """Return the object key holding one persisted partition."""
    return f"{root.rstrip('/')}/status={status_code}/{PART_FILE}"


def _join_fields(fields: list[str], delimiter: str) -> str:
    buf = io.StringIO()
    csv.writer(buf, delimiter=delimiter, lineterminator="").writerow(fields)
    return buf.getvalue()


def persist_store(
    store: PartitionedStore,
    blob_store: BlobStore,
    root: str,
    delimiter: str = ",",
) -> list[str]:
    """
    Write each partition as its own object under root.

    Layout is one directory per status code, "<root>/status=<code>/part-00000.csv",
    with the status column left out of the body since the key carries it.

    Returns:
        Keys written, ascending by status code.

    Raises:
        BlobStoreError: If any object cannot be written.
    """
    written = []
    for status_code in store.keys():
        key = partition_key(root, status_code)
        lines = (
            _join_fields(record.to_fields(include_status=False), delimiter)
            for record in store.partition(status_code)
        )
        blob_store.write_lines(key, lines)
        written.append(key)
        logger.debug("Persisted partition status=%d to %s", status_code, key)
    logger.info("Persisted %d partitions under %s", len(written), root)
    return written


def load_store(blob_store: BlobStore, root: str, delimiter: str = ",") -> PartitionedStore:
    """
    Rebuild a sealed store from the layout written by persist_store().

    Objects under root that do not sit in a "status=<code>/" directory are
    ignored.

    Raises:
        BlobStoreError: If any object cannot be read.
    """
    store = PartitionedStore()
    prefix = root.rstrip("/") + "/"
    for key in blob_store.list_keys(prefix):
        match = _PARTITION_DIR_RE.search(key[len(prefix):])
        if not match:
            continue
        status_code = int(match.group(1))
        records = [
            LogRecord.from_fields(split_line(line, delimiter), status_code=status_code)
            for line in blob_store.read_lines(key)
            if line
        ]
        store.extend(records)
    store.seal()
    return store
