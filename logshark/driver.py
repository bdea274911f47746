"""Job driver: read raw lines, ingest, query, format and write reports.

All mutable state of a run lives in a JobContext, so several jobs can run
in one process at the same time.
"""

import logging
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from logshark.blobstore import BlobStore
from logshark.config import JobConfig
from logshark.errors import BlobStoreError, LogSharkError, StoreUnavailable
from logshark.executor import execute_all
from logshark.formats import ReportFormatter, get_formatter
from logshark.records import LogParser, LogRecord, Reject
from logshark.reports import ReportSpec, standard_reports
from logshark.store import PartitionedStore, persist_store
from logshark.tools import chunked, get_parallel_workers

logger = logging.getLogger(__name__)

SUMMARY_NAME = "_SUMMARY"


@dataclass
class JobSummary:
    """What one run read, kept, refused and produced."""

    lines_read: int
    records_ingested: int
    records_rejected: int
    reject_reasons: dict[str, int]
    partition_counts: dict[int, int]
    reports_written: list[str]
    reports_failed: dict[str, str]
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.reports_failed

    def to_lines(self) -> list[str]:
        """Render the summary as human-readable lines."""
        lines = [
            f"lines read: {self.lines_read}",
            f"records ingested: {self.records_ingested}",
            f"records rejected: {self.records_rejected}",
        ]
        for reason, count in sorted(self.reject_reasons.items()):
            lines.append(f"  {reason}: {count}")
        lines.append(f"partitions: {len(self.partition_counts)}")
        for status_code, count in self.partition_counts.items():
            lines.append(f"  status={status_code}: {count}")
        lines.append(f"reports written: {', '.join(self.reports_written) or '-'}")
        for name, error in self.reports_failed.items():
            lines.append(f"report failed: {name} ({error})")
        return lines


@dataclass
class JobContext:
    """Per-job state passed to every phase."""

    config: JobConfig
    store: PartitionedStore = field(default_factory=PartitionedStore)
    lines_read: int = 0
    rejects: Counter = field(default_factory=Counter)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        self.parser = LogParser(self.config.field_delimiter)

    @property
    def records_rejected(self) -> int:
        return sum(self.rejects.values())

    def count_lines(self, n: int) -> None:
        with self._lock:
            self.lines_read += n

    def add_rejects(self, rejects: list[Reject]) -> None:
        if not rejects:
            return
        with self._lock:
            self.rejects.update(r.reason.value for r in rejects)

    def summary(
        self,
        reports_written: list[str],
        reports_failed: dict[str, str],
        elapsed: float = 0.0,
    ) -> JobSummary:
        return JobSummary(
            lines_read=self.lines_read,
            records_ingested=len(self.store),
            records_rejected=self.records_rejected,
            reject_reasons=dict(self.rejects),
            partition_counts=self.store.partition_counts(),
            reports_written=list(reports_written),
            reports_failed=dict(reports_failed),
            elapsed=elapsed,
        )


def read_sources(ctx: JobContext, blob_store: BlobStore) -> dict[str, list[str]]:
    """
    Load every input object in full.

    Raises:
        StoreUnavailable: If listing or reading fails.
    """
    config = ctx.config
    try:
        keys = list(config.input_keys) or blob_store.list_keys(config.input_prefix)
        sources = {}
        for key in keys:
            with blob_store.open_lines(key) as lines:
                sources[key] = lines
    except BlobStoreError as e:
        raise StoreUnavailable(f"Cannot read input: {e}") from e

    ctx.count_lines(sum(len(lines) for lines in sources.values()))
    logger.info("Read %d lines from %d sources", ctx.lines_read, len(sources))
    return sources


def _ingest_chunk(ctx: JobContext, source: str, chunk: list[tuple[int, str]]) -> int:
    records: list[LogRecord] = []
    rejects: list[Reject] = []
    for line_number, line in chunk:
        result = ctx.parser.parse(line, line_number)
        if isinstance(result, Reject):
            logger.debug(
                "Rejected %s:%d (%s): %s",
                source,
                line_number,
                result.reason.value,
                result.detail,
            )
            rejects.append(result)
        else:
            records.append(result)
    ctx.store.extend(records)
    ctx.add_rejects(rejects)
    return len(records)


def ingest(ctx: JobContext, sources: dict[str, list[str]]) -> int:
    """
    Parse every source and append valid records to the context's store.

    Chunks of lines are parsed on a thread pool. Returns once every chunk
    has been appended, then seals the store.

    Returns:
        Number of records ingested.
    """
    config = ctx.config
    tasks = []
    for source, lines in sources.items():
        numbered = list(ctx.parser.data_lines(lines))
        for chunk in chunked(numbered, config.chunk_size):
            tasks.append((source, chunk))

    ingested = 0
    if tasks:
        workers = min(get_parallel_workers(config.workers), len(tasks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as pool:
            futures = [
                pool.submit(_ingest_chunk, ctx, source, chunk) for source, chunk in tasks
            ]
            ingested = sum(f.result() for f in futures)

    ctx.store.seal()
    logger.info(
        "Ingested %d records into %d partitions, rejected %d",
        ingested,
        len(ctx.store.keys()),
        ctx.records_rejected,
    )
    return ingested


def render_reports(
    ctx: JobContext,
    specs: tuple[ReportSpec, ...],
    formatter: ReportFormatter,
) -> tuple[dict[str, list[str]], dict[str, str]]:
    """
    Run every report query, then format each successful result.

    Returns:
        (rendered lines by report name, error message by failed report name)
    """
    outcomes = execute_all(
        {spec.name: spec.query for spec in specs}, ctx.store, workers=ctx.config.workers
    )

    rendered: dict[str, list[str]] = {}
    failed: dict[str, str] = {}
    for spec in specs:
        outcome = outcomes[spec.name]
        if not outcome.ok:
            failed[spec.name] = str(outcome.error)
            continue
        try:
            rendered[spec.name] = formatter.format_lines(outcome.result, spec.column_labels)
        except LogSharkError as e:
            logger.warning("Report %s could not be formatted: %s", spec.name, e)
            failed[spec.name] = str(e)
    return rendered, failed


def report_key(config: JobConfig, name: str, formatter: ReportFormatter) -> str:
    return f"{config.output_prefix.rstrip('/')}/{name}.{formatter.extension}"


def run_job(
    config: JobConfig,
    blob_store: BlobStore,
    specs: Optional[tuple[ReportSpec, ...]] = None,
) -> JobSummary:
    """
    Run one analytics job end to end.

    Args:
        config: Job options.
        blob_store: Where input is read from and reports are written to.
        specs: Reports to produce. Defaults to standard_reports(config).

    Returns:
        JobSummary of the run.

    Raises:
        StoreUnavailable: If the blob store cannot be read or written. No
            report is written when reading or persisting fails. When a
            report write fails, reports written before it stay and are
            named by the exception's written and summary attributes.
    """
    start = time.perf_counter()
    ctx = JobContext(config)
    specs = specs if specs is not None else standard_reports(config)
    formatter = get_formatter(config.report_format)

    sources = read_sources(ctx, blob_store)
    ingest(ctx, sources)

    if config.partition_root:
        try:
            persist_store(ctx.store, blob_store, config.partition_root, config.field_delimiter)
        except BlobStoreError as e:
            raise StoreUnavailable(f"Cannot persist partitions: {e}") from e

    # Every query has finished before the first write.
    rendered, failed = render_reports(ctx, specs, formatter)

    written: list[str] = []
    for name, lines in rendered.items():
        key = report_key(config, name, formatter)
        try:
            blob_store.write_lines(key, lines)
        except BlobStoreError as e:
            failed[name] = str(e)
            partial = ctx.summary(written, failed, elapsed=time.perf_counter() - start)
            raise StoreUnavailable(
                f"Cannot write reports: {e}; already written: {', '.join(written) or '-'}",
                written=written,
                summary=partial,
            ) from e
        written.append(name)
        logger.debug("Wrote report %s", key)

    summary = ctx.summary(written, failed, elapsed=time.perf_counter() - start)
    if config.write_summary:
        try:
            blob_store.write_lines(
                f"{config.output_prefix.rstrip('/')}/{SUMMARY_NAME}", summary.to_lines()
            )
        except BlobStoreError as e:
            raise StoreUnavailable(f"Cannot write summary: {e}") from e

    for line in summary.to_lines():
        logger.info(line)
    if failed:
        logger.warning("%d of %d reports failed", len(failed), len(specs))
    return summary
