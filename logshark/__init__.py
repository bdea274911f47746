"""LogShark - Partitioned analytics over web-server access logs."""

from logshark.ast import (
    AnyStatus,
    GroupCount,
    StatusRange,
    StatusSet,
    ThresholdFilteredGroupCount,
    TimeBucketedCount,
    TopN,
    TotalCount,
)
from logshark.aggregations import (
    AggregationResult,
    by_client_address,
    by_path,
    by_status,
    by_user_agent,
    group_count,
    threshold_filtered_group_count,
    time_bucketed_count,
    top_n,
    total_count,
)
from logshark.blobstore import BlobStore, LocalBlobStore, MemoryBlobStore
from logshark.config import JobConfig
from logshark.driver import JobContext, JobSummary, run_job
from logshark.errors import (
    FieldCountMismatch,
    InvalidArgument,
    InvalidEncoding,
    InvalidStatusCode,
    InvalidTimestamp,
    LogSharkError,
    ParseError,
    QueryError,
    SchemaMismatch,
    StoreUnavailable,
)
from logshark.executor import execute, execute_all
from logshark.formats import CSVFormatter, TextTableFormatter, get_formatter
from logshark.records import LogParser, LogRecord, Reject, RejectReason, parse_line
from logshark.store import PartitionedStore, load_store, persist_store

__version__ = "0.1.0"
__all__ = [
    # Records
    "LogRecord",
    "LogParser",
    "Reject",
    "RejectReason",
    "parse_line",
    # Store
    "PartitionedStore",
    "persist_store",
    "load_store",
    "StatusSet",
    "StatusRange",
    "AnyStatus",
    # Queries
    "TotalCount",
    "GroupCount",
    "TopN",
    "ThresholdFilteredGroupCount",
    "TimeBucketedCount",
    "execute",
    "execute_all",
    # Aggregation functions
    "AggregationResult",
    "total_count",
    "group_count",
    "top_n",
    "threshold_filtered_group_count",
    "time_bucketed_count",
    "by_status",
    "by_path",
    "by_user_agent",
    "by_client_address",
    # Formatters
    "get_formatter",
    "TextTableFormatter",
    "CSVFormatter",
    # Jobs
    "BlobStore",
    "LocalBlobStore",
    "MemoryBlobStore",
    "JobConfig",
    "JobContext",
    "JobSummary",
    "run_job",
    # Errors
    "LogSharkError",
    "ParseError",
    "FieldCountMismatch",
    "InvalidStatusCode",
    "InvalidEncoding",
    "InvalidTimestamp",
    "QueryError",
    "InvalidArgument",
    "SchemaMismatch",
    "StoreUnavailable",
]
