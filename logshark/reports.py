"""The standard set of named reports a job produces."""

from dataclasses import dataclass
from typing import Any, Callable

from logshark.ast import (
    GroupCount,
    Query,
    StatusSet,
    ThresholdFilteredGroupCount,
    TimeBucketedCount,
    TopN,
    TotalCount,
)
from logshark.config import JobConfig
from logshark.formats import ReportFormatter
from logshark.formats.base import Rows


@dataclass(frozen=True)
class ReportSpec:
    """A named query and the column labels its output is written under.

    column_types holds one converter per column for reading the report
    back; without it, integer-looking keys such as a "2024" time bucket
    would come back as int.
    """

    name: str
    query: Query
    column_labels: tuple[str, ...]
    column_types: tuple[Callable[[str], Any], ...] = ()

    def parse(self, formatter: ReportFormatter, text: str) -> tuple[list[str], Rows]:
        """Parse this report's formatted text with its own column types."""
        return formatter.parse(text, types=self.column_types or None)


def standard_reports(config: JobConfig) -> tuple[ReportSpec, ...]:
    """
    Build the report set for a job.

    Returns:
        total_requests, status_code_counts, top_pages, user_agent_counts,
        suspicious_ips and traffic_trends, in that order.
    """
    return (
        ReportSpec("total_requests", TotalCount(), ("total_requests",), (int,)),
        ReportSpec(
            "status_code_counts",
            GroupCount(key="status_code"),
            ("status_code", "count"),
            (int, int),
        ),
        ReportSpec(
            "top_pages",
            TopN(key="path", n=config.top_pages_n),
            ("path", "hits"),
            (str, int),
        ),
        ReportSpec(
            "user_agent_counts",
            GroupCount(key="user_agent"),
            ("user_agent", "count"),
            (str, int),
        ),
        ReportSpec(
            "suspicious_ips",
            ThresholdFilteredGroupCount(
                key="client_address",
                statuses=StatusSet(config.suspicious_status_set),
                min_count=config.suspicious_min_failures,
            ),
            ("client_address", "failures"),
            (str, int),
        ),
        ReportSpec(
            "traffic_trends",
            TimeBucketedCount(precision=config.time_bucket_precision),
            ("time_bucket", "requests"),
            (str, int),
        ),
    )
