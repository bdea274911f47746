"""Job configuration."""

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional

DEFAULT_SUSPICIOUS_STATUSES = frozenset({404, 500})

# Option names used by job definitions, mapped to JobConfig attributes.
_ALIASES = {
    "fieldDelimiter": "field_delimiter",
    "topPagesN": "top_pages_n",
    "suspiciousStatusSet": "suspicious_status_set",
    "suspiciousMinFailures": "suspicious_min_failures",
    "timeBucketPrecision": "time_bucket_precision",
    "inputPrefix": "input_prefix",
    "inputKeys": "input_keys",
    "outputPrefix": "output_prefix",
    "partitionRoot": "partition_root",
    "reportFormat": "report_format",
    "chunkSize": "chunk_size",
    "writeSummary": "write_summary",
}

ENV_PREFIX = "LOGSHARK_"


@dataclass(frozen=True)
class JobConfig:
    """
    Options for one analytics job.

    Attributes:
        field_delimiter: Delimiter of the raw input lines.
        top_pages_n: Rows kept in the top_pages report.
        suspicious_status_set: Status codes counted as failures.
        suspicious_min_failures: An IP is suspicious with strictly more failures.
        time_bucket_precision: Timestamp prefix length for traffic_trends.
        input_prefix: Blob-store prefix listing the raw input objects.
        input_keys: Explicit input objects; overrides input_prefix.
        output_prefix: Blob-store prefix the reports are written under.
        partition_root: If set, the partitioned store is persisted here.
        report_format: "text" or "csv".
        workers: Thread count for ingestion and queries. None means CPU count.
        chunk_size: Lines per ingestion task.
        write_summary: Also write the run summary as <output_prefix>/_SUMMARY.
    """

    field_delimiter: str = ","
    top_pages_n: int = 3
    suspicious_status_set: frozenset = DEFAULT_SUSPICIOUS_STATUSES
    suspicious_min_failures: int = 3
    time_bucket_precision: int = 16
    input_prefix: str = "raw/"
    input_keys: tuple[str, ...] = field(default_factory=tuple)
    output_prefix: str = "reports/"
    partition_root: Optional[str] = None
    report_format: str = "text"
    workers: Optional[int] = None
    chunk_size: int = 10_000
    write_summary: bool = True

    def __post_init__(self):
        if len(self.field_delimiter) != 1:
            raise ValueError(
                f"field_delimiter must be a single character, got {self.field_delimiter!r}"
            )
        if self.report_format not in ("text", "csv"):
            raise ValueError(
                f"Unknown report_format '{self.report_format}'. Supported: text, csv"
            )
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be >= 1")
        object.__setattr__(
            self, "suspicious_status_set", frozenset(int(c) for c in self.suspicious_status_set)
        )
        object.__setattr__(self, "input_keys", tuple(self.input_keys))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "JobConfig":
        """
        Build a config from a mapping of option names.

        Accepts attribute names (top_pages_n) and job-definition names
        (topPagesN). Values given as strings are converted.

        Raises:
            ValueError: If an option is unknown or cannot be converted.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(
                    f"Unknown option '{key}'. Supported: {', '.join(sorted(known))}"
                )
            kwargs[name] = _convert(name, value)
        return cls(**kwargs)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, base: Optional["JobConfig"] = None
    ) -> "JobConfig":
        """
        Build a config from LOGSHARK_* environment variables.

        LOGSHARK_TOP_PAGES_N=5 sets top_pages_n, and so on for every field.

        Args:
            environ: Mapping to read instead of os.environ.
            base: Config whose values are kept where no variable is set.
        """
        environ = os.environ if environ is None else environ
        base = base or cls()
        overrides = {}
        for f in fields(cls):
            var = ENV_PREFIX + f.name.upper()
            if var in environ:
                overrides[f.name] = _convert(f.name, environ[var])
        return replace(base, **overrides)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Expected a boolean, got {value!r}")


def _convert(name: str, value: Any) -> Any:
    """Convert a string option value to the type of field name."""
    if not isinstance(value, str):
        return value
    try:
        if name in ("top_pages_n", "suspicious_min_failures", "time_bucket_precision", "chunk_size"):
            return int(value)
        if name == "workers":
            return int(value) if value.strip() else None
        if name == "suspicious_status_set":
            return frozenset(int(v) for v in _split_list(value))
        if name == "input_keys":
            return tuple(_split_list(value))
        if name == "write_summary":
            return _to_bool(value)
        if name == "partition_root":
            return value or None
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {value!r}") from e
    return value
