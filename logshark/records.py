"""Log record model and the line parser that validates raw input."""

import csv
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from logshark.errors import (
    FieldCountMismatch,
    InvalidEncoding,
    InvalidStatusCode,
    InvalidTimestamp,
    ParseError,
)

FIELD_NAMES = ("client_address", "timestamp", "path", "status_code", "user_agent")
STATUS_INDEX = 3

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TIMESTAMP_LENGTH = 19

_TIMESTAMP_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}$")
_STATUS_RE = re.compile(r"^[0-9]{3}$")
# Undecodable input bytes arrive as lone surrogates (errors="surrogateescape").
_SURROGATE_RE = re.compile("[\ud800-\udfff]")

MIN_STATUS = 100
MAX_STATUS = 599


class RejectReason(Enum):
    """Why a raw line was refused.

    Attributes:
        FIELD_COUNT_MISMATCH: Split did not yield exactly five fields.
        INVALID_STATUS_CODE: Status is not a three-digit code in [100, 599].
        INVALID_TIMESTAMP: Timestamp is not YYYY-MM-DD HH:MM:SS.
        EMPTY_FIELD: Client address or path is empty.
        INVALID_ENCODING: Line holds bytes the input encoding cannot decode.
    """

    FIELD_COUNT_MISMATCH = "field_count_mismatch"
    INVALID_STATUS_CODE = "invalid_status_code"
    INVALID_TIMESTAMP = "invalid_timestamp"
    EMPTY_FIELD = "empty_field"
    INVALID_ENCODING = "invalid_encoding"


_REASON_ERRORS = {
    RejectReason.FIELD_COUNT_MISMATCH: FieldCountMismatch,
    RejectReason.INVALID_STATUS_CODE: InvalidStatusCode,
    RejectReason.INVALID_TIMESTAMP: InvalidTimestamp,
    RejectReason.EMPTY_FIELD: ParseError,
    RejectReason.INVALID_ENCODING: InvalidEncoding,
}


@dataclass(frozen=True)
class LogRecord:
    """One validated HTTP access event."""

    client_address: str
    timestamp: str
    path: str
    status_code: int
    user_agent: str = ""

    def to_fields(self, include_status: bool = True) -> list[str]:
        """
        Return the record as a list of string fields in schema order.

        Args:
            include_status: If False, the status column is left out. Used by
                the persisted layout where the partition key carries it.
        """
        fields = [self.client_address, self.timestamp, self.path]
        if include_status:
            fields.append(str(self.status_code))
        fields.append(self.user_agent)
        return fields

    @classmethod
    def from_fields(
        cls, fields: list[str], status_code: Optional[int] = None
    ) -> "LogRecord":
        """
        Build a record from already-validated fields.

        Args:
            fields: Five fields in schema order, or four when status_code
                is given separately.
            status_code: Status taken from outside the field list.
        """
        if status_code is not None:
            client_address, timestamp, path, user_agent = fields
        else:
            client_address, timestamp, path, status, user_agent = fields
            status_code = int(status)
        return cls(
            client_address=client_address,
            timestamp=timestamp,
            path=path,
            status_code=status_code,
            user_agent=user_agent,
        )


@dataclass(frozen=True)
class Reject:
    """A raw line that failed validation."""

    reason: RejectReason
    line: str
    detail: str
    line_number: Optional[int] = None

    def to_error(self) -> ParseError:
        """Return the ParseError subclass matching this reject."""
        return _REASON_ERRORS[self.reason](self.detail, line=self.line)


ParseResult = Union[LogRecord, Reject]


def split_line(line: str, delimiter: str = ",") -> list[str]:
    """Split a single line on the delimiter, honouring CSV quoting."""
    try:
        rows = list(csv.reader([line], delimiter=delimiter))
    except csv.Error:
        return line.split(delimiter)
    if not rows:
        return []
    return rows[0]


def is_valid_timestamp(value: str) -> bool:
    """Return True if value is a real instant in YYYY-MM-DD HH:MM:SS form."""
    if not _TIMESTAMP_RE.match(value):
        return False
    try:
        datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return False
    return True


class LogParser:
    """
    Convert raw delimited lines into LogRecords.

    Parsing is pure: bad lines come back as Reject values and never raise.

    Example:
        >>> parser = LogParser()
        >>> parser.parse("10.0.0.1,2024-03-01 10:00:00,/index.html,200,curl/8.0")
        LogRecord(client_address='10.0.0.1', timestamp='2024-03-01 10:00:00', ...)
    """

    def __init__(self, delimiter: str = ","):
        if len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
        self._delimiter = delimiter

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def parse(self, line: str, line_number: Optional[int] = None) -> ParseResult:
        """
        Validate one raw line.

        Args:
            line: Raw text without the trailing newline.
            line_number: Position in the source, carried into rejects.

        Returns:
            LogRecord if the line is valid, Reject otherwise.
        """
        if _SURROGATE_RE.search(line):
            return Reject(
                RejectReason.INVALID_ENCODING,
                line,
                "line contains bytes that are not valid text",
                line_number,
            )

        fields = [f.strip() for f in split_line(line, self._delimiter)]
        if len(fields) != len(FIELD_NAMES):
            return Reject(
                RejectReason.FIELD_COUNT_MISMATCH,
                line,
                f"expected {len(FIELD_NAMES)} fields, got {len(fields)}",
                line_number,
            )

        client_address, timestamp, path, status, user_agent = fields

        if not _STATUS_RE.match(status) or not MIN_STATUS <= int(status) <= MAX_STATUS:
            return Reject(
                RejectReason.INVALID_STATUS_CODE,
                line,
                f"status {status!r} is not an integer in [{MIN_STATUS}, {MAX_STATUS}]",
                line_number,
            )

        if not is_valid_timestamp(timestamp):
            return Reject(
                RejectReason.INVALID_TIMESTAMP,
                line,
                f"timestamp {timestamp!r} does not match YYYY-MM-DD HH:MM:SS",
                line_number,
            )

        if not client_address or not path:
            missing = "client_address" if not client_address else "path"
            return Reject(
                RejectReason.EMPTY_FIELD,
                line,
                f"{missing} must not be empty",
                line_number,
            )

        return LogRecord(
            client_address=client_address,
            timestamp=timestamp,
            path=path,
            status_code=int(status),
            user_agent=user_agent,
        )

    def parse_strict(self, line: str) -> LogRecord:
        """
        Validate one raw line, raising on failure.

        Raises:
            FieldCountMismatch, InvalidStatusCode, InvalidTimestamp,
            InvalidEncoding, ParseError
        """
        result = self.parse(line)
        if isinstance(result, Reject):
            raise result.to_error()
        return result

    def is_header(self, line: str) -> bool:
        """Return True if the line looks like a header row."""
        fields = [f.strip() for f in split_line(line, self._delimiter)]
        if len(fields) != len(FIELD_NAMES):
            return False
        return not fields[STATUS_INDEX].isdigit()

    def data_lines(self, lines: Iterable[str]) -> Iterator[tuple[int, str]]:
        """
        Yield the lines of one input source that hold data.

        Blank lines are skipped. The first non-blank line is dropped if it
        is a header; header detection happens at most once per source.

        Yields:
            (line_number, line) pairs, line numbers 1-based.
        """
        header_checked = False
        for line_number, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            if not header_checked:
                header_checked = True
                if self.is_header(line):
                    continue
            yield line_number, line

    def parse_source(self, lines: Iterable[str]) -> Iterator[tuple[int, ParseResult]]:
        """
        Parse every data line of one input source.

        Yields:
            (line_number, LogRecord or Reject) pairs.
        """
        for line_number, line in self.data_lines(lines):
            yield line_number, self.parse(line, line_number)


def parse_line(line: str, delimiter: str = ",") -> ParseResult:
    """Parse a single line with a throwaway LogParser."""
    return LogParser(delimiter).parse(line)
