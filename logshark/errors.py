"""Exception hierarchy for LogShark."""


class LogSharkError(Exception):
    """Base class for all LogShark errors."""


class ParseError(LogSharkError, ValueError):
    """A raw line could not be turned into a LogRecord."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class FieldCountMismatch(ParseError):
    """The line did not split into exactly the expected number of fields."""


class InvalidStatusCode(ParseError):
    """The status field is not an integer in [100, 599]."""


class InvalidTimestamp(ParseError):
    """The timestamp field does not match YYYY-MM-DD HH:MM:SS."""


class InvalidEncoding(ParseError):
    """The line held bytes that are not valid in the input encoding."""


class QueryError(LogSharkError):
    """A query could not produce its result.

    Aborts only the output of the query that raised it.
    """


class InvalidArgument(QueryError, ValueError):
    """A query was given an argument outside its domain."""


class SchemaMismatch(QueryError, ValueError):
    """Column labels do not match the arity of the result rows."""


class StoreError(LogSharkError):
    """Misuse of the partitioned store lifecycle."""


class StoreSealed(StoreError):
    """Append attempted after the ingestion phase ended."""


class StoreNotSealed(StoreError):
    """Query attempted before the ingestion phase ended."""


class StoreUnavailable(LogSharkError):
    """The external blob store could not be read or written.

    Fatal to the whole job. When reports were already written before the
    failure, written names them and summary holds the partial JobSummary.
    """

    def __init__(self, message: str, written: tuple = (), summary=None):
        super().__init__(message)
        self.written = tuple(written)
        self.summary = summary


class BlobStoreError(LogSharkError, OSError):
    """Raised by BlobStore implementations on any I/O failure."""
