"""Abstract base class for report formatters."""

import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from logshark.aggregations import AggregationResult
from logshark.errors import SchemaMismatch

_INT_RE = re.compile(r"^-?\d+$")

Rows = list[tuple[Any, ...]]


def coerce_cell(value: str) -> Any:
    """Convert an integer-looking cell back to int, leave anything else as str."""
    if _INT_RE.match(value):
        return int(value)
    return value


class ReportFormatter(ABC):
    """
    Abstract base class for report formatters.

    A formatter renders an AggregationResult under a header of column
    labels, keeping the row order it was given, and can parse its own
    output back into rows.
    """

    extension = "txt"

    def check_schema(self, result: AggregationResult, column_labels: Sequence[str]) -> None:
        """
        Verify the labels match the result's row arity.

        Raises:
            SchemaMismatch: If the label count differs from any row's length.
        """
        if len(column_labels) != result.arity:
            raise SchemaMismatch(
                f"{result.name}: {len(column_labels)} column labels for rows of arity {result.arity}"
            )
        for row in result.rows:
            if len(row) != result.arity:
                raise SchemaMismatch(
                    f"{result.name}: row {row!r} does not have arity {result.arity}"
                )

    @abstractmethod
    def format(self, result: AggregationResult, column_labels: Sequence[str]) -> str:
        """
        Render a result as text.

        Args:
            result: Rows to render, in the order they should appear.
            column_labels: One label per column.

        Returns:
            Header line followed by one line per row.

        Raises:
            SchemaMismatch: If labels do not match the row arity.
        """
        pass

    @abstractmethod
    def parse(
        self,
        text: str,
        types: Optional[Sequence[Callable[[str], Any]]] = None,
    ) -> tuple[list[str], Rows]:
        """
        Parse text produced by format() back into labels and rows.

        Args:
            text: Formatted report.
            types: Optional converter per column. Defaults to coerce_cell,
                which turns every integer-looking cell into int, string
                keys such as a "2024" time bucket included.

        Returns:
            (column_labels, rows)
        """
        pass

    def format_lines(self, result: AggregationResult, column_labels: Sequence[str]) -> list[str]:
        """Return format() split into lines, for BlobStore.write_lines()."""
        return self.format(result, column_labels).split("\n")

    @staticmethod
    def _convert(cells: Sequence[str], types: Optional[Sequence[Callable[[str], Any]]]) -> tuple:
        if types is None:
            return tuple(coerce_cell(c) for c in cells)
        return tuple(t(c) for t, c in zip(types, cells))
