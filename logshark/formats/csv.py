"""CSV report formatter."""

import csv
import io
from typing import Any, Callable, Optional, Sequence

from logshark.aggregations import AggregationResult
from logshark.formats.base import ReportFormatter, Rows


class CSVFormatter(ReportFormatter):
    """
    Render results as delimited text with a header row.

    Values containing the delimiter or quotes are quoted, so parse()
    recovers them exactly.
    """

    extension = "csv"

    def __init__(self, delimiter: str = ","):
        """
        Create a CSV formatter.

        Args:
            delimiter: Field delimiter character (default: ",").
        """
        self._delimiter = delimiter

    def format(self, result: AggregationResult, column_labels: Sequence[str]) -> str:
        self.check_schema(result, column_labels)
        buf = io.StringIO()
        writer = csv.writer(buf, delimiter=self._delimiter, lineterminator="\n")
        writer.writerow(column_labels)
        writer.writerows(result.rows)
        return buf.getvalue().rstrip("\n")

    def parse(
        self,
        text: str,
        types: Optional[Sequence[Callable[[str], Any]]] = None,
    ) -> tuple[list[str], Rows]:
        reader = csv.reader(io.StringIO(text), delimiter=self._delimiter)
        try:
            labels = next(reader)
        except StopIteration:
            return [], []
        rows = [self._convert(cells, types) for cells in reader]
        return labels, rows
