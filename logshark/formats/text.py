"""Padded plain-text table formatter."""

from typing import Any, Callable, Optional, Sequence

from logshark.aggregations import AggregationResult
from logshark.formats.base import ReportFormatter, Rows

COLUMN_SEPARATOR = " | "
# Lines are right-stripped, so a trailing empty cell leaves only " |".
_SPLIT = COLUMN_SEPARATOR.rstrip()


class TextTableFormatter(ReportFormatter):
    """
    Render results as an aligned text table.

    Each column is padded to its widest cell, header included:

        path        | hits
        ------------+-----
        /index.html | 4
        /login      | 2
    """

    extension = "txt"

    def format(self, result: AggregationResult, column_labels: Sequence[str]) -> str:
        self.check_schema(result, column_labels)

        header = [str(label) for label in column_labels]
        body = [[str(cell) for cell in row] for row in result.rows]
        widths = [
            max([len(header[i])] + [len(row[i]) for row in body])
            for i in range(len(header))
        ]

        lines = [self._render(header, widths)]
        lines.append("-+-".join("-" * w for w in widths))
        lines.extend(self._render(row, widths) for row in body)
        return "\n".join(lines)

    def _render(self, cells: list[str], widths: list[int]) -> str:
        padded = [cell.ljust(width) for cell, width in zip(cells, widths)]
        return COLUMN_SEPARATOR.join(padded).rstrip()

    def parse(
        self,
        text: str,
        types: Optional[Sequence[Callable[[str], Any]]] = None,
    ) -> tuple[list[str], Rows]:
        """
        Parse a table produced by format().

        Rows are split from the right: only the leading key column holds
        free text, so a key may itself contain " | ". Cell values are
        stripped of padding, so leading or trailing spaces inside a value
        do not survive. Integer-looking cells come back as int unless
        types says otherwise.
        """
        lines = text.split("\n")
        if not lines or not lines[0].strip():
            return [], []

        labels = [cell.strip() for cell in lines[0].split(_SPLIT)]
        rows: Rows = []
        # lines[1] is the rule under the header
        for line in lines[2:]:
            if not line.strip():
                continue
            cells = line.rsplit(_SPLIT, len(labels) - 1)
            cells = [cell.strip() for cell in cells]
            cells += [""] * (len(labels) - len(cells))
            rows.append(self._convert(cells, types))
        return labels, rows
