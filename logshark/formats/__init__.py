"""Report formatters for aggregation results."""

from logshark.formats.base import ReportFormatter
from logshark.formats.csv import CSVFormatter
from logshark.formats.text import TextTableFormatter

__all__ = ["ReportFormatter", "CSVFormatter", "TextTableFormatter", "get_formatter"]


def get_formatter(format_name: str, **kwargs) -> ReportFormatter:
    """
    Factory function to create report formatters.

    Args:
        format_name: Format name ("text", "csv").
        **kwargs: Format-specific options.
            For CSV: delimiter (str).

    Returns:
        ReportFormatter instance for the specified format.

    Raises:
        ValueError: If format is unknown.
    """
    format_name = format_name.lower()

    if format_name == "csv":
        delimiter = kwargs.get("delimiter", ",")
        return CSVFormatter(delimiter=delimiter)
    elif format_name == "text":
        return TextTableFormatter()
    else:
        raise ValueError(
            f"Unknown format: {format_name}. Supported formats: csv, text"
        )
