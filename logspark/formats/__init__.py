"""Format handlers for different input types."""

from logspark.formats.base import FormatHandler
from logspark.formats.csv import CSVHandler
from logspark.formats.json import JSONHandler

__all__ = ["FormatHandler", "CSVHandler", "JSONHandler", "get_format_handler"]


def get_format_handler(format_name: str, **kwargs) -> FormatHandler:
    """
    Factory function to create format handlers.

    Args:
        format_name: Format name ("csv", "json").
        **kwargs: Format-specific options.
            For CSV: delimiter (str).

    Returns:
        FormatHandler instance for the specified format.

    Raises:
        ValueError: If format is unknown.
    """
    format_name = format_name.lower()

    if format_name == "csv":
        delimiter = kwargs.get("delimiter", ",")
        return CSVHandler(delimiter=delimiter)
    elif format_name == "json":
        return JSONHandler()
    else:
        raise ValueError(
            f"Unknown format: {format_name}. Supported formats: csv, json"
        )
