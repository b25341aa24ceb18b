"""CSV format handler."""

from logspark.errors import MalformedRecord
from logspark.formats.base import FormatHandler, strip_newline
from logspark.records import FIELDS, LogRecord


class CSVHandler(FormatHandler):
    """
    Format handler for flat CSV access logs.

    Fields are expected in the order ip,timestamp,url,status,user_agent.
    Quoting and embedded delimiters are not supported; such lines
    split into the wrong number of fields and are reported as malformed.
    """

    def __init__(self, delimiter: str = ","):
        """
        Create a CSV format handler.

        Args:
            delimiter: Field delimiter character (default: ",").
        """
        self._delimiter = delimiter
        self._header = delimiter.join(FIELDS)

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def parse(self, line: str) -> LogRecord:
        line = strip_newline(line)
        fields = line.split(self._delimiter)
        if len(fields) != len(FIELDS):
            raise MalformedRecord(
                f"expected {len(FIELDS)} fields, got {len(fields)}", line
            )
        return self.build_record(line, *fields)

    def is_header(self, line: str) -> bool:
        """Return True if the line is exactly the field names."""
        return strip_newline(line) == self._header
