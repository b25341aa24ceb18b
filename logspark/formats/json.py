"""JSON lines format handler."""

import json

from logspark.errors import MalformedRecord
from logspark.formats.base import FormatHandler, strip_newline
from logspark.records import FIELDS, LogRecord


class JSONHandler(FormatHandler):
    """
    Format handler for newline-delimited JSON access logs.

    Each line is one object carrying the five LogRecord keys.
    Extra keys are ignored. JSON lines have no header row.
    """

    def parse(self, line: str) -> LogRecord:
        line = strip_newline(line)
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            raise MalformedRecord("invalid JSON", line)
        if not isinstance(obj, dict):
            raise MalformedRecord("expected a JSON object", line)

        missing = [f for f in FIELDS if f not in obj]
        if missing:
            raise MalformedRecord(f"missing fields: {', '.join(missing)}", line)

        return self.build_record(line, *(obj[f] for f in FIELDS))

    def is_header(self, line: str) -> bool:
        return False
