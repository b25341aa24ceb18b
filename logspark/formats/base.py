"""Abstract base class for format handlers."""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from logspark.errors import MalformedRecord
from logspark.records import TIMESTAMP_FORMAT, LogRecord

TIMESTAMP_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")
STATUS_PATTERN = re.compile(r"[0-9]{3}")


class FormatHandler(ABC):
    """
    Abstract base class for format handlers.

    Format handlers turn one raw input line into a LogRecord
    for a specific file format (CSV, JSON lines, etc.).
    """

    @abstractmethod
    def parse(self, line: str) -> LogRecord:
        """
        Parse a single input line.

        Args:
            line: Raw line, with or without its trailing newline.

        Returns:
            The parsed LogRecord.

        Raises:
            MalformedRecord: If the line is not a valid record.
        """
        pass

    @abstractmethod
    def is_header(self, line: str) -> bool:
        """
        Return True if the line is a header row.

        Only the first line of an input is ever checked.
        """
        pass

    def build_record(
        self, line: str, ip: Any, timestamp: Any, url: Any, status: Any, user_agent: Any
    ) -> LogRecord:
        """Validate raw field values and build a LogRecord."""
        for name, value in (("ip", ip), ("url", url), ("user_agent", user_agent)):
            if not isinstance(value, str) or not value:
                raise MalformedRecord(f"empty or invalid {name}", line)

        if not isinstance(timestamp, str) or not TIMESTAMP_PATTERN.fullmatch(timestamp):
            raise MalformedRecord("timestamp does not match YYYY-MM-DD HH:MM:SS", line)
        try:
            datetime.strptime(timestamp, TIMESTAMP_FORMAT)
        except ValueError:
            raise MalformedRecord("timestamp is not a valid date and time", line)

        if isinstance(status, bool):
            raise MalformedRecord("status is not an integer", line)
        if isinstance(status, str):
            if not STATUS_PATTERN.fullmatch(status):
                raise MalformedRecord("status is not an integer", line)
            status = int(status)
        elif not isinstance(status, int):
            raise MalformedRecord("status is not an integer", line)
        if not 100 <= status <= 599:
            raise MalformedRecord(f"status {status} out of range 100-599", line)

        return LogRecord(
            ip=ip,
            timestamp=timestamp,
            url=url,
            status=status,
            user_agent=user_agent,
        )


def strip_newline(line: str) -> str:
    """Remove a trailing line terminator, leaving other whitespace alone."""
    return line.rstrip("\r\n")
