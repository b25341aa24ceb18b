"""Exceptions raised by LogSpark."""

from typing import Optional


class LogSparkError(Exception):
    """Base class for all LogSpark errors."""


class MalformedRecord(LogSparkError):
    """
    An input line could not be parsed into a LogRecord.

    Attributes:
        reason: Short description of what was wrong.
        line: The offending input line.
        line_no: 1-based input line number, if known.
    """

    def __init__(self, reason: str, line: str, line_no: Optional[int] = None):
        self.reason = reason
        self.line = line
        self.line_no = line_no
        location = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{location}{reason}: {line!r}")

    def __reduce__(self):
        return (MalformedRecord, (self.reason, self.line, self.line_no))

    def at(self, line_no: int) -> "MalformedRecord":
        """Return a copy of this error tagged with an input line number."""
        return MalformedRecord(self.reason, self.line, line_no)


class EngineFinalized(LogSparkError):
    """Records were submitted after the run was finalized."""


class EngineNotFinalized(LogSparkError):
    """Results were requested before the run was finalized."""


class PartitionOverflow(LogSparkError):
    """
    Too many distinct partition keys.

    Usually means the data was partitioned by a high-cardinality
    column such as ip or timestamp.
    """

    def __init__(self, limit: int, key):
        self.limit = limit
        self.key = key
        super().__init__(
            f"Partition key {key!r} would exceed the limit of {limit} partitions"
        )

    def __reduce__(self):
        return (PartitionOverflow, (self.limit, self.key))


class PipelineAborted(LogSparkError):
    """The run was cancelled between records."""
