"""Record types for LogSpark."""

from dataclasses import dataclass

# Column order of the access log (and of the header line, when present)
FIELDS: tuple[str, ...] = ("ip", "timestamp", "url", "status", "user_agent")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Length of "YYYY-MM-DD HH:MM"
MINUTE_KEY_LENGTH = 16


@dataclass(frozen=True)
class LogRecord:
    """One parsed web access log entry."""

    ip: str
    timestamp: str  # YYYY-MM-DD HH:MM:SS
    url: str
    status: int
    user_agent: str

    @property
    def minute_key(self) -> str:
        """Timestamp truncated to minute resolution."""
        return minute_key(self.timestamp)

    def get(self, column: str):
        """
        Return the value of a column by name.

        Raises:
            ValueError: If column is not a LogRecord field.
        """
        if column not in FIELDS:
            raise ValueError(
                f"Unknown column '{column}'. Supported: {', '.join(FIELDS)}"
            )
        return getattr(self, column)

    def row(self, exclude: tuple[str, ...] = ()) -> tuple:
        """Return field values in column order, skipping excluded columns."""
        return tuple(getattr(self, f) for f in FIELDS if f not in exclude)


def minute_key(timestamp: str) -> str:
    """
    Truncate a timestamp to its minute key.

    This is a plain prefix cut, not a time computation:

        >>> minute_key("2024-02-17 10:01:59")
        '2024-02-17 10:01'
    """
    return timestamp[:MINUTE_KEY_LENGTH]
