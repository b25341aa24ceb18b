"""Run configuration."""

from dataclasses import dataclass, field

from logspark.records import FIELDS

DEFAULT_TOP_K = 3
DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_FAILURE_STATUSES = frozenset({404, 500})
DEFAULT_MAX_PARTITIONS = 1000


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Settings for one analysis run.

    Attributes:
        top_k: Number of URLs in the top-URL report.
        failure_threshold: An IP is suspicious when its failure count is
            strictly greater than this.
        failure_statuses: Status codes counted as failures.
        max_partitions: Maximum number of distinct partition keys.
        partition_column: LogRecord field used as the partition key.
        format: Input format name ("csv", "json").
        delimiter: Field delimiter for CSV input.
    """

    top_k: int = DEFAULT_TOP_K
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    failure_statuses: frozenset[int] = field(
        default_factory=lambda: DEFAULT_FAILURE_STATUSES
    )
    max_partitions: int = DEFAULT_MAX_PARTITIONS
    partition_column: str = "status"
    format: str = "csv"
    delimiter: str = ","

    def __post_init__(self):
        if self.top_k < 1:
            raise ValueError("top_k must be >= 1")
        if self.failure_threshold < 0:
            raise ValueError("failure_threshold must be >= 0")
        if not self.failure_statuses:
            raise ValueError("failure_statuses must not be empty")
        # Normalise lists/sets passed by callers
        object.__setattr__(self, "failure_statuses", frozenset(self.failure_statuses))
        for status in self.failure_statuses:
            if not 100 <= status <= 599:
                raise ValueError(f"Invalid failure status: {status}")
        if self.max_partitions < 1:
            raise ValueError("max_partitions must be >= 1")
        if self.partition_column not in FIELDS:
            raise ValueError(
                f"Unknown partition column '{self.partition_column}'. "
                f"Supported: {', '.join(FIELDS)}"
            )
        if len(self.delimiter) != 1:
            raise ValueError("delimiter must be a single character")
