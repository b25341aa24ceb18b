"""LogSpark - Aggregate web access logs into summary reports and partitions."""

from logspark.pipeline import AnalysisResult, Pipeline
from logspark.config import AnalysisConfig
from logspark.records import FIELDS, LogRecord, minute_key
from logspark.engine import AggregationEngine, EngineStatus
from logspark.state import AggregateState, Histogram
from logspark.partition import (
    DirectorySink,
    MemorySink,
    PartitionSink,
    PartitionWriter,
)
from logspark.report import Report, ReportGenerator
from logspark.formats import CSVHandler, JSONHandler, get_format_handler
from logspark.errors import (
    EngineFinalized,
    EngineNotFinalized,
    LogSparkError,
    MalformedRecord,
    PartitionOverflow,
    PipelineAborted,
)

__version__ = "0.1.0"
__all__ = [
    "Pipeline",
    "AnalysisResult",
    "AnalysisConfig",
    # Records
    "FIELDS",
    "LogRecord",
    "minute_key",
    # Parsing
    "CSVHandler",
    "JSONHandler",
    "get_format_handler",
    # Aggregation
    "AggregationEngine",
    "EngineStatus",
    "AggregateState",
    "Histogram",
    # Partitioning
    "PartitionWriter",
    "PartitionSink",
    "MemorySink",
    "DirectorySink",
    # Reports
    "Report",
    "ReportGenerator",
    # Errors
    "LogSparkError",
    "MalformedRecord",
    "EngineFinalized",
    "EngineNotFinalized",
    "PartitionOverflow",
    "PipelineAborted",
]
