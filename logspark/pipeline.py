"""Pipeline class for building access log analysis runs."""

import logging
import threading
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from functools import reduce
from typing import Any, Iterable, Optional

from logspark.config import AnalysisConfig
from logspark.engine import AggregationEngine
from logspark.errors import MalformedRecord, PartitionOverflow, PipelineAborted
from logspark.formats import get_format_handler
from logspark.partition import PartitionSink, PartitionWriter
from logspark.report import Report, ReportGenerator
from logspark.sources import (
    DEFAULT_CHUNK_SIZE,
    LineSource,
    chunk_lines,
    get_parallel_workers,
    read_lines,
)
from logspark.state import AggregateState

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Outcome of one pipeline run.

    Attributes:
        engine: The finalized aggregation engine.
        report: Rendered reports.
        partitions: Partition key -> rows, or None when partitioning was
            not requested or failed.
        partition_error: The PartitionOverflow that stopped partitioning, if any.
    """

    engine: AggregationEngine
    report: Report
    partitions: Optional[dict[Any, list[tuple]]] = None
    partition_error: Optional[PartitionOverflow] = None


@dataclass
class _ChunkResult:
    state: AggregateState
    writer: Optional[PartitionWriter]
    partition_error: Optional[PartitionOverflow]


def _analyze_lines(
    lines: Iterable[str],
    config: AnalysisConfig,
    offset: int = 0,
    partition: bool = False,
    cancel: Optional[threading.Event] = None,
) -> tuple[AggregationEngine, Optional[PartitionWriter], Optional[PartitionOverflow]]:
    """
    Parse, aggregate and partition a run of input lines.

    Args:
        lines: Input lines.
        config: Run settings.
        offset: 0-based index of the first line in the whole input. The
            header check only applies at offset 0.
        partition: Whether to group records with a PartitionWriter.
        cancel: Checked before each line.

    Returns:
        (engine, writer, partition_error). The engine is finalized. The
        writer is None when partitioning was off or overflowed.
    """
    handler = get_format_handler(config.format, delimiter=config.delimiter)
    engine = AggregationEngine(config, base_position=offset)
    writer = (
        PartitionWriter(config.partition_column, config.max_partitions)
        if partition
        else None
    )
    partition_error = None

    for index, line in enumerate(lines):
        if cancel is not None and cancel.is_set():
            logger.warning("Run cancelled at line %d", offset + index + 1)
            raise PipelineAborted("Run cancelled")

        if index == 0 and offset == 0 and handler.is_header(line):
            continue

        try:
            record = handler.parse(line)
        except MalformedRecord as e:
            engine.skip(e.at(offset + index + 1))
            continue

        engine.ingest(record)
        if writer is not None:
            try:
                writer.add(record)
            except PartitionOverflow as e:
                logger.warning("Partitioning stopped: %s", e)
                partition_error = e
                writer = None

    engine.finalize()
    return engine, writer, partition_error


def _analyze_chunk(args: tuple) -> _ChunkResult:
    """Worker entry point for parallel runs."""
    lines, config, offset, partition = args
    engine, writer, partition_error = _analyze_lines(lines, config, offset, partition)
    return _ChunkResult(engine.state, writer, partition_error)


class Pipeline:
    """
    Builder class for access log analysis runs.

    Example:
        >>> result = (
        ...     Pipeline("access_log.csv")
        ...     .parse("csv")
        ...     .top_k(5)
        ...     .failure_threshold(10)
        ...     .partition_by("status", sink=DirectorySink("out/"))
        ...     .run()
        ... )
        >>> print(result.report.to_text())
    """

    def __init__(self, source: LineSource, format: str = "csv"):
        """
        Create a new Pipeline reading from a file or iterable of lines.

        Args:
            source: Path to the input file, or an iterable of lines.
            format: Input format (csv, json). Default is csv.
        """
        self._source = source
        self._config = AnalysisConfig(format=format)
        self._partition = False
        self._sink: Optional[PartitionSink] = None

    def _update(self, **changes) -> "Pipeline":
        # AnalysisConfig validates on construction
        self._config = replace(self._config, **changes)
        return self

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def parse(self, format: str = "csv", delimiter: str = ",") -> "Pipeline":
        """
        Set the input format.

        Args:
            format: Input format ("csv", "json"). Default is "csv".
            delimiter: Field delimiter for CSV format. Default is ",".

        Returns:
            Self for method chaining.
        """
        get_format_handler(format, delimiter=delimiter)
        return self._update(format=format.lower(), delimiter=delimiter)

    def top_k(self, k: int) -> "Pipeline":
        """Number of URLs in the top-URL report. Must be >= 1."""
        return self._update(top_k=k)

    def failure_threshold(self, threshold: int) -> "Pipeline":
        """Report IPs with strictly more failed requests than this."""
        return self._update(failure_threshold=threshold)

    def failure_statuses(self, *statuses: int) -> "Pipeline":
        """
        Status codes counted as failed requests.

        Example:
            >>> Pipeline("access.csv").failure_statuses(401, 403, 404, 500)
        """
        if not statuses:
            raise ValueError("failure_statuses() requires at least one status")
        return self._update(failure_statuses=frozenset(statuses))

    def max_partitions(self, limit: int) -> "Pipeline":
        """Maximum number of distinct partition keys."""
        return self._update(max_partitions=limit)

    def partition_by(
        self, column: str = "status", sink: Optional[PartitionSink] = None
    ) -> "Pipeline":
        """
        Group records into partitions by a column.

        Args:
            column: LogRecord field to partition by. Default is "status".
            sink: Optional sink receiving each finalized partition.

        Returns:
            Self for method chaining.
        """
        self._update(partition_column=column)
        self._partition = True
        self._sink = sink
        return self

    def _finish(
        self,
        engine: AggregationEngine,
        writer: Optional[PartitionWriter],
        partition_error: Optional[PartitionOverflow],
    ) -> AnalysisResult:
        report = ReportGenerator(self._config).render(engine)
        partitions = None
        if writer is not None:
            if self._sink is not None:
                partitions = writer.write(self._sink)
            else:
                partitions = writer.finalize()
        return AnalysisResult(engine, report, partitions, partition_error)

    def run(self, cancel: Optional[threading.Event] = None) -> AnalysisResult:
        """
        Execute the pipeline in this process.

        Args:
            cancel: Optional event; setting it aborts the run before the
                next line.

        Returns:
            AnalysisResult with engine, report and partitions.

        Raises:
            PipelineAborted: If cancel was set during the run.
            OSError: If the input file cannot be read.
        """
        engine, writer, partition_error = _analyze_lines(
            read_lines(self._source), self._config, 0, self._partition, cancel
        )
        return self._finish(engine, writer, partition_error)

    def run_parallel(
        self, workers: Optional[int] = None, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> AnalysisResult:
        """
        Execute the pipeline across worker processes.

        The input is cut into consecutive line chunks; each chunk gets its
        own engine and the partial states are merged in chunk order. The
        result is identical to run().

        Args:
            workers: Number of worker processes. Default is CPU count.
            chunk_size: Lines per chunk.

        Returns:
            AnalysisResult with engine, report and partitions.
        """
        workers = get_parallel_workers(workers)
        chunks = [
            (lines, self._config, offset, self._partition)
            for offset, lines in chunk_lines(read_lines(self._source), chunk_size)
        ]
        logger.info("Analyzing %d chunks with %d workers", len(chunks), workers)

        if not chunks:
            return self._finish(*_analyze_lines([], self._config, 0, self._partition))

        with ProcessPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(_analyze_chunk, chunks))

        state = reduce(AggregateState.merge, (r.state for r in results))
        engine = AggregationEngine.from_state(state, self._config)

        writer = None
        partition_error = next(
            (r.partition_error for r in results if r.partition_error is not None),
            None,
        )
        if self._partition and partition_error is None:
            writer = PartitionWriter(
                self._config.partition_column, self._config.max_partitions
            )
            try:
                for r in results:
                    writer.merge(r.writer)
            except PartitionOverflow as e:
                logger.warning("Partitioning stopped: %s", e)
                partition_error = e
                writer = None
        elif partition_error is not None:
            logger.warning("Partitioning stopped: %s", partition_error)

        return self._finish(engine, writer, partition_error)
