"""Aggregation engine for access log records."""

import logging
import threading
from enum import Enum, auto
from typing import Iterable, Optional

from logspark.config import AnalysisConfig
from logspark.errors import (
    EngineFinalized,
    EngineNotFinalized,
    MalformedRecord,
    PipelineAborted,
)
from logspark.records import LogRecord
from logspark.state import AggregateState

logger = logging.getLogger(__name__)


class EngineStatus(Enum):
    """Lifecycle of an AggregationEngine.

    Attributes:
        EMPTY: Nothing ingested yet.
        INGESTING: At least one record or skipped line seen.
        FINALIZED: Results are available; no more input accepted.
    """

    EMPTY = auto()
    INGESTING = auto()
    FINALIZED = auto()


class AggregationEngine:
    """
    Consumes LogRecords and maintains the running aggregates for one run.

    Example:
        >>> engine = AggregationEngine()
        >>> for record in records:
        ...     engine.ingest(record)
        >>> engine.finalize()
        >>> engine.top_urls(3)
        [('/home', 2), ('/products', 2), ('/checkout', 1)]
    """

    def __init__(
        self, config: Optional[AnalysisConfig] = None, base_position: int = 0
    ):
        """
        Create an engine.

        Args:
            config: Run settings. Defaults to AnalysisConfig().
            base_position: Input position of the first record this engine
                sees. Engines working on separate chunks of one input use
                the chunk offset so first-seen ties survive a merge.
        """
        self.config = config or AnalysisConfig()
        self._state = AggregateState(failure_statuses=self.config.failure_statuses)
        self._position = base_position
        self._status = EngineStatus.EMPTY

    @classmethod
    def from_state(
        cls, state: AggregateState, config: Optional[AnalysisConfig] = None
    ) -> "AggregationEngine":
        """Wrap an already complete (e.g. merged) state in a finalized engine."""
        engine = cls(config)
        if state.failure_statuses != engine.config.failure_statuses:
            raise ValueError("State and config count different failure statuses")
        engine._state = state
        engine.finalize()
        return engine

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def finalized(self) -> bool:
        return self._status is EngineStatus.FINALIZED

    def _check_open(self) -> None:
        if self.finalized:
            raise EngineFinalized("Cannot add input to a finalized engine")
        self._status = EngineStatus.INGESTING

    def _check_finalized(self) -> None:
        if not self.finalized:
            raise EngineNotFinalized("Call finalize() before reading results")

    def ingest(self, record: LogRecord) -> None:
        """
        Add one record to every aggregate.

        Raises:
            EngineFinalized: If finalize() was already called.
        """
        self._check_open()
        self._state.add(record, self._position)
        self._position += 1

    def skip(self, error: MalformedRecord) -> None:
        """
        Count one malformed input line.

        Raises:
            EngineFinalized: If finalize() was already called.
        """
        self._check_open()
        logger.debug("Skipping malformed record: %s", error)
        self._state.skipped += 1
        self._position += 1

    def ingest_all(
        self,
        records: Iterable[LogRecord],
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Ingest a stream of records.

        Args:
            records: Records to ingest.
            cancel: Checked before each record; when set the run stops.

        Raises:
            PipelineAborted: If cancel was set. Partial state is left as-is
                and should be discarded with the run.
        """
        for record in records:
            if cancel is not None and cancel.is_set():
                raise PipelineAborted("Run cancelled")
            self.ingest(record)

    def finalize(self) -> None:
        """Stop accepting input and make results available."""
        if self.finalized:
            return
        self._status = EngineStatus.FINALIZED
        self._state.finalized = True
        logger.info(
            "Finalized run: %d records, %d skipped",
            self._state.total,
            self._state.skipped,
        )

    # ---------- Results ----------

    @property
    def state(self) -> AggregateState:
        """The finalized aggregate state."""
        self._check_finalized()
        return self._state

    def total_requests(self) -> int:
        self._check_finalized()
        return self._state.total

    def skipped_lines(self) -> int:
        self._check_finalized()
        return self._state.skipped

    def status_counts(self) -> dict[int, int]:
        self._check_finalized()
        return self._state.status_counts()

    def top_urls(self, k: Optional[int] = None) -> list[tuple[str, int]]:
        """Most visited URLs, count descending, ties in first-seen order."""
        self._check_finalized()
        return self._state.top_urls(self.config.top_k if k is None else k)

    def user_agent_counts(self) -> list[tuple[str, int]]:
        self._check_finalized()
        return self._state.user_agent_counts()

    def suspicious_ips(self, threshold: Optional[int] = None) -> list[tuple[str, int]]:
        """IPs whose failure count is strictly greater than threshold."""
        self._check_finalized()
        if threshold is None:
            threshold = self.config.failure_threshold
        return self._state.suspicious_ips(threshold)

    def traffic_per_minute(self) -> list[tuple[str, int]]:
        self._check_finalized()
        return self._state.traffic_per_minute()
