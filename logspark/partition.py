"""Partitioned output for access log records.

PartitionWriter groups records by the value of one column (the status
code by default), the way Hive's dynamic partitioning does. The
partition column is dropped from the stored rows since its value is
carried by the partition key itself.

Durable storage is left to a PartitionSink, which receives one call per
partition once the run is complete.
"""

import csv
import logging
import os
from typing import Any, Optional, Protocol
from urllib.parse import quote

from logspark.config import DEFAULT_MAX_PARTITIONS
from logspark.errors import EngineFinalized, PartitionOverflow
from logspark.records import FIELDS, LogRecord

logger = logging.getLogger(__name__)


class PartitionSink(Protocol):
    """Destination for finalized partitions."""

    def write(self, key: Any, columns: tuple[str, ...], rows: list[tuple]) -> None:
        ...


class PartitionWriter:
    """Groups records into partitions keyed by one column."""

    def __init__(
        self, column: str = "status", max_partitions: int = DEFAULT_MAX_PARTITIONS
    ):
        """
        Create a partition writer.

        Args:
            column: LogRecord field to partition by.
            max_partitions: Maximum number of distinct keys before
                PartitionOverflow is raised.

        Raises:
            ValueError: If column is unknown or max_partitions < 1.
        """
        if column not in FIELDS:
            raise ValueError(
                f"Unknown partition column '{column}'. Supported: {', '.join(FIELDS)}"
            )
        if max_partitions < 1:
            raise ValueError("max_partitions must be >= 1")
        self.column = column
        self.max_partitions = max_partitions
        # Insertion order is first-seen order of each key
        self._partitions: dict[Any, list[tuple]] = {}
        self._finalized = False

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names of stored rows."""
        return tuple(f for f in FIELDS if f != self.column)

    def assign(self, record: LogRecord) -> Any:
        """Return the partition key for a record."""
        return record.get(self.column)

    def _partition_for(self, key: Any) -> list[tuple]:
        rows = self._partitions.get(key)
        if rows is None:
            if len(self._partitions) >= self.max_partitions:
                raise PartitionOverflow(self.max_partitions, key)
            rows = self._partitions[key] = []
        return rows

    def add(self, record: LogRecord) -> Any:
        """
        Append a record to its partition, creating the partition if needed.

        Returns:
            The partition key.

        Raises:
            PartitionOverflow: If a new key would exceed max_partitions.
            EngineFinalized: If finalize() was already called.
        """
        if self._finalized:
            raise EngineFinalized("Cannot add records to a finalized partition writer")
        key = self.assign(record)
        self._partition_for(key).append(record.row(exclude=(self.column,)))
        return key

    def merge(self, other: "PartitionWriter") -> "PartitionWriter":
        """
        Append another writer's partitions to this one, in place.

        Used to combine chunk-local writers; merge them in chunk order to
        keep rows in input order.

        Raises:
            ValueError: If the writers partition by different columns.
            PartitionOverflow: If the combined keys exceed max_partitions.
        """
        if other.column != self.column:
            raise ValueError("Cannot merge writers partitioned by different columns")
        if self._finalized:
            raise EngineFinalized("Cannot merge into a finalized partition writer")
        for key, rows in other._partitions.items():
            self._partition_for(key).extend(rows)
        return self

    def finalize(self) -> dict[Any, list[tuple]]:
        """Return partition key -> rows, keys in first-seen order."""
        self._finalized = True
        return {key: list(rows) for key, rows in self._partitions.items()}

    def write(self, sink: PartitionSink) -> dict[Any, list[tuple]]:
        """Finalize and hand every partition to the sink."""
        partitions = self.finalize()
        for key, rows in partitions.items():
            sink.write(key, self.columns, rows)
        logger.info("Wrote %d partitions by %s", len(partitions), self.column)
        return partitions

    def __len__(self) -> int:
        return len(self._partitions)


class MemorySink:
    """Sink that keeps partitions in a dict, mainly for tests."""

    def __init__(self):
        self.partitions: dict[Any, list[tuple]] = {}
        self.columns: Optional[tuple[str, ...]] = None

    def write(self, key: Any, columns: tuple[str, ...], rows: list[tuple]) -> None:
        self.columns = columns
        self.partitions[key] = list(rows)


class DirectorySink:
    """
    Sink that writes Hive-style partition directories.

    Layout:
        <root>/<column>=<key>/part-00000.csv
    """

    def __init__(
        self,
        root: str,
        column: str = "status",
        delimiter: str = ",",
        header: bool = False,
    ):
        """
        Create a directory sink.

        Args:
            root: Output directory. Created if missing.
            column: Partition column name used in directory names.
            delimiter: Field delimiter for the CSV files.
            header: Whether to write a header row (Hive text tables have none).
        """
        self.root = root
        self.column = column
        self.delimiter = delimiter
        self.header = header

    def partition_path(self, key: Any) -> str:
        # Keys are percent-escaped, as Hive does for "/" and ":"
        dirname = f"{self.column}={quote(str(key), safe='')}"
        return os.path.join(self.root, dirname, "part-00000.csv")

    def write(self, key: Any, columns: tuple[str, ...], rows: list[tuple]) -> None:
        path = self.partition_path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", newline="") as f:
            writer = csv.writer(f, delimiter=self.delimiter)
            if self.header:
                writer.writerow(columns)
            writer.writerows(rows)
        logger.debug("Wrote %d rows to %s", len(rows), path)
