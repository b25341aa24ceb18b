"""Aggregate state for one analysis run.

AggregateState holds every running aggregate the reports need. It is
owned by a single AggregationEngine while records are ingested; partial
states built from disjoint chunks of the same input are combined with
AggregateState.merge().

Every histogram remembers the input position at which each key was
first seen. Ranked views break count ties by that position, which keeps
the output stable and makes merge order irrelevant:

    >>> a.merge(b).top_urls(3) == b.merge(a).top_urls(3)
    True
"""

import heapq
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional

from logspark.config import DEFAULT_FAILURE_STATUSES
from logspark.records import LogRecord


@dataclass
class Histogram:
    """Key -> count mapping that tracks first-seen input positions."""

    counts: dict[Hashable, int] = field(default_factory=dict)
    first_seen: dict[Hashable, int] = field(default_factory=dict)

    def add(self, key: Hashable, position: int, n: int = 1) -> None:
        self.counts[key] = self.counts.get(key, 0) + n
        seen = self.first_seen.get(key)
        if seen is None or position < seen:
            self.first_seen[key] = position

    def merge(self, other: "Histogram") -> "Histogram":
        """Return a new histogram with counts summed and earliest positions kept."""
        merged = Histogram(dict(self.counts), dict(self.first_seen))
        for key, count in other.counts.items():
            merged.add(key, other.first_seen[key], count)
        return merged

    def total(self) -> int:
        return sum(self.counts.values())

    def _rank_key(self, item: tuple[Hashable, int]) -> tuple:
        key, count = item
        return (-count, self.first_seen[key], key)

    def ranked(self, limit: Optional[int] = None) -> list[tuple[Any, int]]:
        """
        Entries sorted by count descending, ties by first-seen position.

        Args:
            limit: Keep only the first `limit` entries. Uses a bounded
                heap, O(n log k), instead of a full sort.
        """
        items = self.counts.items()
        if limit is not None:
            return heapq.nsmallest(limit, items, key=self._rank_key)
        return sorted(items, key=self._rank_key)

    def ascending(self) -> list[tuple[Any, int]]:
        """Entries sorted by key."""
        return sorted(self.counts.items())

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, key: Hashable) -> bool:
        return key in self.counts


@dataclass
class AggregateState:
    """
    Running aggregates for the six access log reports.

    Attributes:
        failure_statuses: Status codes counted in `failures`.
        total: Number of ingested records.
        skipped: Number of malformed input lines.
        status: status code -> count.
        urls: url -> count.
        agents: user agent -> count.
        failures: ip -> count of requests with a failure status.
        minutes: minute key -> count.
        finalized: True once no more records will be added.
    """

    failure_statuses: frozenset[int] = DEFAULT_FAILURE_STATUSES
    total: int = 0
    skipped: int = 0
    status: Histogram = field(default_factory=Histogram)
    urls: Histogram = field(default_factory=Histogram)
    agents: Histogram = field(default_factory=Histogram)
    failures: Histogram = field(default_factory=Histogram)
    minutes: Histogram = field(default_factory=Histogram)
    finalized: bool = False

    def add(self, record: LogRecord, position: int) -> None:
        """
        Count one record seen at the given input position.

        All keys are derived and hashed before any counter changes, so a
        bad record raises without leaving a partial update behind.
        """
        keys = (record.status, record.url, record.user_agent, record.minute_key)
        failed = record.status in self.failure_statuses
        for key in keys + ((record.ip,) if failed else ()):
            hash(key)

        status, url, agent, minute = keys
        self.total += 1
        self.status.add(status, position)
        self.urls.add(url, position)
        self.agents.add(agent, position)
        self.minutes.add(minute, position)
        if failed:
            self.failures.add(record.ip, position)

    def merge(self, other: "AggregateState") -> "AggregateState":
        """
        Combine two partial states into a new one.

        Neither input is modified. The operation is associative and
        commutative as long as the inputs cover disjoint positions.

        Raises:
            ValueError: If the states count different failure statuses.
        """
        if self.failure_statuses != other.failure_statuses:
            raise ValueError("Cannot merge states with different failure statuses")
        return AggregateState(
            failure_statuses=self.failure_statuses,
            total=self.total + other.total,
            skipped=self.skipped + other.skipped,
            status=self.status.merge(other.status),
            urls=self.urls.merge(other.urls),
            agents=self.agents.merge(other.agents),
            failures=self.failures.merge(other.failures),
            minutes=self.minutes.merge(other.minutes),
            finalized=self.finalized and other.finalized,
        )

    def is_consistent(self) -> bool:
        """Check that the per-status and per-minute counts add up to the total."""
        return self.status.total() == self.total and self.minutes.total() == self.total

    # ---------- Views ----------

    def status_counts(self) -> dict[int, int]:
        return dict(self.status.ascending())

    def top_urls(self, k: int) -> list[tuple[str, int]]:
        if k < 1:
            raise ValueError("k must be >= 1")
        return self.urls.ranked(limit=k)

    def user_agent_counts(self) -> list[tuple[str, int]]:
        return self.agents.ranked()

    def suspicious_ips(self, threshold: int) -> list[tuple[str, int]]:
        # ranked() is sorted by count, so everything above threshold is a prefix
        result = []
        for ip, count in self.failures.ranked():
            if count <= threshold:
                break
            result.append((ip, count))
        return result

    def traffic_per_minute(self) -> list[tuple[str, int]]:
        return self.minutes.ascending()
