"""Text rendering of the access log reports."""

from dataclasses import dataclass
from typing import Optional, Union

from logspark.config import AnalysisConfig
from logspark.engine import AggregationEngine
from logspark.errors import EngineNotFinalized
from logspark.state import AggregateState

REPORT_NAMES = (
    "total_requests",
    "status_counts",
    "top_urls",
    "user_agents",
    "suspicious_ips",
    "traffic_per_minute",
)


@dataclass(frozen=True)
class Report:
    """The six rendered reports plus the skipped-line count."""

    total_requests: str
    status_counts: str
    top_urls: str
    user_agents: str
    suspicious_ips: str
    traffic_per_minute: str
    skipped_lines: int = 0

    @property
    def blocks(self) -> tuple[str, ...]:
        return tuple(getattr(self, name) for name in REPORT_NAMES)

    def to_text(self) -> str:
        """All reports separated by blank lines, then the skipped-line footer."""
        return "\n\n".join(self.blocks + (f"Skipped Lines: {self.skipped_lines}",))


def _lines(pairs, suffix: str = "") -> str:
    return "\n".join(f"{key}: {count}{suffix}" for key, count in pairs)


class ReportGenerator:
    """Renders a finalized AggregateState as text."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def render(self, source: Union[AggregateState, AggregationEngine]) -> Report:
        """
        Render the six reports.

        Args:
            source: A finalized state, or a finalized engine.

        Raises:
            EngineNotFinalized: If the state is still being built.
        """
        state = source.state if isinstance(source, AggregationEngine) else source
        if not state.finalized:
            raise EngineNotFinalized("Cannot render a report before finalize()")

        return Report(
            total_requests=f"Total Requests: {state.total}",
            status_counts=_lines(state.status_counts().items()),
            top_urls=_lines(state.top_urls(self.config.top_k)),
            user_agents=_lines(state.user_agent_counts()),
            suspicious_ips=_lines(
                state.suspicious_ips(self.config.failure_threshold), " failed requests"
            ),
            traffic_per_minute=_lines(state.traffic_per_minute(), " requests"),
            skipped_lines=state.skipped,
        )
