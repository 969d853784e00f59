# spacetime/utils/metrics.py
from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class SpaceTimeMetrics:
    """
    Prometheus instruments for one foundation instance.

    Every instance owns its CollectorRegistry so independent systems (and
    tests) never share counters through the process-global registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.state_queries = Counter(
            "spacetime_state_queries_total", "State vector queries routed to a provider",
            ["provider", "outcome"], registry=self.registry,
        )
        self.query_failures = Counter(
            "spacetime_query_failures_total", "Failed queries by error code",
            ["code"], registry=self.registry,
        )
        self.boundary_violations = Counter(
            "spacetime_boundary_violations_total", "Unauthorized operations attempted from the presentation layer",
            ["operation"], registry=self.registry,
        )
        self.time_commits = Counter(
            "spacetime_time_commits_total", "Committed simulation time changes",
            ["source"], registry=self.registry,
        )
        self.dropped_ticks = Counter(
            "spacetime_dropped_ticks_total", "Clock ticks dropped at the time bounds",
            registry=self.registry,
        )
        self.subscriber_errors = Counter(
            "spacetime_subscriber_errors_total", "Time subscriber callbacks that raised",
            registry=self.registry,
        )
        self.current_julian_date = Gauge(
            "spacetime_current_julian_date", "Current simulation Julian date",
            registry=self.registry,
        )

    def sample(self, name: str, **labels: str) -> float:
        """Current value of a sample in this registry (0.0 when never observed)."""
        value = self.registry.get_sample_value(name, labels or None)
        return float(value) if value is not None else 0.0

    def export_prometheus(self) -> str:
        return generate_latest(self.registry).decode("utf-8")


__all__ = ["SpaceTimeMetrics"]
