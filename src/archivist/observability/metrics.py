"""Prometheus metrics for Archivist observability.

This module provides Prometheus metrics for monitoring:
- Status transitions (manual and automatic) and their failures
- Version ledger activity and integrity checks
- Retention sweep runs (duration, per-document outcomes)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

from archivist.config.settings import get_settings

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "MetricsConfig",
    "MetricsManager",
    "TRANSITION_COUNT",
    "TRANSITION_FAILURES",
    "VERSIONS_CREATED",
    "INTEGRITY_CHECKS",
    "SWEEP_RUNS",
    "SWEEP_DURATION",
    "SWEEP_DOCUMENTS",
    "record_transition",
    "record_transition_failure",
    "record_version_created",
    "record_integrity_check",
    "observe_sweep",
    "get_metrics",
    "create_metrics_manager",
    "get_metrics_manager",
]


@dataclass
class MetricsConfig:
    """Configuration for Prometheus metrics.

    Attributes:
        enabled: Whether metrics are recorded.
        prefix: Prefix for all metric names.
    """

    enabled: bool = True
    prefix: str = "archivist"

    @classmethod
    def from_settings(cls) -> MetricsConfig:
        """Create configuration from application settings."""
        return cls(enabled=get_settings().metrics_enabled)


# Default configuration
_config = MetricsConfig()

# ============================================================================
# Transition Metrics
# ============================================================================

TRANSITION_COUNT = Counter(
    f"{_config.prefix}_transitions_total",
    "Total number of committed status transitions",
    ["from_status", "to_status", "trigger"],
)

TRANSITION_FAILURES = Counter(
    f"{_config.prefix}_transition_failures_total",
    "Total number of rejected transition requests",
    ["reason"],
)

# ============================================================================
# Version Ledger Metrics
# ============================================================================

VERSIONS_CREATED = Counter(
    f"{_config.prefix}_versions_created_total",
    "Total number of document versions created",
    ["change_type"],
)

INTEGRITY_CHECKS = Counter(
    f"{_config.prefix}_integrity_checks_total",
    "Total number of version integrity checks",
    ["result"],
)

# ============================================================================
# Sweep Metrics
# ============================================================================

SWEEP_RUNS = Counter(
    f"{_config.prefix}_sweep_runs_total",
    "Total number of retention sweep runs",
)

SWEEP_DURATION = Histogram(
    f"{_config.prefix}_sweep_duration_seconds",
    "Time to complete a retention sweep",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
)

SWEEP_DOCUMENTS = Counter(
    f"{_config.prefix}_sweep_documents_total",
    "Documents examined by retention sweeps",
    ["outcome"],
)

# Service info
SERVICE_INFO = Info(
    f"{_config.prefix}_service",
    "Service information",
)


class MetricsManager:
    """Manages Prometheus metrics configuration and export."""

    def __init__(
        self,
        config: MetricsConfig | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.config = config or MetricsConfig()
        self.registry = registry or REGISTRY
        self._initialized = False

    def initialize(
        self,
        service_name: str = "archivist",
        service_version: str = "0.1.0",
        environment: str = "development",
    ) -> None:
        """Publish service information once."""
        if self._initialized or not self.config.enabled:
            return

        SERVICE_INFO.info(
            {
                "name": service_name,
                "version": service_version,
                "environment": environment,
            }
        )
        self._initialized = True

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def get_metrics(self) -> bytes:
        """Generate metrics output in Prometheus format."""
        return generate_latest(self.registry)


# Global metrics manager
_metrics_manager: MetricsManager | None = None


def get_metrics_manager() -> MetricsManager:
    """Get the global metrics manager instance."""
    global _metrics_manager
    if _metrics_manager is None:
        _metrics_manager = MetricsManager(MetricsConfig.from_settings())
    return _metrics_manager


def create_metrics_manager(
    config: MetricsConfig | None = None,
    registry: CollectorRegistry | None = None,
) -> MetricsManager:
    """Create and register a new metrics manager.

    Args:
        config: Optional metrics configuration.
        registry: Optional custom registry.

    Returns:
        The configured MetricsManager instance.
    """
    global _metrics_manager
    _metrics_manager = MetricsManager(config, registry)
    return _metrics_manager


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return get_metrics_manager().get_metrics()


# ============================================================================
# Convenience Functions for Recording Metrics
# ============================================================================


def record_transition(from_status: str, to_status: str, trigger: str) -> None:
    """Record a committed transition.

    Args:
        from_status: Status before the transition.
        to_status: Status after the transition.
        trigger: "manual" or "sweep".
    """
    if get_metrics_manager().enabled:
        TRANSITION_COUNT.labels(
            from_status=from_status, to_status=to_status, trigger=trigger
        ).inc()


def record_transition_failure(reason: str) -> None:
    """Record a rejected transition, labelled by error class."""
    if get_metrics_manager().enabled:
        TRANSITION_FAILURES.labels(reason=reason).inc()


def record_version_created(change_type: str) -> None:
    if get_metrics_manager().enabled:
        VERSIONS_CREATED.labels(change_type=change_type).inc()


def record_integrity_check(valid: bool) -> None:
    if get_metrics_manager().enabled:
        INTEGRITY_CHECKS.labels(result="valid" if valid else "invalid").inc()


@contextmanager
def observe_sweep() -> Generator[dict[str, Any], None, None]:
    """Context manager for observing a retention sweep.

    Yields:
        Context dict; set "outcomes" to a mapping of outcome -> count.
    """
    context: dict[str, Any] = {"outcomes": {}}
    start_time = time.perf_counter()

    try:
        yield context
    finally:
        if get_metrics_manager().enabled:
            SWEEP_RUNS.inc()
            SWEEP_DURATION.observe(time.perf_counter() - start_time)
            for outcome, count in context.get("outcomes", {}).items():
                if count:
                    SWEEP_DOCUMENTS.labels(outcome=outcome).inc(count)
