"""Observability module for Archivist.

Usage:
    from archivist.observability import get_metrics, observe_sweep

    with observe_sweep() as ctx:
        report = await engine.sweep()
        ctx["outcomes"] = report.outcome_counts()

    payload = get_metrics()  # Prometheus exposition format
"""

from archivist.observability.metrics import (
    INTEGRITY_CHECKS,
    SWEEP_DOCUMENTS,
    SWEEP_DURATION,
    SWEEP_RUNS,
    TRANSITION_COUNT,
    TRANSITION_FAILURES,
    VERSIONS_CREATED,
    MetricsConfig,
    MetricsManager,
    create_metrics_manager,
    get_metrics,
    get_metrics_manager,
    observe_sweep,
    record_integrity_check,
    record_transition,
    record_transition_failure,
    record_version_created,
)

__all__ = [
    "INTEGRITY_CHECKS",
    "SWEEP_DOCUMENTS",
    "SWEEP_DURATION",
    "SWEEP_RUNS",
    "TRANSITION_COUNT",
    "TRANSITION_FAILURES",
    "VERSIONS_CREATED",
    "MetricsConfig",
    "MetricsManager",
    "create_metrics_manager",
    "get_metrics",
    "get_metrics_manager",
    "observe_sweep",
    "record_integrity_check",
    "record_transition",
    "record_transition_failure",
    "record_version_created",
]
