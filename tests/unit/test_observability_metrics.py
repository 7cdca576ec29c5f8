"""Unit tests for Prometheus metrics module."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY, CollectorRegistry

from archivist.observability.metrics import (
    MetricsConfig,
    MetricsManager,
    create_metrics_manager,
    get_metrics,
    observe_sweep,
    record_integrity_check,
    record_transition,
    record_transition_failure,
    record_version_created,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture(autouse=True)
def enabled_metrics():
    manager = create_metrics_manager(MetricsConfig(enabled=True))
    yield manager
    create_metrics_manager(MetricsConfig(enabled=True))


class TestMetricsConfig:
    """Tests for MetricsConfig."""

    def test_default_config(self) -> None:
        config = MetricsConfig()
        assert config.enabled is True
        assert config.prefix == "archivist"

    def test_from_settings(self, test_settings, monkeypatch) -> None:
        monkeypatch.setattr(
            "archivist.observability.metrics.get_settings",
            lambda: test_settings.model_copy(update={"metrics_enabled": False}),
        )
        assert MetricsConfig.from_settings().enabled is False


class TestMetricsManager:
    """Tests for MetricsManager."""

    def test_initialize_once(self) -> None:
        manager = MetricsManager(MetricsConfig(), CollectorRegistry())
        manager.initialize(environment="test")
        assert manager._initialized is True
        manager.initialize(environment="production")
        assert _sample("archivist_service_info", {
            "name": "archivist", "version": "0.1.0", "environment": "test"
        }) == 1.0

    def test_disabled_manager_skips_initialize(self) -> None:
        manager = MetricsManager(MetricsConfig(enabled=False))
        manager.initialize()
        assert manager._initialized is False

    def test_get_metrics_exports_text(self) -> None:
        record_transition("active", "semi_active", "manual")
        output = get_metrics()
        assert b"archivist_transitions_total" in output


class TestRecorders:
    """Tests for the record_* helpers."""

    def test_record_transition(self) -> None:
        labels = {"from_status": "inactive", "to_status": "archived", "trigger": "sweep"}
        before = _sample("archivist_transitions_total", labels)
        record_transition("inactive", "archived", "sweep")
        assert _sample("archivist_transitions_total", labels) == before + 1

    def test_record_transition_failure(self) -> None:
        labels = {"reason": "ApprovalRequiredError"}
        before = _sample("archivist_transition_failures_total", labels)
        record_transition_failure("ApprovalRequiredError")
        assert _sample("archivist_transition_failures_total", labels) == before + 1

    def test_record_version_and_integrity(self) -> None:
        version_before = _sample("archivist_versions_created_total", {"change_type": "minor"})
        invalid_before = _sample("archivist_integrity_checks_total", {"result": "invalid"})
        record_version_created("minor")
        record_integrity_check(False)
        assert (
            _sample("archivist_versions_created_total", {"change_type": "minor"})
            == version_before + 1
        )
        assert (
            _sample("archivist_integrity_checks_total", {"result": "invalid"})
            == invalid_before + 1
        )

    def test_disabled_metrics_not_recorded(self) -> None:
        create_metrics_manager(MetricsConfig(enabled=False))
        labels = {"from_status": "active", "to_status": "archived", "trigger": "manual"}
        before = _sample("archivist_transitions_total", labels)
        record_transition("active", "archived", "manual")
        assert _sample("archivist_transitions_total", labels) == before


class TestObserveSweep:
    """Tests for observe_sweep."""

    def test_counts_run_and_outcomes(self) -> None:
        runs_before = _sample("archivist_sweep_runs_total")
        moved_before = _sample("archivist_sweep_documents_total", {"outcome": "transitioned"})

        with observe_sweep() as ctx:
            ctx["outcomes"] = {"transitioned": 3, "skipped": 0, "failed": 0}

        assert _sample("archivist_sweep_runs_total") == runs_before + 1
        assert (
            _sample("archivist_sweep_documents_total", {"outcome": "transitioned"})
            == moved_before + 3
        )
        assert _sample("archivist_sweep_duration_seconds_count") >= 1

    def test_recorded_when_sweep_raises(self) -> None:
        runs_before = _sample("archivist_sweep_runs_total")
        with pytest.raises(RuntimeError), observe_sweep():
            raise RuntimeError("store offline")
        assert _sample("archivist_sweep_runs_total") == runs_before + 1

    @pytest.mark.asyncio
    async def test_engine_sweep_observed(self, engine) -> None:
        runs_before = _sample("archivist_sweep_runs_total")
        await engine.sweep()
        assert _sample("archivist_sweep_runs_total") == runs_before + 1
