"""Unit tests for the models module.

Tests scale targets, probe results, the observed identity set, the tagged
wait and sampling outcomes, and scenario reports.
"""

import pytest
from pydantic import ValidationError

from scaling_verifier.exceptions import SamplingTimeoutError, WaitTimeoutError
from scaling_verifier.models import (
    ObservedIdentitySet,
    ProbeResult,
    SamplingOutcome,
    ScaleTarget,
    ScenarioReport,
    WaitOutcome,
    WorkloadKind,
)


class TestScaleTarget:
    """Tests for the ScaleTarget model."""

    def test_defaults(self) -> None:
        target = ScaleTarget(name="scaling-app")
        assert target.namespace == "default"
        assert target.kind is WorkloadKind.DEPLOYMENT

    def test_kind_from_string(self) -> None:
        target = ScaleTarget(name="scaling-app", kind="deploymentconfig")
        assert target.kind is WorkloadKind.DEPLOYMENT_CONFIG

    def test_str(self) -> None:
        target = ScaleTarget(name="db", namespace="data", kind=WorkloadKind.STATEFUL_SET)
        assert str(target) == "statefulset/data/db"

    def test_frozen_and_hashable(self) -> None:
        """Targets are immutable and usable as dictionary keys."""
        target = ScaleTarget(name="scaling-app")
        with pytest.raises(ValidationError):
            target.name = "other"  # type: ignore[misc]
        assert {target: 1}[ScaleTarget(name="scaling-app")] == 1

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScaleTarget(name="")


class TestProbeResult:
    """Tests for the ProbeResult model."""

    def test_identity(self) -> None:
        result = ProbeResult(status=200, identity="pod-a", elapsed_ms=3.2)
        assert result.has_identity
        assert result.elapsed_ms == 3.2

    def test_no_identity(self) -> None:
        assert not ProbeResult(status=503).has_identity

    @pytest.mark.parametrize("status", [99, 600])
    def test_status_range(self, status: int) -> None:
        with pytest.raises(ValidationError):
            ProbeResult(status=status)

    def test_negative_elapsed_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProbeResult(status=200, elapsed_ms=-1)


class TestObservedIdentitySet:
    """Tests for idempotent identity accumulation."""

    def test_starts_empty(self) -> None:
        observed = ObservedIdentitySet()
        assert observed.size == 0
        assert len(observed) == 0
        assert observed.tokens == []

    def test_add_reports_new_tokens(self) -> None:
        observed = ObservedIdentitySet()

        assert observed.add("pod-b") is True
        assert observed.add("pod-a") is True
        assert observed.add("pod-b") is False

        assert observed.size == 2
        assert observed.tokens == ["pod-a", "pod-b"]
        assert "pod-a" in observed
        assert "pod-c" not in observed

    def test_tokens_is_a_snapshot(self) -> None:
        observed = ObservedIdentitySet()
        observed.add("pod-a")
        snapshot = observed.tokens
        snapshot.append("pod-z")
        assert observed.tokens == ["pod-a"]


class TestWaitOutcome:
    """Tests for the tagged wait result."""

    def test_unwrap_satisfied(self) -> None:
        outcome = WaitOutcome(satisfied=True, value=2, attempts=3, elapsed_seconds=0.2)
        assert outcome.unwrap() == 2
        assert "satisfied=True" in repr(outcome)

    def test_unwrap_timeout_raises(self) -> None:
        error = WaitTimeoutError(
            message="ready replicas == 2 not met",
            description="ready replicas == 2",
            last_value=1,
            attempts=600,
            elapsed_seconds=60.0,
        )
        outcome = WaitOutcome(
            satisfied=False, value=1, attempts=600, elapsed_seconds=60.0, error=error
        )

        with pytest.raises(WaitTimeoutError) as exc_info:
            outcome.unwrap()
        assert exc_info.value is error


class TestSamplingOutcome:
    """Tests for the tagged sampling result."""

    def test_satisfied(self) -> None:
        outcome = SamplingOutcome(
            satisfied=True, observed=["pod-a", "pod-b"], probes=2, elapsed_seconds=0.1
        )
        assert outcome.distinct_count == 2
        assert outcome.unwrap() == ["pod-a", "pod-b"]

    def test_unwrap_timeout_raises(self) -> None:
        error = SamplingTimeoutError(
            message="Observed 1 of 2",
            expected_count=2,
            observed_tokens=["pod-a"],
            attempts=600,
            elapsed_seconds=60.0,
        )
        outcome = SamplingOutcome(
            satisfied=False, observed=["pod-a"], probes=600, elapsed_seconds=60.0, error=error
        )

        with pytest.raises(SamplingTimeoutError):
            outcome.unwrap()
        assert outcome.distinct_count == 1


class TestScenarioReport:
    """Tests for the ScenarioReport model."""

    def test_passed_report(self) -> None:
        report = ScenarioReport(name="scale_up", passed=True, duration_seconds=4.2)
        assert report.error_type is None
        assert report.diagnostics == {}

    def test_failed_report_serializes(self) -> None:
        report = ScenarioReport(
            name="scale_down",
            passed=False,
            duration_seconds=60.0,
            error_type="SamplingTimeoutError",
            error_message="Observed 1 of 2",
            diagnostics={"observed_tokens": ["pod-a"]},
        )

        data = report.model_dump()

        assert data["passed"] is False
        assert data["diagnostics"]["observed_tokens"] == ["pod-a"]

    def test_negative_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScenarioReport(name="scale_up", passed=True, duration_seconds=-1)
