"""Core type definitions and models for the scaling verifier.

This module provides the data structures shared by the control-plane
adapters, the convergence waiter, the identity sampler and the scenarios:
scale targets, probe results, the observed identity set, tagged wait and
sampling outcomes, and per-scenario reports.

Examples:
    Describing the workload under test::

        from scaling_verifier.models import ScaleTarget, WorkloadKind

        target = ScaleTarget(
            name="scaling-app",
            namespace="ts-scaling",
            kind=WorkloadKind.DEPLOYMENT_CONFIG,
        )

    Accumulating identities::

        observed = ObservedIdentitySet()
        observed.add("scaling-app-1-abcde")
        observed.add("scaling-app-1-abcde")
        assert observed.size == 1
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from scaling_verifier.exceptions import SamplingTimeoutError, WaitTimeoutError

T = TypeVar("T")


class WorkloadKind(str, Enum):
    """Kind of scalable workload the control plane manages.

    Attributes:
        DEPLOYMENT: apps/v1 Deployment.
        STATEFUL_SET: apps/v1 StatefulSet.
        DEPLOYMENT_CONFIG: OpenShift apps.openshift.io/v1 DeploymentConfig.
    """

    DEPLOYMENT = "deployment"
    STATEFUL_SET = "statefulset"
    DEPLOYMENT_CONFIG = "deploymentconfig"


class ScaleTarget(BaseModel):
    """Handle identifying the deployable unit being scaled.

    Owned by one scenario run and never mutated; pass it explicitly to every
    control-plane call instead of keeping it in module state.

    Attributes:
        name: Workload name.
        namespace: Namespace (or OpenShift project) holding the workload.
        kind: Workload kind, which selects the API used to scale it.
    """

    name: str = Field(..., min_length=1, description="Workload name")
    namespace: str = Field(default="default", min_length=1, description="Workload namespace")
    kind: WorkloadKind = Field(default=WorkloadKind.DEPLOYMENT, description="Workload kind")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.namespace}/{self.name}"


class ProbeResult(BaseModel):
    """Outcome of a single probe request.

    Attributes:
        status: HTTP status code returned by the endpoint.
        identity: Identity token of the answering backend, None when the
            response carried none (always None for non-success statuses).
        elapsed_ms: Round-trip time, for diagnostics only.

    Examples:
        >>> ProbeResult(status=200, identity="pod-a").has_identity
        True
        >>> ProbeResult(status=503).has_identity
        False
    """

    status: int = Field(..., ge=100, le=599, description="HTTP status code")
    identity: str | None = Field(default=None, description="Identity token of the backend")
    elapsed_ms: float | None = Field(default=None, ge=0, description="Round-trip time")

    model_config = {"frozen": True}

    @property
    def has_identity(self) -> bool:
        return self.identity is not None


class ObservedIdentitySet:
    """Distinct identity tokens observed during one sampling call.

    Insertion is idempotent: adding a token already present leaves the size
    unchanged. A new set is created for every sampling invocation and never
    shared across invocations.
    """

    def __init__(self) -> None:
        self._tokens: set[str] = set()

    def add(self, token: str) -> bool:
        """Insert a token.

        Args:
            token: The identity token to record.

        Returns:
            True if the token had not been seen before.
        """
        if token in self._tokens:
            return False
        self._tokens.add(token)
        return True

    @property
    def size(self) -> int:
        return len(self._tokens)

    @property
    def tokens(self) -> list[str]:
        """Sorted snapshot of the observed tokens."""
        return sorted(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


class WaitOutcome(Generic[T]):
    """Tagged result of a convergence wait.

    A wait either succeeds with the last polled value or times out with a
    WaitTimeoutError describing what was last seen. The error is returned,
    not raised; call unwrap() to turn a timeout into an exception.

    Attributes:
        satisfied: True if the predicate held before the deadline.
        value: The last successfully polled value (None if no poll succeeded).
        attempts: Number of polls performed.
        elapsed_seconds: Time spent waiting.
        error: The timeout error when not satisfied, None otherwise.
    """

    def __init__(
        self,
        satisfied: bool,
        value: T | None,
        attempts: int,
        elapsed_seconds: float,
        error: WaitTimeoutError | None = None,
    ) -> None:
        self.satisfied = satisfied
        self.value = value
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        self.error = error

    def unwrap(self) -> T:
        """Return the polled value, raising the timeout error if unsatisfied.

        Raises:
            WaitTimeoutError: If the wait timed out.
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return (
            f"WaitOutcome(satisfied={self.satisfied}, value={self.value!r}, "
            f"attempts={self.attempts}, elapsed_seconds={self.elapsed_seconds:.3f})"
        )


class SamplingOutcome:
    """Tagged result of an identity sampling call.

    Attributes:
        satisfied: True if the expected distinct count was reached.
        observed: Sorted snapshot of the distinct identities observed.
        probes: Number of probes issued.
        elapsed_seconds: Time spent sampling.
        error: The sampling timeout when not satisfied, None otherwise.
    """

    def __init__(
        self,
        satisfied: bool,
        observed: list[str],
        probes: int,
        elapsed_seconds: float,
        error: SamplingTimeoutError | None = None,
    ) -> None:
        self.satisfied = satisfied
        self.observed = observed
        self.probes = probes
        self.elapsed_seconds = elapsed_seconds
        self.error = error

    @property
    def distinct_count(self) -> int:
        return len(self.observed)

    def unwrap(self) -> list[str]:
        """Return the observed identities, raising the timeout if unsatisfied.

        Raises:
            SamplingTimeoutError: If sampling timed out.
        """
        if self.error is not None:
            raise self.error
        return self.observed

    def __repr__(self) -> str:
        return (
            f"SamplingOutcome(satisfied={self.satisfied}, observed={self.observed!r}, "
            f"probes={self.probes})"
        )


class ScenarioReport(BaseModel):
    """Pass/fail report for one scenario run.

    Attributes:
        name: Scenario name (scale_up, scale_down, scale_to_zero).
        passed: Whether every step of the scenario succeeded.
        duration_seconds: Wall time spent in the scenario.
        error_type: Exception class name when the scenario failed.
        error_message: Exception message when the scenario failed.
        diagnostics: Last observed counts and tokens for a failed scenario.

    Examples:
        >>> report = ScenarioReport(name="scale_up", passed=True, duration_seconds=4.2)
        >>> report.passed
        True
    """

    name: str = Field(..., min_length=1, description="Scenario name")
    passed: bool = Field(..., description="Whether the scenario passed")
    duration_seconds: float = Field(default=0.0, ge=0, description="Time spent in the scenario")
    error_type: str | None = Field(default=None, description="Exception class on failure")
    error_message: str | None = Field(default=None, description="Exception message on failure")
    diagnostics: dict[str, Any] = Field(
        default_factory=dict,
        description="Last observed state for a failed scenario",
    )
