"""Custom exceptions for the scaling verifier.

This module defines the exception hierarchy used to signal control-plane
failures, probe failures, timeouts and unexpected probe outcomes.

Every exception carries a ``transient`` flag. The convergence waiter uses it
to decide whether a failed poll means "not yet" or "give up now". Outside the
waiter no error is ever swallowed: they all surface to the scenario boundary.

Examples:
    Handling a control-plane failure::

        from scaling_verifier.exceptions import ControlPlaneError

        try:
            controller.scale_to(target, 2)
        except ControlPlaneError as e:
            logger.error("scale.failed", error=str(e), status_code=e.status_code)
            raise

    Inspecting a sampling timeout::

        outcome = sampler.sample_distinct_identities(probe, 2, 0.1, 60)
        if not outcome.satisfied:
            print(outcome.error.observed_count, outcome.error.observed_tokens)
"""

from typing import Any


class ScalingVerifierError(Exception):
    """Base exception for all scaling verifier errors.

    Attributes:
        message: Human-readable error description.
        transient: Whether retrying the failed operation may succeed.

    Examples:
        Catching every verifier error::

            try:
                scenario.scale_up()
            except ScalingVerifierError as e:
                print(e.diagnostics())
    """

    def __init__(self, message: str, transient: bool = False) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
            transient: Whether retrying may succeed.
        """
        self.message = message
        self.transient = transient
        super().__init__(message)

    def diagnostics(self) -> dict[str, Any]:
        """Return the last observed state useful for diagnosing the failure."""
        return {}


class ControlPlaneError(ScalingVerifierError):
    """A scale command or readiness read failed at the transport or API level.

    Raised by ScalingController implementations. The controller never retries;
    the convergence waiter retries transient read failures, and every other
    caller lets the error propagate.

    Attributes:
        message: Human-readable error description.
        target: Name of the workload the call was made for.
        status_code: HTTP status returned by the API, if any.
        transient: Whether the failure is worth retrying (5xx, throttling,
            connection loss).
        cause: The underlying exception, if any.

    Examples:
        Raising from an API failure::

            except ApiException as e:
                raise ControlPlaneError(
                    message=f"Failed to scale {target.name}: {e.reason}",
                    target=target.name,
                    status_code=e.status,
                    transient=e.status >= 500,
                    cause=e,
                ) from e
    """

    def __init__(
        self,
        message: str,
        target: str,
        status_code: int | None = None,
        transient: bool = False,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the control-plane error with details.

        Args:
            message: Human-readable error description.
            target: Name of the workload the call was made for.
            status_code: HTTP status returned by the API, if any.
            transient: Whether the failure is worth retrying.
            cause: The underlying exception, if any.
        """
        super().__init__(message, transient=transient)
        self.target = target
        self.status_code = status_code
        self.cause = cause

    def diagnostics(self) -> dict[str, Any]:
        return {"target": self.target, "status_code": self.status_code}


class ProbeError(ScalingVerifierError):
    """A probe request could not be completed at the transport level.

    Connection refused or reset while replicas come and go is expected during
    scale transitions, so probe errors are transient unless the request can
    never succeed, such as an unsupported scheme or a redirect loop.

    Attributes:
        message: Human-readable error description.
        url: The URL that was probed.
        cause: The underlying transport exception.
    """

    def __init__(
        self,
        message: str,
        url: str,
        cause: Exception | None = None,
        transient: bool = True,
    ) -> None:
        """Initialize the probe error.

        Args:
            message: Human-readable error description.
            url: The URL that was probed.
            cause: The underlying transport exception.
            transient: Whether probing again may succeed.
        """
        super().__init__(message, transient=transient)
        self.url = url
        self.cause = cause

    def diagnostics(self) -> dict[str, Any]:
        return {"url": self.url}


class WaitTimeoutError(ScalingVerifierError):
    """A convergence wait did not observe the expected condition in time.

    Attributes:
        message: Human-readable error description.
        description: What was being waited for.
        last_value: The last successfully polled value, or None.
        attempts: Number of polls performed.
        elapsed_seconds: Time spent waiting.
        last_error: The last transient error swallowed while polling.

    Examples:
        >>> error = WaitTimeoutError(
        ...     message="ready replicas == 2 not met after 60.0s",
        ...     description="ready replicas == 2",
        ...     last_value=1,
        ...     attempts=600,
        ...     elapsed_seconds=60.0,
        ... )
        >>> error.diagnostics()["last_value"]
        1
    """

    def __init__(
        self,
        message: str,
        description: str,
        last_value: Any,
        attempts: int,
        elapsed_seconds: float,
        last_error: Exception | None = None,
    ) -> None:
        """Initialize the timeout error with the last observed state.

        Args:
            message: Human-readable error description.
            description: What was being waited for.
            last_value: The last successfully polled value.
            attempts: Number of polls performed.
            elapsed_seconds: Time spent waiting.
            last_error: The last transient error swallowed while polling.
        """
        super().__init__(message)
        self.description = description
        self.last_value = last_value
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        self.last_error = last_error

    def diagnostics(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "condition": self.description,
            "last_value": self.last_value,
            "attempts": self.attempts,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
        if self.last_error is not None:
            details["last_error"] = str(self.last_error)
        return details


class SamplingTimeoutError(WaitTimeoutError):
    """Fewer distinct identities than expected were observed before the deadline.

    Attributes:
        expected_count: The number of distinct identities expected.
        observed_count: Distinct identities observed when time ran out.
        observed_tokens: Sorted snapshot of the identities observed.
    """

    def __init__(
        self,
        message: str,
        expected_count: int,
        observed_tokens: list[str],
        attempts: int,
        elapsed_seconds: float,
    ) -> None:
        """Initialize the sampling timeout.

        Args:
            message: Human-readable error description.
            expected_count: The number of distinct identities expected.
            observed_tokens: Identities observed when time ran out.
            attempts: Number of probes issued.
            elapsed_seconds: Time spent sampling.
        """
        super().__init__(
            message,
            description=f"{expected_count} distinct identities",
            last_value=len(observed_tokens),
            attempts=attempts,
            elapsed_seconds=elapsed_seconds,
        )
        self.expected_count = expected_count
        self.observed_count = len(observed_tokens)
        self.observed_tokens = observed_tokens

    def diagnostics(self) -> dict[str, Any]:
        details = super().diagnostics()
        details.update(
            expected_count=self.expected_count,
            observed_count=self.observed_count,
            observed_tokens=self.observed_tokens,
        )
        return details


class UnexpectedStatusError(ScalingVerifierError):
    """A probe returned a status other than the one the current phase requires.

    For example a 503 while sampling a scaled-up workload, or a 200 after
    scaling to zero. Terminal and never retried.

    Attributes:
        expected_status: The status the phase requires.
        actual_status: The status the probe returned.
        identity: Identity of the responding backend, if one was extracted.
    """

    def __init__(
        self,
        message: str,
        expected_status: int,
        actual_status: int,
        identity: str | None = None,
    ) -> None:
        """Initialize the unexpected status error.

        Args:
            message: Human-readable error description.
            expected_status: The status the phase requires.
            actual_status: The status the probe returned.
            identity: Identity of the responding backend, if known.
        """
        super().__init__(message)
        self.expected_status = expected_status
        self.actual_status = actual_status
        self.identity = identity

    def diagnostics(self) -> dict[str, Any]:
        return {
            "expected_status": self.expected_status,
            "actual_status": self.actual_status,
            "identity": self.identity,
        }


class IdentityExtractionError(ScalingVerifierError):
    """A successful probe response carried no identity token.

    The backend is expected to echo a per-instance identity; a success
    without one breaks that contract.

    Attributes:
        status: The status of the response lacking an identity.
    """

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status

    def diagnostics(self) -> dict[str, Any]:
        return {"status": self.status}
