"""Replica identity sampler.

The sampler infers how many replicas sit behind a load balancer by probing
it repeatedly and counting the distinct identity tokens in the responses.
Nothing in the probe protocol says how many backends exist, so the answer is
statistical: the interval/timeout pair trades confidence for latency, and
an unlucky routing pattern can hide a replica until the deadline. That false
negative surfaces as a timeout rather than being papered over.

Rules:
    1. Every sampling call starts from an empty ObservedIdentitySet.
    2. A probe status other than the success status fails fast with
       UnexpectedStatusError.
    3. Sampling succeeds as soon as exactly the expected number of distinct
       identities has been observed: "N backends confirmed", not "never more
       than N".
    4. The set grows by at most one per probe, so it reaches the expected
       count exactly before it could ever exceed it.
    5. Probe exceptions propagate; only the convergence waiter retries.

Examples:
    Confirming two replicas answer::

        from scaling_verifier.core.sampler import ReplicaIdentitySampler

        sampler = ReplicaIdentitySampler()
        outcome = sampler.sample_distinct_identities(
            probe=http_probe,
            expected_distinct_count=2,
            interval_seconds=0.1,
            timeout_seconds=60,
        )
        outcome.unwrap()

    Confirming nothing answers after scaling to zero::

        sampler.confirm_status(http_probe, expected_status=503, probe_count=5,
                               interval_seconds=0.1)
"""

from collections.abc import Callable

from scaling_verifier.core.timing import Clock, SystemClock
from scaling_verifier.exceptions import (
    IdentityExtractionError,
    SamplingTimeoutError,
    UnexpectedStatusError,
)
from scaling_verifier.models import ObservedIdentitySet, ProbeResult, SamplingOutcome
from scaling_verifier.observability.logging import get_logger
from scaling_verifier.observability.metrics import record_distinct_identities

logger = get_logger(__name__)

Probe = Callable[[], ProbeResult]


class ReplicaIdentitySampler:
    """Count distinct backend identities behind an endpoint.

    Attributes:
        clock: Time source for the deadline and the spacing between probes.
        success_status: The only status accepted while sampling identities.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        success_status: int = 200,
    ) -> None:
        self.clock = clock or SystemClock()
        self.success_status = success_status

    def sample_distinct_identities(
        self,
        probe: Probe,
        expected_distinct_count: int,
        interval_seconds: float,
        timeout_seconds: float,
    ) -> SamplingOutcome:
        """Probe until expected_distinct_count identities were seen, or time runs out.

        Args:
            probe: Issues one request and returns its ProbeResult.
            expected_distinct_count: Number of distinct identities to confirm (>= 1).
            interval_seconds: Spacing between probes (>= 0).
            timeout_seconds: Overall deadline (>= 0).

        Returns:
            A satisfied SamplingOutcome, or an unsatisfied one whose error is
            a SamplingTimeoutError with the identities observed so far.

        Raises:
            ValueError: If an argument is out of range.
            UnexpectedStatusError: If a probe answered with a status other
                than success_status.
            IdentityExtractionError: If a successful probe carried no identity.
        """
        if expected_distinct_count < 1:
            raise ValueError(
                f"expected_distinct_count must be >= 1, got {expected_distinct_count}; "
                "use confirm_status() to check an unavailable endpoint"
            )
        if interval_seconds < 0:
            raise ValueError(f"interval_seconds must be >= 0, got {interval_seconds}")
        if timeout_seconds < 0:
            raise ValueError(f"timeout_seconds must be >= 0, got {timeout_seconds}")

        observed = ObservedIdentitySet()
        start = self.clock.monotonic()
        probes = 0

        while True:
            result = probe()
            probes += 1
            self._check_status(result, self.success_status)

            if result.identity is None:
                raise IdentityExtractionError(
                    message=f"Probe answered {result.status} without an identity token",
                    status=result.status,
                )

            if observed.add(result.identity):
                logger.debug(
                    "sample.identity_observed",
                    identity=result.identity,
                    distinct=observed.size,
                    expected=expected_distinct_count,
                )

            if observed.size == expected_distinct_count:
                elapsed = self.clock.monotonic() - start
                record_distinct_identities(observed.size)
                logger.info(
                    "sample.satisfied",
                    expected=expected_distinct_count,
                    identities=observed.tokens,
                    probes=probes,
                    elapsed_seconds=round(elapsed, 3),
                )
                return SamplingOutcome(
                    satisfied=True,
                    observed=observed.tokens,
                    probes=probes,
                    elapsed_seconds=elapsed,
                )

            elapsed = self.clock.monotonic() - start
            remaining = timeout_seconds - elapsed
            if remaining <= 0:
                break
            self.clock.sleep(min(interval_seconds, remaining))

        record_distinct_identities(observed.size)
        logger.warning(
            "sample.timeout",
            expected=expected_distinct_count,
            observed=observed.size,
            identities=observed.tokens,
            probes=probes,
            elapsed_seconds=round(elapsed, 3),
        )
        error = SamplingTimeoutError(
            message=(
                f"Observed {observed.size} of {expected_distinct_count} distinct "
                f"identities after {elapsed:.1f}s ({probes} probes)"
            ),
            expected_count=expected_distinct_count,
            observed_tokens=observed.tokens,
            attempts=probes,
            elapsed_seconds=elapsed,
        )
        return SamplingOutcome(
            satisfied=False,
            observed=observed.tokens,
            probes=probes,
            elapsed_seconds=elapsed,
            error=error,
        )

    def confirm_status(
        self,
        probe: Probe,
        expected_status: int,
        probe_count: int,
        interval_seconds: float,
    ) -> int:
        """Require every one of probe_count probes to answer expected_status.

        Used once a workload is scaled to zero, where nothing may answer
        successfully and identities are irrelevant.

        Args:
            probe: Issues one request and returns its ProbeResult.
            expected_status: Status every probe must report.
            probe_count: Number of probes to issue (>= 1).
            interval_seconds: Spacing between probes (>= 0).

        Returns:
            The number of probes issued.

        Raises:
            ValueError: If an argument is out of range.
            UnexpectedStatusError: At the first probe with another status.
        """
        if probe_count < 1:
            raise ValueError(f"probe_count must be >= 1, got {probe_count}")
        if interval_seconds < 0:
            raise ValueError(f"interval_seconds must be >= 0, got {interval_seconds}")

        for index in range(probe_count):
            if index:
                self.clock.sleep(interval_seconds)
            self._check_status(probe(), expected_status)

        logger.info("sample.status_confirmed", status=expected_status, probes=probe_count)
        return probe_count

    def _check_status(self, result: ProbeResult, expected_status: int) -> None:
        if result.status == expected_status:
            return
        logger.error(
            "probe.unexpected_status",
            expected_status=expected_status,
            actual_status=result.status,
            identity=result.identity,
        )
        raise UnexpectedStatusError(
            message=f"Expected status {expected_status}, got {result.status}",
            expected_status=expected_status,
            actual_status=result.status,
            identity=result.identity,
        )
