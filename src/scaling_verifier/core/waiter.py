"""Convergence waiter: poll a condition until it holds or a deadline passes.

The waiter repeatedly calls a poll function, evaluates a predicate on the
result, and sleeps a fixed interval between attempts. It returns a tagged
WaitOutcome instead of raising on timeout, so callers decide whether a
timeout is fatal.

Poll failures:
    Scale transitions make the control plane and the endpoint briefly
    unreachable. An exception from poll() is treated as "not yet satisfied"
    when it is transient, and re-raised at once otherwise. This is the only
    place in the verifier where errors are swallowed.

Examples:
    Waiting for two ready replicas::

        from scaling_verifier.core.waiter import ConvergenceWaiter

        waiter = ConvergenceWaiter()
        outcome = waiter.await_until(
            poll=lambda: controller.ready_replicas(target),
            predicate=lambda ready: ready == 2,
            interval_seconds=0.1,
            timeout_seconds=60,
            description="ready replicas == 2",
        )
        if not outcome.satisfied:
            print(outcome.error.last_value)
"""

from collections.abc import Callable
from typing import TypeVar

from scaling_verifier.core.timing import Clock, SystemClock
from scaling_verifier.exceptions import (
    ScalingVerifierError,
    UnexpectedStatusError,
    WaitTimeoutError,
)
from scaling_verifier.models import WaitOutcome
from scaling_verifier.observability.logging import get_logger
from scaling_verifier.observability.metrics import record_wait

logger = get_logger(__name__)

T = TypeVar("T")

# Errors that retrying cannot fix: a bug in the poll or a wrong status.
NON_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    ValueError,
    TypeError,
    UnexpectedStatusError,
)


def default_is_transient(error: Exception) -> bool:
    """Classify a poll failure as transient (retry) or fatal (re-raise).

    Examples:
        >>> default_is_transient(ConnectionRefusedError())
        True
        >>> default_is_transient(ValueError("bad target"))
        False
    """
    if isinstance(error, NON_TRANSIENT_ERRORS):
        return False
    if isinstance(error, ScalingVerifierError):
        return error.transient
    return True


class ConvergenceWaiter:
    """Bounded polling with a fixed interval.

    Attributes:
        clock: Time source used for the deadline and the sleeps.
        is_transient: Classifier deciding which poll errors are retried.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        is_transient: Callable[[Exception], bool] = default_is_transient,
    ) -> None:
        self.clock = clock or SystemClock()
        self.is_transient = is_transient

    def await_until(
        self,
        poll: Callable[[], T],
        predicate: Callable[[T], bool],
        interval_seconds: float,
        timeout_seconds: float,
        description: str = "condition",
    ) -> WaitOutcome[T]:
        """Poll until predicate(poll()) holds or timeout_seconds elapse.

        The first poll happens immediately. A timeout of zero performs exactly
        one poll. Sleeps never overshoot the deadline, and a final poll is
        made at the deadline itself.

        Args:
            poll: Reads the current value.
            predicate: Decides whether the value is the expected one.
            interval_seconds: Sleep between attempts (>= 0).
            timeout_seconds: Overall deadline (>= 0).
            description: Human-readable condition, used in logs and errors.

        Returns:
            A satisfied WaitOutcome carrying the matching value, or an
            unsatisfied one whose error is a WaitTimeoutError with the last
            observed value.

        Raises:
            ValueError: If interval_seconds or timeout_seconds is negative.
            Exception: Any non-transient error raised by poll().
        """
        if interval_seconds < 0:
            raise ValueError(f"interval_seconds must be >= 0, got {interval_seconds}")
        if timeout_seconds < 0:
            raise ValueError(f"timeout_seconds must be >= 0, got {timeout_seconds}")

        start = self.clock.monotonic()
        attempts = 0
        last_value: T | None = None
        last_error: Exception | None = None

        while True:
            attempts += 1
            try:
                value = poll()
            except Exception as e:
                if not self.is_transient(e):
                    logger.error(
                        "wait.poll_aborted",
                        condition=description,
                        attempts=attempts,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise
                last_error = e
                logger.debug(
                    "wait.poll_failed",
                    condition=description,
                    attempt=attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                last_value = value
                if predicate(value):
                    elapsed = self.clock.monotonic() - start
                    record_wait(True, attempts)
                    logger.info(
                        "wait.satisfied",
                        condition=description,
                        value=value,
                        attempts=attempts,
                        elapsed_seconds=round(elapsed, 3),
                    )
                    return WaitOutcome(
                        satisfied=True,
                        value=value,
                        attempts=attempts,
                        elapsed_seconds=elapsed,
                    )

            elapsed = self.clock.monotonic() - start
            remaining = timeout_seconds - elapsed
            if remaining <= 0:
                break
            self.clock.sleep(min(interval_seconds, remaining))

        record_wait(False, attempts)
        logger.warning(
            "wait.timeout",
            condition=description,
            last_value=last_value,
            attempts=attempts,
            elapsed_seconds=round(elapsed, 3),
            last_error=str(last_error) if last_error is not None else None,
        )
        error = WaitTimeoutError(
            message=(
                f"{description} not met after {elapsed:.1f}s "
                f"({attempts} attempts, last value {last_value!r})"
            ),
            description=description,
            last_value=last_value,
            attempts=attempts,
            elapsed_seconds=elapsed,
            last_error=last_error,
        )
        return WaitOutcome(
            satisfied=False,
            value=last_value,
            attempts=attempts,
            elapsed_seconds=elapsed,
            error=error,
        )
