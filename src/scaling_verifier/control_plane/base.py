"""Scaling controller protocol for the scaling verifier.

This module defines the interface every control-plane adapter implements.
The verifier never orchestrates anything itself: it asks the control plane
to change the desired replica count and reads back how many replicas are
ready.

Examples:
    Implementing a custom controller::

        from scaling_verifier.control_plane.base import ScalingController
        from scaling_verifier.models import ScaleTarget

        class NomadScalingController:
            def scale_to(self, target: ScaleTarget, count: int) -> None:
                self.client.job.scale(target.name, count)

            def ready_replicas(self, target: ScaleTarget) -> int:
                return self.client.job.summary(target.name).running

Contract:
    1. **No readiness blocking**: scale_to() returns once the control plane
       accepted the request, not once replicas are ready.

    2. **No retries**: failures raise ControlPlaneError straight away with the
       transient flag set when retrying may help. Whether to retry is the
       caller's decision.

    3. **Stateless**: implementations keep no verifier state between calls;
       every call goes to the external system.

    4. **Validation first**: a negative count raises ValueError before any
       call reaches the control plane.
"""

from typing import Protocol, runtime_checkable

from scaling_verifier.models import ScaleTarget


@runtime_checkable
class ScalingController(Protocol):
    """Protocol for scaling a workload and reading its ready replicas.

    Error Handling:
        Methods raise ControlPlaneError for API and transport failures.
        Implementations must not leak client-library exceptions.
    """

    def scale_to(self, target: ScaleTarget, count: int) -> None:
        """Request the control plane to set the desired replica count.

        Args:
            target: The workload to scale.
            count: Desired number of replicas (>= 0).

        Raises:
            ValueError: If count is negative.
            ControlPlaneError: If the control plane rejected or failed the call.
        """
        ...

    def ready_replicas(self, target: ScaleTarget) -> int:
        """Read the number of ready replicas.

        Args:
            target: The workload to inspect.

        Returns:
            The current ready-replica count (>= 0).

        Raises:
            ControlPlaneError: If the read failed.
        """
        ...


def validate_replica_count(count: int) -> int:
    """Validate a desired replica count.

    Raises:
        ValueError: If count is not a non-negative integer.

    Examples:
        >>> validate_replica_count(2)
        2
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"Replica count must be an integer, got {count!r}")
    if count < 0:
        raise ValueError(f"Replica count must be >= 0, got {count}")
    return count
