"""In-memory scaling controller with simulated readiness lag.

This module provides an implementation of the ScalingController protocol
that keeps workloads in a dictionary. A scale request takes effect once a
configurable readiness delay has elapsed on the injected clock, which is
enough to exercise convergence waits without a cluster.

The InMemoryScalingController is suitable for:
    - Development and dry runs of scenarios
    - Tests that need a control plane with realistic lag
    - Backing a fake load balancer through instances()

Replica identities:
    - Each replica gets a stable identity "<name>-<serial>" when it becomes ready
    - Scaling down removes the most recently started replicas first
    - Surviving replicas keep their identity across scale operations

Examples:
    Basic usage::

        from scaling_verifier.control_plane.memory import InMemoryScalingController
        from scaling_verifier.core.timing import ManualClock

        clock = ManualClock()
        controller = InMemoryScalingController(clock=clock, readiness_delay_seconds=2.0)
        controller.add_workload(target, replicas=1)

        controller.scale_to(target, 3)
        controller.ready_replicas(target)   # 1, still starting
        clock.advance(2.0)
        controller.ready_replicas(target)   # 3
"""

from scaling_verifier.control_plane.base import ScalingController, validate_replica_count
from scaling_verifier.core.timing import Clock, SystemClock
from scaling_verifier.exceptions import ControlPlaneError
from scaling_verifier.models import ScaleTarget


class _Workload:
    def __init__(self, name: str, replicas: int, changed_at: float) -> None:
        self.name = name
        self.desired = replicas
        self.changed_at = changed_at
        self.instances: list[str] = []
        self.serial = 0
        self._resize(replicas)

    def _resize(self, count: int) -> None:
        while len(self.instances) < count:
            self.serial += 1
            self.instances.append(f"{self.name}-{self.serial}")
        del self.instances[count:]

    def settle(self, now: float, delay: float) -> None:
        if len(self.instances) != self.desired and now - self.changed_at >= delay:
            self._resize(self.desired)


class InMemoryScalingController(ScalingController):
    """In-memory control plane with per-workload readiness lag.

    Attributes:
        readiness_delay_seconds: Time after a scale request before the ready
            count reflects it.
        scale_requests: Every (target, count) pair passed to scale_to, in order.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        readiness_delay_seconds: float = 0.0,
    ) -> None:
        """Initialize an empty control plane.

        Args:
            clock: Time source for readiness lag. Defaults to SystemClock.
            readiness_delay_seconds: Delay before a scale request takes effect.
        """
        if readiness_delay_seconds < 0:
            raise ValueError(
                f"readiness_delay_seconds must be >= 0, got {readiness_delay_seconds}"
            )
        self._clock = clock or SystemClock()
        self.readiness_delay_seconds = readiness_delay_seconds
        self._workloads: dict[ScaleTarget, _Workload] = {}
        self._read_failures: list[ControlPlaneError] = []
        self.scale_requests: list[tuple[ScaleTarget, int]] = []

    def add_workload(self, target: ScaleTarget, replicas: int = 1) -> None:
        """Register a workload that is already running with replicas ready."""
        validate_replica_count(replicas)
        self._workloads[target] = _Workload(target.name, replicas, self._clock.monotonic())

    def fail_next_reads(self, count: int, transient: bool = True, status_code: int = 503) -> None:
        """Make the next count ready_replicas() calls raise ControlPlaneError."""
        for _ in range(count):
            self._read_failures.append(
                ControlPlaneError(
                    message=f"Injected read failure ({status_code})",
                    target="*",
                    status_code=status_code,
                    transient=transient,
                )
            )

    def scale_to(self, target: ScaleTarget, count: int) -> None:
        validate_replica_count(count)
        workload = self._lookup(target)
        self.scale_requests.append((target, count))
        workload.settle(self._clock.monotonic(), self.readiness_delay_seconds)
        workload.desired = count
        workload.changed_at = self._clock.monotonic()

    def ready_replicas(self, target: ScaleTarget) -> int:
        if self._read_failures:
            raise self._read_failures.pop(0)
        return len(self.instances(target))

    def desired_replicas(self, target: ScaleTarget) -> int:
        return self._lookup(target).desired

    def instances(self, target: ScaleTarget) -> list[str]:
        """Identities of the ready replicas of target, oldest first."""
        workload = self._lookup(target)
        workload.settle(self._clock.monotonic(), self.readiness_delay_seconds)
        return list(workload.instances)

    def _lookup(self, target: ScaleTarget) -> _Workload:
        try:
            return self._workloads[target]
        except KeyError:
            raise ControlPlaneError(
                message=f"Workload {target} not found",
                target=target.name,
                status_code=404,
                transient=False,
            ) from None
