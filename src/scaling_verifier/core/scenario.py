"""Scaling scenarios: scale up, scale down and scale to zero.

This module composes the control plane, the convergence waiter and the
identity sampler into the three verification scenarios. They share one
external resource, the workload being scaled, so they run strictly in
order and each is followed by a reset to a single replica:

    scale_up       1 -> 2 replicas, 2 distinct identities answer
    scale_down     1 -> 2 -> 1 replicas, 2 then 1 distinct identities answer
    scale_to_zero  1 -> 0 replicas, every probe answers 503

Every scenario opens with a health gate: one ready replica and an endpoint
answering the success status.

Errors are never recovered here. A scenario step raises, run() records the
failure with the last observed counts and identities, resets the workload,
and the next scenario starts from the health gate.

Examples:
    Running all scenarios::

        from scaling_verifier.core.scenario import ScalingScenario

        scenario = ScalingScenario(
            controller=controller,
            probe=HttpProbe.from_config(config),
            target=config.target(),
            config=config,
        )
        reports = scenario.run_all()
        assert all(report.passed for report in reports)

    Running one scenario and letting errors propagate::

        scenario.scale_down()
"""

from collections.abc import Callable

from scaling_verifier.config import VerifierConfig
from scaling_verifier.control_plane.base import ScalingController
from scaling_verifier.core.sampler import Probe, ReplicaIdentitySampler
from scaling_verifier.core.waiter import ConvergenceWaiter
from scaling_verifier.exceptions import ScalingVerifierError
from scaling_verifier.models import ScaleTarget, ScenarioReport
from scaling_verifier.observability.logging import bind_scenario, clear_scenario, get_logger
from scaling_verifier.observability.metrics import record_scale_command, record_scenario

logger = get_logger(__name__)

SCENARIO_ORDER = ("scale_up", "scale_down", "scale_to_zero")

# Replica count every scenario starts from and is reset to.
BASELINE_REPLICAS = 1


class ScalingScenario:
    """Ordered scaling scenarios against one workload.

    The scenario object is the explicit context shared by the three
    scenarios; nothing is kept in module state.

    Attributes:
        controller: Control plane used to scale and read readiness.
        probe: Issues one request against the load-balanced endpoint.
        target: The workload under test.
        config: Timing and status settings.
        waiter: Convergence waiter for readiness and the health gate.
        sampler: Identity sampler for the load-balanced endpoint.
    """

    def __init__(
        self,
        controller: ScalingController,
        probe: Probe,
        target: ScaleTarget,
        config: VerifierConfig,
        waiter: ConvergenceWaiter | None = None,
        sampler: ReplicaIdentitySampler | None = None,
    ) -> None:
        self.controller = controller
        self.probe = probe
        self.target = target
        self.config = config
        self.waiter = waiter or ConvergenceWaiter()
        self.sampler = sampler or ReplicaIdentitySampler(
            clock=self.waiter.clock,
            success_status=config.success_status,
        )

    # Steps

    def health_gate(self) -> None:
        """Wait for the baseline replica to be ready and answering."""
        self.waiter.await_until(
            poll=lambda: self.controller.ready_replicas(self.target),
            predicate=lambda ready: ready == BASELINE_REPLICAS,
            interval_seconds=self.config.health_interval_seconds,
            timeout_seconds=self.config.timeout_seconds,
            description=f"ready replicas == {BASELINE_REPLICAS}",
        ).unwrap()
        self.waiter.await_until(
            poll=self.probe,
            predicate=lambda result: result.status == self.config.success_status,
            interval_seconds=self.config.health_interval_seconds,
            timeout_seconds=self.config.timeout_seconds,
            description=f"{self.config.probe_path} answers {self.config.success_status}",
        ).unwrap()

    def scale(self, count: int) -> None:
        """Ask the control plane for count replicas; does not wait."""
        logger.info("scale.requested", replicas=count)
        try:
            self.controller.scale_to(self.target, count)
        except ScalingVerifierError:
            record_scale_command(False)
            raise
        record_scale_command(True)

    def await_ready(self, count: int) -> int:
        """Wait until exactly count replicas are ready."""
        return self.waiter.await_until(
            poll=lambda: self.controller.ready_replicas(self.target),
            predicate=lambda ready: ready == count,
            interval_seconds=self.config.readiness_interval_seconds,
            timeout_seconds=self.config.timeout_seconds,
            description=f"ready replicas == {count}",
        ).unwrap()

    def expect_distinct(self, count: int) -> list[str]:
        """Probe until count distinct identities answered."""
        return self.sampler.sample_distinct_identities(
            probe=self.probe,
            expected_distinct_count=count,
            interval_seconds=self.config.sample_interval_seconds,
            timeout_seconds=self.config.timeout_seconds,
        ).unwrap()

    def expect_unavailable(self) -> int:
        """Require every probe to answer the unavailable status."""
        return self.sampler.confirm_status(
            probe=self.probe,
            expected_status=self.config.unavailable_status,
            probe_count=self.config.unavailable_probe_count,
            interval_seconds=self.config.sample_interval_seconds,
        )

    def reset(self) -> None:
        """Scale back to the baseline without waiting for readiness."""
        logger.info("scenario.reset", replicas=BASELINE_REPLICAS)
        self.scale(BASELINE_REPLICAS)

    # Scenarios

    def scale_up(self) -> None:
        """One replica is running; scale to two and confirm both answer."""
        self.health_gate()
        self.scale(2)
        self.await_ready(2)
        self.expect_distinct(2)

    def scale_down(self) -> None:
        """Scale to two and confirm both answer, then back to one and confirm one answers."""
        self.health_gate()
        self.scale(2)
        self.await_ready(2)
        self.expect_distinct(2)

        self.scale(1)
        self.await_ready(1)
        self.expect_distinct(1)

    def scale_to_zero(self) -> None:
        """Scale to zero and confirm every probe is answered with 503."""
        self.health_gate()
        self.scale(0)
        self.await_ready(0)
        self.expect_unavailable()

    # Runner

    def scenarios(self) -> dict[str, Callable[[], None]]:
        return {
            "scale_up": self.scale_up,
            "scale_down": self.scale_down,
            "scale_to_zero": self.scale_to_zero,
        }

    def run(self, name: str) -> ScenarioReport:
        """Run one scenario by name, reset afterwards, and report the result.

        Raises:
            ValueError: If name is not a known scenario.
            ScalingVerifierError: If the reset after the scenario fails.
        """
        scenarios = self.scenarios()
        if name not in scenarios:
            raise ValueError(f"Unknown scenario {name!r}, expected one of {', '.join(SCENARIO_ORDER)}")

        bind_scenario(name, str(self.target))
        started = self.waiter.clock.monotonic()
        try:
            try:
                scenarios[name]()
            except ScalingVerifierError as e:
                report = self._report(name, started, error=e)
            else:
                report = self._report(name, started)
            finally:
                self.reset()
        finally:
            clear_scenario()
        return report

    def run_all(self) -> list[ScenarioReport]:
        """Run every scenario in order; a failure does not stop the next one."""
        return [self.run(name) for name in SCENARIO_ORDER]

    def _report(
        self,
        name: str,
        started: float,
        error: ScalingVerifierError | None = None,
    ) -> ScenarioReport:
        duration = max(self.waiter.clock.monotonic() - started, 0.0)
        record_scenario(name, error is None, duration)
        if error is None:
            logger.info("scenario.passed", duration_seconds=round(duration, 3))
            return ScenarioReport(name=name, passed=True, duration_seconds=duration)

        logger.error(
            "scenario.failed",
            error=str(error),
            error_type=type(error).__name__,
            **error.diagnostics(),
        )
        return ScenarioReport(
            name=name,
            passed=False,
            duration_seconds=duration,
            error_type=type(error).__name__,
            error_message=str(error),
            diagnostics=error.diagnostics(),
        )
