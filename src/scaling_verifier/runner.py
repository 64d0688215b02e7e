"""Entry point running the scaling scenarios from environment configuration.

Configuration comes from SCALING_* environment variables (see
VerifierConfig.from_env). The process exits 0 when every scenario passed and
1 otherwise, so a CI job can gate on it.

Examples:
    Running against an OpenShift DeploymentConfig::

        SCALING_TARGET_NAME=scaling-app \\
        SCALING_NAMESPACE=ts-scaling \\
        SCALING_WORKLOAD_KIND=deploymentconfig \\
        SCALING_BASE_URL=http://scaling-app-ts-scaling.apps.example.com \\
        python -m scaling_verifier
"""

from scaling_verifier.config import VerifierConfig
from scaling_verifier.control_plane.base import ScalingController
from scaling_verifier.control_plane.kube import KubernetesScalingController
from scaling_verifier.core.scenario import ScalingScenario
from scaling_verifier.core.waiter import ConvergenceWaiter
from scaling_verifier.models import ScenarioReport
from scaling_verifier.observability.logging import configure_logging_from, get_logger
from scaling_verifier.probe import HttpProbe

logger = get_logger(__name__)


def run_scenarios(
    config: VerifierConfig,
    controller: ScalingController,
    probe: HttpProbe,
    waiter: ConvergenceWaiter | None = None,
) -> list[ScenarioReport]:
    """Run the three scenarios in order against config.target()."""
    scenario = ScalingScenario(
        controller=controller,
        probe=probe,
        target=config.target(),
        config=config,
        waiter=waiter,
    )
    reports = scenario.run_all()
    failed = [report.name for report in reports if not report.passed]
    logger.info(
        "run.completed",
        passed=len(reports) - len(failed),
        failed=failed,
    )
    return reports


def main() -> int:
    """Load configuration, run every scenario against the cluster, return the exit code."""
    config = VerifierConfig.from_env()
    configure_logging_from(config)

    controller = KubernetesScalingController.from_config(config)
    probe = HttpProbe.from_config(config)
    try:
        reports = run_scenarios(config, controller, probe)
    finally:
        probe.close()
    return 0 if all(report.passed for report in reports) else 1
