"""Prometheus metrics for the scaling verifier.

Metrics include:

- Scale commands by result
- Convergence waits by outcome, with attempt counts
- Probes by status code
- Distinct identities observed by the last sampling call
- Scenario results and durations

Examples:
    Recording a probe::

        from scaling_verifier.observability.metrics import record_probe

        record_probe(status_code=200)

    Recording a finished scenario::

        from scaling_verifier.observability.metrics import record_scenario

        record_scenario(scenario="scale_up", passed=True, duration_seconds=12.5)
"""

from prometheus_client import Counter, Gauge, Histogram

# Labels: result (ok, error)
scale_commands_total = Counter(
    "scaling_verifier_scale_commands_total",
    "Total number of scale commands sent to the control plane",
    ["result"],
)

# Labels: outcome (satisfied, timeout)
waits_total = Counter(
    "scaling_verifier_waits_total",
    "Total number of convergence waits by outcome",
    ["outcome"],
)

wait_attempts = Histogram(
    "scaling_verifier_wait_attempts",
    "Number of polls needed per convergence wait",
    buckets=[1, 2, 5, 10, 25, 50, 100, 250, 600],
)

# Labels: status_code ("error" for transport failures)
probes_total = Counter(
    "scaling_verifier_probes_total",
    "Total number of probes issued against the target endpoint",
    ["status_code"],
)

distinct_identities = Gauge(
    "scaling_verifier_distinct_identities",
    "Distinct backend identities observed by the most recent sampling call",
)

# Labels: scenario, result (passed, failed)
scenarios_total = Counter(
    "scaling_verifier_scenarios_total",
    "Total number of scenario runs by result",
    ["scenario", "result"],
)

scenario_duration_seconds = Histogram(
    "scaling_verifier_scenario_duration_seconds",
    "Scenario wall time in seconds",
    ["scenario"],
    buckets=[1, 5, 10, 30, 60, 120, 300],
)


def record_scale_command(succeeded: bool) -> None:
    """Record a scale command sent to the control plane.

    Examples:
        >>> record_scale_command(True)
    """
    scale_commands_total.labels(result="ok" if succeeded else "error").inc()


def record_wait(satisfied: bool, attempts: int) -> None:
    """Record the outcome of a convergence wait.

    Args:
        satisfied: Whether the condition held before the deadline
        attempts: Number of polls performed

    Examples:
        >>> record_wait(True, 12)
    """
    waits_total.labels(outcome="satisfied" if satisfied else "timeout").inc()
    wait_attempts.observe(attempts)


def record_probe(status_code: int | None) -> None:
    """Record a probe by its status code; None means a transport failure.

    Examples:
        >>> record_probe(200)
        >>> record_probe(None)
    """
    probes_total.labels(status_code="error" if status_code is None else str(status_code)).inc()


def record_distinct_identities(count: int) -> None:
    distinct_identities.set(count)


def record_scenario(scenario: str, passed: bool, duration_seconds: float) -> None:
    """Record a finished scenario.

    Examples:
        >>> record_scenario("scale_down", False, 61.2)
    """
    scenarios_total.labels(scenario=scenario, result="passed" if passed else "failed").inc()
    scenario_duration_seconds.labels(scenario=scenario).observe(duration_seconds)
