"""Observability utilities for the scaling verifier.

This package provides:
- Prometheus metrics for scale commands, waits, probes and scenarios
- Structured logging with scenario context

A failed verification is only useful if the last observed counts and
identities are visible, so every wait and sampling call reports both.
"""

from scaling_verifier.observability.logging import (
    bind_scenario,
    clear_scenario,
    configure_logging,
    configure_logging_from,
    get_logger,
)
from scaling_verifier.observability.metrics import (
    record_distinct_identities,
    record_probe,
    record_scale_command,
    record_scenario,
    record_wait,
)

__all__ = [
    "configure_logging",
    "configure_logging_from",
    "get_logger",
    "bind_scenario",
    "clear_scenario",
    "record_scale_command",
    "record_wait",
    "record_probe",
    "record_distinct_identities",
    "record_scenario",
]
