"""Core verification logic for the scaling verifier.

This package contains:
- Timing: injected clocks (real and manual)
- Waiter: bounded polling until a condition converges
- Sampler: distinct backend identity counting behind a load balancer
- Scenario: scale-up, scale-down and scale-to-zero composed from the above

The core is independent of any particular control plane or HTTP client;
both are passed in.
"""

from scaling_verifier.core.sampler import ReplicaIdentitySampler
from scaling_verifier.core.timing import Clock, ManualClock, SystemClock
from scaling_verifier.core.waiter import ConvergenceWaiter, default_is_transient

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "ConvergenceWaiter",
    "ReplicaIdentitySampler",
    "default_is_transient",
]
