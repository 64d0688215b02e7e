"""
Scaling verification for orchestrated workloads.

This package drives an external control plane to a replica count, waits for
the ready count to converge, and samples a load-balanced endpoint to confirm
how many distinct replicas actually answer.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
