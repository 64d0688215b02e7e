"""End-to-end scaling scenarios.

Each module drives ScalingScenario against the in-memory control plane and a
fake load balancer served through TestClient, on a manual clock.
"""
