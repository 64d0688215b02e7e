"""Control-plane adapters for the scaling verifier.

All adapters implement the ScalingController protocol defined in base.py.

Available Adapters:
    - KubernetesScalingController: Deployments, StatefulSets and OpenShift
      DeploymentConfigs via the kubernetes client (control_plane.kube)
    - InMemoryScalingController: Dictionary-backed control plane with
      simulated readiness lag
"""

from scaling_verifier.control_plane.base import ScalingController, validate_replica_count
from scaling_verifier.control_plane.memory import InMemoryScalingController

__all__ = [
    "ScalingController",
    "InMemoryScalingController",
    "validate_replica_count",
]
