"""Kubernetes and OpenShift scaling controller.

This module implements the ScalingController protocol with the official
kubernetes client. Deployments and StatefulSets are scaled through their
apps/v1 scale subresource; OpenShift DeploymentConfigs through the
apps.openshift.io/v1 scale subresource via the custom objects API.

Ready replicas are read from the workload status. Kubernetes omits
readyReplicas when no replica is ready, which is reported as 0.

Error mapping:
    - ApiException with status 0, 408, 409, 429 or 5xx -> transient ControlPlaneError
    - ApiException with any other status (401, 403, 404, 422) -> non-transient
    - urllib3 transport failures -> transient ControlPlaneError

Examples:
    Scaling a DeploymentConfig::

        from scaling_verifier.control_plane.kube import KubernetesScalingController
        from scaling_verifier.models import ScaleTarget, WorkloadKind

        controller = KubernetesScalingController.from_config(config)
        target = ScaleTarget(
            name="scaling-app",
            namespace="ts-scaling",
            kind=WorkloadKind.DEPLOYMENT_CONFIG,
        )
        controller.scale_to(target, 2)
        controller.ready_replicas(target)
"""

from typing import Any

from kubernetes import client
from kubernetes import config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from scaling_verifier.config import VerifierConfig
from scaling_verifier.control_plane.base import ScalingController, validate_replica_count
from scaling_verifier.exceptions import ControlPlaneError
from scaling_verifier.models import ScaleTarget, WorkloadKind
from scaling_verifier.observability.logging import get_logger

logger = get_logger(__name__)

OPENSHIFT_APPS_GROUP = "apps.openshift.io"
OPENSHIFT_APPS_VERSION = "v1"
DEPLOYMENT_CONFIG_PLURAL = "deploymentconfigs"

TRANSIENT_STATUS_CODES = {0, 408, 409, 429}


def is_transient_status(status: int | None) -> bool:
    """Whether an API status code is worth retrying.

    Examples:
        >>> is_transient_status(503)
        True
        >>> is_transient_status(404)
        False
    """
    if status is None:
        return True
    return status in TRANSIENT_STATUS_CODES or status >= 500


class KubernetesScalingController(ScalingController):
    """Scale workloads through the Kubernetes API.

    Attributes:
        apps_api: apps/v1 API used for Deployments and StatefulSets.
        custom_api: Custom objects API used for DeploymentConfigs.
    """

    def __init__(
        self,
        apps_api: client.AppsV1Api | None = None,
        custom_api: client.CustomObjectsApi | None = None,
    ) -> None:
        """Initialize with API clients, built from the loaded configuration if omitted."""
        self.apps_api = apps_api or client.AppsV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()

    @classmethod
    def from_config(cls, config: VerifierConfig) -> "KubernetesScalingController":
        """Load cluster credentials and build a controller.

        In-cluster service account credentials are tried first; outside a
        cluster the local kubeconfig is used, with config.kube_context if set.

        Raises:
            ControlPlaneError: If no usable credentials were found.
        """
        try:
            kube_config.load_incluster_config()
        except ConfigException:
            try:
                kube_config.load_kube_config(context=config.kube_context)
            except (ConfigException, OSError) as e:
                raise ControlPlaneError(
                    message=f"Unable to load cluster credentials: {e}",
                    target=config.target_name,
                    transient=False,
                    cause=e,
                ) from e
        return cls()

    def scale_to(self, target: ScaleTarget, count: int) -> None:
        validate_replica_count(count)
        body = {"spec": {"replicas": count}}

        def call() -> Any:
            if target.kind is WorkloadKind.DEPLOYMENT:
                return self.apps_api.patch_namespaced_deployment_scale(
                    target.name, target.namespace, body
                )
            if target.kind is WorkloadKind.STATEFUL_SET:
                return self.apps_api.patch_namespaced_stateful_set_scale(
                    target.name, target.namespace, body
                )
            return self.custom_api.patch_namespaced_custom_object_scale(
                OPENSHIFT_APPS_GROUP,
                OPENSHIFT_APPS_VERSION,
                target.namespace,
                DEPLOYMENT_CONFIG_PLURAL,
                target.name,
                body,
            )

        self._call(target, f"scale to {count}", call)
        logger.debug("control_plane.scaled", target=str(target), replicas=count)

    def ready_replicas(self, target: ScaleTarget) -> int:
        if target.kind is WorkloadKind.DEPLOYMENT:
            status = self._call(
                target,
                "read status",
                lambda: self.apps_api.read_namespaced_deployment_status(
                    target.name, target.namespace
                ),
            ).status
            return _ready_count(status)

        if target.kind is WorkloadKind.STATEFUL_SET:
            status = self._call(
                target,
                "read status",
                lambda: self.apps_api.read_namespaced_stateful_set_status(
                    target.name, target.namespace
                ),
            ).status
            return _ready_count(status)

        obj = self._call(
            target,
            "read status",
            lambda: self.custom_api.get_namespaced_custom_object_status(
                OPENSHIFT_APPS_GROUP,
                OPENSHIFT_APPS_VERSION,
                target.namespace,
                DEPLOYMENT_CONFIG_PLURAL,
                target.name,
            ),
        )
        return int((obj.get("status") or {}).get("readyReplicas") or 0)

    def _call(self, target: ScaleTarget, action: str, call: Any) -> Any:
        try:
            return call()
        except ApiException as e:
            raise ControlPlaneError(
                message=f"Failed to {action} for {target}: {e.status} {e.reason}",
                target=target.name,
                status_code=e.status,
                transient=is_transient_status(e.status),
                cause=e,
            ) from e
        except HTTPError as e:
            raise ControlPlaneError(
                message=f"Failed to {action} for {target}: {e}",
                target=target.name,
                transient=True,
                cause=e,
            ) from e


def _ready_count(status: Any) -> int:
    if status is None or status.ready_replicas is None:
        return 0
    return int(status.ready_replicas)
