"""Configuration module for the scaling verifier.

This module provides the VerifierConfig class, which names the workload under
test, where to probe it, and the timing used by the convergence waiter and
the identity sampler.

Example:
    Basic usage with defaults:

        >>> config = VerifierConfig(target_name="scaling-app")
        >>> config.timeout_seconds
        60
        >>> config.readiness_interval_seconds
        0.1

    Loading from environment:

        >>> import os
        >>> os.environ['SCALING_TARGET_NAME'] = 'scaling-app'
        >>> os.environ['SCALING_BASE_URL'] = 'http://scaling-app.apps.example.com'
        >>> config = VerifierConfig.from_env()

    Loading from dictionary:

        >>> config = VerifierConfig.from_dict({
        ...     'target_name': 'scaling-app',
        ...     'workload_kind': 'deploymentconfig',
        ...     'namespace': 'ts-scaling',
        ... })
"""

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from scaling_verifier.models import ScaleTarget, WorkloadKind

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class VerifierConfig(BaseModel):
    """Configuration for a scaling verification run.

    Attributes:
        target_name: Name of the workload to scale.
        namespace: Namespace (or OpenShift project) of the workload.
        workload_kind: deployment, statefulset or deploymentconfig.
        kube_context: kubeconfig context to use outside a cluster. None uses
            the current context.
        base_url: Base URL of the load-balanced route or service.
        probe_path: Path probed for the backend identity. Default "/scaling".
        timeout_seconds: Deadline for every wait and sampling call (1-3600).
            Default is 60.
        readiness_interval_ms: Poll interval while waiting for ready replicas.
            Default is 100.
        health_interval_ms: Poll interval of the initial health gate.
            Default is 1000.
        sample_interval_ms: Delay between identity probes. Default is 100.
        success_status: Status a healthy backend answers with. Default 200.
        unavailable_status: Status expected once scaled to zero. Default 503.
        unavailable_probe_count: Probes issued after scaling to zero, each of
            which must answer unavailable_status. Default is 5.
        request_timeout_seconds: Per-request HTTP timeout. Default is 5.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_logs: Emit JSON logs instead of console output.

    Note:
        This class is immutable (frozen=True). Create a new instance if you
        need different settings.
    """

    target_name: str = Field(..., min_length=1, description="Name of the workload to scale")
    namespace: str = Field(default="default", min_length=1, description="Workload namespace")
    workload_kind: WorkloadKind = Field(
        default=WorkloadKind.DEPLOYMENT,
        description="Workload kind: deployment, statefulset or deploymentconfig",
    )
    kube_context: str | None = Field(default=None, description="kubeconfig context")
    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the load-balanced endpoint",
    )
    probe_path: str = Field(default="/scaling", description="Path probed for the identity")
    timeout_seconds: int = Field(default=60, description="Deadline for waits (1-3600)")
    readiness_interval_ms: int = Field(default=100, description="Ready-replica poll interval")
    health_interval_ms: int = Field(default=1000, description="Health gate poll interval")
    sample_interval_ms: int = Field(default=100, description="Delay between identity probes")
    success_status: int = Field(default=200, ge=100, le=599, description="Healthy status")
    unavailable_status: int = Field(default=503, ge=100, le=599, description="Scaled-to-zero status")
    unavailable_probe_count: int = Field(default=5, description="Probes issued at zero replicas")
    request_timeout_seconds: float = Field(default=5.0, gt=0, description="HTTP request timeout")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    json_logs: bool = Field(default=True, description="Emit JSON logs")

    model_config = {"frozen": True}

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Normalize the log level to uppercase.

        Example:
            >>> VerifierConfig(target_name="app", log_level="debug").log_level
            'DEBUG'
        """
        if isinstance(v, str):
            v = v.strip().upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Valid levels are: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        return v

    @field_validator("probe_path")
    @classmethod
    def validate_probe_path(cls, v: str) -> str:
        """Ensure the probe path is absolute.

        Example:
            >>> VerifierConfig(target_name="app", probe_path="scaling").probe_path
            '/scaling'
        """
        v = v.strip()
        if not v.startswith("/"):
            v = f"/{v}"
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout_seconds(cls, v: int) -> int:
        """Validate the wait deadline is between 1 second and 1 hour."""
        if not (1 <= v <= 3600):
            raise ValueError(f"timeout_seconds must be between 1 and 3600, got {v}")
        return v

    @field_validator("readiness_interval_ms", "health_interval_ms", "sample_interval_ms")
    @classmethod
    def validate_interval_ms(cls, v: int) -> int:
        """Validate poll intervals are between 1 ms and 60 s."""
        if not (1 <= v <= 60_000):
            raise ValueError(f"poll intervals must be between 1 and 60000 ms, got {v}")
        return v

    @field_validator("unavailable_probe_count")
    @classmethod
    def validate_unavailable_probe_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"unavailable_probe_count must be >= 1, got {v}")
        return v

    @model_validator(mode="after")
    def validate_statuses(self) -> "VerifierConfig":
        """Reject configurations where healthy and scaled-to-zero look the same."""
        if self.success_status == self.unavailable_status:
            raise ValueError(
                "success_status and unavailable_status must differ, "
                f"both are {self.success_status}"
            )
        return self

    @property
    def readiness_interval_seconds(self) -> float:
        return self.readiness_interval_ms / 1000.0

    @property
    def health_interval_seconds(self) -> float:
        return self.health_interval_ms / 1000.0

    @property
    def sample_interval_seconds(self) -> float:
        return self.sample_interval_ms / 1000.0

    def target(self) -> ScaleTarget:
        """Build the scale target handle described by this configuration.

        Example:
            >>> VerifierConfig(target_name="app", namespace="ns").target().name
            'app'
        """
        return ScaleTarget(
            name=self.target_name,
            namespace=self.namespace,
            kind=self.workload_kind,
        )

    @classmethod
    def from_env(cls, prefix: str = "SCALING_") -> "VerifierConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, for example
        SCALING_TARGET_NAME or SCALING_TIMEOUT_SECONDS.

        Args:
            prefix: Prefix for environment variable names. Default "SCALING_".

        Returns:
            VerifierConfig populated from environment variables.

        Raises:
            ValidationError: If a variable holds an invalid value or
                SCALING_TARGET_NAME is missing.
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "target_name": str,
            "namespace": str,
            "workload_kind": str,
            "kube_context": str,
            "base_url": str,
            "probe_path": str,
            "timeout_seconds": int,
            "readiness_interval_ms": int,
            "health_interval_ms": int,
            "sample_interval_ms": int,
            "success_status": int,
            "unavailable_status": int,
            "unavailable_probe_count": int,
            "request_timeout_seconds": float,
            "log_level": str,
            "json_logs": bool,
        }

        for field_name, field_type in field_types.items():
            env_var = f"{prefix}{field_name.upper()}"
            env_value = os.environ.get(env_var)

            if env_value is not None:
                if field_type is int:
                    config_dict[field_name] = int(env_value)
                elif field_type is float:
                    config_dict[field_name] = float(env_value)
                elif field_type is bool:
                    config_dict[field_name] = env_value.strip().lower() in ("1", "true", "yes", "on")
                else:
                    config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "VerifierConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
