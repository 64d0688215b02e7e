"""
Pytest configuration and shared fixtures for scaling_verifier tests.

The fake load balancer is a FastAPI app served through TestClient. It routes
each request to one of the ready replicas of the in-memory control plane and
answers 503 when none is ready, like an OpenShift router in front of a
scaled-to-zero service.
"""

import itertools
from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from scaling_verifier.config import VerifierConfig
from scaling_verifier.control_plane.memory import InMemoryScalingController
from scaling_verifier.core.timing import ManualClock
from scaling_verifier.models import ScaleTarget, WorkloadKind
from scaling_verifier.probe import HttpProbe

LoadBalancerFactory = Callable[..., TestClient]


@pytest.fixture
def clock() -> ManualClock:
    """Provide a manual clock starting at zero."""
    return ManualClock()


@pytest.fixture
def target() -> ScaleTarget:
    """Provide the workload under test."""
    return ScaleTarget(name="scaling-app", namespace="ts-scaling", kind=WorkloadKind.DEPLOYMENT)


@pytest.fixture
def config() -> VerifierConfig:
    """Provide a config with the default timings."""
    return VerifierConfig(target_name="scaling-app", namespace="ts-scaling")


@pytest.fixture
def controller(clock: ManualClock, target: ScaleTarget) -> InMemoryScalingController:
    """Provide a control plane running one replica with half a second of readiness lag."""
    plane = InMemoryScalingController(clock=clock, readiness_delay_seconds=0.5)
    plane.add_workload(target, replicas=1)
    return plane


@pytest.fixture
def load_balancer_factory(
    controller: InMemoryScalingController,
    target: ScaleTarget,
) -> LoadBalancerFactory:
    """Build TestClients for a fake load balancer in front of the control plane.

    Policies:
        round_robin: rotate through the ready replicas.
        sticky: always route to the oldest ready replica.
        ignore_readiness: always answer 200 from "stale-backend", even at zero.
    """

    def factory(policy: str = "round_robin") -> TestClient:
        app = FastAPI()
        counter = itertools.count()

        @app.get("/scaling", response_class=PlainTextResponse)
        async def scaling():
            if policy == "ignore_readiness":
                return PlainTextResponse("stale-backend")

            instances = controller.instances(target)
            if not instances:
                return PlainTextResponse("Application is not available", status_code=503)
            if policy == "sticky":
                return PlainTextResponse(instances[0])
            return PlainTextResponse(instances[next(counter) % len(instances)])

        return TestClient(app)

    return factory


@pytest.fixture
def probe(load_balancer_factory: LoadBalancerFactory) -> HttpProbe:
    """Provide a probe against a round-robin load balancer."""
    return HttpProbe(load_balancer_factory("round_robin"), path="/scaling")
