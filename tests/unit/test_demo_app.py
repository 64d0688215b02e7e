"""Tests for the demo backend echoing its replica identity."""

from fastapi.testclient import TestClient

import demo_app


def test_scaling_returns_instance_id() -> None:
    client = TestClient(demo_app.app)

    response = client.get("/scaling")

    assert response.status_code == 200
    assert response.text == demo_app.INSTANCE_ID
    assert response.headers["content-type"].startswith("text/plain")


def test_identity_is_stable_across_requests() -> None:
    client = TestClient(demo_app.app)
    assert client.get("/scaling").text == client.get("/scaling").text


def test_health_reports_instance() -> None:
    response = TestClient(demo_app.app).get("/health")

    assert response.json() == {"status": "ok", "instance": demo_app.INSTANCE_ID}


def test_root_lists_endpoints() -> None:
    body = TestClient(demo_app.app).get("/").json()

    assert "GET /scaling" in body["endpoints"]
