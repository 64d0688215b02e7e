"""Unit tests for logging context and Prometheus metric helpers."""

import io
import json
import logging

import pytest
import structlog
from prometheus_client import REGISTRY

from scaling_verifier.config import VerifierConfig
from scaling_verifier.observability import (
    bind_scenario,
    clear_scenario,
    configure_logging,
    configure_logging_from,
    get_logger,
    record_distinct_identities,
    record_probe,
    record_scale_command,
    record_scenario,
    record_wait,
)


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def log_stream():
    """Route log output into a buffer, restoring defaults afterwards."""
    stream = io.StringIO()
    yield stream
    structlog.reset_defaults()
    clear_scenario()


class TestConfigureLogging:
    """Tests for the logging setup used by a verification run."""

    def test_json_lines_carry_scenario_context(self, log_stream: io.StringIO) -> None:
        configure_logging(level="INFO", json_output=True, stream=log_stream)
        bind_scenario("scale_up", "deployment/ts-scaling/scaling-app")

        get_logger("test").info("wait.satisfied", attempts=3)

        line = json.loads(log_stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "wait.satisfied"
        assert line["attempts"] == 3
        assert line["scenario"] == "scale_up"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_level_filters_lower_events(self, log_stream: io.StringIO) -> None:
        configure_logging(level="warning", json_output=True, stream=log_stream)

        get_logger("test").info("sample.identity_observed")
        get_logger("test").warning("sample.timeout")

        output = log_stream.getvalue()
        assert "sample.identity_observed" not in output
        assert "sample.timeout" in output

    def test_console_output_has_no_colors_off_terminal(self, log_stream: io.StringIO) -> None:
        configure_logging(level="INFO", json_output=False, stream=log_stream)

        get_logger("test").info("scenario.passed")

        output = log_stream.getvalue()
        assert "scenario.passed" in output
        assert "\x1b[" not in output

    def test_client_libraries_held_at_warning(self, log_stream: io.StringIO) -> None:
        configure_logging(level="INFO", stream=log_stream)
        assert logging.getLogger("kubernetes").level == logging.WARNING

        configure_logging(level="DEBUG", stream=log_stream)
        assert logging.getLogger("urllib3").level == logging.DEBUG

    def test_invalid_level(self, log_stream: io.StringIO) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="chatty", stream=log_stream)

    def test_from_config(self, log_stream: io.StringIO) -> None:
        config = VerifierConfig(target_name="app", log_level="ERROR", json_logs=True)

        configure_logging_from(config, stream=log_stream)
        get_logger("test").warning("wait.timeout")
        get_logger("test").error("scenario.failed")

        output = log_stream.getvalue()
        assert "wait.timeout" not in output
        assert json.loads(output.strip())["event"] == "scenario.failed"


class TestScenarioContext:
    """Tests for binding the scenario to log lines."""

    def test_bind_and_clear(self) -> None:
        bind_scenario("scale_up", "deployment/ts-scaling/scaling-app")

        context = structlog.contextvars.get_contextvars()
        assert context["scenario"] == "scale_up"
        assert context["target"] == "deployment/ts-scaling/scaling-app"

        clear_scenario()
        assert "scenario" not in structlog.contextvars.get_contextvars()


class TestMetrics:
    """Tests for the record_* helpers."""

    def test_record_scale_command(self) -> None:
        before = sample("scaling_verifier_scale_commands_total", {"result": "error"})
        record_scale_command(False)
        assert sample("scaling_verifier_scale_commands_total", {"result": "error"}) == before + 1

    def test_record_probe_transport_failure(self) -> None:
        before = sample("scaling_verifier_probes_total", {"status_code": "error"})
        record_probe(None)
        assert sample("scaling_verifier_probes_total", {"status_code": "error"}) == before + 1

    def test_record_probe_status(self) -> None:
        before = sample("scaling_verifier_probes_total", {"status_code": "503"})
        record_probe(503)
        assert sample("scaling_verifier_probes_total", {"status_code": "503"}) == before + 1

    def test_record_wait(self) -> None:
        before = sample("scaling_verifier_waits_total", {"outcome": "timeout"})
        record_wait(False, 600)
        assert sample("scaling_verifier_waits_total", {"outcome": "timeout"}) == before + 1

    def test_record_distinct_identities(self) -> None:
        record_distinct_identities(3)
        assert sample("scaling_verifier_distinct_identities") == 3

    def test_record_scenario(self) -> None:
        labels = {"scenario": "scale_down", "result": "failed"}
        before = sample("scaling_verifier_scenarios_total", labels)
        record_scenario("scale_down", False, 12.5)
        assert sample("scaling_verifier_scenarios_total", labels) == before + 1
