"""Structured logging configuration for the scaling verifier.

This module provides structured logging using structlog. CI runs emit JSON so
the last observed replica counts and identities of a failed run can be pulled
out of the job log; local runs use the console renderer.

The verifier binds context for:
- Scale targets
- Expected and observed replica counts
- Observed identity tokens
- Scenario names

Examples:
    Configure logging::

        from scaling_verifier.observability.logging import configure_logging

        configure_logging(level="INFO", json_output=True)

    Use the logger::

        from scaling_verifier.observability.logging import get_logger

        logger = get_logger(__name__)
        logger.info(
            "wait.satisfied",
            condition="ready replicas == 2",
            attempts=14,
            elapsed_seconds=1.4,
        )

    Output (JSON)::

        {
            "condition": "ready replicas == 2",
            "attempts": 14,
            "elapsed_seconds": 1.4,
            "event": "wait.satisfied",
            "level": "info",
            "timestamp": "2024-01-01T00:00:00.000000Z"
        }
"""

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import structlog

if TYPE_CHECKING:
    from scaling_verifier.config import VerifierConfig

# Client libraries that log every API call and connection at INFO/DEBUG.
NOISY_LIBRARIES = ("kubernetes", "urllib3", "httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for a verification run.

    Call once before running scenarios. Log lines go to stream (stderr by
    default), leaving stdout to whatever invoked the verifier. The client
    libraries in NOISY_LIBRARIES are held at WARNING unless level is DEBUG,
    so a timeout's last observations are not buried under polling noise.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON logs; if False, use console format.
            Colors are only used when stream is a terminal.
        stream: Where log lines are written. Defaults to sys.stderr.

    Examples:
        >>> configure_logging(level="DEBUG", json_output=True)
        >>> configure_logging(level="INFO", json_output=False)
    """
    stream = stream or sys.stderr
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level, force=True)
    library_level = numeric_level if numeric_level == logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def configure_logging_from(config: "VerifierConfig", stream: TextIO | None = None) -> None:
    """Configure logging from a VerifierConfig's log_level and json_logs."""
    configure_logging(level=config.log_level, json_output=config.json_logs, stream=stream)


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)


def bind_scenario(scenario: str, target: str) -> None:
    """Bind the running scenario to every log line until cleared.

    Args:
        scenario: Scenario name.
        target: Printable scale target.
    """
    structlog.contextvars.bind_contextvars(scenario=scenario, target=target)


def clear_scenario() -> None:
    """Drop the scenario context bound by bind_scenario."""
    structlog.contextvars.unbind_contextvars("scenario", "target")
