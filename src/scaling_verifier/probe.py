"""HTTP probe against the load-balanced endpoint.

A probe issues one GET to a fixed path and turns the response into a
ProbeResult: the status code plus, for 2xx responses, an identity token
naming the backend that answered.

Identity extraction is pluggable. Whatever extractor is used must honour one
contract: the token is stable for a given backend instance for the duration
of a run, and differs between instances. Hostnames and pod names echoed by
the backend satisfy it; request IDs do not.

Examples:
    Probing a route that echoes the pod hostname::

        import httpx
        from scaling_verifier.probe import HttpProbe

        probe = HttpProbe(httpx.Client(base_url="http://scaling-app.apps.example.com"))
        result = probe()
        result.status, result.identity
        # (200, 'scaling-app-1-x7k2p')

    Reading the identity from a JSON field::

        probe = HttpProbe(client, path="/info", extractor=json_field("pod"))
"""

import time
from collections.abc import Callable
from typing import Any

import httpx

from scaling_verifier.config import VerifierConfig
from scaling_verifier.exceptions import ProbeError
from scaling_verifier.models import ProbeResult
from scaling_verifier.observability.logging import get_logger
from scaling_verifier.observability.metrics import record_probe

logger = get_logger(__name__)

IdentityExtractor = Callable[[httpx.Response], str | None]

# Request failures that repeat identically on every attempt.
FATAL_REQUEST_ERRORS: tuple[type[Exception], ...] = (
    httpx.InvalidURL,
    httpx.UnsupportedProtocol,
    httpx.TooManyRedirects,
)


def body_text(response: httpx.Response) -> str | None:
    """Use the stripped response body as the identity; empty bodies have none."""
    text = response.text.strip()
    return text or None


def json_field(name: str) -> IdentityExtractor:
    """Build an extractor reading a top-level JSON field.

    Invalid JSON, a non-object body or a missing/null field yields no identity.

    Examples:
        >>> extract = json_field("hostname")
    """

    def extract(response: httpx.Response) -> str | None:
        try:
            payload: Any = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        value = payload.get(name)
        return None if value is None else str(value)

    return extract


def header(name: str) -> IdentityExtractor:
    """Build an extractor reading a response header (case-insensitive)."""

    def extract(response: httpx.Response) -> str | None:
        value = response.headers.get(name)
        if value is None:
            return None
        return value.strip() or None

    return extract


class HttpProbe:
    """Callable probe issuing GET requests through an httpx client.

    Attributes:
        client: The httpx client, usually with base_url set.
        path: Path requested on every probe.
        extractor: Turns a 2xx response into an identity token.
    """

    def __init__(
        self,
        client: httpx.Client,
        path: str = "/scaling",
        extractor: IdentityExtractor = body_text,
    ) -> None:
        self.client = client
        self.path = path
        self.extractor = extractor

    @property
    def url(self) -> str:
        """Absolute URL probed, for diagnostics."""
        return f"{str(self.client.base_url).rstrip('/')}/{self.path.lstrip('/')}"

    @classmethod
    def from_config(
        cls,
        config: VerifierConfig,
        extractor: IdentityExtractor = body_text,
    ) -> "HttpProbe":
        """Build a probe with a dedicated client for config.base_url."""
        client = httpx.Client(
            base_url=config.base_url,
            timeout=config.request_timeout_seconds,
            follow_redirects=True,
        )
        return cls(client, path=config.probe_path, extractor=extractor)

    def __call__(self) -> ProbeResult:
        """Issue one probe.

        Returns:
            The status and, for 2xx responses, the extracted identity.

        Raises:
            ProbeError: If the request failed before a response arrived. It
                is transient for connection, timeout and decoding failures,
                and fatal for the errors in FATAL_REQUEST_ERRORS.
        """
        started = time.perf_counter()
        try:
            response = self.client.get(self.path)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            transient = not isinstance(e, FATAL_REQUEST_ERRORS)
            record_probe(None)
            logger.debug(
                "probe.failed",
                path=self.path,
                error=str(e),
                error_type=type(e).__name__,
                transient=transient,
            )
            raise ProbeError(
                message=f"Probe of {self.path} failed: {e}",
                url=self.url,
                cause=e,
                transient=transient,
            ) from e

        record_probe(response.status_code)
        identity = self.extractor(response) if response.is_success else None
        return ProbeResult(
            status=response.status_code,
            identity=identity,
            elapsed_ms=(time.perf_counter() - started) * 1000.0,
        )

    def close(self) -> None:
        self.client.close()
