"""Unit tests for the HTTP probe and identity extractors.

Responses come from httpx.MockTransport handlers, or from a FastAPI app
through TestClient, so no network is involved.
"""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from scaling_verifier.config import VerifierConfig
from scaling_verifier.exceptions import ProbeError
from scaling_verifier.probe import HttpProbe, body_text, header, json_field


def mock_client(handler) -> httpx.Client:
    return httpx.Client(base_url="http://scaling-app.test", transport=httpx.MockTransport(handler))


class TestExtractors:
    """Tests for turning responses into identity tokens."""

    def test_body_text_strips(self) -> None:
        assert body_text(httpx.Response(200, text="  pod-a\n")) == "pod-a"

    def test_body_text_empty(self) -> None:
        assert body_text(httpx.Response(200, text="  ")) is None

    def test_json_field(self) -> None:
        extract = json_field("hostname")
        assert extract(httpx.Response(200, json={"hostname": "pod-a"})) == "pod-a"

    def test_json_field_stringifies(self) -> None:
        assert json_field("id")(httpx.Response(200, json={"id": 7})) == "7"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"other": "x"}),
            httpx.Response(200, json={"hostname": None}),
            httpx.Response(200, json=["pod-a"]),
            httpx.Response(200, text="not json"),
        ],
    )
    def test_json_field_missing(self, response: httpx.Response) -> None:
        assert json_field("hostname")(response) is None

    def test_header_case_insensitive(self) -> None:
        response = httpx.Response(200, headers={"X-Backend": " pod-b "})
        assert header("x-backend")(response) == "pod-b"

    def test_header_missing(self) -> None:
        assert header("X-Backend")(httpx.Response(200)) is None


class TestHttpProbe:
    """Tests for issuing probes."""

    def test_success_carries_identity(self) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(200, text="pod-a")

        result = HttpProbe(mock_client(handler))()

        assert requested == ["/scaling"]
        assert result.status == 200
        assert result.identity == "pod-a"
        assert result.elapsed_ms is not None and result.elapsed_ms >= 0

    def test_unavailable_has_no_identity(self) -> None:
        """Error pages are never mistaken for a backend identity."""
        probe = HttpProbe(mock_client(lambda request: httpx.Response(503, text="Application is not available")))

        result = probe()

        assert result.status == 503
        assert result.identity is None

    def test_success_with_empty_body(self) -> None:
        result = HttpProbe(mock_client(lambda request: httpx.Response(200, text="")))()
        assert result.status == 200
        assert not result.has_identity

    def test_custom_path_and_extractor(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/info"
            return httpx.Response(200, json={"pod": "pod-c"})

        probe = HttpProbe(mock_client(handler), path="/info", extractor=json_field("pod"))

        assert probe().identity == "pod-c"

    def test_transport_error_becomes_probe_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(ProbeError) as exc_info:
            HttpProbe(mock_client(handler))()

        error = exc_info.value
        assert error.transient is True
        assert error.url == "http://scaling-app.test/scaling"
        assert isinstance(error.cause, httpx.ConnectError)

    def test_unsupported_scheme_is_fatal(self) -> None:
        """A scheme httpx cannot speak fails the same way on every retry."""
        client = httpx.Client(base_url="ftp://scaling-app")

        with pytest.raises(ProbeError) as exc_info:
            HttpProbe(client)()

        assert exc_info.value.transient is False
        assert isinstance(exc_info.value.cause, httpx.UnsupportedProtocol)
        assert exc_info.value.url == "ftp://scaling-app/scaling"

    def test_redirect_loop_is_fatal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "/scaling"})

        client = httpx.Client(
            base_url="http://scaling-app.test",
            transport=httpx.MockTransport(handler),
            follow_redirects=True,
        )

        with pytest.raises(ProbeError) as exc_info:
            HttpProbe(client)()

        assert exc_info.value.transient is False
        assert isinstance(exc_info.value.cause, httpx.TooManyRedirects)

    def test_decoding_error_is_transient(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.DecodingError("Invalid gzip data", request=request)

        with pytest.raises(ProbeError) as exc_info:
            HttpProbe(mock_client(handler))()

        assert exc_info.value.transient is True

    def test_against_asgi_app(self) -> None:
        app = FastAPI()

        @app.get("/scaling", response_class=PlainTextResponse)
        async def scaling():
            return "scaling-app-1"

        result = HttpProbe(TestClient(app))()

        assert result.status == 200
        assert result.identity == "scaling-app-1"


class TestFromConfig:
    """Tests for building a probe from configuration."""

    def test_from_config(self) -> None:
        config = VerifierConfig(
            target_name="app",
            base_url="http://scaling-app.apps.example.com/",
            probe_path="hostname",
            request_timeout_seconds=2.5,
        )

        probe = HttpProbe.from_config(config)
        try:
            assert probe.path == "/hostname"
            assert str(probe.client.base_url) == "http://scaling-app.apps.example.com/"
            assert probe.client.timeout.read == 2.5
            assert probe.extractor is body_text
        finally:
            probe.close()

        assert probe.client.is_closed
