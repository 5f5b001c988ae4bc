"""Tests for the HTTP endpoints."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from tests.helpers import parse_frames, sse, text
from ybproxy import __version__
from ybproxy.api.app import create_app
from ybproxy.config.logging import LoggingSettings
from ybproxy.config.settings import Settings


@pytest.fixture
def test_client() -> TestClient:
    return TestClient(create_app(Settings()))


def split_frames(body: str) -> list[bytes]:
    return [f"{part}\n\n".encode() for part in body.split("\n\n") if part]


@pytest.mark.integration
class TestEndpoints:
    """Test the health and replay endpoints."""

    def test_health_check(self, test_client: TestClient) -> None:
        """Test health check endpoint."""
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}

    def test_replay_plain(self, test_client: TestClient) -> None:
        """Test a captured stream is transformed frame by frame."""
        response = test_client.post(
            "/v1/replay?model=hunyuan-t1",
            content=sse(text("Hello "), text("world")),
            headers={"content-type": "text/event-stream", "x-request-id": "r-42"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-request-id"] == "r-42"

        frames = parse_frames(split_frames(response.text))
        assert frames[0]["model"] == "hunyuan-t1"
        assert frames[0]["choices"][0]["delta"]["content"] == "Hello "
        assert frames[-2]["choices"][0]["finish_reason"] == "stop"
        assert frames[-1] == "[DONE]"

    def test_replay_with_tools(self, test_client: TestClient) -> None:
        """Test declared tools switch on tool call extraction."""
        body = sse(
            text("<tool_use><tool_name>search</tool_name>"),
            text('<arguments>{"q":"x"}</arguments></tool_use>'),
        )

        response = test_client.post(
            "/v1/replay?tool=search",
            content=body,
            headers={"content-type": "text/event-stream"},
        )

        frames = parse_frames(split_frames(response.text))
        tool_call = frames[0]["choices"][0]["delta"]["tool_calls"][0]
        assert tool_call["function"] == {"name": "search", "arguments": '{"q":"x"}'}
        assert frames[0]["choices"][0]["finish_reason"] == "tool_calls"

    def test_replay_rejected_body(self, test_client: TestClient) -> None:
        """Test an HTML body is reported as a rejection."""
        response = test_client.post(
            "/v1/replay",
            content=b"<html><body>blocked</body></html>",
            headers={"content-type": "text/html"},
        )

        frames = parse_frames(split_frames(response.text))
        assert frames[0]["error"] == {
            "message": "rejected by server",
            "type": "server error",
        }


@pytest.mark.unit
class TestAppLogging:
    """Test logging setup performed by the application factory."""

    @pytest.mark.parametrize(("is_tty", "expected"), [(True, False), (False, True)])
    def test_auto_format_follows_terminal(self, is_tty: bool, expected: bool) -> None:
        """Test the auto format picks JSON only when stderr is not a terminal."""
        settings = Settings(logging=LoggingSettings(format="auto"))

        with (
            patch("ybproxy.api.app.structlog.is_configured", return_value=False),
            patch("ybproxy.api.app.setup_logging") as mock_setup,
            patch("ybproxy.api.app.sys") as mock_sys,
        ):
            mock_sys.stderr.isatty.return_value = is_tty
            create_app(settings)

        mock_setup.assert_called_once()
        assert mock_setup.call_args.kwargs["json_logs"] is expected
