"""Unit tests for the CLI app."""

import httpx
import pytest
from typer.testing import CliRunner

from answer_client.cli.main import app
from answer_client.exceptions import AnswerTransportError
from tests.helpers.sse import (
    RELATED_PAYLOAD,
    SOURCES_PAYLOAD,
    RecordedRequests,
    sse_record,
    streaming_transport,
    text_record,
)


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    """Keep the app callback from replacing pytest's log handlers."""
    from answer_client.cli import main as cli_main

    monkeypatch.setattr(cli_main, "configure_logging", lambda level=None: None)


@pytest.fixture
def fake_service(mock_settings, monkeypatch):
    """Serve a canned answer to every session the CLI creates."""
    from answer_client.session import AnswerSession

    requests = RecordedRequests()
    chunks = [
        sse_record("sources", SOURCES_PAYLOAD),
        text_record("Run "),
        text_record("the installer."),
        sse_record("related-queries", RELATED_PAYLOAD),
    ]
    transport = streaming_transport(chunks, requests=requests)

    def client(self):
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(transport=transport)
        return self._http_client

    monkeypatch.setattr(AnswerSession, "_get_http_client", client)
    return requests


class TestMainApp:
    """Test main CLI app registration."""

    def test_app_name(self):
        assert app.info.name == "answer-client"

    def test_app_help(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "ask" in result.output
        assert "version" in result.output

    def test_no_args_shows_help(self, runner):
        result = runner.invoke(app, [])
        assert "Usage:" in result.output

    def test_version(self, runner):
        from answer_client import __version__

        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"answer-client {__version__}" in result.output


class TestAskCommand:
    def test_streams_answer_sources_and_related(self, runner, fake_service):
        result = runner.invoke(app, ["ask", "How do I install?"])

        assert result.exit_code == 0, result.output
        assert "Run the installer." in result.output
        assert "Sources (2)" in result.output
        assert "doc-1" in result.output
        assert "Installing" in result.output
        assert "Related questions" in result.output
        assert RELATED_PAYLOAD[0] in result.output

    def test_options_reach_the_request(self, runner, fake_service):
        import json

        result = runner.invoke(
            app,
            [
                "ask",
                "How do I install?",
                "--related",
                "0",
                "--context",
                "new user",
                "--api-key",
                "cli-key",
            ],
        )

        assert result.exit_code == 0, result.output
        [request] = fake_service
        assert request.url.params["api-key"] == "cli-key"
        form = fake_service.form()
        assert "related" not in form
        assert json.loads(form["userData"]) == "new user"

    def test_client_error_exits_1(self, runner, monkeypatch):
        from answer_client.cli import main as cli_main

        async def failing_ask(*args):
            raise AnswerTransportError("Answer endpoint returned HTTP 503", status_code=503)

        monkeypatch.setattr(cli_main, "_run_ask", failing_ask)

        result = runner.invoke(app, ["ask", "anything"])

        assert result.exit_code == 1
        assert "HTTP 503" in result.output

    def test_passes_arguments(self, runner, monkeypatch):
        from answer_client.cli import main as cli_main

        received = []

        async def fake_ask(*args):
            received.append(args)

        monkeypatch.setattr(cli_main, "_run_ask", fake_ask)

        result = runner.invoke(
            app, ["ask", "q", "-e", "https://search.example.com", "-r", "5"]
        )

        assert result.exit_code == 0
        assert received == [("q", "https://search.example.com", None, 5, None)]
