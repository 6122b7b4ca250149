"""Tests for the Gemini provider client."""

from unittest.mock import MagicMock

import pytest
import requests

from arrivals_notifier.config import Config
from arrivals_notifier.errors import ConfigurationError, ParseError, TransportError
from arrivals_notifier.services.gemini_client import GeminiClient


def make_response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    response.json.return_value = payload
    return response


def candidate_payload(*texts: str) -> dict:
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": t} for t in texts]},
                "groundingMetadata": {
                    "groundingChunks": [{"web": {"uri": "https://example.org", "title": "KEJ"}}]
                },
            }
        ]
    }


@pytest.fixture
def config(monkeypatch) -> Config:
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.delenv("API_KEY", raising=False)
    return Config()


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


class TestGenerate:
    """Tests for GeminiClient.generate."""

    def test_returns_candidate_text(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(payload=candidate_payload('[{"id":', '"a"}]'))
        client = GeminiClient(config, session_factory=lambda: session)

        assert client.generate("prompt") == '[{"id":"a"}]'

    def test_request_shape(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(payload=candidate_payload("[]"))
        GeminiClient(config, session_factory=lambda: session).generate("hello")

        args, kwargs = session.post.call_args
        assert args[0].endswith("/models/gemini-2.5-flash:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "test-key"
        assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "hello"
        assert kwargs["json"]["tools"] == [{"google_search": {}}]
        assert kwargs["timeout"] == 60

    def test_grounding_can_be_disabled(self, monkeypatch, session: MagicMock) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("SEARCH_GROUNDING", "false")
        session.post.return_value = make_response(payload=candidate_payload("[]"))

        GeminiClient(Config(), session_factory=lambda: session).generate("hello")

        assert "tools" not in session.post.call_args.kwargs["json"]

    def test_missing_key_raises_before_request(self, monkeypatch, session: MagicMock) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        client = GeminiClient(Config(), session_factory=lambda: session)

        with pytest.raises(ConfigurationError):
            client.generate("prompt")
        session.post.assert_not_called()

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_key_is_configuration_error(
        self, config: Config, session: MagicMock, status_code: int
    ) -> None:
        session.post.return_value = make_response(status_code=status_code, text="denied")
        with pytest.raises(ConfigurationError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")

    def test_invalid_key_reported_as_bad_request(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(
            status_code=400, text='{"error": {"details": [{"reason": "API_KEY_INVALID"}]}}'
        )
        with pytest.raises(ConfigurationError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")

    def test_server_error_is_transport_error(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(status_code=503, text="unavailable")
        with pytest.raises(TransportError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")

    def test_network_failure_is_transport_error(self, config: Config, session: MagicMock) -> None:
        session.post.side_effect = requests.ConnectionError("no route to host")
        with pytest.raises(TransportError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")

    def test_no_candidates_is_parse_error(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(payload={"promptFeedback": {"blockReason": "OTHER"}})
        with pytest.raises(ParseError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")

    def test_empty_text_is_parse_error(self, config: Config, session: MagicMock) -> None:
        session.post.return_value = make_response(payload=candidate_payload(""))
        with pytest.raises(ParseError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")


class TestSessions:
    """Tests for per-request session handling."""

    def test_each_request_uses_its_own_session(self, config: Config) -> None:
        """Test that concurrent today/tomorrow fetches never share a session."""
        sessions = []

        def factory() -> MagicMock:
            session = MagicMock()
            session.post.return_value = make_response(payload=candidate_payload("[]"))
            sessions.append(session)
            return session

        client = GeminiClient(config, session_factory=factory)
        client.generate("today")
        client.generate("tomorrow")

        assert len(sessions) == 2
        assert sessions[0] is not sessions[1]
        for session in sessions:
            session.post.assert_called_once()
            session.close.assert_called_once()

    def test_session_closed_on_network_failure(self, config: Config, session: MagicMock) -> None:
        session.post.side_effect = requests.Timeout("slow")
        with pytest.raises(TransportError):
            GeminiClient(config, session_factory=lambda: session).generate("prompt")
        session.close.assert_called_once()
