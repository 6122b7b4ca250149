"""Gemini generateContent client used as the schedule data provider"""
from typing import Any, Callable, Dict, List
import requests

from ..config import Config
from ..errors import ConfigurationError, ParseError, TransportError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class GeminiClient:
    """Thin wrapper around the Gemini REST API"""

    def __init__(
        self,
        config: Config,
        session_factory: Callable[[], requests.Session] = requests.Session
    ):
        """
        Initialize Gemini client

        Args:
            config: Application configuration (model, URL, grounding, timeout)
            session_factory: Creates the session for each request; today and
                tomorrow are fetched from separate threads, so sessions are not shared
        """
        self.config = config
        self.session_factory = session_factory

    @property
    def endpoint(self) -> str:
        return f"{self.config.gemini_api_url}/models/{self.config.gemini_model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        """Request body for one prompt"""
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if self.config.search_grounding:
            # Structured output cannot be combined with tools, so the
            # response is free text and decoded by the caller
            payload["tools"] = [{"google_search": {}}]
        return payload

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the generated text

        Args:
            prompt: Natural-language request

        Returns:
            Concatenated text of the first candidate

        Raises:
            ConfigurationError: If the API key is missing or rejected
            TransportError: If the request fails
            ParseError: If the response carries no text
        """
        # Read at request time so a missing key only fails this fetch
        api_key = self.config.get_api_key()
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

        session = self.session_factory()
        try:
            logger.debug(f"Requesting {self.endpoint}")
            response = session.post(
                self.endpoint,
                json=self.build_payload(prompt),
                headers=headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Provider request failed: {e}") from e
        finally:
            session.close()

        if not response.ok:
            self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"Provider returned a non-JSON body: {e}") from e

        return self._extract_text(data)

    def _raise_for_status(self, response: requests.Response):
        """Map an error response to the pipeline error taxonomy"""
        body = response.text or ""
        if response.status_code in (401, 403) or "API_KEY_INVALID" in body:
            raise ConfigurationError(
                f"Provider rejected the API key (HTTP {response.status_code})"
            )
        raise TransportError(f"Provider returned HTTP {response.status_code}: {body[:500]}")

    def _extract_text(self, data: Dict[str, Any]) -> str:
        """Join the text parts of the first candidate"""
        candidates: List[Dict[str, Any]] = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback")
            raise ParseError(f"Provider returned no candidates (feedback: {feedback})")

        candidate = candidates[0]
        self._log_grounding(candidate)

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise ParseError("Provider returned an empty response", raw_text=text)
        return text

    def _log_grounding(self, candidate: Dict[str, Any]):
        chunks = (candidate.get("groundingMetadata") or {}).get("groundingChunks") or []
        for chunk in chunks:
            web = chunk.get("web") or {}
            logger.debug(f"Grounding source: {web.get('title')} {web.get('uri')}")
