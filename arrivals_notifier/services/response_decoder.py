"""Decoders turning provider responses into raw record lists"""
import json
import re
from typing import Any, List, Protocol

from ..errors import ParseError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

_FENCE_PATTERN = re.compile(r'```(?:json)?', re.IGNORECASE)
# Greedy: first '[' through last ']'
_ARRAY_PATTERN = re.compile(r'\[.*\]', re.DOTALL)


class ResponseDecoder(Protocol):
    """Turns provider response text into a list of raw records"""

    def decode(self, text: str) -> List[Any]:
        ...


class FreeTextArrayDecoder:
    """
    Tolerant decoder for free text that should contain one JSON array

    The provider is asked for a bare array but may wrap it in prose or
    markdown code fences. Only the bracketed span is parsed.
    """

    def decode(self, text: str) -> List[Any]:
        """
        Extract and parse the JSON array from provider text

        Args:
            text: Raw provider response text

        Returns:
            Parsed list of records

        Raises:
            ParseError: If no array is found or it is not valid JSON
        """
        cleaned = self.strip_code_fences(text or "")
        span = self.extract_array(cleaned)

        if span is None:
            logger.error(f"No JSON array in provider response: {text!r}")
            raise ParseError("Provider response contains no JSON array", raw_text=text)

        try:
            records = json.loads(span)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON array in provider response ({e}): {text!r}")
            raise ParseError(f"Provider response is not valid JSON: {e}", raw_text=text) from e

        return records

    @staticmethod
    def strip_code_fences(text: str) -> str:
        """Remove markdown code fence markers"""
        return _FENCE_PATTERN.sub("", text).strip()

    @staticmethod
    def extract_array(text: str):
        """Return the greedy '[...]' span, or None"""
        match = _ARRAY_PATTERN.search(text)
        return match.group(0) if match else None
