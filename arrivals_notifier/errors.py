"""
Error taxonomy for the arrivals pipeline.

Only the sync scheduler turns these into user-facing messages; everything
below it raises and lets the error propagate.
"""
from typing import Optional


class ArrivalsError(Exception):
    """Base exception for all arrivals pipeline errors"""


class ConfigurationError(ArrivalsError):
    """Raised when the provider credential is missing or rejected"""


class TransportError(ArrivalsError):
    """Raised when the data provider cannot be reached or answers with an error"""


class ParseError(ArrivalsError):
    """Raised when the provider response cannot be decoded into a JSON array"""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        self.raw_text = raw_text
        super().__init__(message)


class FormatError(ArrivalsError):
    """Raised for a malformed HH:mm time-of-day string"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time of day {value!r}, expected HH:mm")
