"""Time-of-day arithmetic for scheduled and estimated arrival times"""
import re
from typing import Optional

from ..errors import FormatError
from .logger import setup_logger

logger = setup_logger(__name__)

MINUTES_PER_DAY = 1440

_TIME_PATTERN = re.compile(r'([0-9]{2}):([0-9]{2})')


def parse_time_of_day(value: str) -> int:
    """
    Parse an HH:mm string into minutes since midnight

    Args:
        value: Time of day, 24-hour, zero padded (e.g. '07:05')

    Returns:
        Minutes since midnight

    Raises:
        FormatError: If the value is not a valid HH:mm time
    """
    if not isinstance(value, str):
        raise FormatError(value)

    match = _TIME_PATTERN.fullmatch(value)
    if not match:
        raise FormatError(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise FormatError(value)

    return hours * 60 + minutes


def delay_minutes(scheduled: str, estimated: str) -> int:
    """
    Minutes between scheduled and estimated arrival

    A negative difference is read as the estimate rolling past midnight,
    so one day is added. Delays longer than a day cannot be represented.

    Raises:
        FormatError: If either time is malformed
    """
    diff = parse_time_of_day(estimated) - parse_time_of_day(scheduled)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


def format_delay(minutes: Optional[int]) -> str:
    """Render a delay as '1ч 5м' or '40 мин'; empty for unknown or non-positive"""
    if minutes is None or minutes <= 0:
        return ""

    hours, rest = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}ч {rest}м"
    return f"{rest} мин"


def describe_delay(scheduled: str, estimated: Optional[str], placeholder: str = "") -> str:
    """
    Format the delay between two times, degrading bad data to a placeholder

    Args:
        scheduled: Scheduled HH:mm
        estimated: Estimated HH:mm, may be missing
        placeholder: Returned when the delay is unknown or not positive

    Returns:
        Formatted delay or the placeholder
    """
    if not estimated:
        return placeholder

    try:
        text = format_delay(delay_minutes(scheduled, estimated))
    except FormatError as e:
        logger.debug(f"Cannot compute delay: {e}")
        return placeholder

    return text or placeholder
