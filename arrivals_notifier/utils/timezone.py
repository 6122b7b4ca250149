"""Airport-local calendar helpers"""
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
import pytz


def now_local(tz: str, now: Optional[datetime] = None) -> datetime:
    """
    Current wall-clock time in the given timezone.

    Args:
        tz: Timezone string (e.g., 'Asia/Novokuznetsk')
        now: Optional reference instant; naive values are taken as UTC

    Returns:
        Timezone-aware datetime in tz
    """
    if now is None:
        now = datetime.now(pytz.UTC)
    elif now.tzinfo is None:
        now = pytz.UTC.localize(now)

    return now.astimezone(pytz.timezone(tz))


def today_and_tomorrow(tz: str, now: Optional[datetime] = None) -> Tuple[date, date]:
    """Calendar dates of 'today' and 'tomorrow' at the airport"""
    today = now_local(tz, now).date()
    return today, today + timedelta(days=1)


def is_valid_timezone(tz: str) -> bool:
    """Check whether tz is a known timezone name"""
    try:
        pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        return False
    return True
