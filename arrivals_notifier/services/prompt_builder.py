"""Natural-language request for an arrivals schedule"""
from datetime import date

from ..models import FlightStatus

_WEEKDAYS_RU = (
    "понедельник", "вторник", "среда", "четверг", "пятница", "суббота", "воскресенье",
)

_MONTHS_RU = (
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
)


def format_date_ru(target_date: date) -> str:
    """Long Russian date, e.g. 'суббота, 18 октября'"""
    weekday = _WEEKDAYS_RU[target_date.weekday()]
    month = _MONTHS_RU[target_date.month - 1]
    return f"{weekday}, {target_date.day} {month}"


def build_schedule_prompt(airport_code: str, airport_name: str, target_date: date) -> str:
    """
    Build the provider request for one airport and date

    Args:
        airport_code: IATA code (e.g. 'KEJ')
        airport_name: City or airport name used in the request
        target_date: Calendar date to ask about

    Returns:
        Prompt text
    """
    statuses = ", ".join(f'"{status.value}"' for status in FlightStatus)

    return f"""
Check current weather in {airport_name} ({airport_code}) and flight arrivals for {format_date_ru(target_date)} ({target_date.isoformat()}).

Based on the search results (weather conditions like fog/snow or actual flight delays), generate a JSON array of arrival flights for {airport_name} Airport ({airport_code}) on {target_date.isoformat()}.

RULES:
1. If search shows BAD WEATHER (fog, snowstorm) in {airport_name}, mark 30-50% of flights as "{FlightStatus.DELAYED.value}" (Delayed) and set 'estimatedTime' 1-3 hours later than 'scheduledTime'.
2. Use REAL flight numbers that serve {airport_code}.
3. Status MUST be one of: {statuses}.
4. 'estimatedTime' is mandatory. If on time, it equals 'scheduledTime'.
5. Times are local to {airport_name}, 24-hour "HH:mm".
6. STRICTLY OUTPUT ONLY RAW JSON ARRAY. No markdown, no explanations.

JSON Structure per object:
{{
  "id": "unique_string",
  "flightNumber": "string (e.g. SU 1450)",
  "airline": "string",
  "origin": "string (City)",
  "scheduledTime": "HH:mm",
  "estimatedTime": "HH:mm",
  "status": "string",
  "aircraft": "string",
  "terminal": "string (optional)"
}}
""".strip()
