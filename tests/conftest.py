"""
Pytest fixtures for the arrivals pipeline tests.

Provides sample provider records, flights and fake collaborators.
"""

from datetime import date
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from arrivals_notifier.models import Flight, FlightStatus
from arrivals_notifier.services.notifier import NotificationPermission


@pytest.fixture
def anyio_backend():
    """Use asyncio backend."""
    return "asyncio"


@pytest.fixture
def target_date() -> date:
    return date(2026, 10, 18)


@pytest.fixture
def raw_records() -> List[dict]:
    """Records as the provider returns them, unsorted."""
    return [
        {
            "id": "f-2606",
            "flightNumber": "S7 2606",
            "airline": "S7 Airlines",
            "origin": "Москва",
            "scheduledTime": "14:00",
            "estimatedTime": "15:20",
            "status": "Задерживается",
            "aircraft": "Airbus A320",
        },
        {
            "id": "f-1450",
            "flightNumber": "SU 1450",
            "airline": "Аэрофлот",
            "origin": "Москва",
            "scheduledTime": "09:30",
            "status": "Прибыл",
            "date": "1999-01-01",
        },
        {
            "id": "f-101",
            "flightNumber": "KV 101",
            "airline": "КрасАвиа",
            "origin": "Красноярск",
            "scheduledTime": "22:10",
            "estimatedTime": "22:10",
            "status": "По расписанию",
        },
    ]


def make_flight(
    flight_id: str = "F1",
    status: str = FlightStatus.DELAYED.value,
    scheduled: str = "10:00",
    estimated: Optional[str] = "11:05",
    flight_number: str = "SU 1450",
    origin: str = "Москва",
    flight_date: str = "2026-10-18",
) -> Flight:
    return Flight(
        id=flight_id,
        flight_number=flight_number,
        airline="Аэрофлот",
        origin=origin,
        scheduled_time=scheduled,
        estimated_time=estimated,
        status=status,
        date=flight_date,
    )


@pytest.fixture
def flight_factory():
    return make_flight


@pytest.fixture
def granted_notifier() -> MagicMock:
    """Notifier with permission granted whose sends succeed."""
    notifier = MagicMock()
    notifier.permission = NotificationPermission.GRANTED
    notifier.request_permission = AsyncMock(return_value=NotificationPermission.GRANTED)
    notifier.send_notification = AsyncMock(return_value=True)
    return notifier
