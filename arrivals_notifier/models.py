"""Data models for arrivals and board state"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class FlightStatus(str, Enum):
    """Canonical arrival statuses, valued with the literals the provider emits"""
    LANDED = "Прибыл"
    EXPECTED = "Ожидается"
    DELAYED = "Задерживается"
    CANCELLED = "Отменен"
    SCHEDULED = "По расписанию"
    EN_ROUTE = "В пути"

    @classmethod
    def parse(cls, value) -> Optional["FlightStatus"]:
        """Return the matching status, or None for unrecognized strings"""
        try:
            return cls(value)
        except ValueError:
            return None


DEDUP_BY_ID = "id"
DEDUP_BY_FLIGHT = "flight"


@dataclass(frozen=True)
class Flight:
    """Represents one scheduled arrival"""
    id: str
    flight_number: str
    airline: str
    origin: str
    scheduled_time: str  # HH:mm
    estimated_time: str  # HH:mm, equals scheduled_time when the provider omits it
    status: str  # kept verbatim, may be outside FlightStatus
    date: str  # YYYY-MM-DD
    aircraft: Optional[str] = None
    terminal: Optional[str] = None

    @property
    def canonical_status(self) -> Optional[FlightStatus]:
        return FlightStatus.parse(self.status)

    @property
    def is_delayed(self) -> bool:
        return self.canonical_status is FlightStatus.DELAYED

    def dedup_key(self, strategy: str = DEDUP_BY_ID) -> str:
        """
        Key used to notify about a flight at most once

        Args:
            strategy: 'id' trusts the provider id, 'flight' uses flight number and date
                (falls back to the id when the flight number is empty)
        """
        if strategy == DEDUP_BY_FLIGHT and self.flight_number:
            return f"{self.flight_number}|{self.date}"
        return self.id


@dataclass(frozen=True)
class DaySchedule:
    """Arrivals for one calendar date"""
    date: Optional[str] = None
    flights: Tuple[Flight, ...] = ()

    @property
    def delayed(self) -> Tuple[Flight, ...]:
        return tuple(f for f in self.flights if f.is_delayed)


class SyncPhase(Enum):
    """Outcome of the latest sync cycle"""
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class BoardState:
    """Snapshot handed to the presentation layer"""
    today: DaySchedule = field(default_factory=DaySchedule)
    tomorrow: DaySchedule = field(default_factory=DaySchedule)
    loading: bool = False
    error: Optional[str] = None
    phase: SyncPhase = SyncPhase.IDLE
    last_updated: Optional[datetime] = None
