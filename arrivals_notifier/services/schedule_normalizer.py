"""Normalization of raw provider records into Flight entities"""
from datetime import date
from typing import Any, Dict, List, Optional

from ..models import Flight
from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class ScheduleNormalizer:
    """Service for turning provider records into a sorted flight list"""

    def normalize(self, records: List[Any], target_date: date) -> List[Flight]:
        """
        Normalize raw records for one date

        Args:
            records: Records decoded from the provider response
            target_date: Date the records were requested for

        Returns:
            Flights sorted by scheduled time
        """
        date_str = target_date.isoformat()
        flights = []

        for index, record in enumerate(records):
            flight = self._normalize_record(record, date_str)
            if flight:
                flights.append(flight)
            else:
                logger.warning(f"Dropped record {index} for {date_str}: {record!r}")

        # HH:mm is fixed width, so string order is time order
        flights.sort(key=lambda f: f.scheduled_time)

        logger.info(f"Normalized {len(records)} records to {len(flights)} flights for {date_str}")
        return flights

    def _normalize_record(self, record: Any, date_str: str) -> Optional[Flight]:
        """Build a Flight from one record, or None if it cannot go on the board"""
        if not isinstance(record, dict):
            return None

        scheduled = self._text(record, "scheduledTime")
        if not scheduled:
            return None

        flight_number = self._text(record, "flightNumber") or ""
        estimated = self._text(record, "estimatedTime") or scheduled
        flight_id = self._text(record, "id") or f"{flight_number}|{date_str}"

        return Flight(
            id=flight_id,
            flight_number=flight_number,
            airline=self._text(record, "airline") or "",
            origin=self._text(record, "origin") or "",
            scheduled_time=scheduled,
            estimated_time=estimated,
            status=self._text(record, "status") or "",
            # Provider-supplied dates are ignored
            date=date_str,
            aircraft=self._text(record, "aircraft"),
            terminal=self._text(record, "terminal"),
        )

    @staticmethod
    def _text(record: Dict[str, Any], key: str) -> Optional[str]:
        value = record.get(key)
        if value is None:
            return None
        value = str(value).strip()
        return value or None
