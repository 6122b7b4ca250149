"""Delay notification tracker"""
from typing import Iterable, Optional, Set, Tuple

from ..models import DEDUP_BY_ID, Flight
from ..utils.logger import setup_logger
from ..utils.time_utils import describe_delay
from .notifier import NotificationPermission, Notifier

logger = setup_logger(__name__)

UNKNOWN_DELAY = "неизвестно"


def compose_delay_notification(flight: Flight) -> Tuple[str, str]:
    """
    Build title and body for a delayed flight

    Args:
        flight: Delayed flight

    Returns:
        (title, body)
    """
    delay = describe_delay(flight.scheduled_time, flight.estimated_time, placeholder=UNKNOWN_DELAY)
    title = f"Задержка рейса {flight.flight_number} из {flight.origin}"
    body = (
        f"Рейс из {flight.origin} задерживается. "
        f"Время ожидания: {delay}. "
        f"Ожидаемое прибытие: {flight.estimated_time}"
    )
    return title, body


class DelayNotificationTracker:
    """Sends at most one delay notification per flight per session"""

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        dedup_strategy: str = DEDUP_BY_ID,
        icon: Optional[str] = None,
        notified_ids: Optional[Set[str]] = None
    ):
        """
        Initialize delay tracker

        Args:
            notifier: Notification host, None when the host has no such capability
            dedup_strategy: 'id' or 'flight', see Flight.dedup_key
            icon: Optional icon identifier passed to the notifier
            notified_ids: Session set of notified keys; only ever grows
        """
        self.notifier = notifier
        self.dedup_strategy = dedup_strategy
        self.icon = icon
        self.notified_ids = notified_ids if notified_ids is not None else set()
        # Keys with a dispatch in progress, so overlapping cycles do not double-send
        self._pending: Set[str] = set()

    @property
    def enabled(self) -> bool:
        return (
            self.notifier is not None
            and self.notifier.permission is NotificationPermission.GRANTED
        )

    async def request_permission(self) -> NotificationPermission:
        """Ask the host for permission once at session start"""
        if self.notifier is None:
            logger.info("No notification host configured, delay alerts disabled")
            return NotificationPermission.DENIED

        try:
            permission = await self.notifier.request_permission()
        except Exception as e:
            logger.warning(f"Notification permission request failed: {e}")
            return NotificationPermission.DENIED

        logger.info(f"Notification permission: {permission.value}")
        return permission

    async def process(self, flights: Iterable[Flight]) -> int:
        """
        Notify about newly delayed flights

        Args:
            flights: Today's flights from a successful sync

        Returns:
            Number of notifications sent
        """
        if not self.enabled:
            logger.debug("Notifications unavailable, skipping delay check")
            return 0

        sent = 0
        for flight in flights:
            if not flight.is_delayed:
                continue

            key = flight.dedup_key(self.dedup_strategy)
            if key in self.notified_ids or key in self._pending:
                continue

            self._pending.add(key)
            try:
                if await self._dispatch(flight):
                    self.notified_ids.add(key)
                    sent += 1
            finally:
                self._pending.discard(key)

        if sent:
            logger.info(f"Sent {sent} delay notification(s)")
        return sent

    async def _dispatch(self, flight: Flight) -> bool:
        """Send one notification; failures are logged and reported as False"""
        title, body = compose_delay_notification(flight)
        try:
            success = await self.notifier.send_notification(title, body, self.icon)
        except Exception as e:
            logger.warning(f"Delay notification for {flight.flight_number} failed: {e}")
            return False

        if success:
            logger.info(f"Notified delay of {flight.flight_number} (est. {flight.estimated_time})")
        else:
            logger.warning(f"Delay notification for {flight.flight_number} was not delivered")
        return bool(success)
