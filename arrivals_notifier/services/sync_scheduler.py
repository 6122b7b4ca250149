"""Sync scheduler for the today/tomorrow arrivals board"""
import asyncio
from dataclasses import replace
from datetime import date
from typing import Callable, List, Set

from ..errors import ConfigurationError
from ..models import BoardState, DaySchedule, Flight, SyncPhase
from ..utils.logger import setup_logger
from ..utils.timezone import now_local, today_and_tomorrow
from .delay_tracker import DelayNotificationTracker
from .schedule_fetcher import ScheduleFetcher
from .schedule_normalizer import ScheduleNormalizer

logger = setup_logger(__name__)

CONFIG_ERROR_MESSAGE = "Ошибка: API_KEY не найден. Убедитесь, что ключ настроен в окружении."
GENERIC_ERROR_MESSAGE = "Не удалось загрузить данные."

BoardListener = Callable[[BoardState], None]


def error_message_for(error: BaseException) -> str:
    """User-facing message for a failed sync"""
    if isinstance(error, ConfigurationError):
        return CONFIG_ERROR_MESSAGE
    return GENERIC_ERROR_MESSAGE


class SyncScheduler:
    """Polls the provider and keeps the board state current"""

    def __init__(
        self,
        fetcher: ScheduleFetcher,
        normalizer: ScheduleNormalizer,
        tracker: DelayNotificationTracker,
        airport_timezone: str,
        interval_seconds: int = 60,
        single_flight: bool = False
    ):
        """
        Initialize sync scheduler

        Args:
            fetcher: Schedule fetcher
            normalizer: Schedule normalizer
            tracker: Delay notification tracker, run on today's flights
            airport_timezone: Timezone used to decide 'today' and 'tomorrow'
            interval_seconds: Polling period
            single_flight: Skip triggers while a cycle is already running
        """
        self.fetcher = fetcher
        self.normalizer = normalizer
        self.tracker = tracker
        self.airport_timezone = airport_timezone
        self.interval_seconds = interval_seconds
        self.single_flight = single_flight

        self.state = BoardState()
        self.running = False
        self._in_flight = 0
        self._listeners: List[BoardListener] = []
        self._tasks: Set[asyncio.Task] = set()

    def add_listener(self, listener: BoardListener):
        """Register a callback receiving every new board state"""
        self._listeners.append(listener)

    async def run(self):
        """Sync now, then every interval until stopped"""
        self.running = True
        logger.info(f"Starting sync loop (every {self.interval_seconds}s)")

        while self.running:
            # Cycles are not awaited, the timer keeps its cadence
            self.refresh()
            try:
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break

    def stop(self):
        """Stop the polling loop; in-flight cycles are left to finish"""
        self.running = False
        logger.info("Stopping sync loop")

    def refresh(self) -> asyncio.Task:
        """Start a sync cycle in the background, independent of the timer"""
        task = asyncio.create_task(self.trigger_sync())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def trigger_sync(self) -> SyncPhase:
        """
        Run one sync cycle for today and tomorrow

        Never raises: any failure ends in SyncPhase.FAILED with the
        previous schedules left in place.

        Returns:
            Phase the cycle ended in (FETCHING if it was skipped)
        """
        if self.single_flight and self._in_flight:
            logger.info("Sync already in progress, skipping trigger")
            return SyncPhase.FETCHING

        self._in_flight += 1
        self._set_state(loading=True, error=None, phase=SyncPhase.FETCHING)
        try:
            changes = await self._run_cycle()
        finally:
            self._in_flight -= 1

        self._set_state(loading=self._in_flight > 0, **changes)
        if changes["phase"] is not SyncPhase.SUCCESS:
            return changes["phase"]

        today = changes["today"]
        logger.info(
            f"Sync complete: {len(today.flights)} today, "
            f"{len(changes['tomorrow'].flights)} tomorrow"
        )

        try:
            await self.tracker.process(today.flights)
        except Exception as e:
            logger.error(f"Delay notification check failed: {e}", exc_info=True)

        return SyncPhase.SUCCESS

    async def _run_cycle(self) -> dict:
        """Fetch both days; return the state changes to apply"""
        try:
            today, tomorrow = today_and_tomorrow(self.airport_timezone)
            results = await asyncio.gather(
                self._load_day(today),
                self._load_day(tomorrow),
                return_exceptions=True,
            )
            errors = [r for r in results if isinstance(r, BaseException)]
            if errors:
                raise self._pick_error(errors)
        except Exception as e:
            logger.error(f"Failed to load flights: {e}", exc_info=True)
            # Previous schedules stay on the board
            return {"error": error_message_for(e), "phase": SyncPhase.FAILED}

        today_flights, tomorrow_flights = results
        return {
            "today": DaySchedule(today.isoformat(), tuple(today_flights)),
            "tomorrow": DaySchedule(tomorrow.isoformat(), tuple(tomorrow_flights)),
            "error": None,
            "phase": SyncPhase.SUCCESS,
            "last_updated": now_local(self.airport_timezone),
        }

    async def _load_day(self, target_date: date) -> List[Flight]:
        records = await self.fetcher.fetch_records(target_date)
        return self.normalizer.normalize(records, target_date)

    @staticmethod
    def _pick_error(errors: List[BaseException]) -> BaseException:
        """Prefer a configuration error, which has its own message"""
        for error in errors:
            if isinstance(error, ConfigurationError):
                return error
        return errors[0]

    def _set_state(self, **changes):
        """Replace the board state and notify listeners"""
        self.state = replace(self.state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as e:
                logger.error(f"Board listener failed: {e}")
