"""Main entry point for the arrivals notifier"""
import asyncio
import signal
import sys
from typing import Optional

from .config import Config
from .models import BoardState, SyncPhase
from .services.delay_tracker import DelayNotificationTracker
from .services.discord_client import DiscordClient
from .services.gemini_client import GeminiClient
from .services.schedule_fetcher import ScheduleFetcher
from .services.schedule_normalizer import ScheduleNormalizer
from .services.sync_scheduler import SyncScheduler
from .utils.logger import setup_logger
from .utils.time_utils import describe_delay

logger = setup_logger(__name__)


def summarize_board(state: BoardState) -> str:
    """One-line description of the board for the log"""
    if state.error:
        return f"Ошибка загрузки: {state.error}"

    delayed = state.today.delayed
    parts = [
        f"Сегодня ({state.today.date}): {len(state.today.flights)} рейсов, задержано {len(delayed)}",
        f"Завтра ({state.tomorrow.date}): {len(state.tomorrow.flights)} рейсов",
    ]
    for flight in delayed:
        delay = describe_delay(flight.scheduled_time, flight.estimated_time)
        parts.append(
            f"{flight.flight_number} {flight.origin} {flight.scheduled_time} -> "
            f"{flight.estimated_time}" + (f" (+{delay})" if delay else "")
        )
    return "; ".join(parts)


def build_discord_client(config: Config) -> Optional[DiscordClient]:
    """Create the Discord notification host, or None when not configured"""
    if not config.notifications_enabled:
        return None
    return DiscordClient(
        token=config.discord_bot_token,
        channel_id=config.discord_channel_id,
        mention_role_id=config.discord_mention_role_id,
        mention_role_name=config.discord_mention_role_name,
        ping_everyone=config.discord_ping_everyone
    )


def build_scheduler(config: Config, discord_client: Optional[DiscordClient]) -> SyncScheduler:
    """Wire fetcher, normalizer and tracker into a scheduler"""
    fetcher = ScheduleFetcher(
        client=GeminiClient(config),
        airport_code=config.airport_code,
        airport_name=config.airport_name
    )
    tracker = DelayNotificationTracker(
        notifier=discord_client,
        dedup_strategy=config.notify_dedup_key,
        icon=config.notify_icon
    )
    return SyncScheduler(
        fetcher=fetcher,
        normalizer=ScheduleNormalizer(),
        tracker=tracker,
        airport_timezone=config.airport_timezone,
        interval_seconds=config.sync_interval_seconds,
        single_flight=config.sync_single_flight
    )


class ArrivalsBot:
    """Main orchestrator"""

    def __init__(self):
        """Initialize components"""
        self.config = Config()
        self.running = False

        self.discord_client = build_discord_client(self.config)
        self.scheduler = build_scheduler(self.config, self.discord_client)
        self.scheduler.add_listener(self._on_board_update)

        if self.discord_client:
            self.discord_client.on_refresh = self.scheduler.refresh

        # Setup signal handlers for graceful shutdown
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.running = False

    def _on_board_update(self, state: BoardState):
        """Presentation boundary: log finished cycles"""
        if state.phase in (SyncPhase.SUCCESS, SyncPhase.FAILED):
            logger.info(summarize_board(state))

    async def start(self):
        """Start the bot"""
        self.running = True
        logger.info("Starting arrivals notifier...")

        discord_task = None
        if self.discord_client:
            discord_task = self.discord_client.start_in_background()

        # Permission is resolved once, without holding up the first sync
        permission_task = asyncio.create_task(self.scheduler.tracker.request_permission())
        sync_task = asyncio.create_task(self.scheduler.run())

        try:
            # Run until stopped
            while self.running:
                await asyncio.sleep(1)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Stopping services...")
            self.scheduler.stop()
            sync_task.cancel()
            permission_task.cancel()

            if self.discord_client:
                await self.discord_client.close()
                discord_task.cancel()

            logger.info("Stopped")


async def main():
    """Main entry point"""
    try:
        bot = ArrivalsBot()
        await bot.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def run():
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    run()
