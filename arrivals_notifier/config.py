"""Configuration loading and validation"""
import os
from typing import Optional
from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import DEDUP_BY_FLIGHT, DEDUP_BY_ID
from .utils.logger import setup_logger
from .utils.timezone import is_valid_timezone

logger = setup_logger(__name__)

# Load environment variables from .env file
load_dotenv()

API_KEY_VARS = ("GEMINI_API_KEY", "API_KEY")


def _get_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration"""

    def __init__(self):
        """Load and validate configuration"""
        # Data provider (the API key itself is read lazily, see get_api_key)
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_api_url = os.getenv(
            "GEMINI_API_URL",
            "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip('/')
        self.search_grounding = _get_bool("SEARCH_GROUNDING", "true")
        self.request_timeout = int(os.getenv("REQUEST_TIMEOUT", "60"))

        # Airport
        self.airport_code = os.getenv("AIRPORT_CODE", "KEJ").strip().upper()
        self.airport_name = os.getenv("AIRPORT_NAME", "Кемерово").strip()
        self.airport_timezone = os.getenv("AIRPORT_TIMEZONE", "Asia/Novokuznetsk").strip()

        # Sync and notification settings
        self.sync_interval_seconds = int(os.getenv("SYNC_INTERVAL_SECONDS", "60"))
        self.sync_single_flight = _get_bool("SYNC_SINGLE_FLIGHT", "false")
        self.notify_dedup_key = os.getenv("NOTIFY_DEDUP_KEY", DEDUP_BY_ID).strip().lower()
        self.notify_icon = os.getenv("NOTIFY_ICON", "✈️")

        # Discord is the optional notification host
        self.discord_bot_token = os.getenv("DISCORD_BOT_TOKEN")
        self.discord_channel_id = os.getenv("DISCORD_CHANNEL_ID")
        self.discord_mention_role_id = os.getenv("DISCORD_MENTION_ROLE_ID")
        self.discord_mention_role_name = os.getenv("DISCORD_MENTION_ROLE_NAME")
        self.discord_ping_everyone = _get_bool("DISCORD_PING_EVERYONE", "false")

        # Role ID takes precedence over role name if both are provided
        if self.discord_mention_role_id and self.discord_mention_role_name:
            logger.info(
                "Both DISCORD_MENTION_ROLE_ID and DISCORD_MENTION_ROLE_NAME are set. "
                "Using role ID (takes precedence)."
            )

        self._validate()
        logger.info("Configuration loaded successfully")

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.discord_bot_token)

    def get_api_key(self) -> str:
        """
        Read the provider API key from the environment

        Called when a request is built, so a missing key fails that fetch
        instead of the whole process at startup.

        Raises:
            ConfigurationError: If no key is set
        """
        for key in API_KEY_VARS:
            value: Optional[str] = os.getenv(key)
            if value and value.strip():
                return value.strip()
        raise ConfigurationError(
            f"Provider API key is not set (expected one of: {', '.join(API_KEY_VARS)})"
        )

    def _validate(self):
        """Validate configuration values"""
        if self.sync_interval_seconds < 1:
            raise ValueError("SYNC_INTERVAL_SECONDS must be at least 1 second")

        if self.request_timeout < 1:
            raise ValueError("REQUEST_TIMEOUT must be at least 1 second")

        if not self.airport_code:
            raise ValueError("AIRPORT_CODE must not be empty")

        if not is_valid_timezone(self.airport_timezone):
            raise ValueError(f"AIRPORT_TIMEZONE '{self.airport_timezone}' is not a known timezone")

        if self.notify_dedup_key not in (DEDUP_BY_ID, DEDUP_BY_FLIGHT):
            raise ValueError(
                f"NOTIFY_DEDUP_KEY must be '{DEDUP_BY_ID}' or '{DEDUP_BY_FLIGHT}'"
            )

        if self.discord_bot_token:
            if not self.discord_channel_id:
                raise ValueError("DISCORD_CHANNEL_ID is required when DISCORD_BOT_TOKEN is set")
            # Validate Discord channel ID is numeric
            try:
                int(self.discord_channel_id)
            except ValueError:
                raise ValueError("DISCORD_CHANNEL_ID must be a numeric channel ID")

        logger.info(f"Airport: {self.airport_name} ({self.airport_code}), tz {self.airport_timezone}")
        logger.info(f"Sync interval: {self.sync_interval_seconds} seconds")
        if self.notifications_enabled:
            logger.info(f"Delay notifications: Discord channel {self.discord_channel_id}")
        else:
            logger.info("Delay notifications: disabled (DISCORD_BOT_TOKEN not set)")
