"""Discord bot client used as the delay notification host"""
import asyncio
from typing import Callable, Optional
import discord
from discord.ext import commands

from ..utils.logger import setup_logger
from .notifier import NotificationPermission

logger = setup_logger(__name__)


class DiscordClient:
    """Discord bot client for notifications and manual refresh"""

    def __init__(
        self,
        token: str,
        channel_id: str,
        mention_role_id: Optional[str] = None,
        mention_role_name: Optional[str] = None,
        ping_everyone: bool = False,
        ready_timeout: float = 60
    ):
        """
        Initialize Discord client

        Args:
            token: Discord bot token
            channel_id: Channel ID to send notifications to
            mention_role_id: Optional role ID to mention (takes precedence over role_name)
            mention_role_name: Optional role name to mention (looked up after bot connects)
            ping_everyone: Whether to ping @everyone
            ready_timeout: Seconds to wait for the bot to connect when asked for permission
        """
        self.token = token
        self.channel_id = int(channel_id)
        self.mention_role_id = int(mention_role_id) if mention_role_id else None
        self.mention_role_name = mention_role_name
        self.ping_everyone = ping_everyone
        self.ready_timeout = ready_timeout
        self.permission = NotificationPermission.DEFAULT
        self.on_refresh: Optional[Callable[[], object]] = None

        # No message content intent: commands are read from mentions, and from
        # '!' prefixes only where the intent is enabled in the developer portal
        intents = discord.Intents.default()
        self.bot = commands.Bot(
            command_prefix=commands.when_mentioned_or('!'),
            intents=intents
        )

        self._setup_events()
        self._setup_commands()

    def _setup_events(self):
        """Set up Discord bot events"""
        @self.bot.event
        async def on_ready():
            logger.info(f"Discord bot logged in as {self.bot.user}")
            self.permission = self._check_channel_permission()
            logger.info(f"Notification channel {self.channel_id}: {self.permission.value}")

            # Resolve role name to ID if provided and role_id not already set
            if self.mention_role_name and not self.mention_role_id:
                await self._resolve_role_name()

    def _setup_commands(self):
        """Set up the !refresh command"""
        @self.bot.command(name="refresh", help="Reload the arrivals board now")
        async def refresh(ctx: commands.Context):
            if self.on_refresh is None:
                await ctx.send("Обновление недоступно")
                return
            logger.info(f"Manual refresh requested by {ctx.author}")
            self.on_refresh()
            await ctx.send("Обновляю расписание прилетов...")

    async def start(self):
        """Start the Discord bot"""
        await self.bot.start(self.token)

    def start_in_background(self) -> asyncio.Task:
        """Run the bot as a task whose failure is logged and disables notifications"""
        task = asyncio.create_task(self.start())
        task.add_done_callback(self._on_bot_stopped)
        return task

    def _on_bot_stopped(self, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Discord bot stopped: {error}", exc_info=error)
            self.permission = NotificationPermission.DENIED

    async def close(self):
        """Close the Discord bot connection"""
        await self.bot.close()

    async def request_permission(self) -> NotificationPermission:
        """
        Wait for the bot to connect and resolve the channel permission

        Returns:
            GRANTED if the bot can post to the channel, otherwise DENIED
            (DEFAULT if the bot did not connect in time)
        """
        try:
            await asyncio.wait_for(self.bot.wait_until_ready(), timeout=self.ready_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Discord bot not ready after {self.ready_timeout}s")
            return self.permission

        self.permission = self._check_channel_permission()
        return self.permission

    def _check_channel_permission(self) -> NotificationPermission:
        """Check that the channel exists and the bot may send messages there"""
        channel = self.bot.get_channel(self.channel_id)
        if not channel:
            logger.error(f"Channel {self.channel_id} not found")
            logger.error("Make sure the bot is in the server and the channel ID is correct")
            return NotificationPermission.DENIED

        if not channel.permissions_for(channel.guild.me).send_messages:
            logger.error(f"Bot lacks permission to send messages in channel {self.channel_id}")
            return NotificationPermission.DENIED

        return NotificationPermission.GRANTED

    async def _resolve_role_name(self):
        """
        Resolve role name to role ID by searching in the guild

        This is called after the bot connects to Discord.
        """
        try:
            channel = self.bot.get_channel(self.channel_id)
            guild = channel.guild if channel else None
            if not guild:
                logger.warning(
                    f"Cannot resolve role name '{self.mention_role_name}': "
                    f"Guild not found for channel {self.channel_id}"
                )
                return

            role = discord.utils.get(guild.roles, name=self.mention_role_name)
            if role:
                self.mention_role_id = role.id
                logger.info(f"Resolved role name '{self.mention_role_name}' to role ID {role.id}")
            else:
                logger.warning(
                    f"Role '{self.mention_role_name}' not found in server '{guild.name}'. "
                    f"The bot will continue without role mentions."
                )
        except discord.DiscordException as e:
            logger.error(f"Error resolving role name '{self.mention_role_name}': {e}")

    async def send_notification(self, title: str, body: str, icon: Optional[str] = None) -> bool:
        """
        Post a notification to the channel

        Args:
            title: Notification title
            body: Notification text
            icon: Optional icon (emoji) shown before the title

        Returns:
            True if notification was sent successfully
        """
        try:
            channel = self.bot.get_channel(self.channel_id)
            if not channel:
                logger.error(f"Channel {self.channel_id} not found")
                return False

            await channel.send(self._format_message(title, body, icon))
            logger.info(f"Sent notification '{title}' to channel {self.channel_id}")
            return True

        except discord.errors.Forbidden as e:
            logger.error(f"Permission denied: {e}")
            self.permission = NotificationPermission.DENIED
            return False
        except discord.errors.HTTPException as e:
            logger.error(f"Discord API error sending notification: {e}")
            return False

    def _format_message(self, title: str, body: str, icon: Optional[str] = None) -> str:
        """
        Format notification message

        Args:
            title: Notification title
            body: Notification text
            icon: Optional icon prefix

        Returns:
            Formatted message string
        """
        heading = f"{icon} **{title}**" if icon else f"**{title}**"
        message = f"{heading}\n{body}"

        # Add mentions
        mentions = []
        if self.ping_everyone:
            mentions.append("@everyone")
        if self.mention_role_id:
            mentions.append(f"<@&{self.mention_role_id}>")

        if mentions:
            message = " ".join(mentions) + "\n" + message

        return message
