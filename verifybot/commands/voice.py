"""
Voice slash commands cog.

This cog handles:
- /joinvc - Join (and stay in) a voice channel
- /leavevc - Leave the voice channel
- Feeding voice state changes and link health into the session controller
- Rejoining remembered voice channels after a restart
"""

import logging

import discord
from discord import default_permissions
from discord.ext import commands, tasks
from discord.commands import Option

from verifybot import config
from verifybot.errors import ConnectError, PersistenceError

logger = logging.getLogger(__name__)


class VoiceCog(commands.Cog):
    """Cog for voice channel commands and connection monitoring."""

    def __init__(self, bot: discord.Bot, behavior, health_interval: float = config.VOICE_HEALTH_INTERVAL):
        self.bot = bot
        self.behavior = behavior
        self.monitor_voice_sessions.change_interval(seconds=health_interval)

    def cog_unload(self):
        self.monitor_voice_sessions.cancel()

    @commands.slash_command(name="joinvc", description="Join a voice channel and stay there")
    @default_permissions(manage_guild=True)
    async def joinvc(
        self,
        ctx: discord.ApplicationContext,
        channel: Option(discord.VoiceChannel, "Voice channel to join (defaults to yours)", required=False, default=None),
    ):
        await self.behavior.dispatcher.dispatch(ctx, "joinvc", channel=channel)

    @commands.slash_command(name="leavevc", description="Leave the voice channel")
    @default_permissions(manage_guild=True)
    async def leavevc(self, ctx: discord.ApplicationContext):
        await self.behavior.dispatcher.dispatch(ctx, "leavevc")

    @commands.Cog.listener()
    async def on_ready(self):
        if not self.monitor_voice_sessions.is_running():
            self.monitor_voice_sessions.start()
        await self.resume_voice_sessions()

    @commands.Cog.listener()
    async def on_voice_state_update(self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):
        if self.bot.user is None or member.id != self.bot.user.id:
            return

        controller = self.behavior.voice_controller
        if after.channel is None:
            controller.handle_disconnect(member.guild.id)
        else:
            controller.handle_signalling(member.guild.id)

    @tasks.loop(seconds=config.VOICE_HEALTH_INTERVAL)
    async def monitor_voice_sessions(self):
        self.behavior.voice_controller.check_health()

    async def resume_voice_sessions(self):
        """Rejoin each guild's remembered voice channel that has no live session."""
        controller = self.behavior.voice_controller
        settings_service = self.behavior.settings_service

        for guild in self.bot.guilds:
            if controller.get_session(guild.id) is not None:
                continue
            settings = settings_service.get(guild.id)
            if not settings.voice_channel_id:
                continue

            channel = controller.transport.resolve_channel(str(guild.id), settings.voice_channel_id)
            if channel is None:
                logger.info(f"Remembered voice channel {settings.voice_channel_id} in {guild.name} is gone, forgetting it")
                try:
                    settings_service.clear_voice_channel(guild.id)
                except PersistenceError as e:
                    logger.error(f"Could not forget voice channel for {guild.name}: {e}")
                continue

            logger.info(f"Rejoining {channel.name} in {guild.name}")
            try:
                await controller.join(guild.id, channel)
            except ConnectError as e:
                logger.warning(f"Could not rejoin {channel.name} in {guild.name}: {e}")


def setup(bot: discord.Bot, behavior=None):
    """Set up voice commands cog."""
    if behavior is None:
        raise ValueError("behavior parameter is required for VoiceCog")
    bot.add_cog(VoiceCog(bot, behavior, health_interval=behavior.env.voice_health_interval))
