"""
Voice transport adapters.

The session controller only talks to a `VoiceTransport`; the production
implementation delegates to py-cord's voice client, which owns the
gateway and RTP details.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import discord

logger = logging.getLogger(__name__)


class VoiceTransport(ABC):
    """Connect/disconnect primitives used by the voice session controller."""

    @abstractmethod
    async def connect(self, channel: Any) -> Any:
        """Open a connection to the channel and return the link once ready."""
        pass

    @abstractmethod
    async def disconnect(self, guild_id: str, link: Any = None) -> bool:
        """Close the link (or whatever the guild is connected with). Returns True if something was closed."""
        pass

    @abstractmethod
    def resolve_channel(self, guild_id: str, channel_id: str) -> Optional[Any]:
        """Look up a voice channel by ID; None if it or its guild is gone."""
        pass

    @abstractmethod
    def is_connected(self, link: Any) -> bool:
        pass


class DiscordVoiceTransport(VoiceTransport):
    """VoiceTransport on top of py-cord voice clients."""

    def __init__(self, bot: discord.Client):
        self.bot = bot

    def _guild(self, guild_id: str) -> Optional[discord.Guild]:
        return self.bot.get_guild(int(guild_id))

    async def connect(self, channel: discord.VoiceChannel) -> discord.VoiceClient:
        voice_client = channel.guild.voice_client
        if voice_client is not None:
            # A stale client blocks channel.connect() with ClientException.
            logger.info(f"Dropping stale voice client in {channel.guild.name} before connecting")
            await voice_client.disconnect(force=True)
        return await channel.connect(reconnect=True)

    async def disconnect(self, guild_id: str, link: Any = None) -> bool:
        voice_client = link
        if voice_client is None:
            guild = self._guild(guild_id)
            voice_client = guild.voice_client if guild else None
        if voice_client is None:
            return False
        await voice_client.disconnect(force=True)
        return True

    def resolve_channel(self, guild_id: str, channel_id: str) -> Optional[discord.abc.GuildChannel]:
        guild = self._guild(guild_id)
        if guild is None:
            return None
        channel = guild.get_channel(int(channel_id))
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            return None
        return channel

    def is_connected(self, link: Any) -> bool:
        return link is not None and link.is_connected()
