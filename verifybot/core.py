"""
Core Bot class - Main Discord bot instance.

This module provides the Bot class which extends commands.Bot
with additional attributes for bot configuration.
"""

import logging
from typing import List, Optional

import discord
from discord.ext import commands

logger = logging.getLogger(__name__)


class Bot(commands.Bot):
    """
    Main Discord bot class with custom attributes.

    Attributes:
        token: Discord bot token for authentication.
        behavior: BotBehavior wiring the services, set once it is built.
    """

    def __init__(self, command_prefix: str, intents: discord.Intents,
                 token: str, debug_guilds: Optional[List[int]] = None):
        """
        Initialize the bot.

        Args:
            command_prefix: Prefix for text commands.
            intents: Discord intents configuration.
            token: Bot authentication token.
            debug_guilds: Guild IDs to register slash commands in directly.
        """
        options = {}
        if debug_guilds:
            options["debug_guilds"] = debug_guilds
        super().__init__(command_prefix=command_prefix, intents=intents, **options)
        self.token = token
        self.behavior = None

    @staticmethod
    def default_intents() -> discord.Intents:
        """Guilds and members for roles, messages for moderation, voice states for sessions."""
        return discord.Intents(guilds=True, members=True, messages=True, voice_states=True)

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} ({self.user.id}) in {len(self.guilds)} guild(s)")

    async def close(self):
        if self.behavior is not None:
            await self.behavior.voice_controller.shutdown()
        await super().close()

    def run_bot(self) -> None:
        """Start the bot using the configured token."""
        self.run(self.token)
