"""
Verification slash commands cog.

This cog handles:
- /verify - Verify a Minecraft username (role + nickname)
- /setverifychannel, /pauseverify, /resumeverify - Manage Server only
- Removing stray messages posted in the verify channel
"""

import discord
from discord import default_permissions
from discord.ext import commands
from discord.commands import Option


class VerificationCog(commands.Cog):
    """Cog for verification commands."""

    def __init__(self, bot: discord.Bot, behavior):
        """
        Initialize the verification cog.

        Args:
            bot: The Discord bot instance
            behavior: BotBehavior instance
        """
        self.bot = bot
        self.behavior = behavior

    @commands.slash_command(name="verify", description="Verify your Minecraft username")
    async def verify(
        self,
        ctx: discord.ApplicationContext,
        username: Option(str, "Minecraft username", required=True),
    ):
        await self.behavior.dispatcher.dispatch(ctx, "verify", username=username)

    @commands.slash_command(name="setverifychannel", description="Use this channel for verification")
    @default_permissions(manage_guild=True)
    async def setverifychannel(self, ctx: discord.ApplicationContext):
        await self.behavior.dispatcher.dispatch(ctx, "setverifychannel")

    @commands.slash_command(name="pauseverify", description="Pause verification")
    @default_permissions(manage_guild=True)
    async def pauseverify(self, ctx: discord.ApplicationContext):
        await self.behavior.dispatcher.dispatch(ctx, "pauseverify")

    @commands.slash_command(name="resumeverify", description="Resume verification")
    @default_permissions(manage_guild=True)
    async def resumeverify(self, ctx: discord.ApplicationContext):
        await self.behavior.dispatcher.dispatch(ctx, "resumeverify")

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author == self.bot.user:
            return
        await self.behavior.dispatcher.handle_message(message)


def setup(bot: discord.Bot, behavior=None):
    """Set up verification commands cog."""
    if behavior is None:
        raise ValueError("behavior parameter is required for VerificationCog")
    bot.add_cog(VerificationCog(bot, behavior))
